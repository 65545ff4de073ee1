from __future__ import annotations

from .spans import COMMENT_PREFIX
from .util import run


def ensure_jj(repo_root: str) -> None:
    res = run(["jj", "root"], cwd=repo_root)
    if res.code != 0:
        raise RuntimeError(res.stderr or "not inside a jj workspace")


def description(repo_root: str, rev: str = "@") -> str:
    res = run(
        ["jj", "log", "-r", rev, "--no-graph", "-T", "description"],
        cwd=repo_root,
    )
    if res.code != 0:
        raise RuntimeError(res.stderr or f"jj log -r {rev} failed")
    return res.stdout


def changed_files(repo_root: str, rev: str = "@") -> list[str]:
    res = run(["jj", "diff", "-r", rev, "--summary"], cwd=repo_root)
    if res.code != 0:
        raise RuntimeError(res.stderr or f"jj diff -r {rev} failed")
    return [line for line in res.stdout.splitlines() if line.strip()]


def editor_text(repo_root: str, rev: str = "@") -> str:
    """Rebuild the text ``jj describe`` hands to the editor for ``rev``."""
    body = description(repo_root, rev).rstrip("\n")
    lines = [body] if body else [""]
    entries = changed_files(repo_root, rev)
    if entries:
        lines.append("")
        lines.append(f"{COMMENT_PREFIX}This commit contains the following changes:")
        for entry in entries:
            lines.append(f"{COMMENT_PREFIX}    {entry}")
    return "\n".join(lines) + "\n"
