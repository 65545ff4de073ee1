from __future__ import annotations

import os
from typing import Optional

from .util import run


def jj_root(cwd: str) -> Optional[str]:
    res = run(["jj", "root"], cwd=cwd)
    if res.code != 0:
        return None
    return res.stdout.strip()


def config_dir() -> str:
    override = os.getenv("JJDESC_HOME")
    if override:
        return os.path.abspath(override)
    return os.path.join(os.path.expanduser("~"), ".jjdesc")


def config_path() -> str:
    return os.path.join(config_dir(), "config.json")
