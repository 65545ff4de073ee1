from __future__ import annotations

import argparse
import os
import sys

from rich.console import Console

from jjdesc import __version__
from jjdesc import display
from jjdesc.core import config as config_mod
from jjdesc.core import jj as jj_mod
from jjdesc.core import paths
from jjdesc.core.spans import classify
from jjdesc.core.util import read_text


def _die(msg: str) -> None:
    print(msg, file=sys.stderr)
    sys.exit(1)


def _print_kv(title: str, value: str) -> None:
    print(f"{title}: {value}")


def _repo_root_or_cwd() -> str:
    cwd = os.getcwd()
    root = paths.jj_root(cwd)
    return root if root else cwd


def _load_settings(args: argparse.Namespace) -> config_mod.Settings:
    try:
        settings = config_mod.load_settings()
    except RuntimeError as exc:
        _die(str(exc))
    if getattr(args, "max_length", None) is not None:
        settings.summary_max_length = args.max_length
    return settings


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    if not os.path.isfile(source):
        _die(f"no such file: {source}")
    try:
        return read_text(source)
    except (OSError, UnicodeDecodeError) as exc:
        _die(f"cannot read {source}: {exc}")


def _console(args: argparse.Namespace) -> Console:
    return display.make_console(getattr(args, "color", "auto"))


def _render(console: Console, text: str, settings: config_mod.Settings) -> None:
    spans = classify(text, settings.summary_max_length)
    display.render(console, text, spans, settings)


def _check_styles(settings: config_mod.Settings) -> None:
    try:
        display.category_styles(settings)
    except ValueError as exc:
        _die(str(exc))


def cmd_show(args: argparse.Namespace) -> None:
    settings = _load_settings(args)
    _check_styles(settings)
    text = _read_input(args.file)
    _render(_console(args), text, settings)


def cmd_spans(args: argparse.Namespace) -> None:
    settings = _load_settings(args)
    text = _read_input(args.file)
    spans = classify(text, settings.summary_max_length)
    if args.json:
        print(display.spans_to_json(text, spans))
        return
    if not spans:
        print("No spans.")
        return
    display.make_console().print(display.spans_table(text, spans))


def cmd_rev(args: argparse.Namespace) -> None:
    settings = _load_settings(args)
    _check_styles(settings)
    repo_root = _repo_root_or_cwd()
    try:
        jj_mod.ensure_jj(repo_root)
        if args.full:
            text = jj_mod.editor_text(repo_root, args.revision)
        else:
            text = jj_mod.description(repo_root, args.revision)
    except RuntimeError as exc:
        _die(str(exc))
    if not text.strip():
        print("(no description set)")
        return
    _render(_console(args), text, settings)


def cmd_watch(args: argparse.Namespace) -> None:
    from jjdesc.watcher import start_watching

    settings = _load_settings(args)
    _check_styles(settings)
    console = _console(args)

    def _on_change(text: str) -> None:
        if console.is_terminal:
            console.clear()
        else:
            print("-" * 20)
        try:
            _render(console, text, settings)
        except ValueError as exc:
            print(f"Render error: {exc}")
        console.file.flush()

    _on_change(_read_input(args.file))
    try:
        start_watching(args.file, _on_change, args.timeout)
    except RuntimeError as exc:
        _die(str(exc))


def cmd_tui(args: argparse.Namespace) -> None:
    from jjdesc.tui import run_tui

    settings = _load_settings(args)
    _check_styles(settings)
    text = _read_input(args.file)
    run_tui(text, settings, title=os.path.basename(args.file))


def cmd_config(args: argparse.Namespace) -> None:
    try:
        settings = config_mod.load_settings(env=False)
    except RuntimeError as exc:
        _die(str(exc))

    if not args.key:
        for key in config_mod.config_keys():
            _print_kv(key, config_mod.get_value(settings, key))
        _print_kv("file", paths.config_path())
        return

    if args.value is None:
        try:
            print(config_mod.get_value(settings, args.key))
        except ValueError as exc:
            _die(str(exc))
        return

    try:
        if args.key.startswith("style."):
            display.parse_style(args.value)
        config_mod.set_value(settings, args.key, args.value)
        config_mod.save_settings(settings)
    except ValueError as exc:
        _die(str(exc))
    except OSError as exc:
        _die(f"cannot write config: {exc}")
    _print_kv(args.key, args.value)


def _add_render_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--max-length", type=int, default=None, dest="max_length")
    p.add_argument("--color", choices=("auto", "always", "never"), default="auto")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jjdesc")
    parser.add_argument(
        "--version", action="version", version=f"jjdesc {__version__}"
    )
    sub = parser.add_subparsers(dest="cmd")

    show = sub.add_parser("show")
    show.add_argument("file", nargs="?", default="-")
    _add_render_options(show)
    show.set_defaults(func=cmd_show)

    spans = sub.add_parser("spans")
    spans.add_argument("file", nargs="?", default="-")
    spans.add_argument("--max-length", type=int, default=None, dest="max_length")
    spans.add_argument("--json", action="store_true")
    spans.set_defaults(func=cmd_spans)

    rev = sub.add_parser("rev")
    rev.add_argument("-r", "--revision", default="@")
    rev.add_argument("--full", action="store_true")
    _add_render_options(rev)
    rev.set_defaults(func=cmd_rev)

    watch = sub.add_parser("watch")
    watch.add_argument("file")
    watch.add_argument("--timeout", type=float, default=0.3)
    _add_render_options(watch)
    watch.set_defaults(func=cmd_watch)

    tui = sub.add_parser("tui")
    tui.add_argument("file")
    tui.add_argument("--max-length", type=int, default=None, dest="max_length")
    tui.set_defaults(func=cmd_tui)

    cfg = sub.add_parser("config")
    cfg.add_argument("key", nargs="?")
    cfg.add_argument("value", nargs="?")
    cfg.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
