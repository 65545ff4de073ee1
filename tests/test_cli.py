"""
Tests for the jjdesc command line.
"""

import json
import re

import pytest

from jjdesc import cli
from jjdesc.core import config as config_mod

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture
def desc_file(tmp_path, description_text):
    path = tmp_path / "editor-1234.jjdescription"
    path.write_text(description_text, encoding="utf-8")
    return path


@pytest.fixture
def no_jj(monkeypatch):
    monkeypatch.setattr(cli.paths, "jj_root", lambda cwd: None)


class TestShow:
    def test_plain_output(self, desc_file, description_text, capsys):
        cli.main(["show", str(desc_file), "--color", "never"])
        assert capsys.readouterr().out == description_text

    def test_colored_output(self, desc_file, capsys):
        cli.main(["show", str(desc_file), "--color", "always"])
        out = capsys.readouterr().out
        assert out.startswith("\x1b[1mFix overflow handling in the parser")
        assert "33mM\x1b[0m" in out

    def test_max_length_flag(self, tmp_path, capsys):
        path = tmp_path / "d.txt"
        path.write_text("abcdefgh", encoding="utf-8")
        cli.main(["show", str(path), "--color", "always", "--max-length", "4"])
        out = capsys.readouterr().out
        assert "\x1b[1mabcd\x1b[0m" in out
        assert "\x1b[31mefgh" in out
        assert ANSI_RE.sub("", out) == "abcdefgh\n"

    def test_auto_color_off_when_not_a_tty(self, desc_file, description_text, capsys):
        cli.main(["show", str(desc_file)])
        assert capsys.readouterr().out == description_text

    def test_stdin(self, monkeypatch, capsys):
        import io
        monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))
        cli.main(["show", "-", "--color", "never"])
        assert capsys.readouterr().out == "from stdin\n"

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["show", str(tmp_path / "missing")])
        assert exc.value.code == 1
        assert "no such file" in capsys.readouterr().err

    def test_bad_style_in_config(self, desc_file, capsys):
        settings = config_mod.Settings()
        settings.styles["summary"] = "glitter"
        config_mod.save_settings(settings)
        with pytest.raises(SystemExit):
            cli.main(["show", str(desc_file), "--color", "always"])
        assert "invalid style" in capsys.readouterr().err


class TestSpans:
    def test_table(self, desc_file, capsys):
        cli.main(["spans", str(desc_file)])
        out = capsys.readouterr().out
        assert "\x1b[" not in out
        assert "Category" in out
        assert "summary" in out
        assert "comment-header" in out
        assert "'src/parser.rs'" in out

    def test_json(self, desc_file, capsys):
        cli.main(["spans", str(desc_file), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data[0]["category"] == "summary"
        files = [d["text"] for d in data if d["category"] == "comment-file"]
        assert files == ["src/parser.rs", "tests/overflow.rs"]

    def test_env_threshold(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "d.txt"
        path.write_text("abcdef", encoding="utf-8")
        monkeypatch.setenv("JJDESC_SUMMARY_MAX_LENGTH", "3")
        cli.main(["spans", str(path), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert [(d["category"], d["text"]) for d in data] == [
            ("summary", "abc"),
            ("overflow", "def"),
        ]

    def test_flag_beats_env(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "d.txt"
        path.write_text("abcdef", encoding="utf-8")
        monkeypatch.setenv("JJDESC_SUMMARY_MAX_LENGTH", "3")
        cli.main(["spans", str(path), "--json", "--max-length", "0"])
        data = json.loads(capsys.readouterr().out)
        assert [d["category"] for d in data] == ["summary"]

    def test_no_spans(self, tmp_path, capsys):
        path = tmp_path / "d.txt"
        path.write_text("\nbody only\n", encoding="utf-8")
        cli.main(["spans", str(path)])
        assert capsys.readouterr().out == "No spans.\n"


class TestRev:
    def test_description(self, monkeypatch, no_jj, capsys):
        monkeypatch.setattr(cli.jj_mod, "ensure_jj", lambda root: None)
        monkeypatch.setattr(cli.jj_mod, "description", lambda root, rev: f"Change {rev}\n")
        cli.main(["rev", "-r", "xyz", "--color", "never"])
        assert capsys.readouterr().out == "Change xyz\n"

    def test_full(self, monkeypatch, no_jj, capsys):
        monkeypatch.setattr(cli.jj_mod, "ensure_jj", lambda root: None)
        monkeypatch.setattr(
            cli.jj_mod, "editor_text", lambda root, rev: "S\n\nJJ: C new.txt\n"
        )
        cli.main(["rev", "--full", "--color", "always"])
        assert "32mnew.txt\x1b[0m" in capsys.readouterr().out

    def test_empty_description(self, monkeypatch, no_jj, capsys):
        monkeypatch.setattr(cli.jj_mod, "ensure_jj", lambda root: None)
        monkeypatch.setattr(cli.jj_mod, "description", lambda root, rev: "")
        cli.main(["rev"])
        assert capsys.readouterr().out == "(no description set)\n"

    def test_not_a_workspace(self, monkeypatch, no_jj, capsys):
        def fail(root):
            raise RuntimeError("There is no jj repo")
        monkeypatch.setattr(cli.jj_mod, "ensure_jj", fail)
        with pytest.raises(SystemExit) as exc:
            cli.main(["rev"])
        assert exc.value.code == 1
        assert "no jj repo" in capsys.readouterr().err


class TestConfig:
    def test_list(self, isolated_config, capsys):
        cli.main(["config"])
        out = capsys.readouterr().out
        assert "summary_max_length: 50" in out
        assert "style.overflow: red" in out
        assert f"file: {isolated_config / 'config.json'}" in out

    def test_set_and_get(self, capsys):
        cli.main(["config", "summary_max_length", "72"])
        cli.main(["config", "summary_max_length"])
        out = capsys.readouterr().out.splitlines()
        assert out == ["summary_max_length: 72", "72"]
        assert config_mod.load_settings().summary_max_length == 72

    def test_set_style(self, capsys):
        cli.main(["config", "style.comment-file", "bright_cyan underline"])
        assert config_mod.load_settings().styles["comment-file"] == "bright_cyan underline"

    def test_rejects_bad_style(self, capsys):
        with pytest.raises(SystemExit):
            cli.main(["config", "style.summary", "glitter"])
        assert "invalid style" in capsys.readouterr().err
        assert config_mod.load_settings().styles["summary"] == "bold"

    def test_rejects_unknown_key(self, capsys):
        with pytest.raises(SystemExit):
            cli.main(["config", "colour"])
        assert "unknown config key" in capsys.readouterr().err

    def test_corrupt_config(self, isolated_config, capsys):
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.json").write_text("{", encoding="utf-8")
        with pytest.raises(SystemExit):
            cli.main(["config"])
        assert "Corrupted config file" in capsys.readouterr().err


class TestParser:
    def test_no_command_prints_help(self, capsys):
        cli.main([])
        assert "usage: jjdesc" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])
        assert exc.value.code == 0
        assert "jjdesc 0.1.0" in capsys.readouterr().out

    def test_watch_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            cli.main(["watch", str(tmp_path / "missing")])
        assert "no such file" in capsys.readouterr().err


class TestWatch:
    def test_bad_style_stops_before_watching(self, desc_file, monkeypatch, capsys):
        """An invalid style is reported up front instead of inside the watcher thread."""
        import jjdesc.watcher

        calls = []
        monkeypatch.setattr(jjdesc.watcher, "start_watching", lambda *args: calls.append(args))
        settings = config_mod.Settings()
        settings.styles["overflow"] = "glitter"
        config_mod.save_settings(settings)
        with pytest.raises(SystemExit) as exc:
            cli.main(["watch", str(desc_file)])
        assert exc.value.code == 1
        assert "invalid style" in capsys.readouterr().err
        assert calls == []

    def test_callback_reports_render_errors(self, desc_file, monkeypatch, capsys):
        callbacks = []
        monkeypatch.setattr(
            "jjdesc.watcher.start_watching",
            lambda path, on_change, timeout: callbacks.append(on_change),
        )
        cli.main(["watch", str(desc_file), "--color", "never"])
        on_change = callbacks[0]

        def broken(console, text, spans, settings):
            raise ValueError("invalid style 'glitter'")

        monkeypatch.setattr(cli.display, "render", broken)
        on_change("New summary\n")
        out = capsys.readouterr().out
        assert "Render error: invalid style 'glitter'" in out

    def test_initial_render(self, desc_file, description_text, monkeypatch, capsys):
        monkeypatch.setattr("jjdesc.watcher.start_watching", lambda *args: None)
        cli.main(["watch", str(desc_file), "--color", "never"])
        assert capsys.readouterr().out == "-" * 20 + "\n" + description_text
