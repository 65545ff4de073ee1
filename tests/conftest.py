"""
Pytest configuration and fixtures.

Every test gets its own config directory so a developer's
~/.jjdesc/config.json or environment never leaks into results.
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config directory at a temp dir and clear overrides."""
    home = tmp_path / "jjdesc-home"
    monkeypatch.setenv("JJDESC_HOME", str(home))
    monkeypatch.delenv("JJDESC_SUMMARY_MAX_LENGTH", raising=False)
    for name in ("NO_COLOR", "FORCE_COLOR", "TTY_COMPATIBLE"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def description_text():
    """A description as `jj describe` opens it in the editor."""
    return (
        "Fix overflow handling in the parser\n"
        "\n"
        "Longer body text explaining the change.\n"
        "JJ: This commit contains the following changes:\n"
        "JJ:     M src/parser.rs\n"
        "JJ:     A tests/overflow.rs\n"
        "JJ: rest of the description is ignored\n"
    )
