from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Dict

from .paths import config_path
from .spans import DEFAULT_SUMMARY_MAX_LENGTH, Category
from .util import read_json, write_json

ENV_SUMMARY_MAX_LENGTH = "JJDESC_SUMMARY_MAX_LENGTH"

DEFAULT_STYLES: Dict[str, str] = {
    Category.SUMMARY.value: "bold",
    Category.OVERFLOW.value: "red",
    Category.COMMENT_BASE.value: "dim",
    Category.COMMENT_HEADER.value: "bold blue",
    Category.COMMENT_TYPE.value: "yellow",
    Category.COMMENT_FILE.value: "green",
}


@dataclass
class Settings:
    summary_max_length: int = DEFAULT_SUMMARY_MAX_LENGTH
    styles: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STYLES))

    def style_for(self, category: Category) -> str:
        return self.styles.get(category.value, "")

    def to_dict(self) -> dict:
        return {
            "summary_max_length": self.summary_max_length,
            "styles": dict(self.styles),
        }


def _parse_length(raw) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"summary_max_length must be an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"summary_max_length must be an integer, got {raw!r}")


def _from_dict(data: dict) -> Settings:
    settings = Settings()
    if "summary_max_length" in data:
        settings.summary_max_length = _parse_length(data["summary_max_length"])
    styles = data.get("styles", {})
    if not isinstance(styles, dict):
        raise ValueError("styles must be a mapping of category to style")
    for name, spec in styles.items():
        if name not in DEFAULT_STYLES:
            raise ValueError(f"unknown style category: {name}")
        settings.styles[name] = str(spec)
    return settings


def load_settings(path: str | None = None, env: bool = True) -> Settings:
    """Load settings from the config file, then apply the environment override.

    Raises:
        RuntimeError: If the config file cannot be parsed
    """
    path = path or config_path()
    try:
        data = read_json(path) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be an object")
        settings = _from_dict(data)
    except (json.JSONDecodeError, ValueError) as e:
        raise RuntimeError(f"Corrupted config file {path}: {e}")

    if env:
        override = os.getenv(ENV_SUMMARY_MAX_LENGTH)
        if override:
            try:
                settings.summary_max_length = _parse_length(override)
            except ValueError as e:
                raise RuntimeError(f"{ENV_SUMMARY_MAX_LENGTH}: {e}")
    return settings


def save_settings(settings: Settings, path: str | None = None) -> None:
    write_json(path or config_path(), settings.to_dict())


def get_value(settings: Settings, key: str) -> str:
    if key == "summary_max_length":
        return str(settings.summary_max_length)
    if key.startswith("style."):
        name = key[len("style."):]
        if name in settings.styles:
            return settings.styles[name]
    raise ValueError(f"unknown config key: {key}")


def set_value(settings: Settings, key: str, value: str) -> None:
    if key == "summary_max_length":
        settings.summary_max_length = _parse_length(value)
        return
    if key.startswith("style."):
        name = key[len("style."):]
        if name in DEFAULT_STYLES:
            settings.styles[name] = value
            return
    raise ValueError(f"unknown config key: {key}")


def config_keys() -> list[str]:
    return ["summary_max_length"] + [f"style.{name}" for name in DEFAULT_STYLES]
