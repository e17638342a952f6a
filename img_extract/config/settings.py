"""Settings storage for extraction defaults and tool locations."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


SETTINGS_PATH = Path(
    os.environ.get(
        "IMG_EXTRACT_SETTINGS_PATH",
        Path.home() / ".config" / "img-extract" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_COPY_CHUNK_SIZE = 4 * 1024 * 1024

DEFAULT_SETTINGS: dict[str, Any] = {
    "copy_chunk_size": DEFAULT_COPY_CHUNK_SIZE,
    "warn_on_short_copy": True,
    "tool_paths": {},
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = json.loads(json.dumps(DEFAULT_SETTINGS))
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def get_bool(key: str, default: bool = False) -> bool:
    return bool(get_setting(key, default))


def get_int(key: str, default: int) -> int:
    """Return an integer setting, falling back to ``default`` on bad values."""
    value = get_setting(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_tool_path(program: str) -> str:
    """Return the configured executable for ``program`` (or the bare name)."""
    tool_paths = get_setting("tool_paths") or {}
    if isinstance(tool_paths, dict):
        configured = tool_paths.get(program)
        if configured:
            return str(configured)
    return program


load_settings()
