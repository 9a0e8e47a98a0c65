from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_SAVE_INTERVAL = 60.0


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _env_int_or_none(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    # Empty path means in-memory storage
    storage_path: str = ""

    # Debounce window for write-back, in seconds
    save_interval: float = DEFAULT_SAVE_INTERVAL

    # FileSaveLocation behaviour
    create_if_missing: bool = True

    # None writes compact JSON
    json_indent: int | None = None


def get_settings(env_file: str | os.PathLike[str] | None = None) -> Settings:
    if env_file is not None:
        load_dotenv(env_file)

    return Settings(
        storage_path=os.getenv("DOCSTORE_PATH", "").strip(),
        save_interval=_env_float("DOCSTORE_SAVE_INTERVAL", DEFAULT_SAVE_INTERVAL),
        create_if_missing=_env_bool("DOCSTORE_CREATE_IF_MISSING", True),
        json_indent=_env_int_or_none("DOCSTORE_JSON_INDENT"),
    )
