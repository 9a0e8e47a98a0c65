from __future__ import annotations

from pathlib import Path


def read_text(path: Path) -> str:
    """
    Read a UTF-8 text file. Returns "" for a missing file.
    """
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def atomic_write_text(path: Path, text: str) -> None:
    """
    Atomically write text to disk by writing to a temp file then replacing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(text)
    tmp_path.replace(path)


def touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
