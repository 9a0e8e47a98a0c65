from __future__ import annotations

from pathlib import Path

import pytest

from docstore.settings import DEFAULT_SAVE_INTERVAL, Settings, get_settings


def test_defaults_without_environment():
    settings = get_settings()
    assert settings == Settings()
    assert settings.storage_path == ""
    assert settings.save_interval == DEFAULT_SAVE_INTERVAL == 60.0
    assert settings.create_if_missing is True
    assert settings.json_indent is None


def test_reads_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DOCSTORE_PATH", "  /tmp/db.json ")
    monkeypatch.setenv("DOCSTORE_SAVE_INTERVAL", "2.5")
    monkeypatch.setenv("DOCSTORE_CREATE_IF_MISSING", "no")
    monkeypatch.setenv("DOCSTORE_JSON_INDENT", "4")

    settings = get_settings()
    assert settings.storage_path == "/tmp/db.json"
    assert settings.save_interval == 2.5
    assert settings.create_if_missing is False
    assert settings.json_indent == 4


@pytest.mark.parametrize("raw", ["soon", "-1", ""])
def test_bad_save_interval_falls_back(monkeypatch: pytest.MonkeyPatch, raw: str):
    monkeypatch.setenv("DOCSTORE_SAVE_INTERVAL", raw)
    assert get_settings().save_interval == DEFAULT_SAVE_INTERVAL


def test_bad_indent_is_compact(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DOCSTORE_JSON_INDENT", "wide")
    assert get_settings().json_indent is None


def test_env_file_is_loaded(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("DOCSTORE_PATH=data/store.json\nDOCSTORE_SAVE_INTERVAL=0\n", encoding="utf-8")

    settings = get_settings(env_file)
    assert settings.storage_path == "data/store.json"
    assert settings.save_interval == 0.0


def test_process_environment_wins_over_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("DOCSTORE_PATH=from-file.json\n", encoding="utf-8")
    monkeypatch.setenv("DOCSTORE_PATH", "from-shell.json")

    assert get_settings(env_file).storage_path == "from-shell.json"
