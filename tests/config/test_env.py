# tests/config/test_env.py

import os
import pytest
from pathlib import Path

from danfe_tracking.config.env import (
    EnvError,
    load_env,
    get_app_env,
    env as env_get,
)
from danfe_tracking.models.env_cfg import DEFAULT_GEMINI_MODEL, DEFAULT_SSW_BASE_URL

APP_KEYS = ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "SSW_BASE_URL", "SSW_TIMEOUT")


def _write_env_file(dirpath, text=""):
    f = dirpath / ".env"
    f.write_text(text)
    return f


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    # setenv first so values loaded from .env files are undone on teardown
    for n in APP_KEYS:
        monkeypatch.setenv(n, "")
        monkeypatch.delenv(n)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_file():
    cfg = get_app_env(dotenv_path=None)
    assert cfg.SSW_BASE_URL == DEFAULT_SSW_BASE_URL
    assert cfg.SSW_TIMEOUT == 30
    assert cfg.GEMINI_API_KEY == ""
    assert cfg.GEMINI_MODEL == DEFAULT_GEMINI_MODEL


def test_load_env_reads_file_and_sets_process_env(tmp_path):
    f = _write_env_file(tmp_path, "GEMINI_API_KEY=file_key\nSSW_TIMEOUT=12\n")

    loaded = load_env(f, strict=True, required_keys=("GEMINI_API_KEY",))

    assert loaded == {"GEMINI_API_KEY": "file_key", "SSW_TIMEOUT": "12"}
    assert os.environ["GEMINI_API_KEY"] == "file_key"


def test_process_env_wins_over_dotenv(tmp_path, monkeypatch):
    f = _write_env_file(
        tmp_path, "GEMINI_API_KEY=file_key\nSSW_BASE_URL=https://file.example/api\n")
    monkeypatch.setenv("GEMINI_API_KEY", "env_key")

    cfg = get_app_env(f)

    assert cfg.GEMINI_API_KEY == "env_key"                     # env wins
    assert cfg.SSW_BASE_URL == "https://file.example/api"      # came from file


def test_load_env_override_true_file_wins(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env_key")
    f = _write_env_file(tmp_path, "GEMINI_API_KEY=file_key\n")

    load_env(f, override=True)

    assert os.environ["GEMINI_API_KEY"] == "file_key"


def test_legacy_api_key_name_is_accepted(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy")
    assert get_app_env(dotenv_path=None).GEMINI_API_KEY == "legacy"


def test_bad_timeout_is_env_error(monkeypatch):
    monkeypatch.setenv("SSW_TIMEOUT", "soon")
    with pytest.raises(EnvError):
        get_app_env(dotenv_path=None)


def test_strict_requires_gemini_key(tmp_path: Path):
    env_file = tmp_path / ".env"
    assert not env_file.exists()

    with pytest.raises(EnvError) as e:
        get_app_env(dotenv_path=env_file, strict=True)
    assert "GEMINI_API_KEY" in str(e.value)


def test_env_required_flag_raises():
    with pytest.raises(KeyError):
        env_get("DT_SOME_MISSING_VAR", required=True)


def test_env_default_and_cast(monkeypatch):
    assert env_get("DT_OPTIONAL_VAR", default="fallback") == "fallback"
    monkeypatch.setenv("DT_OPTIONAL_VAR", "7")
    assert env_get("DT_OPTIONAL_VAR", cast=int) == 7


def test_strict_accepts_legacy_api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy")
    cfg = get_app_env(dotenv_path=None, strict=True)
    assert cfg.GEMINI_API_KEY == "legacy"


def test_strict_accepts_legacy_api_key_from_file(tmp_path):
    f = _write_env_file(tmp_path, "API_KEY=from_file\n")
    assert get_app_env(f, strict=True).GEMINI_API_KEY == "from_file"
