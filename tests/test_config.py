from pathlib import Path

import pytest

from payments_ledger.config import Settings, load_settings


@pytest.fixture(autouse=True)
def _clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("LOG_LEVEL", "LEDGER_WORKERS", "LEDGER_REJECTS_PATH"):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_defaults():
    s = load_settings()
    assert s.log_level == "INFO"
    assert s.workers == 1
    assert s.rejects_path is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LEDGER_WORKERS", "4")
    monkeypatch.setenv("LEDGER_REJECTS_PATH", "out/rejects.jsonl")

    s = load_settings()
    assert s.log_level == "debug"
    assert s.workers == 4
    assert s.rejects_path == Path("out/rejects.jsonl")


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("LEDGER_WORKERS=2\n", encoding="utf-8")
    assert load_settings().workers == 2


@pytest.mark.parametrize(
    "env",
    [
        {"LEDGER_WORKERS": "0"},
        {"LOG_LEVEL": "chatty"},
    ],
)
def test_invalid_settings_rejected(monkeypatch, env):
    for k, v in env.items():
        monkeypatch.setenv(k, v)
    with pytest.raises(ValueError):
        Settings().validate_required()
