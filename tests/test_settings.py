import pytest
from pydantic import ValidationError

from landlord.settings import LedgerSettings

ENV_VARS = ("LEDGER_MAX_BOMBS", "LEDGER_DATA_FILE", "LEDGER_LOG_LEVEL", "LEDGER_LOG_DIR", "LEDGER_CORS_ORIGINS")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = LedgerSettings()

    assert settings.max_bombs == 10
    assert settings.data_file == "data/ledger.json"
    assert settings.log_level == "INFO"
    assert settings.log_dir is None
    assert settings.cors_origin_list == ["*"]


def test_environment_overrides(clean_env):
    clean_env.setenv("LEDGER_MAX_BOMBS", "5")
    clean_env.setenv("LEDGER_LOG_LEVEL", "debug")
    clean_env.setenv("LEDGER_CORS_ORIGINS", "http://a.test, http://b.test")

    settings = LedgerSettings()

    assert settings.max_bombs == 5
    assert settings.log_level == "DEBUG"
    assert settings.cors_origin_list == ["http://a.test", "http://b.test"]


def test_invalid_values_are_rejected(clean_env):
    with pytest.raises(ValidationError):
        LedgerSettings(log_level="chatty")
    with pytest.raises(ValidationError):
        LedgerSettings(max_bombs=-1)
