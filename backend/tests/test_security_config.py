import importlib
import sys

import pytest

STRONG_ACCESS_SECRET = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
STRONG_REFRESH_SECRET = "fedcba9876543210fedcba9876543210fedcba9876543210fedcba9876543210"


def reload_config_module():
    config_module = sys.modules.get("app.config")
    if config_module:
        config_module.get_settings.cache_clear()
        sys.modules.pop("app.config", None)
    return importlib.import_module("app.config")


@pytest.fixture(autouse=True)
def restore_config_module():
    yield
    # Later tests import modules that captured the original settings
    reload_config_module()


@pytest.mark.parametrize("variable", ["ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET"])
def test_missing_secret_fails_closed(monkeypatch, variable):
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", STRONG_ACCESS_SECRET)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", STRONG_REFRESH_SECRET)
    monkeypatch.setenv(variable, "")

    config_module = reload_config_module()

    with pytest.raises(Exception, match=variable):
        config_module.get_settings()


def test_weak_secret_fails_closed(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", "changeme-in-production")
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", STRONG_REFRESH_SECRET)

    config_module = reload_config_module()

    with pytest.raises(Exception, match="ACCESS_TOKEN_SECRET"):
        config_module.get_settings()


def test_low_entropy_secret_fails_closed(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", STRONG_ACCESS_SECRET)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", "ab" * 20)

    config_module = reload_config_module()

    with pytest.raises(Exception, match="entropy"):
        config_module.get_settings()


def test_identical_secrets_fail_closed(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", STRONG_ACCESS_SECRET)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", STRONG_ACCESS_SECRET)

    config_module = reload_config_module()

    with pytest.raises(Exception, match="must differ"):
        config_module.get_settings()


def test_strong_secrets_pass(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", STRONG_ACCESS_SECRET)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", STRONG_REFRESH_SECRET)

    config_module = reload_config_module()
    settings = config_module.get_settings()

    assert settings.access_token_secret == STRONG_ACCESS_SECRET
    assert settings.refresh_token_expire_days == 10
