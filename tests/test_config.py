"""Unit tests for core/config.py -- Settings defaults and session validation."""

import pytest
from pydantic import ValidationError

from core.config import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults():
    s = _settings()
    assert s.session_cookie_name == "auth_session"
    assert s.session_ttl_seconds == 30 * 24 * 3600
    assert s.session_renew_seconds == 0
    assert s.cookie_same_site == "lax"
    assert s.secure_cookies is False
    assert s.database_url.startswith("sqlite:///")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SESSION_TTL_SECONDS", "120")
    monkeypatch.setenv("SECURE_COOKIES", "true")
    s = _settings()
    assert s.session_ttl_seconds == 120
    assert s.secure_cookies is True


@pytest.mark.parametrize("ttl", [0, -5])
def test_ttl_must_be_positive(ttl):
    with pytest.raises(ValidationError):
        _settings(session_ttl_seconds=ttl)


@pytest.mark.parametrize("renew", [-1, 3600, 7200])
def test_renew_window_must_be_shorter_than_ttl(renew):
    with pytest.raises(ValidationError):
        _settings(session_ttl_seconds=3600, session_renew_seconds=renew)


def test_same_site_is_normalized():
    assert _settings(cookie_same_site="Strict").cookie_same_site == "strict"


def test_unknown_same_site_rejected():
    with pytest.raises(ValidationError):
        _settings(cookie_same_site="sometimes")


def test_default_hosts_do_not_include_test_client_host(monkeypatch):
    monkeypatch.delenv("ALLOWED_HOSTS", raising=False)
    assert _settings().allowed_hosts == ["localhost", "127.0.0.1", "*.localhost"]
