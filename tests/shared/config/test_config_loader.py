# -*- coding: utf-8 -*-
import pytest

from app.shared.config.config_loader import get_settings


def _reset_loader_cache():
    get_settings.cache_clear()


def test_loader_returns_dev_by_default(monkeypatch):
    monkeypatch.delenv("PYTHON_ENV", raising=False)
    _reset_loader_cache()
    s = get_settings()
    assert s.is_dev is True
    assert s.python_env == "development"


def test_loader_selects_test(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "test")
    _reset_loader_cache()
    s = get_settings()
    assert s.is_test is True
    assert s.scheduler_enabled is False
    assert s.notifications_background is False


def test_loader_selects_prod(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    _reset_loader_cache()
    s = get_settings()
    assert s.is_prod is True
    assert s.python_env == "production"


def test_loader_caches_singleton():
    _reset_loader_cache()
    a = get_settings()
    b = get_settings()
    assert a is b


def test_checks_reject_invalid_threshold(monkeypatch):
    monkeypatch.setenv("LEDGER_LOW_BALANCE_THRESHOLD", "0")
    _reset_loader_cache()
    with pytest.raises(ValueError) as ei:
        get_settings()
    assert "LEDGER_LOW_BALANCE_THRESHOLD" in str(ei.value)


def test_checks_reject_page_size_above_max(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "500")
    monkeypatch.setenv("MAX_PAGE_SIZE", "100")
    _reset_loader_cache()
    with pytest.raises(ValueError):
        get_settings()


def test_ledger_defaults():
    _reset_loader_cache()
    s = get_settings()
    assert s.ledger_low_balance_threshold == 2
    assert s.ledger_expired_locks_batch == 100
    assert s.ledger_principal_franqueadora_id is None


def test_cors_origins_parsing(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, 'https://b.example'")
    _reset_loader_cache()
    assert get_settings().get_cors_origins() == ["https://a.example", "https://b.example"]
# Fin del archivo backend/tests/shared/config/test_config_loader.py
