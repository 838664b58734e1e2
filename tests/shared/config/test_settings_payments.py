# -*- coding: utf-8 -*-
"""
backend/tests/shared/config/test_settings_payments.py

Tests de configuración de pagos (Asaas).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from decimal import Decimal

from app.shared.config.settings_payments import (
    ASAAS_PRODUCTION_URL,
    ASAAS_SANDBOX_URL,
    PaymentsSettings,
    get_payments_settings,
)


def test_payments_settings_defaults():
    """Defaults seguros: sandbox, sin split, PIX."""
    settings = PaymentsSettings(_env_file=None)

    assert settings.payments_enabled is True
    assert settings.asaas_env == "sandbox"
    assert settings.asaas_base_url == ASAAS_SANDBOX_URL
    assert settings.asaas_timeout_seconds == 15.0
    assert settings.asaas_webhook_token is None
    assert settings.payments_split_percent == Decimal("0")
    assert settings.payments_default_billing_type == "PIX"


def test_asaas_env_aliases(monkeypatch):
    monkeypatch.setenv("ASAAS_ENV", "prod")
    settings = PaymentsSettings(_env_file=None)
    assert settings.asaas_env == "production"
    assert settings.asaas_base_url == ASAAS_PRODUCTION_URL
    assert settings.asaas_invoice_base_url == "https://www.asaas.com"


def test_api_key_legacy_fallback(monkeypatch):
    monkeypatch.setenv("ASAAS_ACCESS_TOKEN", "$aact_legacy")
    settings = PaymentsSettings(_env_file=None)
    assert settings.asaas_api_key == "$aact_legacy"


def test_get_payments_settings_singleton():
    assert get_payments_settings() is get_payments_settings()
# Fin del archivo backend/tests/shared/config/test_settings_payments.py
