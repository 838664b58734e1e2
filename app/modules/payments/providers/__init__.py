# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/providers/__init__.py

Proveedores de pago. Por ahora solo Asaas.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from typing import Optional

from .base import (
    ParsedWebhook,
    PaymentLink,
    PaymentProvider,
    ProviderCustomer,
    ProviderPayment,
    SplitRule,
)
from .asaas_provider import AsaasProvider

_provider: Optional[PaymentProvider] = None


def get_payment_provider() -> PaymentProvider:
    """Proveedor global construido desde PaymentsSettings."""
    global _provider
    if _provider is None:
        from app.shared.config.settings_payments import get_payments_settings
        _provider = AsaasProvider.from_settings(get_payments_settings())
    return _provider


__all__ = [
    "ParsedWebhook",
    "PaymentLink",
    "PaymentProvider",
    "ProviderCustomer",
    "ProviderPayment",
    "SplitRule",
    "AsaasProvider",
    "get_payment_provider",
]
