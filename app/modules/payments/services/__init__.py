# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/__init__.py

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .payment_intent_service import (
    PaymentIntentService,
    WebhookOutcome,
    get_payment_intent_service,
    map_provider_status,
)

__all__ = [
    "PaymentIntentService",
    "WebhookOutcome",
    "get_payment_intent_service",
    "map_provider_status",
]
