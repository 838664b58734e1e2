# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/metrics.py

Contadores Prometheus del flujo de cobro.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from app.shared.core.metrics_helpers import get_or_create_counter

PAYMENTS_WEBHOOK_OUTCOME_TOTAL = get_or_create_counter(
    "payments_webhook_outcome_total",
    "Webhooks procesados por resultado (ok/ignored/duplicate/error)",
    ("outcome",),
)

PAYMENTS_CREDIT_APPLIED_TOTAL = get_or_create_counter(
    "payments_credit_applied_total",
    "Paquetes acreditados en el ledger",
    ("intent_type",),
)

__all__ = ["PAYMENTS_WEBHOOK_OUTCOME_TOTAL", "PAYMENTS_CREDIT_APPLIED_TOTAL"]
