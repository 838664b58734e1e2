# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums.py

Enums del flujo de cobro de paquetes (Asaas).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from enum import Enum


class PaymentIntentType(str, Enum):
    """Qué se compra: créditos de alumno u horas de profesor."""
    STUDENT_PACKAGE = "STUDENT_PACKAGE"
    PROF_HOURS = "PROF_HOURS"


class PaymentIntentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELED = "CANCELED"


class BillingType(str, Enum):
    PIX = "PIX"
    BOLETO = "BOLETO"
    CREDIT_CARD = "CREDIT_CARD"
    UNDEFINED = "UNDEFINED"


class WebhookOutcomeStatus(str, Enum):
    """Resultado del procesamiento de un webhook."""
    OK = "ok"
    IGNORED = "ignored"        # provider_id desconocido
    DUPLICATE = "duplicate"    # intent ya PAID (o transición perdida)


__all__ = [
    "PaymentIntentType",
    "PaymentIntentStatus",
    "BillingType",
    "WebhookOutcomeStatus",
]
