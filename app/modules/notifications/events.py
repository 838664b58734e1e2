# -*- coding: utf-8 -*-
"""
backend/app/modules/notifications/events.py

Eventos emitidos por las mutaciones del ledger y de pagos.

Las mutaciones no notifican directamente: devuelven una lista de
LedgerEvent y el LedgerEventDispatcher los entrega al Notifier.
El payload coincide con los kwargs del método del Notifier.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class LedgerEventType(str, Enum):
    CREDITS_DEBITED = "credits_debited"
    CREDITS_PURCHASED = "credits_purchased"
    CREDITS_REFUNDED = "credits_refunded"
    BALANCE_LOW = "balance_low"
    BALANCE_ZERO = "balance_zero"
    HOURS_PURCHASED = "hours_purchased"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_REFUNDED = "payment_refunded"


@dataclass(frozen=True)
class LedgerEvent:
    """Evento de dominio listo para entregar al Notifier."""
    type: LedgerEventType
    payload: Dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------
# Constructores
# ---------------------------------------------------------

def credits_debited(student_id: str, qty: int, new_balance: int, booking_id: Optional[str] = None) -> LedgerEvent:
    return LedgerEvent(
        LedgerEventType.CREDITS_DEBITED,
        {"student_id": student_id, "qty": qty, "new_balance": new_balance, "booking_id": booking_id},
    )


def credits_purchased(student_id: str, qty: int, new_balance: int) -> LedgerEvent:
    return LedgerEvent(
        LedgerEventType.CREDITS_PURCHASED,
        {"student_id": student_id, "qty": qty, "new_balance": new_balance},
    )


def credits_refunded(student_id: str, qty: int, new_balance: int) -> LedgerEvent:
    return LedgerEvent(
        LedgerEventType.CREDITS_REFUNDED,
        {"student_id": student_id, "qty": qty, "new_balance": new_balance},
    )


def balance_low(student_id: str, available: int) -> LedgerEvent:
    return LedgerEvent(LedgerEventType.BALANCE_LOW, {"student_id": student_id, "available": available})


def balance_zero(student_id: str) -> LedgerEvent:
    return LedgerEvent(LedgerEventType.BALANCE_ZERO, {"student_id": student_id})


def hours_purchased(professor_id: str, hours: int, new_available: int) -> LedgerEvent:
    return LedgerEvent(
        LedgerEventType.HOURS_PURCHASED,
        {"professor_id": professor_id, "hours": hours, "new_available": new_available},
    )


def payment_event(
    event_type: LedgerEventType,
    user_id: str,
    payment_id: str,
    amount: Any,
    **extra: Any,
) -> LedgerEvent:
    """Evento de pago (confirmed/failed/refunded)."""
    return LedgerEvent(
        event_type,
        {"user_id": user_id, "payment_id": payment_id, "amount": amount, **extra},
    )


__all__ = [
    "LedgerEventType",
    "LedgerEvent",
    "credits_debited",
    "credits_purchased",
    "credits_refunded",
    "balance_low",
    "balance_zero",
    "hours_purchased",
    "payment_event",
]
