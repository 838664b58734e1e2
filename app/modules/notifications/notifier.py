# -*- coding: utf-8 -*-
"""
backend/app/modules/notifications/notifier.py

Interfaz Notifier (frontera externa) e implementación por defecto
basada en logging.

La entrega real (push, SSE, email) vive fuera del ledger; cualquier
implementación que cumpla el protocolo puede registrarse con set_notifier().

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Notifier(Protocol):
    """Eventos producidos por el ledger (fire-and-forget)."""

    async def credits_debited(self, student_id: str, qty: int, new_balance: int, booking_id: Optional[str] = None) -> None: ...

    async def credits_purchased(self, student_id: str, qty: int, new_balance: int) -> None: ...

    async def credits_refunded(self, student_id: str, qty: int, new_balance: int) -> None: ...

    async def balance_low(self, student_id: str, available: int) -> None: ...

    async def balance_zero(self, student_id: str) -> None: ...

    async def hours_purchased(self, professor_id: str, hours: int, new_available: int) -> None: ...

    async def payment_confirmed(self, user_id: str, payment_id: str, amount: Any, **extra: Any) -> None: ...

    async def payment_failed(self, user_id: str, payment_id: str, amount: Any, **extra: Any) -> None: ...

    async def payment_refunded(self, user_id: str, payment_id: str, amount: Any, **extra: Any) -> None: ...


class LoggingNotifier:
    """Notifier por defecto: deja constancia en logs (topic por usuario)."""

    @staticmethod
    def _topic(user_id: str) -> str:
        return f"user:{user_id}"

    async def credits_debited(self, student_id, qty, new_balance, booking_id=None):
        logger.info(
            "notify topic=%s event=credits_debited qty=%d balance=%d booking=%s",
            self._topic(student_id), qty, new_balance, booking_id,
        )

    async def credits_purchased(self, student_id, qty, new_balance):
        logger.info(
            "notify topic=%s event=credits_purchased qty=%d balance=%d",
            self._topic(student_id), qty, new_balance,
        )

    async def credits_refunded(self, student_id, qty, new_balance):
        logger.info(
            "notify topic=%s event=credits_refunded qty=%d balance=%d",
            self._topic(student_id), qty, new_balance,
        )

    async def balance_low(self, student_id, available):
        logger.info("notify topic=%s event=balance_low available=%d", self._topic(student_id), available)

    async def balance_zero(self, student_id):
        logger.info("notify topic=%s event=balance_zero", self._topic(student_id))

    async def hours_purchased(self, professor_id, hours, new_available):
        logger.info(
            "notify topic=%s event=hours_purchased hours=%d available=%d",
            self._topic(professor_id), hours, new_available,
        )

    async def payment_confirmed(self, user_id, payment_id, amount, **extra):
        logger.info("notify topic=%s event=payment_confirmed payment=%s amount=%s", self._topic(user_id), payment_id, amount)

    async def payment_failed(self, user_id, payment_id, amount, **extra):
        logger.info("notify topic=%s event=payment_failed payment=%s amount=%s", self._topic(user_id), payment_id, amount)

    async def payment_refunded(self, user_id, payment_id, amount, **extra):
        logger.info("notify topic=%s event=payment_refunded payment=%s amount=%s", self._topic(user_id), payment_id, amount)


# Singleton global
_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = LoggingNotifier()
    return _notifier


def set_notifier(notifier: Notifier) -> None:
    """Registra la implementación real del Notifier (arranque de la app)."""
    global _notifier
    _notifier = notifier


__all__ = ["Notifier", "LoggingNotifier", "get_notifier", "set_notifier"]
