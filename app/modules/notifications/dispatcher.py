# -*- coding: utf-8 -*-
"""
backend/app/modules/notifications/dispatcher.py

Despachador de eventos del ledger hacia el Notifier.

Reglas:
- Nunca bloquea ni reintenta: en modo background cada evento se
  entrega en una tarea asyncio independiente.
- Nunca propaga errores: un fallo del Notifier se registra en logs
  y en métricas, y el cambio de saldo ya persistido se mantiene.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Set

from app.shared.core.metrics_helpers import get_or_create_counter
from .events import LedgerEvent
from .notifier import Notifier, get_notifier

logger = logging.getLogger(__name__)

NOTIFICATIONS_FAILED_TOTAL = get_or_create_counter(
    "notifications_failed_total",
    "Entregas de notificación fallidas (descartadas)",
    ("event",),
)


class LedgerEventDispatcher:
    """Entrega best-effort de LedgerEvent al Notifier."""

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        *,
        background: Optional[bool] = None,
    ):
        self._notifier = notifier
        if background is None:
            from app.shared.config import settings
            background = bool(settings.notifications_background)
        self.background = background
        self._pending: Set[asyncio.Task] = set()

    @property
    def notifier(self) -> Notifier:
        return self._notifier or get_notifier()

    async def dispatch(self, events: Iterable[LedgerEvent]) -> None:
        """Entrega (o agenda) cada evento; nunca lanza."""
        for event in events:
            if self.background:
                task = asyncio.create_task(self._deliver(event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
            else:
                await self._deliver(event)

    async def drain(self) -> None:
        """Espera las entregas en curso (shutdown / tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, event: LedgerEvent) -> None:
        try:
            handler = getattr(self.notifier, event.type.value)
            await handler(**event.payload)
        except Exception:
            NOTIFICATIONS_FAILED_TOTAL.labels(event=event.type.value).inc()
            logger.warning(
                "Notification delivery failed (ignored): event=%s payload=%s",
                event.type.value,
                event.payload,
                exc_info=True,
            )


# Singleton global
_dispatcher: Optional[LedgerEventDispatcher] = None


def get_event_dispatcher() -> LedgerEventDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = LedgerEventDispatcher()
    return _dispatcher


__all__ = ["LedgerEventDispatcher", "get_event_dispatcher", "NOTIFICATIONS_FAILED_TOTAL"]
