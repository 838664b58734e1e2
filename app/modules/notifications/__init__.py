# -*- coding: utf-8 -*-
"""
backend/app/modules/notifications/__init__.py

Eventos del ledger, interfaz Notifier y despachador best-effort.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .events import LedgerEvent, LedgerEventType
from .notifier import Notifier, LoggingNotifier, get_notifier, set_notifier
from .dispatcher import LedgerEventDispatcher, get_event_dispatcher

__all__ = [
    "LedgerEvent",
    "LedgerEventType",
    "Notifier",
    "LoggingNotifier",
    "get_notifier",
    "set_notifier",
    "LedgerEventDispatcher",
    "get_event_dispatcher",
]
