# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/services/results.py

Resultados de las mutaciones del ledger.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from app.modules.notifications.events import LedgerEvent


@dataclass
class LedgerResult:
    """
    Saldo resultante, movimiento que lo justifica y eventos a despachar
    después del commit.
    """
    balance: Any
    transaction: Any
    events: List[LedgerEvent] = field(default_factory=list)


@dataclass(frozen=True)
class SyncResult:
    """Resultado de la reconciliación de horas bloqueadas."""
    previous: int
    recomputed: int
    corrected: bool


__all__ = ["LedgerResult", "SyncResult"]
