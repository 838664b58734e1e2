# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/metrics.py

Contadores Prometheus del ledger.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from app.shared.core.metrics_helpers import get_or_create_counter

LEDGER_MUTATIONS_TOTAL = get_or_create_counter(
    "ledger_mutations_total",
    "Mutaciones de saldo aplicadas",
    ("resource", "operation"),
)

LEDGER_INSUFFICIENT_BALANCE_TOTAL = get_or_create_counter(
    "ledger_insufficient_balance_total",
    "Mutaciones rechazadas por saldo insuficiente",
    ("resource",),
)

__all__ = ["LEDGER_MUTATIONS_TOTAL", "LEDGER_INSUFFICIENT_BALANCE_TOTAL"]
