# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/repositories/__init__.py

Repositorios del ledger. Reciben la sesión por llamada y solo hacen flush.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .student_balance_repository import StudentBalanceRepository
from .student_transaction_repository import StudentTransactionRepository
from .hour_balance_repository import HourBalanceRepository
from .hour_transaction_repository import HourTransactionRepository
from .credit_grant_repository import CreditGrantRepository

__all__ = [
    "StudentBalanceRepository",
    "StudentTransactionRepository",
    "HourBalanceRepository",
    "HourTransactionRepository",
    "CreditGrantRepository",
]
