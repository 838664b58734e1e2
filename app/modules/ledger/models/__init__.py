# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/models/__init__.py

Modelos ORM del ledger (BalanceStore).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .student_credit_models import StudentClassBalance, StudentClassTransaction
from .professor_hour_models import ProfHourBalance, HourTransaction
from .credit_grant_models import CreditGrant

__all__ = [
    "StudentClassBalance",
    "StudentClassTransaction",
    "ProfHourBalance",
    "HourTransaction",
    "CreditGrant",
]
