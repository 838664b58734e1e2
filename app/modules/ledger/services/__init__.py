# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/services/__init__.py

Servicios del ledger de créditos (alumnos) y horas (profesores).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .results import LedgerResult, SyncResult
from .scope_resolver import BalanceScope, ScopeResolver
from .student_balance_service import StudentBalanceService, get_student_balance_service
from .professor_hour_service import ProfessorHourService, get_professor_hour_service
from .credit_grant_service import CreditGrantService, get_credit_grant_service

__all__ = [
    "LedgerResult",
    "SyncResult",
    "BalanceScope",
    "ScopeResolver",
    "StudentBalanceService",
    "get_student_balance_service",
    "ProfessorHourService",
    "get_professor_hour_service",
    "CreditGrantService",
    "get_credit_grant_service",
]
