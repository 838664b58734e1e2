# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/enums.py

Enums del ledger de créditos (alumnos) y horas (profesores).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from enum import Enum


class StudentTxType(str, Enum):
    """Tipo de movimiento en el ledger de créditos de alumno."""
    PURCHASE = "PURCHASE"  # +total_purchased
    CONSUME = "CONSUME"    # +total_consumed (y libera lock si existe)
    LOCK = "LOCK"          # +locked_qty
    UNLOCK = "UNLOCK"      # -locked_qty
    REFUND = "REFUND"      # -total_consumed
    REVOKE = "REVOKE"      # -total_purchased
    GRANT = "GRANT"        # +total_purchased (manual, admin)


class HourTxType(str, Enum):
    """Tipo de movimiento en el ledger de horas de profesor."""
    PURCHASE = "PURCHASE"
    CONSUME = "CONSUME"
    BONUS_LOCK = "BONUS_LOCK"
    BONUS_UNLOCK = "BONUS_UNLOCK"
    REFUND = "REFUND"
    REVOKE = "REVOKE"
    GRANT = "GRANT"


class TxSource(str, Enum):
    """Origen del movimiento."""
    ALUNO = "ALUNO"
    PROFESSOR = "PROFESSOR"
    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"


class CreditType(str, Enum):
    """Tipo de crédito otorgado manualmente."""
    STUDENT_CLASS = "STUDENT_CLASS"
    PROFESSOR_HOUR = "PROFESSOR_HOUR"


__all__ = [
    "StudentTxType",
    "HourTxType",
    "TxSource",
    "CreditType",
]
