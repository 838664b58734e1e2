# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/facades/__init__.py

Fachadas del ledger (orquestación con commit).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .grants import GrantOutcome, grant_credits, validate_grant_request

__all__ = ["GrantOutcome", "grant_credits", "validate_grant_request"]
