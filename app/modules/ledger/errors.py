# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/errors.py

Excepciones de dominio del ledger.

Los errores de saldo son síncronos: abortan la operación de negocio
que los provocó (p. ej. la creación de la reserva) sin mutar nada.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations


class LedgerError(Exception):
    """Error base del ledger."""

    http_status: int = 400


class InvalidScope(LedgerError):
    """No se pudo resolver una franqueadora activa (ni la principal)."""

    http_status = 500

    def __init__(self, franqueadora_id: str | None):
        self.franqueadora_id = franqueadora_id
        super().__init__(
            f"No active franqueadora for scope {franqueadora_id!r} and no principal fallback"
        )


class InsufficientBalance(LedgerError):
    """Saldo disponible menor al requerido."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient balance: available={available}, required={required}"
        )


class InsufficientLockedBalance(LedgerError):
    """Saldo bloqueado menor al que se intenta liberar."""

    def __init__(self, locked: int, required: int):
        self.locked = locked
        self.required = required
        super().__init__(
            f"Insufficient locked balance: locked={locked}, required={required}"
        )


class GrantValidationError(ValueError):
    """Solicitud de grant manual inválida (cantidad, confirmación o rol)."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


__all__ = [
    "LedgerError",
    "InvalidScope",
    "InsufficientBalance",
    "InsufficientLockedBalance",
    "GrantValidationError",
]
