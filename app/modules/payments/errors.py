# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/errors.py

Excepciones de dominio del flujo de cobro.

Cada error lleva `http_status` como sugerencia para la capa HTTP.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Any, Optional


class PaymentError(Exception):
    """Error base de pagos."""

    http_status: int = 400

    def __init__(self, message: str = "", *, details: Optional[Any] = None):
        self.message = message or self.__class__.__name__
        self.details = details
        super().__init__(self.message)


# ---------------------------------------------------------
# Errores del proveedor
# ---------------------------------------------------------

class ProviderError(PaymentError):
    """Fallo reportado por (o al hablar con) el proveedor de pagos."""

    http_status = 502


class BusinessRuleError(ProviderError):
    """Datos de identidad requeridos ausentes o inválidos (CPF/CNPJ)."""

    http_status = 400


class ConfigurationError(ProviderError):
    """Credenciales del proveedor no configuradas."""

    http_status = 500


class ExternalProviderError(ProviderError):
    """Cualquier otro fallo del proveedor (non-2xx o transporte)."""

    http_status = 502


# ---------------------------------------------------------
# Errores del PaymentIntent
# ---------------------------------------------------------

class PaymentIntentNotFound(PaymentError):
    http_status = 404

    def __init__(self, intent_id: str):
        self.intent_id = intent_id
        super().__init__(f"Payment intent {intent_id} not found")


class Unauthorized(PaymentError):
    http_status = 403


class InvalidState(PaymentError):
    http_status = 409


class CheckoutUnavailable(PaymentError):
    """No se pudo resolver una URL de checkout para el cobro."""

    http_status = 502


__all__ = [
    "PaymentError",
    "ProviderError",
    "BusinessRuleError",
    "ConfigurationError",
    "ExternalProviderError",
    "PaymentIntentNotFound",
    "Unauthorized",
    "InvalidState",
    "CheckoutUnavailable",
]
