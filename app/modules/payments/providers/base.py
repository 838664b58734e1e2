# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/providers/base.py

Interfaz del proveedor de pagos y sus DTOs.

Las implementaciones lanzan subtipos de ProviderError:
- BusinessRuleError: datos de identidad faltantes/ inválidos
- ConfigurationError: credenciales ausentes
- ExternalProviderError: cualquier otro fallo

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class ProviderCustomer:
    id: str


@dataclass(frozen=True)
class ProviderPayment:
    id: str
    checkout_url: Optional[str] = None
    status: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class PaymentLink:
    payment_url: Optional[str] = None
    bank_slip_url: Optional[str] = None
    pix_code: Optional[str] = None


@dataclass(frozen=True)
class SplitRule:
    """Instrucción de reparto: wallet destino y porcentaje (o valor fijo)."""
    wallet_id: str
    percentual_value: Optional[Decimal] = None
    fixed_value: Optional[Decimal] = None


@dataclass(frozen=True)
class ParsedWebhook:
    provider_id: Optional[str]
    status: str
    event: Optional[str] = None


@runtime_checkable
class PaymentProvider(Protocol):
    name: str

    async def create_customer(
        self,
        name: str,
        email: str,
        tax_id: Optional[str],
        phone: Optional[str] = None,
    ) -> ProviderCustomer: ...

    async def create_payment(
        self,
        customer_id: str,
        billing_type: str,
        value: Decimal,
        due_date: date,
        description: str,
        external_reference: Optional[str] = None,
        split: Optional[List[SplitRule]] = None,
    ) -> ProviderPayment: ...

    async def generate_payment_link(self, payment_id: str) -> PaymentLink: ...

    async def get_payment(self, payment_id: str) -> ProviderPayment: ...

    async def cancel_payment(self, payment_id: str) -> None: ...

    def parse_webhook(self, raw_event: Dict[str, Any]) -> ParsedWebhook: ...


__all__ = [
    "ProviderCustomer",
    "ProviderPayment",
    "PaymentLink",
    "SplitRule",
    "ParsedWebhook",
    "PaymentProvider",
]
