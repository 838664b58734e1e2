# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas.py

Esquemas Pydantic del flujo de cobro.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import PaymentIntentStatus, PaymentIntentType


class PaymentActor(BaseModel):
    """Usuario que compra el paquete (datos de identidad para el proveedor)."""

    id: str
    name: str
    email: str
    tax_id: Optional[str] = Field(default=None, description="CPF/CNPJ")
    phone: Optional[str] = None


class PaymentIntentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: PaymentIntentType
    provider: str
    provider_id: Optional[str] = None
    amount: Decimal
    status: PaymentIntentStatus
    checkout_url: Optional[str] = None
    metadata_json: Dict[str, Any] = Field(default_factory=dict)
    actor_user_id: str
    franqueadora_id: Optional[str] = None
    unit_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class WebhookAck(BaseModel):
    """Respuesta al proveedor: siempre 200 una vez autenticado."""

    received: bool = True
    status: str


__all__ = ["PaymentActor", "PaymentIntentOut", "WebhookAck"]
