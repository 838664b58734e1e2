# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/schemas.py

Esquemas Pydantic del ledger: auditoría de grants y solicitud de grant
manual por un administrador.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import CreditType


class CreditGrantCreate(BaseModel):
    """Datos de una fila de auditoría de grant."""

    recipient_id: str
    recipient_email: str
    recipient_name: Optional[str] = None
    credit_type: CreditType
    quantity: int = Field(gt=0)
    reason: Optional[str] = None
    granted_by_id: str
    granted_by_email: str
    franqueadora_id: str
    franchise_id: Optional[str] = None
    transaction_id: Optional[int] = None


class CreditGrantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: str
    recipient_email: str
    recipient_name: Optional[str] = None
    credit_type: CreditType
    quantity: int
    reason: Optional[str] = None
    granted_by_id: str
    granted_by_email: str
    franqueadora_id: str
    franchise_id: Optional[str] = None
    transaction_id: Optional[int] = None
    created_at: datetime


class GrantQueryFilters(BaseModel):
    """Filtros del historial de grants (todos opcionales)."""

    franqueadora_id: Optional[str] = None
    franchise_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    recipient_email: Optional[str] = Field(default=None, description="Substring, case-insensitive")
    credit_type: Optional[CreditType] = None
    granted_by_email: Optional[str] = Field(default=None, description="Substring, case-insensitive")


class GrantPage(BaseModel):
    grants: List[CreditGrantOut]
    total: int
    page: int
    total_pages: int


class GrantRecipient(BaseModel):
    """Destinatario del grant tal como lo resuelve el directorio de usuarios."""

    id: str
    email: str
    name: Optional[str] = None
    role: str = Field(description="STUDENT | TEACHER")


class GrantRequest(BaseModel):
    """Solicitud de grant manual."""

    recipient: GrantRecipient
    credit_type: CreditType
    quantity: int
    reason: Optional[str] = None
    franqueadora_id: str
    unit_id: Optional[str] = None
    franchise_id: Optional[str] = None
    confirm_high_quantity: bool = False


class AdminContext(BaseModel):
    """Administrador que ejecuta el grant."""

    id: str
    email: str


__all__ = [
    "CreditGrantCreate",
    "CreditGrantOut",
    "GrantQueryFilters",
    "GrantPage",
    "GrantRecipient",
    "GrantRequest",
    "AdminContext",
]
