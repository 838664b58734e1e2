# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/models/credit_grant_models.py

Auditoría inmutable de créditos/horas otorgados manualmente por admins.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, as_db_enum, utcnow
from ..enums import CreditType


class CreditGrant(Base):
    """
    Registro de auditoría de un grant manual.

    Tabla: public.credit_grants

    transaction_id apunta a student_class_tx.id o hour_tx.id según
    credit_type (no se declara FK porque referencia dos tablas).
    """

    __tablename__ = "credit_grants"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    recipient_id: Mapped[str] = mapped_column(String(36), nullable=False)

    recipient_email: Mapped[str] = mapped_column(String(320), nullable=False)

    recipient_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    credit_type: Mapped[CreditType] = mapped_column(
        as_db_enum(CreditType, name="credit_grant_type"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    granted_by_id: Mapped[str] = mapped_column(String(36), nullable=False)

    granted_by_email: Mapped[str] = mapped_column(String(320), nullable=False)

    franqueadora_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franchise_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    transaction_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_credit_grants_franqueadora_created", "franqueadora_id", "created_at"),
        Index("ix_credit_grants_recipient", "recipient_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<CreditGrant id={self.id} type={self.credit_type} qty={self.quantity} "
            f"recipient={self.recipient_id}>"
        )


__all__ = ["CreditGrant"]
