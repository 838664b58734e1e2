# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models.py

Modelos ORM de cobros:
- PaymentIntent: intento de compra de un paquete (créditos u horas)
- PaymentCustomer: id de cliente del proveedor cacheado por usuario

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import DateTime, Index, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, JSONType, as_db_enum, utcnow
from .enums import PaymentIntentStatus, PaymentIntentType


class PaymentIntent(Base):
    """
    Intento de pago de un paquete.

    Tabla: public.payment_intents

    Nace PENDING y pasa a PAID una sola vez (transición condicional
    en PaymentIntentRepository.transition_status).
    """

    __tablename__ = "payment_intents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    type: Mapped[PaymentIntentType] = mapped_column(
        as_db_enum(PaymentIntentType, name="payment_intent_type"),
        nullable=False,
    )

    provider: Mapped[str] = mapped_column(String(32), nullable=False, default="asaas")

    provider_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, unique=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[PaymentIntentStatus] = mapped_column(
        as_db_enum(PaymentIntentStatus, name="payment_intent_status"),
        nullable=False,
        default=PaymentIntentStatus.PENDING,
    )

    checkout_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # "metadata" está reservado por SQLAlchemy
    metadata_json: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        nullable=False,
        default=dict,
    )

    actor_user_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franqueadora_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    unit_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    __table_args__ = (
        Index("ix_payment_intents_actor_created", "actor_user_id", "created_at"),
        Index("ix_payment_intents_unit_created", "unit_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentIntent id={self.id} type={self.type} status={self.status} "
            f"provider_id={self.provider_id}>"
        )


class PaymentCustomer(Base):
    """
    Cliente del proveedor asociado a un usuario.

    Tabla: public.payment_customers
    """

    __tablename__ = "payment_customers"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(36), nullable=False)

    provider: Mapped[str] = mapped_column(String(32), nullable=False, default="asaas")

    provider_customer_id: Mapped[str] = mapped_column(String(128), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_payment_customers_user_provider"),
    )


__all__ = ["PaymentIntent", "PaymentCustomer"]
