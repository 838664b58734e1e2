# -*- coding: utf-8 -*-
"""
backend/app/modules/tenants/models.py

Modelo ORM de la franqueadora (tenant raíz de balances y transacciones).

El CRUD de franqueadoras vive fuera del ledger; aquí solo se leen
`is_active` (validación de scope) y `asaas_wallet_id` (split de cobros).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, utcnow


class Franqueadora(Base):
    """
    Tenant raíz.

    Tabla: public.franqueadoras

    La franqueadora "principal" es la configurada en
    LEDGER_PRINCIPAL_FRANQUEADORA_ID o, en su defecto, la activa más antigua.
    """

    __tablename__ = "franqueadoras"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
    )

    asaas_wallet_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        doc="Wallet Asaas que recibe el split de cobros",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Franqueadora id={self.id} active={self.is_active}>"


__all__ = ["Franqueadora"]
