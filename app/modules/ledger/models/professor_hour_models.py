# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/models/professor_hour_models.py

Modelos ORM del saldo de horas de profesor y su ledger.

Dos bolsas:
- available_hours: horas gastables (compras o bonus ya madurado)
- locked_hours: bonus en tránsito ligado a un aula no concluida

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, JSONType, as_db_enum, utcnow
from ..enums import HourTxType, TxSource


class ProfHourBalance(Base):
    """
    Saldo de horas de un profesor en un scope.

    Tabla: public.prof_hour_balance

    Clave lógica: professor_id × franqueadora_id [× unit_id]
    """

    __tablename__ = "prof_hour_balance"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    professor_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franqueadora_id: Mapped[str] = mapped_column(String(36), nullable=False)

    unit_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    available_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    locked_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("available_hours >= 0", name="available_non_negative"),
        CheckConstraint("locked_hours >= 0", name="locked_non_negative"),
        Index(
            "uq_prof_hour_balance_unit_scope",
            "professor_id", "franqueadora_id", "unit_id",
            unique=True,
            postgresql_where=text("unit_id IS NOT NULL"),
            sqlite_where=text("unit_id IS NOT NULL"),
        ),
        Index(
            "uq_prof_hour_balance_tenant_scope",
            "professor_id", "franqueadora_id",
            unique=True,
            postgresql_where=text("unit_id IS NULL"),
            sqlite_where=text("unit_id IS NULL"),
        ),
    )

    @property
    def spendable_hours(self) -> int:
        """Horas que pueden bloquearse o debitarse (available - locked)."""
        return self.available_hours - self.locked_hours

    def __repr__(self) -> str:
        return (
            f"<ProfHourBalance professor={self.professor_id} "
            f"available={self.available_hours} locked={self.locked_hours}>"
        )


class HourTransaction(Base):
    """
    Ledger append-only de horas de profesor.

    Tabla: public.hour_tx

    Las filas de efecto cero (unlock/revoke sin horas bloqueadas) llevan
    hours=0 y meta {"skipped": true, "reason": "no_locked_hours"}.
    """

    __tablename__ = "hour_tx"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    professor_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franqueadora_id: Mapped[str] = mapped_column(String(36), nullable=False)

    unit_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    type: Mapped[HourTxType] = mapped_column(
        as_db_enum(HourTxType, name="hour_tx_type"),
        nullable=False,
    )

    source: Mapped[TxSource] = mapped_column(
        as_db_enum(TxSource, name="tx_source"),
        nullable=False,
        default=TxSource.SYSTEM,
    )

    hours: Mapped[int] = mapped_column(Integer, nullable=False)

    booking_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    source_tx_id: Mapped[Optional[int]] = mapped_column(
        BigIntPK,
        ForeignKey("hour_tx.id"),
        nullable=True,
    )

    meta: Mapped[dict[str, Any]] = mapped_column(
        "meta_json",
        JSONType,
        nullable=False,
        default=dict,
    )

    unlock_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("hours >= 0", name="hours_non_negative"),
        Index("ix_hour_tx_professor_created", "professor_id", "created_at"),
        Index("ix_hour_tx_type_unlock_at", "type", "unlock_at"),
        Index("ix_hour_tx_source_tx", "source_tx_id"),
    )

    def __repr__(self) -> str:
        return f"<HourTransaction id={self.id} type={self.type} hours={self.hours} professor={self.professor_id}>"


__all__ = ["ProfHourBalance", "HourTransaction"]
