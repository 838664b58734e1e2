# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/models/student_credit_models.py

Modelos ORM del saldo de créditos de alumno y su ledger.

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
from ..enums import StudentTxType, TxSource


class StudentClassBalance(Base):
    """
    Saldo materializado de créditos de un alumno en un scope.

    Tabla: public.student_class_balance

    Clave lógica: student_id × franqueadora_id [× unit_id]
    (dos índices únicos parciales para que unit_id NULL también colisione).

    available = total_purchased - total_consumed - locked_qty
    """

    __tablename__ = "student_class_balance"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    student_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franqueadora_id: Mapped[str] = mapped_column(String(36), nullable=False)

    unit_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    total_purchased: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_consumed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    locked_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("total_purchased >= 0", name="purchased_non_negative"),
        CheckConstraint("total_consumed >= 0", name="consumed_non_negative"),
        CheckConstraint("locked_qty >= 0", name="locked_non_negative"),
        Index(
            "uq_student_class_balance_unit_scope",
            "student_id", "franqueadora_id", "unit_id",
            unique=True,
            postgresql_where=text("unit_id IS NOT NULL"),
            sqlite_where=text("unit_id IS NOT NULL"),
        ),
        Index(
            "uq_student_class_balance_tenant_scope",
            "student_id", "franqueadora_id",
            unique=True,
            postgresql_where=text("unit_id IS NULL"),
            sqlite_where=text("unit_id IS NULL"),
        ),
    )

    @property
    def available(self) -> int:
        """Créditos disponibles (comprados - consumidos - bloqueados)."""
        return self.total_purchased - self.total_consumed - self.locked_qty

    def __repr__(self) -> str:
        return (
            f"<StudentClassBalance student={self.student_id} purchased={self.total_purchased} "
            f"consumed={self.total_consumed} locked={self.locked_qty}>"
        )


class StudentClassTransaction(Base):
    """
    Ledger append-only de créditos de alumno.

    Tabla: public.student_class_tx

    - unlock_at: solo relevante en filas LOCK con expiración por tiempo
    - source_tx_id: en filas UNLOCK generadas por el scheduler, apunta
      al LOCK liberado (evita liberarlo dos veces)
    """

    __tablename__ = "student_class_tx"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    student_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franqueadora_id: Mapped[str] = mapped_column(String(36), nullable=False)

    unit_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    type: Mapped[StudentTxType] = mapped_column(
        as_db_enum(StudentTxType, name="student_class_tx_type"),
        nullable=False,
    )

    source: Mapped[TxSource] = mapped_column(
        as_db_enum(TxSource, name="tx_source"),
        nullable=False,
        default=TxSource.SYSTEM,
    )

    qty: Mapped[int] = mapped_column(Integer, nullable=False)

    booking_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    source_tx_id: Mapped[Optional[int]] = mapped_column(
        BigIntPK,
        ForeignKey("student_class_tx.id"),
        nullable=True,
    )

    # La columna se llama meta_json; "metadata" está reservado en SQLAlchemy
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
        CheckConstraint("qty >= 0", name="qty_non_negative"),
        Index("ix_student_class_tx_student_created", "student_id", "created_at"),
        Index("ix_student_class_tx_type_unlock_at", "type", "unlock_at"),
        Index("ix_student_class_tx_source_tx", "source_tx_id"),
    )

    def __repr__(self) -> str:
        return f"<StudentClassTransaction id={self.id} type={self.type} qty={self.qty} student={self.student_id}>"


__all__ = ["StudentClassBalance", "StudentClassTransaction"]
