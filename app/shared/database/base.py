# -*- coding: utf-8 -*-
"""
backend/app/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_db_enum: helper genérico para mapear enums Python a columnas de texto
- BigIntPK / JSONType: tipos portables (PostgreSQL en producción, SQLite en tests)

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import BigInteger, Integer, JSON, MetaData
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.dialects.postgresql import JSONB

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    """Timestamp UTC con zona (default del lado Python para evitar lazy-loads async)."""
    return datetime.now(timezone.utc)


# BIGSERIAL en PostgreSQL; INTEGER PRIMARY KEY (rowid) en SQLite
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")

# JSONB en PostgreSQL; JSON genérico en otros dialectos
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM del ledger.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== HELPER GENÉRICO PARA ENUMS =====
def as_db_enum(
    enum_cls: Type[Enum],
    name: str | None = None,
    length: int = 32,
) -> SQLEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy almacenado como texto (no nativo).

    Uso típico:

        from app.shared.database.base import Base, as_db_enum
        from .enums import PaymentIntentStatus

        class PaymentIntent(Base):
            status: Mapped[PaymentIntentStatus] = mapped_column(
                as_db_enum(PaymentIntentStatus, name="payment_intent_status"),
                nullable=False,
            )

    - Persiste el `.value` de cada miembro (values_callable).
    - Si no se pasa `name`, usa el nombre de la clase en minúsculas.
    """
    enum_name = name or enum_cls.__name__.lower()

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return SQLEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        length=length,
        values_callable=_values,
        validate_strings=True,
    )


__all__ = ["Base", "NAMING_CONVENTION", "as_db_enum", "BigIntPK", "JSONType", "utcnow"]

# Fin del archivo backend/app/shared/database/base.py
