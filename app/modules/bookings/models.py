# -*- coding: utf-8 -*-
"""
backend/app/modules/bookings/models.py

Proyección de solo lectura de reservas.

El ciclo de vida de las reservas pertenece a otro servicio; el ledger
solo la consulta para reconciliar `locked_hours` de profesores.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, utcnow
from .enums import BookingStatus


class Booking(Base):
    """
    Reserva de aula.

    Tabla: public.bookings

    Columnas usadas por el ledger:
    - teacher_id / franqueadora_id / unit_id: scope del profesor
    - status_canonical: RESERVED | PAID | CANCELED | DONE
    - is_loyalty: alumno de cartera (debita horas disponibles, sin lock)
    - bonus_hours: horas bonus en tránsito que genera la reserva
    """

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False)

    franqueadora_id: Mapped[str] = mapped_column(String(36), nullable=False)

    unit_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    status_canonical: Mapped[BookingStatus] = mapped_column(
        as_db_enum(BookingStatus, name="booking_status_canonical"),
        nullable=False,
        default=BookingStatus.RESERVED,
    )

    is_loyalty: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    bonus_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_bookings_teacher_scope_status", "teacher_id", "franqueadora_id", "status_canonical"),
    )

    def __repr__(self) -> str:
        return f"<Booking id={self.id} teacher={self.teacher_id} status={self.status_canonical}>"


__all__ = ["Booking"]
