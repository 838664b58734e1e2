# -*- coding: utf-8 -*-
"""
backend/app/modules/bookings/repositories.py

Consultas de reservas usadas por la reconciliación de horas bloqueadas.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .enums import BookingStatus
from .models import Booking


class BookingRepository:
    """Repositorio de lectura para Booking."""

    async def sum_active_bonus_hours(
        self,
        session: AsyncSession,
        teacher_id: str,
        franqueadora_id: str,
        unit_id: Optional[str] = None,
    ) -> int:
        """
        Suma las horas bonus de reservas activas, pagadas y fuera del
        programa de fidelidad del profesor.

        El filtro por unidad sigue la clave del saldo: sin unit_id solo
        cuentan las reservas sin unidad (saldo a nivel franqueadora), para
        no sumar dos veces las horas de saldos por unidad.
        """
        stmt = select(func.coalesce(func.sum(Booking.bonus_hours), 0)).where(
            Booking.teacher_id == teacher_id,
            Booking.franqueadora_id == franqueadora_id,
            Booking.status_canonical == BookingStatus.PAID,
            Booking.is_loyalty.is_(False),
        )
        if unit_id is not None:
            stmt = stmt.where(Booking.unit_id == unit_id)
        else:
            stmt = stmt.where(Booking.unit_id.is_(None))

        result = await session.execute(stmt)
        return int(result.scalar_one())


__all__ = ["BookingRepository"]
