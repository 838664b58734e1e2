# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/repositories/hour_transaction_repository.py

Repositorio del ledger append-only de horas de profesor.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ..enums import HourTxType, TxSource
from ..models import HourTransaction

logger = logging.getLogger(__name__)


class HourTransactionRepository:
    """Altas y consultas del ledger de horas."""

    async def create(
        self,
        session: AsyncSession,
        *,
        professor_id: str,
        franqueadora_id: str,
        unit_id: Optional[str],
        tx_type: HourTxType,
        source: TxSource,
        hours: int,
        booking_id: Optional[str] = None,
        unlock_at: Optional[datetime] = None,
        source_tx_id: Optional[int] = None,
        meta: Optional[dict] = None,
    ) -> HourTransaction:
        if hours < 0:
            raise ValueError("hours cannot be negative")

        tx = HourTransaction(
            professor_id=professor_id,
            franqueadora_id=franqueadora_id,
            unit_id=unit_id,
            type=tx_type,
            source=source,
            hours=hours,
            booking_id=booking_id,
            unlock_at=unlock_at,
            source_tx_id=source_tx_id,
            meta=meta or {},
        )
        session.add(tx)
        await session.flush()

        logger.debug(
            "HourTransaction created: professor=%s type=%s hours=%d booking=%s",
            professor_id, tx_type.value, hours, booking_id,
        )
        return tx

    async def list_expired_locks(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int,
    ) -> Sequence[HourTransaction]:
        """
        Filas BONUS_LOCK vencidas, sin booking y sin BONUS_UNLOCK que
        las referencie (source_tx_id).

        FOR UPDATE SKIP LOCKED: dos barridos concurrentes no toman la
        misma fila.
        """
        release = aliased(HourTransaction)
        already_released = (
            select(release.id)
            .where(release.source_tx_id == HourTransaction.id)
            .exists()
        )
        stmt = (
            select(HourTransaction)
            .where(
                HourTransaction.type == HourTxType.BONUS_LOCK,
                HourTransaction.unlock_at.is_not(None),
                HourTransaction.unlock_at <= now,
                HourTransaction.booking_id.is_(None),
                ~already_released,
            )
            .order_by(HourTransaction.unlock_at.asc(), HourTransaction.id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_release(
        self,
        session: AsyncSession,
        lock_tx_id: int,
    ) -> Optional[HourTransaction]:
        """Fila que ya liberó el lock `lock_tx_id`, si existe."""
        stmt = (
            select(HourTransaction)
            .where(HourTransaction.source_tx_id == lock_tx_id)
            .order_by(HourTransaction.id.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_by_professor(
        self,
        session: AsyncSession,
        professor_id: str,
        franqueadora_id: Optional[str] = None,
        limit: int = 50,
    ) -> Sequence[HourTransaction]:
        stmt = select(HourTransaction).where(HourTransaction.professor_id == professor_id)
        if franqueadora_id:
            stmt = stmt.where(HourTransaction.franqueadora_id == franqueadora_id)
        stmt = stmt.order_by(
            HourTransaction.created_at.desc(), HourTransaction.id.desc()
        ).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["HourTransactionRepository"]
