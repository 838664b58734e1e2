# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/repositories/student_transaction_repository.py

Repositorio del ledger append-only de créditos de alumno.

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

from ..enums import StudentTxType, TxSource
from ..models import StudentClassTransaction

logger = logging.getLogger(__name__)


class StudentTransactionRepository:
    """Altas y consultas del ledger de alumno."""

    async def create(
        self,
        session: AsyncSession,
        *,
        student_id: str,
        franqueadora_id: str,
        unit_id: Optional[str],
        tx_type: StudentTxType,
        source: TxSource,
        qty: int,
        booking_id: Optional[str] = None,
        unlock_at: Optional[datetime] = None,
        source_tx_id: Optional[int] = None,
        meta: Optional[dict] = None,
    ) -> StudentClassTransaction:
        """
        Crea un movimiento en el ledger.

        Validaciones:
        - qty >= 0 (qty == 0 solo en movimientos marcados como skipped)
        """
        if qty < 0:
            raise ValueError("qty cannot be negative")

        tx = StudentClassTransaction(
            student_id=student_id,
            franqueadora_id=franqueadora_id,
            unit_id=unit_id,
            type=tx_type,
            source=source,
            qty=qty,
            booking_id=booking_id,
            unlock_at=unlock_at,
            source_tx_id=source_tx_id,
            meta=meta or {},
        )
        session.add(tx)
        await session.flush()

        logger.debug(
            "StudentClassTransaction created: student=%s type=%s qty=%d booking=%s",
            student_id, tx_type.value, qty, booking_id,
        )
        return tx

    async def list_expired_locks(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int,
    ) -> Sequence[StudentClassTransaction]:
        """
        Filas LOCK vencidas (unlock_at <= now), sin booking asociado y
        todavía no liberadas por un UNLOCK que las referencie.

        Acotado por `limit`; puede devolver lista vacía.
        FOR UPDATE SKIP LOCKED: dos barridos concurrentes no toman la
        misma fila.
        """
        release = aliased(StudentClassTransaction)
        already_released = (
            select(release.id)
            .where(release.source_tx_id == StudentClassTransaction.id)
            .exists()
        )
        stmt = (
            select(StudentClassTransaction)
            .where(
                StudentClassTransaction.type == StudentTxType.LOCK,
                StudentClassTransaction.unlock_at.is_not(None),
                StudentClassTransaction.unlock_at <= now,
                StudentClassTransaction.booking_id.is_(None),
                ~already_released,
            )
            .order_by(StudentClassTransaction.unlock_at.asc(), StudentClassTransaction.id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_release(
        self,
        session: AsyncSession,
        lock_tx_id: int,
    ) -> Optional[StudentClassTransaction]:
        """Fila que ya liberó el lock `lock_tx_id`, si existe."""
        stmt = (
            select(StudentClassTransaction)
            .where(StudentClassTransaction.source_tx_id == lock_tx_id)
            .order_by(StudentClassTransaction.id.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_by_student(
        self,
        session: AsyncSession,
        student_id: str,
        franqueadora_id: Optional[str] = None,
        limit: int = 50,
    ) -> Sequence[StudentClassTransaction]:
        """Historial reciente del alumno (más nuevo primero)."""
        stmt = select(StudentClassTransaction).where(
            StudentClassTransaction.student_id == student_id
        )
        if franqueadora_id:
            stmt = stmt.where(StudentClassTransaction.franqueadora_id == franqueadora_id)
        stmt = stmt.order_by(
            StudentClassTransaction.created_at.desc(), StudentClassTransaction.id.desc()
        ).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["StudentTransactionRepository"]
