# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/repositories/student_balance_repository.py

Repositorio del saldo de créditos de alumno (StudentClassBalance).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.base import utcnow
from app.shared.database.repository import dialect_insert
from ..models import StudentClassBalance

logger = logging.getLogger(__name__)


class StudentBalanceRepository:
    """Lecturas con lock y upsert tolerante a conflictos del saldo de alumno."""

    async def get(
        self,
        session: AsyncSession,
        student_id: str,
        franqueadora_id: str,
        unit_id: Optional[str] = None,
        *,
        for_update: bool = False,
    ) -> Optional[StudentClassBalance]:
        """
        Obtiene el saldo del alumno en el scope.

        Con for_update=True la fila queda bloqueada hasta el fin de la
        transacción del llamador (SELECT ... FOR UPDATE).
        """
        stmt = select(StudentClassBalance).where(
            StudentClassBalance.student_id == student_id,
            StudentClassBalance.franqueadora_id == franqueadora_id,
        )
        if unit_id is None:
            stmt = stmt.where(StudentClassBalance.unit_id.is_(None))
        else:
            stmt = stmt.where(StudentClassBalance.unit_id == unit_id)
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        session: AsyncSession,
        student_id: str,
        franqueadora_id: str,
        unit_id: Optional[str] = None,
    ) -> tuple[StudentClassBalance, bool]:
        """
        Obtiene o crea el saldo (en ceros) y lo devuelve bloqueado.

        INSERT ... ON CONFLICT DO NOTHING: dos creadores simultáneos no
        generan error de duplicado; el perdedor simplemente relee la fila.

        Returns:
            Tuple (balance, created: bool)
        """
        stmt = (
            dialect_insert(session, StudentClassBalance)
            .values(
                student_id=student_id,
                franqueadora_id=franqueadora_id,
                unit_id=unit_id,
                total_purchased=0,
                total_consumed=0,
                locked_qty=0,
            )
            .on_conflict_do_nothing()
        )
        result = await session.execute(stmt)
        created = result.rowcount == 1
        if created:
            logger.info(
                "Student balance created: student=%s franqueadora=%s unit=%s",
                student_id, franqueadora_id, unit_id,
            )

        balance = await self.get(
            session, student_id, franqueadora_id, unit_id, for_update=True
        )
        if balance is None:
            # No debería llegar aquí
            raise RuntimeError(
                f"Failed to get or create student balance for {student_id} in {franqueadora_id}"
            )
        return balance, created

    async def apply_delta(
        self,
        session: AsyncSession,
        balance: StudentClassBalance,
        *,
        purchased: int = 0,
        consumed: int = 0,
        locked: int = 0,
    ) -> StudentClassBalance:
        """Aplica deltas al saldo ya bloqueado por el llamador."""
        balance.total_purchased += purchased
        balance.total_consumed += consumed
        balance.locked_qty += locked
        balance.updated_at = utcnow()
        await session.flush()
        return balance


__all__ = ["StudentBalanceRepository"]
