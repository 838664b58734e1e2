# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/repositories/hour_balance_repository.py

Repositorio del saldo de horas de profesor (ProfHourBalance).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.base import utcnow
from app.shared.database.repository import dialect_insert
from ..models import ProfHourBalance

logger = logging.getLogger(__name__)


class HourBalanceRepository:
    """Lecturas con lock y upsert tolerante a conflictos del saldo de horas."""

    async def get(
        self,
        session: AsyncSession,
        professor_id: str,
        franqueadora_id: str,
        unit_id: Optional[str] = None,
        *,
        for_update: bool = False,
    ) -> Optional[ProfHourBalance]:
        stmt = select(ProfHourBalance).where(
            ProfHourBalance.professor_id == professor_id,
            ProfHourBalance.franqueadora_id == franqueadora_id,
        )
        if unit_id is None:
            stmt = stmt.where(ProfHourBalance.unit_id.is_(None))
        else:
            stmt = stmt.where(ProfHourBalance.unit_id == unit_id)
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        session: AsyncSession,
        professor_id: str,
        franqueadora_id: str,
        unit_id: Optional[str] = None,
    ) -> tuple[ProfHourBalance, bool]:
        """
        Obtiene o crea el saldo de horas (en ceros) y lo devuelve bloqueado.

        Returns:
            Tuple (balance, created: bool)
        """
        stmt = (
            dialect_insert(session, ProfHourBalance)
            .values(
                professor_id=professor_id,
                franqueadora_id=franqueadora_id,
                unit_id=unit_id,
                available_hours=0,
                locked_hours=0,
            )
            .on_conflict_do_nothing()
        )
        result = await session.execute(stmt)
        created = result.rowcount == 1
        if created:
            logger.info(
                "Hour balance created: professor=%s franqueadora=%s unit=%s",
                professor_id, franqueadora_id, unit_id,
            )

        balance = await self.get(
            session, professor_id, franqueadora_id, unit_id, for_update=True
        )
        if balance is None:
            raise RuntimeError(
                f"Failed to get or create hour balance for {professor_id} in {franqueadora_id}"
            )
        return balance, created

    async def apply_delta(
        self,
        session: AsyncSession,
        balance: ProfHourBalance,
        *,
        available: int = 0,
        locked: int = 0,
    ) -> ProfHourBalance:
        """Aplica deltas al saldo ya bloqueado por el llamador."""
        balance.available_hours += available
        balance.locked_hours += locked
        balance.updated_at = utcnow()
        await session.flush()
        return balance

    async def set_locked(
        self,
        session: AsyncSession,
        balance: ProfHourBalance,
        locked_hours: int,
    ) -> ProfHourBalance:
        """Sobrescribe locked_hours (reconciliación)."""
        balance.locked_hours = locked_hours
        balance.updated_at = utcnow()
        await session.flush()
        return balance

    async def list_page(
        self,
        session: AsyncSession,
        *,
        after_id: int = 0,
        limit: int = 200,
    ) -> Sequence[ProfHourBalance]:
        """Página de saldos ordenada por id (keyset), para barridos periódicos."""
        stmt = (
            select(ProfHourBalance)
            .where(ProfHourBalance.id > after_id)
            .order_by(ProfHourBalance.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["HourBalanceRepository"]
