# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/repositories/credit_grant_repository.py

Repositorio de la auditoría de grants manuales (append-only).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import CreditType
from ..models import CreditGrant

logger = logging.getLogger(__name__)


class CreditGrantRepository:
    """Altas y consultas filtradas de CreditGrant. No hay update ni delete."""

    async def create(self, session: AsyncSession, **fields: Any) -> CreditGrant:
        grant = CreditGrant(**fields)
        session.add(grant)
        await session.flush()
        logger.debug(
            "CreditGrant created: id=%s recipient=%s type=%s qty=%s",
            grant.id, grant.recipient_id, grant.credit_type, grant.quantity,
        )
        return grant

    async def get_by_id(self, session: AsyncSession, grant_id: int) -> Optional[CreditGrant]:
        return await session.get(CreditGrant, grant_id)

    @staticmethod
    def _filtered(
        stmt,
        *,
        franqueadora_id: Optional[str] = None,
        franchise_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        recipient_email: Optional[str] = None,
        credit_type: Optional[CreditType] = None,
        granted_by_email: Optional[str] = None,
    ):
        if franqueadora_id:
            stmt = stmt.where(CreditGrant.franqueadora_id == franqueadora_id)
        if franchise_id:
            stmt = stmt.where(CreditGrant.franchise_id == franchise_id)
        if start_date:
            stmt = stmt.where(CreditGrant.created_at >= start_date)
        if end_date:
            stmt = stmt.where(CreditGrant.created_at <= end_date)
        if recipient_email:
            stmt = stmt.where(CreditGrant.recipient_email.icontains(recipient_email, autoescape=True))
        if credit_type:
            stmt = stmt.where(CreditGrant.credit_type == credit_type)
        if granted_by_email:
            stmt = stmt.where(CreditGrant.granted_by_email.icontains(granted_by_email, autoescape=True))
        return stmt

    async def query(
        self,
        session: AsyncSession,
        *,
        offset: int,
        limit: int,
        **filters: Any,
    ) -> tuple[Sequence[CreditGrant], int]:
        """
        Consulta paginada más reciente primero.

        Returns:
            Tuple (grants, total)
        """
        count_stmt = self._filtered(select(func.count(CreditGrant.id)), **filters)
        total = int((await session.execute(count_stmt)).scalar_one())

        stmt = self._filtered(select(CreditGrant), **filters)
        stmt = (
            stmt.order_by(CreditGrant.created_at.desc(), CreditGrant.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), total

    async def list_by_recipient(
        self,
        session: AsyncSession,
        recipient_id: str,
        limit: int = 50,
    ) -> Sequence[CreditGrant]:
        stmt = (
            select(CreditGrant)
            .where(CreditGrant.recipient_id == recipient_id)
            .order_by(CreditGrant.created_at.desc(), CreditGrant.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_franqueadora(self, session: AsyncSession, franqueadora_id: str) -> int:
        stmt = select(func.count(CreditGrant.id)).where(
            CreditGrant.franqueadora_id == franqueadora_id
        )
        return int((await session.execute(stmt)).scalar_one())


__all__ = ["CreditGrantRepository"]
