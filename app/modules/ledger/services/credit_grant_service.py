# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/services/credit_grant_service.py

Auditoría inmutable de grants manuales.

Este servicio solo agrega filas: nunca toca saldos. El grant en sí lo
aplica StudentBalanceService/ProfessorHourService (ver facades.grants).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import CreditGrant
from ..repositories import CreditGrantRepository
from ..schemas import CreditGrantCreate, CreditGrantOut, GrantPage, GrantQueryFilters

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class CreditGrantService:
    def __init__(self, repo: Optional[CreditGrantRepository] = None):
        self.repo = repo or CreditGrantRepository()

    async def append(self, session: AsyncSession, grant_data: CreditGrantCreate) -> CreditGrant:
        """Inserta una fila de auditoría (inmutable)."""
        grant = await self.repo.create(session, **grant_data.model_dump())
        logger.info(
            "Credit grant recorded: id=%s recipient=%s type=%s qty=%d by=%s",
            grant.id, grant.recipient_id, grant.credit_type.value,
            grant.quantity, grant.granted_by_email,
        )
        return grant

    async def query(
        self,
        session: AsyncSession,
        filters: Optional[GrantQueryFilters] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> GrantPage:
        """
        Historial paginado, más reciente primero.

        limit se acota a 1..100; page mínimo 1.
        """
        filters = filters or GrantQueryFilters()
        page = max(1, page or 1)
        limit = min(max(1, limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

        grants, total = await self.repo.query(
            session,
            offset=(page - 1) * limit,
            limit=limit,
            **filters.model_dump(exclude_none=True),
        )
        return GrantPage(
            grants=[CreditGrantOut.model_validate(g) for g in grants],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    async def get_by_id(self, session: AsyncSession, grant_id: int) -> Optional[CreditGrant]:
        return await self.repo.get_by_id(session, grant_id)

    async def list_by_recipient(
        self,
        session: AsyncSession,
        recipient_id: str,
        limit: int = 50,
    ) -> Sequence[CreditGrant]:
        return await self.repo.list_by_recipient(session, recipient_id, limit)

    async def count_by_franqueadora(self, session: AsyncSession, franqueadora_id: str) -> int:
        return await self.repo.count_by_franqueadora(session, franqueadora_id)


# Singleton global
_service: Optional[CreditGrantService] = None


def get_credit_grant_service() -> CreditGrantService:
    global _service
    if _service is None:
        _service = CreditGrantService()
    return _service


__all__ = ["CreditGrantService", "get_credit_grant_service"]
