# -*- coding: utf-8 -*-
"""
backend/app/modules/tenants/repositories.py

Repositorio de lectura para franqueadoras.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from .models import Franqueadora


class FranqueadoraRepository(BaseRepository[Franqueadora]):
    """Consultas de tenants usadas por el ledger y los cobros."""

    def __init__(self):
        super().__init__(Franqueadora)

    async def get_active(
        self,
        session: AsyncSession,
        franqueadora_id: str,
    ) -> Optional[Franqueadora]:
        """Devuelve la franqueadora solo si existe y está activa."""
        stmt = select(Franqueadora).where(
            Franqueadora.id == franqueadora_id,
            Franqueadora.is_active.is_(True),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_oldest_active(self, session: AsyncSession) -> Optional[Franqueadora]:
        """Franqueadora activa más antigua (fallback de la principal)."""
        stmt = (
            select(Franqueadora)
            .where(Franqueadora.is_active.is_(True))
            .order_by(Franqueadora.created_at.asc(), Franqueadora.id.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


__all__ = ["FranqueadoraRepository"]
