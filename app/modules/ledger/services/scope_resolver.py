# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/services/scope_resolver.py

Resolución del scope (franqueadora [+ unidad]) de un saldo.

Si la franqueadora pedida no existe o está inactiva, el saldo se abre
bajo la franqueadora principal:
1. LEDGER_PRINCIPAL_FRANQUEADORA_ID si existe y está activa
2. la franqueadora activa más antigua
Si ninguna resuelve -> InvalidScope.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.tenants.repositories import FranqueadoraRepository
from ..errors import InvalidScope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceScope:
    """Clave de partición de un saldo."""
    franqueadora_id: Optional[str]
    unit_id: Optional[str] = None


class ScopeResolver:
    def __init__(
        self,
        tenants: Optional[FranqueadoraRepository] = None,
        principal_id: Optional[str] = None,
    ):
        self.tenants = tenants or FranqueadoraRepository()
        self._principal_id = principal_id

    @property
    def principal_id(self) -> Optional[str]:
        if self._principal_id is not None:
            return self._principal_id
        from app.shared.config import settings
        return settings.ledger_principal_franqueadora_id

    async def resolve(self, session: AsyncSession, scope: BalanceScope) -> BalanceScope:
        if scope.franqueadora_id:
            tenant = await self.tenants.get_active(session, scope.franqueadora_id)
            if tenant is not None:
                return scope

        principal = None
        if self.principal_id:
            principal = await self.tenants.get_active(session, self.principal_id)
        if principal is None:
            principal = await self.tenants.get_oldest_active(session)
        if principal is None:
            raise InvalidScope(scope.franqueadora_id)

        # La unidad pertenece al tenant original; bajo la principal el saldo es tenant-wide
        logger.warning(
            "Franqueadora %s inactive or missing, falling back to principal %s",
            scope.franqueadora_id, principal.id,
        )
        return BalanceScope(franqueadora_id=principal.id, unit_id=None)


__all__ = ["BalanceScope", "ScopeResolver"]
