# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories.py

Repositorios de PaymentIntent y PaymentCustomer.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.base import utcnow
from app.shared.database.repository import BaseRepository, dialect_insert
from .enums import PaymentIntentStatus
from .models import PaymentCustomer, PaymentIntent

logger = logging.getLogger(__name__)


class PaymentIntentRepository(BaseRepository[PaymentIntent]):
    def __init__(self):
        super().__init__(PaymentIntent)

    async def get_by_provider_id(
        self,
        session: AsyncSession,
        provider_id: str,
    ) -> Optional[PaymentIntent]:
        result = await session.execute(
            select(PaymentIntent).where(PaymentIntent.provider_id == provider_id)
        )
        return result.scalar_one_or_none()

    async def transition_status(
        self,
        session: AsyncSession,
        intent_id: str,
        new_status: PaymentIntentStatus,
    ) -> int:
        """
        UPDATE condicional: solo cambia el estado si el intent no está PAID.

        Dos webhooks simultáneos no pueden ambos ver rowcount == 1 hacia
        PAID: el segundo UPDATE espera el lock de fila del primero y, tras
        su commit, ya no cumple `status <> 'PAID'`.

        Returns:
            Filas afectadas (0 o 1)
        """
        stmt = (
            update(PaymentIntent)
            .where(
                PaymentIntent.id == intent_id,
                PaymentIntent.status != PaymentIntentStatus.PAID,
            )
            .values(status=new_status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        logger.debug(
            "PaymentIntent %s transition to %s: rowcount=%d",
            intent_id, new_status.value, result.rowcount,
        )
        return result.rowcount

    async def cancel_if_pending(self, session: AsyncSession, intent_id: str) -> int:
        """
        UPDATE condicional a CANCELED: solo desde PENDING.

        Un webhook que confirmó el pago entre la lectura y la cancelación
        deja rowcount == 0.

        Returns:
            Filas afectadas (0 o 1)
        """
        stmt = (
            update(PaymentIntent)
            .where(
                PaymentIntent.id == intent_id,
                PaymentIntent.status == PaymentIntentStatus.PENDING,
            )
            .values(status=PaymentIntentStatus.CANCELED, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def list_by_actor(
        self,
        session: AsyncSession,
        user_id: str,
        status: Optional[PaymentIntentStatus] = None,
    ) -> Sequence[PaymentIntent]:
        stmt = select(PaymentIntent).where(PaymentIntent.actor_user_id == user_id)
        if status is not None:
            stmt = stmt.where(PaymentIntent.status == status)
        stmt = stmt.order_by(PaymentIntent.created_at.desc())
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_unit(
        self,
        session: AsyncSession,
        unit_id: str,
        status: Optional[PaymentIntentStatus] = None,
    ) -> Sequence[PaymentIntent]:
        stmt = select(PaymentIntent).where(PaymentIntent.unit_id == unit_id)
        if status is not None:
            stmt = stmt.where(PaymentIntent.status == status)
        stmt = stmt.order_by(PaymentIntent.created_at.desc())
        result = await session.execute(stmt)
        return result.scalars().all()


class PaymentCustomerRepository:
    async def get_customer_id(
        self,
        session: AsyncSession,
        user_id: str,
        provider: str = "asaas",
    ) -> Optional[str]:
        result = await session.execute(
            select(PaymentCustomer.provider_customer_id).where(
                PaymentCustomer.user_id == user_id,
                PaymentCustomer.provider == provider,
            )
        )
        return result.scalar_one_or_none()

    async def save(
        self,
        session: AsyncSession,
        user_id: str,
        provider_customer_id: str,
        provider: str = "asaas",
    ) -> None:
        """Guarda el id de cliente; si otro proceso lo guardó antes, se conserva el suyo."""
        stmt = (
            dialect_insert(session, PaymentCustomer)
            .values(user_id=user_id, provider=provider, provider_customer_id=provider_customer_id)
            .on_conflict_do_nothing()
        )
        await session.execute(stmt)
        logger.debug("PaymentCustomer cached: user=%s provider=%s", user_id, provider)


__all__ = ["PaymentIntentRepository", "PaymentCustomerRepository"]
