# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/services/professor_hour_service.py

Servicio de horas de profesor.

Dos bolsas por saldo:
- available_hours: gastables (compras, grants y bonus madurado)
- locked_hours: bonus en tránsito ligado a un aula no concluida

lock estándar y consume_available exigen available - locked >= hours.
lock_bonus no tiene precondición (recompensa de plataforma).
unlock_bonus / revoke_bonus_lock nunca lanzan si no hay horas
bloqueadas: registran un movimiento de efecto cero.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.bookings.repositories import BookingRepository
from app.modules.notifications import events as ev
from ..enums import HourTxType, TxSource
from ..errors import InsufficientBalance
from ..metrics import LEDGER_INSUFFICIENT_BALANCE_TOTAL, LEDGER_MUTATIONS_TOTAL
from ..models import HourTransaction, ProfHourBalance
from ..repositories import HourBalanceRepository, HourTransactionRepository
from .results import LedgerResult, SyncResult
from .scope_resolver import BalanceScope, ScopeResolver

logger = logging.getLogger(__name__)

RESOURCE = "professor_hours"

NO_LOCKED_HOURS = {"skipped": True, "reason": "no_locked_hours"}


def _require_positive(hours: int) -> None:
    if hours <= 0:
        raise ValueError("hours must be positive")


class ProfessorHourService:
    """Mutaciones del saldo de horas de profesor."""

    def __init__(
        self,
        balances: Optional[HourBalanceRepository] = None,
        transactions: Optional[HourTransactionRepository] = None,
        bookings: Optional[BookingRepository] = None,
        scopes: Optional[ScopeResolver] = None,
    ):
        self.balances = balances or HourBalanceRepository()
        self.transactions = transactions or HourTransactionRepository()
        self.bookings = bookings or BookingRepository()
        self.scopes = scopes or ScopeResolver()

    async def get_or_create_balance(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
    ) -> ProfHourBalance:
        """Mismas reglas de upsert y validación de scope que el saldo de alumno."""
        resolved = await self.scopes.resolve(session, scope)
        balance, _ = await self.balances.get_or_create(
            session, professor_id, resolved.franqueadora_id, resolved.unit_id
        )
        return balance

    # ------------------------------------------------------------------
    # Mutaciones
    # ------------------------------------------------------------------

    async def purchase(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        *,
        source: TxSource = TxSource.PROFESSOR,
        meta: Optional[dict] = None,
    ) -> LedgerResult:
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)

        await self.balances.apply_delta(session, balance, available=hours)
        tx = await self._log(session, balance, HourTxType.PURCHASE, source, hours, meta=meta)

        self._count("purchase")
        logger.info(
            "Professor hours purchased: professor=%s hours=%d available=%d",
            professor_id, hours, balance.available_hours,
        )
        return LedgerResult(
            balance, tx, [ev.hours_purchased(professor_id, hours, balance.available_hours)]
        )

    async def lock(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        booking_id: Optional[str],
        unlock_at: Optional[datetime] = None,
        *,
        source: TxSource = TxSource.SYSTEM,
    ) -> LedgerResult:
        """
        Bloqueo estándar de horas gastables.

        Raises:
            InsufficientBalance: available_hours - locked_hours < hours
        """
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)
        self._ensure_spendable(balance, hours)

        await self.balances.apply_delta(session, balance, locked=hours)
        tx = await self._log(
            session, balance, HourTxType.BONUS_LOCK, source, hours,
            booking_id=booking_id, unlock_at=unlock_at, meta={"kind": "standard"},
        )

        self._count("lock")
        logger.info(
            "Professor hours locked: professor=%s hours=%d booking=%s",
            professor_id, hours, booking_id,
        )
        return LedgerResult(balance, tx)

    async def lock_bonus(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        booking_id: Optional[str],
        unlock_at: Optional[datetime] = None,
        *,
        source: TxSource = TxSource.SYSTEM,
    ) -> LedgerResult:
        """
        Crea horas bonus bloqueadas (recompensa). Sin precondición de saldo.

        Sin unlock_at la maduración depende de la conclusión del aula.
        """
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)

        await self.balances.apply_delta(session, balance, locked=hours)
        tx = await self._log(
            session, balance, HourTxType.BONUS_LOCK, source, hours,
            booking_id=booking_id, unlock_at=unlock_at, meta={"kind": "bonus"},
        )

        self._count("lock_bonus")
        logger.info(
            "Professor bonus hours locked: professor=%s hours=%d booking=%s",
            professor_id, hours, booking_id,
        )
        return LedgerResult(balance, tx)

    async def unlock_bonus(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        booking_id: Optional[str],
        *,
        source: TxSource = TxSource.SYSTEM,
        source_tx_id: Optional[int] = None,
    ) -> LedgerResult:
        """
        Madura bonus: mueve min(hours, locked_hours) de locked a available.

        Con locked_hours == 0 devuelve un movimiento de efecto cero.
        """
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)
        return await self._mature(
            session, balance, hours, booking_id, source=source, source_tx_id=source_tx_id
        )

    async def revoke_bonus_lock(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        booking_id: Optional[str],
        *,
        source: TxSource = TxSource.SYSTEM,
    ) -> LedgerResult:
        """
        Descarta bonus en tránsito (aula cancelada antes de concluir) sin
        acreditar available. No lanza si no hay horas bloqueadas.
        """
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)

        if balance.locked_hours == 0:
            tx = await self._log(
                session, balance, HourTxType.REVOKE, source, 0,
                booking_id=booking_id, meta=dict(NO_LOCKED_HOURS, requested=hours),
            )
            logger.info(
                "Bonus revoke skipped (no locked hours): professor=%s booking=%s",
                professor_id, booking_id,
            )
            return LedgerResult(balance, tx)

        revoked = min(hours, balance.locked_hours)
        await self.balances.apply_delta(session, balance, locked=-revoked)
        tx = await self._log(
            session, balance, HourTxType.REVOKE, source, revoked,
            booking_id=booking_id, meta={"kind": "bonus_lock", "requested": hours},
        )

        self._count("revoke_bonus_lock")
        logger.info(
            "Professor bonus lock revoked: professor=%s hours=%d booking=%s",
            professor_id, revoked, booking_id,
        )
        return LedgerResult(balance, tx)

    async def consume_available(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        booking_id: Optional[str],
        *,
        source: TxSource = TxSource.SYSTEM,
    ) -> LedgerResult:
        """
        Débito directo de horas (alumnos de cartera / fidelidad).

        Raises:
            InsufficientBalance: available_hours - locked_hours < hours
        """
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)
        self._ensure_spendable(balance, hours)

        await self.balances.apply_delta(session, balance, available=-hours)
        tx = await self._log(
            session, balance, HourTxType.CONSUME, source, hours, booking_id=booking_id,
        )

        self._count("consume_available")
        logger.info(
            "Professor hours consumed: professor=%s hours=%d booking=%s available=%d",
            professor_id, hours, booking_id, balance.available_hours,
        )
        return LedgerResult(balance, tx)

    async def grant(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
        hours: int,
        granted_by: str,
        reason: Optional[str],
    ) -> LedgerResult:
        """Otorga horas gastables manualmente (auditoría a cargo del llamador)."""
        _require_positive(hours)
        balance = await self.get_or_create_balance(session, professor_id, scope)

        await self.balances.apply_delta(session, balance, available=hours)
        tx = await self._log(
            session, balance, HourTxType.GRANT, TxSource.ADMIN, hours,
            meta={"granted_by": granted_by, "reason": reason},
        )

        self._count("grant")
        logger.info(
            "Professor hours granted: professor=%s hours=%d by=%s",
            professor_id, hours, granted_by,
        )
        return LedgerResult(balance, tx)

    # ------------------------------------------------------------------
    # Reconciliación
    # ------------------------------------------------------------------

    async def sync_locked_hours(
        self,
        session: AsyncSession,
        professor_id: str,
        scope: BalanceScope,
    ) -> SyncResult:
        """
        Recalcula locked_hours desde las reservas activas (PAID, fuera de
        fidelidad) del profesor en el scope y lo sobrescribe.

        Idempotente: una segunda pasada no corrige nada.
        """
        balance = await self.get_or_create_balance(session, professor_id, scope)
        return await self.sync_balance(session, balance)

    async def sync_balance(self, session: AsyncSession, balance: ProfHourBalance) -> SyncResult:
        """Reconciliación sobre un saldo ya resuelto (barrido periódico)."""
        previous = balance.locked_hours
        recomputed = await self.bookings.sum_active_bonus_hours(
            session, balance.professor_id, balance.franqueadora_id, balance.unit_id
        )
        if recomputed == previous:
            return SyncResult(previous=previous, recomputed=recomputed, corrected=False)

        await self.balances.set_locked(session, balance, recomputed)
        # Fila de auditoría con qty 0: el ajuste queda trazable en el ledger
        await self._log(
            session, balance, HourTxType.REVOKE, TxSource.SYSTEM, 0,
            meta={"reconciliation": {"previous": previous, "recomputed": recomputed}},
        )
        self._count("sync_locked_hours")
        logger.warning(
            "Locked hours drift corrected: professor=%s franqueadora=%s unit=%s %d -> %d",
            balance.professor_id, balance.franqueadora_id, balance.unit_id,
            previous, recomputed,
        )
        return SyncResult(previous=previous, recomputed=recomputed, corrected=True)

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------

    async def list_expired_locks(
        self,
        session: AsyncSession,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[HourTransaction]:
        """BONUS_LOCK vencidos sin booking y aún no liberados."""
        if limit is None:
            from app.shared.config import settings
            limit = int(settings.ledger_expired_locks_batch)
        return await self.transactions.list_expired_locks(
            session, now or datetime.now(timezone.utc), limit
        )

    async def release_expired_lock(
        self,
        session: AsyncSession,
        lock_tx: HourTransaction,
    ) -> LedgerResult:
        """
        Libera un BONUS_LOCK vencido sin lanzar.

        - kind "standard": las horas vuelven a ser gastables (solo baja
          locked_hours; available_hours ya las contaba)
        - bonus: madura como unlock_bonus (locked -> available)

        Un lock ya liberado devuelve la fila existente sin tocar el saldo.
        """
        balance, _ = await self.balances.get_or_create(
            session, lock_tx.professor_id, lock_tx.franqueadora_id, lock_tx.unit_id
        )
        # Re-check con el saldo bloqueado: otro barrido pudo liberarlo ya
        existing = await self.transactions.get_release(session, lock_tx.id)
        if existing is not None:
            logger.info(
                "Expired professor lock %s already released by tx=%s, skipping",
                lock_tx.id, existing.id,
            )
            return LedgerResult(balance, existing)

        if (lock_tx.meta or {}).get("kind") == "standard":
            result = await self._release_standard(session, balance, lock_tx)
        else:
            result = await self._mature(
                session, balance, lock_tx.hours, None,
                source=TxSource.SYSTEM, source_tx_id=lock_tx.id,
                extra_meta={"expired_lock": True},
            )
        lock_tx.meta = {
            **(lock_tx.meta or {}),
            "released_at": datetime.now(timezone.utc).isoformat(),
        }
        await session.flush()
        return result

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    async def _mature(
        self,
        session: AsyncSession,
        balance: ProfHourBalance,
        hours: int,
        booking_id: Optional[str],
        *,
        source: TxSource,
        source_tx_id: Optional[int] = None,
        extra_meta: Optional[dict] = None,
    ) -> LedgerResult:
        if balance.locked_hours == 0:
            tx = await self._log(
                session, balance, HourTxType.BONUS_UNLOCK, source, 0,
                booking_id=booking_id, source_tx_id=source_tx_id,
                meta={**NO_LOCKED_HOURS, "requested": hours, **(extra_meta or {})},
            )
            logger.info(
                "Bonus unlock skipped (no locked hours): professor=%s booking=%s",
                balance.professor_id, booking_id,
            )
            return LedgerResult(balance, tx)

        moved = min(hours, balance.locked_hours)
        await self.balances.apply_delta(session, balance, available=moved, locked=-moved)
        tx = await self._log(
            session, balance, HourTxType.BONUS_UNLOCK, source, moved,
            booking_id=booking_id, source_tx_id=source_tx_id,
            meta={"requested": hours, **(extra_meta or {})},
        )

        self._count("unlock_bonus")
        logger.info(
            "Professor bonus matured: professor=%s hours=%d booking=%s available=%d",
            balance.professor_id, moved, booking_id, balance.available_hours,
        )
        return LedgerResult(balance, tx)

    async def _release_standard(
        self,
        session: AsyncSession,
        balance: ProfHourBalance,
        lock_tx: HourTransaction,
    ) -> LedgerResult:
        released = min(lock_tx.hours, balance.locked_hours)
        meta = {"kind": "standard", "requested": lock_tx.hours, "expired_lock": True}
        if released == 0:
            meta.update(NO_LOCKED_HOURS)
        else:
            await self.balances.apply_delta(session, balance, locked=-released)

        tx = await self._log(
            session, balance, HourTxType.BONUS_UNLOCK, TxSource.SYSTEM, released,
            source_tx_id=lock_tx.id, meta=meta,
        )
        self._count("release_expired_lock")
        logger.info(
            "Expired standard lock released: lock_tx=%s professor=%s hours=%d",
            lock_tx.id, balance.professor_id, released,
        )
        return LedgerResult(balance, tx)

    def _ensure_spendable(self, balance: ProfHourBalance, hours: int) -> None:
        spendable = balance.spendable_hours
        if spendable < hours:
            LEDGER_INSUFFICIENT_BALANCE_TOTAL.labels(resource=RESOURCE).inc()
            raise InsufficientBalance(available=spendable, required=hours)

    async def _log(
        self,
        session: AsyncSession,
        balance: ProfHourBalance,
        tx_type: HourTxType,
        source: TxSource,
        hours: int,
        **kwargs,
    ) -> HourTransaction:
        return await self.transactions.create(
            session,
            professor_id=balance.professor_id,
            franqueadora_id=balance.franqueadora_id,
            unit_id=balance.unit_id,
            tx_type=tx_type,
            source=source,
            hours=hours,
            **kwargs,
        )

    @staticmethod
    def _count(operation: str) -> None:
        LEDGER_MUTATIONS_TOTAL.labels(resource=RESOURCE, operation=operation).inc()


# Singleton global
_service: Optional[ProfessorHourService] = None


def get_professor_hour_service() -> ProfessorHourService:
    global _service
    if _service is None:
        _service = ProfessorHourService()
    return _service


__all__ = ["ProfessorHourService", "get_professor_hour_service"]
