# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/services/student_balance_service.py

Servicio de saldo de créditos de alumno.

Reglas:
- available = total_purchased - total_consumed - locked_qty
- Cada mutación lee su saldo con SELECT ... FOR UPDATE y escribe el
  movimiento que la justifica en la misma transacción.
- El servicio solo hace flush; commit/rollback es del llamador.
- Las notificaciones no se envían aquí: se devuelven como eventos en
  LedgerResult para despacharlas después del commit.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.notifications import events as ev
from app.modules.notifications.events import LedgerEvent
from ..enums import StudentTxType, TxSource
from ..errors import InsufficientBalance, InsufficientLockedBalance
from ..metrics import LEDGER_INSUFFICIENT_BALANCE_TOTAL, LEDGER_MUTATIONS_TOTAL
from ..models import StudentClassBalance, StudentClassTransaction
from ..repositories import StudentBalanceRepository, StudentTransactionRepository
from .results import LedgerResult
from .scope_resolver import BalanceScope, ScopeResolver

logger = logging.getLogger(__name__)

RESOURCE = "student_credits"


def _require_positive(qty: int) -> None:
    if qty <= 0:
        raise ValueError("qty must be positive")


class StudentBalanceService:
    """Mutaciones del saldo de créditos de alumno."""

    def __init__(
        self,
        balances: Optional[StudentBalanceRepository] = None,
        transactions: Optional[StudentTransactionRepository] = None,
        scopes: Optional[ScopeResolver] = None,
        low_balance_threshold: Optional[int] = None,
    ):
        self.balances = balances or StudentBalanceRepository()
        self.transactions = transactions or StudentTransactionRepository()
        self.scopes = scopes or ScopeResolver()
        self._low_balance_threshold = low_balance_threshold

    @property
    def low_balance_threshold(self) -> int:
        if self._low_balance_threshold is not None:
            return self._low_balance_threshold
        from app.shared.config import settings
        return int(settings.ledger_low_balance_threshold)

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    async def get_or_create_balance(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
    ) -> StudentClassBalance:
        """
        Devuelve el saldo del alumno bloqueado para update, creándolo en
        ceros si no existe. El scope se valida contra las franqueadoras
        activas (fallback a la principal).
        """
        resolved = await self.scopes.resolve(session, scope)
        balance, _ = await self.balances.get_or_create(
            session, student_id, resolved.franqueadora_id, resolved.unit_id
        )
        return balance

    # ------------------------------------------------------------------
    # Mutaciones
    # ------------------------------------------------------------------

    async def purchase(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        *,
        source: TxSource = TxSource.ALUNO,
        meta: Optional[dict] = None,
    ) -> LedgerResult:
        """Suma créditos comprados (sin tope)."""
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        await self.balances.apply_delta(session, balance, purchased=qty)
        tx = await self._log(session, balance, StudentTxType.PURCHASE, source, qty, meta=meta)

        self._count("purchase")
        logger.info(
            "Student credits purchased: student=%s qty=%d available=%d",
            student_id, qty, balance.available,
        )
        return LedgerResult(
            balance, tx, [ev.credits_purchased(student_id, qty, balance.available)]
        )

    async def lock(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        booking_id: Optional[str],
        unlock_at: Optional[datetime] = None,
        *,
        source: TxSource = TxSource.ALUNO,
    ) -> LedgerResult:
        """
        Reserva créditos para una reserva futura.

        Raises:
            InsufficientBalance: available < qty (sin mutar nada)
        """
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        available = balance.available
        if available < qty:
            LEDGER_INSUFFICIENT_BALANCE_TOTAL.labels(resource=RESOURCE).inc()
            raise InsufficientBalance(available=available, required=qty)

        await self.balances.apply_delta(session, balance, locked=qty)
        tx = await self._log(
            session, balance, StudentTxType.LOCK, source, qty,
            booking_id=booking_id, unlock_at=unlock_at,
        )

        self._count("lock")
        logger.info(
            "Student credits locked: student=%s qty=%d booking=%s unlock_at=%s",
            student_id, qty, booking_id, unlock_at,
        )
        return LedgerResult(balance, tx)

    async def unlock(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        booking_id: Optional[str],
        *,
        source: TxSource = TxSource.SYSTEM,
        source_tx_id: Optional[int] = None,
    ) -> LedgerResult:
        """
        Libera créditos bloqueados.

        Raises:
            InsufficientLockedBalance: locked_qty < qty
        """
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        if balance.locked_qty < qty:
            LEDGER_INSUFFICIENT_BALANCE_TOTAL.labels(resource=RESOURCE).inc()
            raise InsufficientLockedBalance(locked=balance.locked_qty, required=qty)

        await self.balances.apply_delta(session, balance, locked=-qty)
        tx = await self._log(
            session, balance, StudentTxType.UNLOCK, source, qty,
            booking_id=booking_id, source_tx_id=source_tx_id,
        )

        self._count("unlock")
        logger.info(
            "Student credits unlocked: student=%s qty=%d booking=%s",
            student_id, qty, booking_id,
        )
        return LedgerResult(balance, tx)

    async def consume(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        booking_id: Optional[str],
        *,
        source: TxSource = TxSource.ALUNO,
    ) -> LedgerResult:
        """
        Debita créditos.

        Libera min(locked_qty, qty) del bloqueo y suma qty completo a
        total_consumed: el consumo puede exceder lo bloqueado.
        """
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        from_lock = min(balance.locked_qty, qty)
        await self.balances.apply_delta(session, balance, consumed=qty, locked=-from_lock)
        tx = await self._log(
            session, balance, StudentTxType.CONSUME, source, qty,
            booking_id=booking_id, meta={"unlocked_from_lock": from_lock},
        )

        available = balance.available
        if available < 0:
            logger.warning(
                "Student balance went negative after consume: student=%s available=%d booking=%s",
                student_id, available, booking_id,
            )

        self._count("consume")
        logger.info(
            "Student credits consumed: student=%s qty=%d from_lock=%d available=%d",
            student_id, qty, from_lock, available,
        )
        events = [ev.credits_debited(student_id, qty, available, booking_id)]
        events.extend(self._threshold_events(student_id, available))
        return LedgerResult(balance, tx, events)

    async def refund(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        booking_id: Optional[str] = None,
        reason: Optional[str] = None,
        *,
        source: TxSource = TxSource.SYSTEM,
    ) -> LedgerResult:
        """Devuelve créditos consumidos (total_consumed con piso en 0)."""
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        refunded = min(qty, balance.total_consumed)
        meta = {"requested": qty, "reason": reason}
        if refunded < qty:
            meta["capped"] = True
            logger.warning(
                "Refund capped by total_consumed: student=%s requested=%d refunded=%d",
                student_id, qty, refunded,
            )

        await self.balances.apply_delta(session, balance, consumed=-refunded)
        tx = await self._log(
            session, balance, StudentTxType.REFUND, source, refunded,
            booking_id=booking_id, meta=meta,
        )

        self._count("refund")
        logger.info(
            "Student credits refunded: student=%s qty=%d available=%d",
            student_id, refunded, balance.available,
        )
        return LedgerResult(
            balance, tx, [ev.credits_refunded(student_id, refunded, balance.available)]
        )

    async def revoke(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        reason: Optional[str],
        revoked_by: Optional[str],
    ) -> LedgerResult:
        """
        Retira créditos comprados (acción administrativa).

        Raises:
            InsufficientBalance: available < qty
        """
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        available = balance.available
        if available < qty:
            LEDGER_INSUFFICIENT_BALANCE_TOTAL.labels(resource=RESOURCE).inc()
            raise InsufficientBalance(available=available, required=qty)

        await self.balances.apply_delta(session, balance, purchased=-qty)
        tx = await self._log(
            session, balance, StudentTxType.REVOKE, TxSource.ADMIN, qty,
            meta={"revoked_by": revoked_by, "reason": reason},
        )

        self._count("revoke")
        logger.info(
            "Student credits revoked: student=%s qty=%d by=%s", student_id, qty, revoked_by
        )
        return LedgerResult(balance, tx)

    async def grant(
        self,
        session: AsyncSession,
        student_id: str,
        scope: BalanceScope,
        qty: int,
        granted_by: str,
        reason: Optional[str],
    ) -> LedgerResult:
        """
        Otorga créditos manualmente. No depende de locked/consumed.

        La fila de auditoría CreditGrant la escribe el llamador.
        """
        _require_positive(qty)
        balance = await self.get_or_create_balance(session, student_id, scope)

        await self.balances.apply_delta(session, balance, purchased=qty)
        tx = await self._log(
            session, balance, StudentTxType.GRANT, TxSource.ADMIN, qty,
            meta={"granted_by": granted_by, "reason": reason},
        )

        self._count("grant")
        logger.info(
            "Student credits granted: student=%s qty=%d by=%s", student_id, qty, granted_by
        )
        return LedgerResult(balance, tx)

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------

    async def list_expired_locks(
        self,
        session: AsyncSession,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[StudentClassTransaction]:
        """LOCK vencidos sin booking y aún no liberados (acotado por limit)."""
        if limit is None:
            from app.shared.config import settings
            limit = int(settings.ledger_expired_locks_batch)
        return await self.transactions.list_expired_locks(
            session, now or datetime.now(timezone.utc), limit
        )

    async def release_expired_lock(
        self,
        session: AsyncSession,
        lock_tx: StudentClassTransaction,
    ) -> LedgerResult:
        """
        Libera un LOCK vencido escribiendo un UNLOCK que lo referencia.

        Si locked_qty ya no cubre el bloqueo, el UNLOCK queda con qty=0
        y meta skipped (no lanza). Un lock ya liberado devuelve el UNLOCK
        existente sin tocar el saldo.
        """
        balance, _ = await self.balances.get_or_create(
            session, lock_tx.student_id, lock_tx.franqueadora_id, lock_tx.unit_id
        )
        # Re-check con el saldo bloqueado: otro barrido pudo liberarlo ya
        existing = await self.transactions.get_release(session, lock_tx.id)
        if existing is not None:
            logger.info(
                "Expired student lock %s already released by tx=%s, skipping",
                lock_tx.id, existing.id,
            )
            return LedgerResult(balance, existing)

        now = datetime.now(timezone.utc)

        if balance.locked_qty < lock_tx.qty:
            logger.warning(
                "Expired lock %s not covered by locked_qty=%d (qty=%d), marking skipped",
                lock_tx.id, balance.locked_qty, lock_tx.qty,
            )
            released = 0
            meta = {"skipped": True, "reason": "insufficient_locked_qty", "expired_lock": True}
        else:
            released = lock_tx.qty
            meta = {"expired_lock": True}
            await self.balances.apply_delta(session, balance, locked=-released)

        tx = await self._log(
            session, balance, StudentTxType.UNLOCK, TxSource.SYSTEM, released,
            source_tx_id=lock_tx.id, meta=meta,
        )
        lock_tx.meta = {**(lock_tx.meta or {}), "released_at": now.isoformat()}
        await session.flush()

        self._count("release_expired_lock")
        logger.info(
            "Expired student lock released: lock_tx=%s student=%s qty=%d",
            lock_tx.id, lock_tx.student_id, released,
        )
        return LedgerResult(balance, tx)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    async def _log(
        self,
        session: AsyncSession,
        balance: StudentClassBalance,
        tx_type: StudentTxType,
        source: TxSource,
        qty: int,
        **kwargs,
    ) -> StudentClassTransaction:
        return await self.transactions.create(
            session,
            student_id=balance.student_id,
            franqueadora_id=balance.franqueadora_id,
            unit_id=balance.unit_id,
            tx_type=tx_type,
            source=source,
            qty=qty,
            **kwargs,
        )

    def _threshold_events(self, student_id: str, available: int) -> List[LedgerEvent]:
        if available == 0:
            return [ev.balance_zero(student_id)]
        if 0 < available < self.low_balance_threshold:
            return [ev.balance_low(student_id, available)]
        return []

    @staticmethod
    def _count(operation: str) -> None:
        LEDGER_MUTATIONS_TOTAL.labels(resource=RESOURCE, operation=operation).inc()


# Singleton global
_service: Optional[StudentBalanceService] = None


def get_student_balance_service() -> StudentBalanceService:
    global _service
    if _service is None:
        _service = StudentBalanceService()
    return _service


__all__ = ["StudentBalanceService", "get_student_balance_service"]
