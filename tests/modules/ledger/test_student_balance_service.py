# -*- coding: utf-8 -*-
"""
backend/tests/modules/ledger/test_student_balance_service.py

Tests del saldo de créditos de alumno.

Cubre:
- Invariante purchased - consumed - locked >= 0
- lock/unlock ida y vuelta
- consume por encima de lo bloqueado
- Umbrales low/zero
- lock insuficiente sin mutar el saldo
- refund con tope, revoke, grant
- Liberación de locks vencidos (una sola vez por lock)
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.modules.ledger.enums import StudentTxType, TxSource
from app.modules.ledger.errors import InsufficientBalance, InsufficientLockedBalance
from app.modules.ledger.models import StudentClassTransaction
from app.modules.ledger.services import BalanceScope, StudentBalanceService
from app.modules.notifications.events import LedgerEventType

STUDENT = "student-1"


@pytest.fixture
def service():
    return StudentBalanceService(low_balance_threshold=2)


@pytest.fixture
def scope(tenants):
    return BalanceScope(franqueadora_id=tenants["principal"])


async def _tx_count(session) -> int:
    result = await session.execute(select(func.count(StudentClassTransaction.id)))
    return int(result.scalar_one())


@pytest.mark.asyncio
async def test_get_or_create_starts_at_zero(db_session, service, scope):
    balance = await service.get_or_create_balance(db_session, STUDENT, scope)

    assert balance.total_purchased == 0
    assert balance.total_consumed == 0
    assert balance.locked_qty == 0
    assert balance.available == 0
    assert balance.franqueadora_id == scope.franqueadora_id


@pytest.mark.asyncio
async def test_purchase_adds_credits_and_logs_transaction(db_session, service, scope):
    result = await service.purchase(db_session, STUDENT, scope, 5, meta={"payment_intent_id": "pi-1"})

    assert result.balance.total_purchased == 5
    assert result.balance.available == 5
    assert result.transaction.type == StudentTxType.PURCHASE
    assert result.transaction.source == TxSource.ALUNO
    assert result.transaction.qty == 5
    assert result.transaction.meta == {"payment_intent_id": "pi-1"}
    assert [e.type for e in result.events] == [LedgerEventType.CREDITS_PURCHASED]
    assert result.events[0].payload["new_balance"] == 5


@pytest.mark.asyncio
async def test_non_positive_qty_rejected(db_session, service, scope):
    with pytest.raises(ValueError):
        await service.purchase(db_session, STUDENT, scope, 0)


@pytest.mark.asyncio
async def test_lock_then_unlock_restores_locked_qty(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 4)

    locked = await service.lock(db_session, STUDENT, scope, 3, "booking-1")
    assert locked.balance.locked_qty == 3
    assert locked.balance.available == 1
    assert locked.transaction.type == StudentTxType.LOCK
    assert locked.transaction.booking_id == "booking-1"

    unlocked = await service.unlock(db_session, STUDENT, scope, 3, "booking-1")
    balance = unlocked.balance
    assert balance.locked_qty == 0
    assert balance.total_purchased == 4
    assert balance.total_consumed == 0
    assert unlocked.transaction.type == StudentTxType.UNLOCK
    assert unlocked.transaction.source == TxSource.SYSTEM


@pytest.mark.asyncio
async def test_unlock_more_than_locked_raises(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 4)
    await service.lock(db_session, STUDENT, scope, 1, "booking-1")

    with pytest.raises(InsufficientLockedBalance) as ei:
        await service.unlock(db_session, STUDENT, scope, 2, "booking-1")

    assert ei.value.locked == 1
    assert ei.value.required == 2


@pytest.mark.asyncio
async def test_insufficient_lock_leaves_balance_unchanged(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 5)
    balance = await service.get_or_create_balance(db_session, STUDENT, scope)
    before = (balance.total_purchased, balance.total_consumed, balance.locked_qty, balance.updated_at)
    tx_before = await _tx_count(db_session)

    with pytest.raises(InsufficientBalance) as ei:
        await service.lock(db_session, STUDENT, scope, 6, "booking-1")

    assert ei.value.available == 5
    assert ei.value.required == 6

    balance = await service.get_or_create_balance(db_session, STUDENT, scope)
    after = (balance.total_purchased, balance.total_consumed, balance.locked_qty, balance.updated_at)
    assert after == before
    assert await _tx_count(db_session) == tx_before


@pytest.mark.asyncio
async def test_consume_more_than_locked_zeroes_lock(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 10)
    await service.lock(db_session, STUDENT, scope, 2, "booking-1")

    result = await service.consume(db_session, STUDENT, scope, 5, "booking-1")

    assert result.balance.locked_qty == 0
    assert result.balance.total_consumed == 5
    assert result.balance.available == 5
    assert result.transaction.meta == {"unlocked_from_lock": 2}
    assert result.events[0].type == LedgerEventType.CREDITS_DEBITED
    assert result.events[0].payload["booking_id"] == "booking-1"


@pytest.mark.asyncio
async def test_consume_beyond_purchased_goes_negative(db_session, service, scope, caplog):
    await service.purchase(db_session, STUDENT, scope, 1)

    with caplog.at_level("WARNING"):
        result = await service.consume(db_session, STUDENT, scope, 3, "booking-1")

    assert result.balance.available == -2
    assert "went negative" in caplog.text
    # available < 0 no emite low ni zero
    assert [e.type for e in result.events] == [LedgerEventType.CREDITS_DEBITED]


@pytest.mark.asyncio
async def test_threshold_events_low_then_zero(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 2)

    first = await service.consume(db_session, STUDENT, scope, 1, "booking-1")
    assert first.balance.available == 1
    assert [e.type for e in first.events] == [
        LedgerEventType.CREDITS_DEBITED,
        LedgerEventType.BALANCE_LOW,
    ]
    assert first.events[1].payload == {"student_id": STUDENT, "available": 1}

    second = await service.consume(db_session, STUDENT, scope, 1, "booking-2")
    assert second.balance.available == 0
    assert [e.type for e in second.events] == [
        LedgerEventType.CREDITS_DEBITED,
        LedgerEventType.BALANCE_ZERO,
    ]


@pytest.mark.asyncio
async def test_refund_is_capped_by_consumed(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 5)
    await service.consume(db_session, STUDENT, scope, 2, "booking-1")

    result = await service.refund(db_session, STUDENT, scope, 3, "booking-1", reason="class canceled")

    assert result.balance.total_consumed == 0
    assert result.transaction.qty == 2
    assert result.transaction.meta["capped"] is True
    assert result.transaction.meta["requested"] == 3
    assert result.events[0].type == LedgerEventType.CREDITS_REFUNDED
    assert result.events[0].payload["qty"] == 2


@pytest.mark.asyncio
async def test_revoke_requires_available(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 3)
    await service.lock(db_session, STUDENT, scope, 2, "booking-1")

    with pytest.raises(InsufficientBalance):
        await service.revoke(db_session, STUDENT, scope, 2, "chargeback", "admin-1")

    result = await service.revoke(db_session, STUDENT, scope, 1, "chargeback", "admin-1")
    assert result.balance.total_purchased == 2
    assert result.transaction.type == StudentTxType.REVOKE
    assert result.transaction.source == TxSource.ADMIN
    assert result.transaction.meta == {"revoked_by": "admin-1", "reason": "chargeback"}


@pytest.mark.asyncio
async def test_grant_adds_exactly_qty_regardless_of_state(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 3)
    await service.lock(db_session, STUDENT, scope, 1, "booking-1")
    await service.consume(db_session, STUDENT, scope, 5, "booking-2")
    balance = await service.get_or_create_balance(db_session, STUDENT, scope)
    purchased_before = balance.total_purchased

    result = await service.grant(db_session, STUDENT, scope, 4, "admin-1", "goodwill")

    assert result.balance.total_purchased == purchased_before + 4
    assert result.transaction.type == StudentTxType.GRANT
    assert result.transaction.source == TxSource.ADMIN


@pytest.mark.asyncio
async def test_invariant_holds_across_successful_operations(db_session, service, scope):
    ops = [
        lambda: service.purchase(db_session, STUDENT, scope, 6),
        lambda: service.lock(db_session, STUDENT, scope, 2, "b-1"),
        lambda: service.lock(db_session, STUDENT, scope, 3, "b-2"),
        lambda: service.unlock(db_session, STUDENT, scope, 2, "b-1"),
        lambda: service.lock(db_session, STUDENT, scope, 5, "b-3"),  # falla
        lambda: service.consume(db_session, STUDENT, scope, 3, "b-2"),
        lambda: service.refund(db_session, STUDENT, scope, 1),
        lambda: service.revoke(db_session, STUDENT, scope, 10, None, "admin"),  # falla
        lambda: service.grant(db_session, STUDENT, scope, 2, "admin", None),
    ]
    for op in ops:
        try:
            await op()
        except InsufficientBalance:
            pass
        balance = await service.get_or_create_balance(db_session, STUDENT, scope)
        assert balance.available >= 0
        assert balance.locked_qty >= 0


@pytest.mark.asyncio
async def test_release_expired_lock_is_idempotent(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 3)
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    await service.lock(db_session, STUDENT, scope, 2, None, unlock_at=past)

    expired = await service.list_expired_locks(db_session, limit=10)
    assert len(expired) == 1
    lock_tx = expired[0]

    result = await service.release_expired_lock(db_session, lock_tx)
    assert result.balance.locked_qty == 0
    assert result.transaction.type == StudentTxType.UNLOCK
    assert result.transaction.source_tx_id == lock_tx.id
    assert "released_at" in lock_tx.meta

    assert await service.list_expired_locks(db_session, limit=10) == []


@pytest.mark.asyncio
async def test_expired_locks_exclude_booked_and_future(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 5)
    now = datetime.now(timezone.utc)
    await service.lock(db_session, STUDENT, scope, 1, "booking-1", unlock_at=now - timedelta(minutes=1))
    await service.lock(db_session, STUDENT, scope, 1, None, unlock_at=now + timedelta(hours=1))
    await service.lock(db_session, STUDENT, scope, 1, None)

    assert await service.list_expired_locks(db_session, now=now, limit=10) == []


@pytest.mark.asyncio
async def test_release_expired_lock_skips_when_not_covered(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 3)
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    lock = await service.lock(db_session, STUDENT, scope, 2, None, unlock_at=past)
    # El consumo ya liberó el bloqueo
    await service.consume(db_session, STUDENT, scope, 2, None)

    result = await service.release_expired_lock(db_session, lock.transaction)

    assert result.transaction.qty == 0
    assert result.transaction.meta["skipped"] is True
    assert result.balance.locked_qty == 0


@pytest.mark.asyncio
async def test_release_same_expired_lock_twice_releases_once(db_session, service, scope):
    await service.purchase(db_session, STUDENT, scope, 10)
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    await service.lock(db_session, STUDENT, scope, 2, None, unlock_at=past)
    await service.lock(db_session, STUDENT, scope, 3, "booking-live")

    expired = await service.list_expired_locks(db_session, limit=10)
    assert len(expired) == 1
    lock_tx = expired[0]

    first = await service.release_expired_lock(db_session, lock_tx)
    # Segundo barrido con la misma fila leída antes del commit del primero
    second = await service.release_expired_lock(db_session, lock_tx)

    assert second.transaction.id == first.transaction.id
    assert second.balance.locked_qty == 3

    unlocks = await db_session.execute(
        select(func.count(StudentClassTransaction.id)).where(
            StudentClassTransaction.source_tx_id == lock_tx.id
        )
    )
    assert unlocks.scalar_one() == 1
