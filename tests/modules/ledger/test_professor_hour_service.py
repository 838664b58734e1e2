# -*- coding: utf-8 -*-
"""
backend/tests/modules/ledger/test_professor_hour_service.py

Tests del saldo de horas de profesor.

Cubre:
- lock_bonus sin saldo previo
- unlock_bonus / revoke_bonus_lock sin horas bloqueadas (efecto cero)
- lock estándar y consume_available contra horas gastables
- sync_locked_hours idempotente
- Liberación de BONUS_LOCK vencidos (bonus y estándar, una sola vez por lock)
- Reconciliación auditada y acotada a la unidad del saldo
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.modules.bookings.enums import BookingStatus
from app.modules.bookings.models import Booking
from app.modules.ledger.enums import HourTxType, TxSource
from app.modules.ledger.errors import InsufficientBalance
from app.modules.ledger.models import HourTransaction
from app.modules.ledger.services import BalanceScope, ProfessorHourService
from app.modules.notifications.events import LedgerEventType

PROFESSOR = "professor-1"


@pytest.fixture
def service():
    return ProfessorHourService()


@pytest.fixture
def scope(tenants):
    return BalanceScope(franqueadora_id=tenants["principal"])


@pytest.mark.asyncio
async def test_purchase_adds_available_hours(db_session, service, scope):
    result = await service.purchase(db_session, PROFESSOR, scope, 10)

    assert result.balance.available_hours == 10
    assert result.balance.locked_hours == 0
    assert result.transaction.type == HourTxType.PURCHASE
    assert result.transaction.source == TxSource.PROFESSOR
    assert result.events[0].type == LedgerEventType.HOURS_PURCHASED
    assert result.events[0].payload == {"professor_id": PROFESSOR, "hours": 10, "new_available": 10}


@pytest.mark.asyncio
async def test_lock_bonus_without_balance(db_session, service, scope):
    result = await service.lock_bonus(db_session, PROFESSOR, scope, 2, "booking-1")

    assert result.balance.locked_hours == 2
    assert result.balance.available_hours == 0
    assert result.transaction.type == HourTxType.BONUS_LOCK
    assert result.transaction.meta == {"kind": "bonus"}


@pytest.mark.asyncio
async def test_unlock_bonus_without_locked_hours_is_noop(db_session, service, scope):
    result = await service.unlock_bonus(db_session, PROFESSOR, scope, 3, "booking-1")

    assert result.transaction.type == HourTxType.BONUS_UNLOCK
    assert result.transaction.hours == 0
    assert result.transaction.meta["skipped"] is True
    assert result.transaction.meta["reason"] == "no_locked_hours"
    assert result.balance.available_hours == 0
    assert result.balance.locked_hours == 0


@pytest.mark.asyncio
async def test_unlock_bonus_matures_locked_hours(db_session, service, scope):
    await service.lock_bonus(db_session, PROFESSOR, scope, 2, "booking-1")

    result = await service.unlock_bonus(db_session, PROFESSOR, scope, 5, "booking-1")

    assert result.transaction.hours == 2
    assert result.balance.locked_hours == 0
    assert result.balance.available_hours == 2


@pytest.mark.asyncio
async def test_revoke_bonus_lock(db_session, service, scope):
    skipped = await service.revoke_bonus_lock(db_session, PROFESSOR, scope, 1, "booking-1")
    assert skipped.transaction.hours == 0
    assert skipped.transaction.meta["skipped"] is True

    await service.lock_bonus(db_session, PROFESSOR, scope, 3, "booking-1")
    result = await service.revoke_bonus_lock(db_session, PROFESSOR, scope, 1, "booking-1")

    assert result.transaction.type == HourTxType.REVOKE
    assert result.transaction.hours == 1
    assert result.balance.locked_hours == 2
    assert result.balance.available_hours == 0


@pytest.mark.asyncio
async def test_standard_lock_requires_spendable_hours(db_session, service, scope):
    await service.purchase(db_session, PROFESSOR, scope, 3)
    await service.lock(db_session, PROFESSOR, scope, 2, "booking-1")

    with pytest.raises(InsufficientBalance) as ei:
        await service.lock(db_session, PROFESSOR, scope, 2, "booking-2")
    assert ei.value.available == 1
    assert ei.value.required == 2


@pytest.mark.asyncio
async def test_consume_available(db_session, service, scope):
    await service.purchase(db_session, PROFESSOR, scope, 3)
    await service.lock_bonus(db_session, PROFESSOR, scope, 2, "booking-1")

    with pytest.raises(InsufficientBalance):
        await service.consume_available(db_session, PROFESSOR, scope, 2, "booking-2")

    result = await service.consume_available(db_session, PROFESSOR, scope, 1, "booking-2")
    assert result.transaction.type == HourTxType.CONSUME
    assert result.balance.available_hours == 2
    assert result.balance.locked_hours == 2


@pytest.mark.asyncio
async def test_grant_adds_available_hours(db_session, service, scope):
    await service.lock_bonus(db_session, PROFESSOR, scope, 4, "booking-1")

    result = await service.grant(db_session, PROFESSOR, scope, 5, "admin-1", "bonus campaign")

    assert result.balance.available_hours == 5
    assert result.balance.locked_hours == 4
    assert result.transaction.source == TxSource.ADMIN


@pytest.mark.asyncio
async def test_sync_locked_hours_is_idempotent(db_session, service, scope):
    await service.lock_bonus(db_session, PROFESSOR, scope, 5, "booking-x")
    db_session.add_all([
        Booking(teacher_id=PROFESSOR, franqueadora_id=scope.franqueadora_id,
                status_canonical=BookingStatus.PAID, bonus_hours=1),
        Booking(teacher_id=PROFESSOR, franqueadora_id=scope.franqueadora_id,
                status_canonical=BookingStatus.PAID, bonus_hours=2),
        # No cuentan: fidelidad, cancelada, otro profesor
        Booking(teacher_id=PROFESSOR, franqueadora_id=scope.franqueadora_id,
                status_canonical=BookingStatus.PAID, is_loyalty=True, bonus_hours=4),
        Booking(teacher_id=PROFESSOR, franqueadora_id=scope.franqueadora_id,
                status_canonical=BookingStatus.CANCELED, bonus_hours=4),
        Booking(teacher_id="professor-2", franqueadora_id=scope.franqueadora_id,
                status_canonical=BookingStatus.PAID, bonus_hours=4),
    ])
    await db_session.flush()

    first = await service.sync_locked_hours(db_session, PROFESSOR, scope)
    assert first.previous == 5
    assert first.recomputed == 3
    assert first.corrected is True

    second = await service.sync_locked_hours(db_session, PROFESSOR, scope)
    assert second.previous == 3
    assert second.recomputed == 3
    assert second.corrected is False


@pytest.mark.asyncio
async def test_release_expired_bonus_lock(db_session, service, scope):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    await service.lock_bonus(db_session, PROFESSOR, scope, 2, None, unlock_at=past)

    expired = await service.list_expired_locks(db_session, limit=10)
    assert len(expired) == 1

    result = await service.release_expired_lock(db_session, expired[0])
    assert result.transaction.type == HourTxType.BONUS_UNLOCK
    assert result.transaction.source_tx_id == expired[0].id
    assert result.transaction.meta["expired_lock"] is True
    assert result.balance.available_hours == 2
    assert result.balance.locked_hours == 0

    assert await service.list_expired_locks(db_session, limit=10) == []


@pytest.mark.asyncio
async def test_release_expired_standard_lock_only_unlocks(db_session, service, scope):
    await service.purchase(db_session, PROFESSOR, scope, 5)
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    await service.lock(db_session, PROFESSOR, scope, 3, None, unlock_at=past)

    expired = await service.list_expired_locks(db_session, limit=10)
    assert len(expired) == 1

    result = await service.release_expired_lock(db_session, expired[0])

    # Las horas bloqueadas ya estaban en available: no se acuña nada
    assert result.balance.available_hours == 5
    assert result.balance.locked_hours == 0
    assert result.transaction.type == HourTxType.BONUS_UNLOCK
    assert result.transaction.hours == 3
    assert result.transaction.meta["kind"] == "standard"
    assert result.transaction.source_tx_id == expired[0].id


@pytest.mark.asyncio
async def test_release_same_expired_lock_twice_releases_once(db_session, service, scope):
    await service.purchase(db_session, PROFESSOR, scope, 10)
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    await service.lock_bonus(db_session, PROFESSOR, scope, 2, None, unlock_at=past)
    await service.lock_bonus(db_session, PROFESSOR, scope, 3, "booking-live")

    expired = await service.list_expired_locks(db_session, limit=10)
    assert len(expired) == 1
    lock_tx = expired[0]

    first = await service.release_expired_lock(db_session, lock_tx)
    second = await service.release_expired_lock(db_session, lock_tx)

    assert second.transaction.id == first.transaction.id
    assert second.balance.locked_hours == 3
    assert second.balance.available_hours == 12

    releases = await db_session.execute(
        select(func.count(HourTransaction.id)).where(HourTransaction.source_tx_id == lock_tx.id)
    )
    assert releases.scalar_one() == 1


@pytest.mark.asyncio
async def test_sync_correction_is_logged_in_ledger(db_session, service, scope):
    await service.lock_bonus(db_session, PROFESSOR, scope, 4, "booking-x")

    result = await service.sync_locked_hours(db_session, PROFESSOR, scope)
    assert result.corrected is True

    rows = await db_session.execute(
        select(HourTransaction).where(
            HourTransaction.professor_id == PROFESSOR,
            HourTransaction.type == HourTxType.REVOKE,
        )
    )
    audit = rows.scalars().one()
    assert audit.hours == 0
    assert audit.source == TxSource.SYSTEM
    assert audit.meta["reconciliation"] == {"previous": 4, "recomputed": 0}


@pytest.mark.asyncio
async def test_sync_only_counts_bookings_of_the_balance_unit(db_session, service, scope):
    unit_scope = BalanceScope(franqueadora_id=scope.franqueadora_id, unit_id="unit-a")
    db_session.add_all([
        Booking(teacher_id=PROFESSOR, franqueadora_id=scope.franqueadora_id,
                status_canonical=BookingStatus.PAID, bonus_hours=1),
        Booking(teacher_id=PROFESSOR, franqueadora_id=scope.franqueadora_id, unit_id="unit-a",
                status_canonical=BookingStatus.PAID, bonus_hours=2),
    ])
    await db_session.flush()

    tenant_wide = await service.sync_locked_hours(db_session, PROFESSOR, scope)
    per_unit = await service.sync_locked_hours(db_session, PROFESSOR, unit_scope)

    assert tenant_wide.recomputed == 1
    assert per_unit.recomputed == 2
