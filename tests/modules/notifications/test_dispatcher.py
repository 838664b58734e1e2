# -*- coding: utf-8 -*-
"""
backend/tests/modules/notifications/test_dispatcher.py

Entrega best-effort de eventos al Notifier.
"""

import asyncio

import pytest

from app.modules.notifications import LoggingNotifier, Notifier
from app.modules.notifications import events as ev
from app.modules.notifications.dispatcher import LedgerEventDispatcher


class _FailingNotifier:
    def __init__(self):
        self.delivered = []

    async def balance_zero(self, student_id):
        raise ConnectionError("push gateway down")

    async def balance_low(self, student_id, available):
        self.delivered.append(("balance_low", student_id, available))


@pytest.mark.asyncio
async def test_inline_dispatch_calls_notifier(notifier):
    dispatcher = LedgerEventDispatcher(notifier, background=False)

    await dispatcher.dispatch([
        ev.credits_debited("student-1", 1, 4, "booking-1"),
        ev.balance_low("student-1", 1),
    ])

    assert notifier.calls == [
        ("credits_debited", {"student_id": "student-1", "qty": 1, "new_balance": 4, "booking_id": "booking-1"}),
        ("balance_low", {"student_id": "student-1", "available": 1}),
    ]


@pytest.mark.asyncio
async def test_notifier_failure_is_swallowed(caplog):
    failing = _FailingNotifier()
    dispatcher = LedgerEventDispatcher(failing, background=False)

    with caplog.at_level("WARNING"):
        await dispatcher.dispatch([ev.balance_zero("student-1"), ev.balance_low("student-1", 1)])

    assert failing.delivered == [("balance_low", "student-1", 1)]
    assert "Notification delivery failed" in caplog.text


@pytest.mark.asyncio
async def test_background_dispatch_drains(notifier):
    dispatcher = LedgerEventDispatcher(notifier, background=True)

    await dispatcher.dispatch([ev.hours_purchased("professor-1", 5, 5)])
    await dispatcher.drain()

    assert notifier.names() == ["hours_purchased"]


@pytest.mark.asyncio
async def test_background_failure_does_not_propagate():
    dispatcher = LedgerEventDispatcher(_FailingNotifier(), background=True)

    await dispatcher.dispatch([ev.balance_zero("student-1")])
    await dispatcher.drain()
    await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_logging_notifier_satisfies_protocol():
    notifier = LoggingNotifier()
    assert isinstance(notifier, Notifier)
    await notifier.payment_confirmed("user-1", "pi-1", "99.90", intent_type="STUDENT_PACKAGE")
