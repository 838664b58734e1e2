# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/test_asaas_handler.py

Fachada de webhooks de Asaas: token, commit y despacho de eventos.
"""

import pytest
from sqlalchemy import select

from app.modules.ledger.models import StudentClassBalance
from app.modules.payments.enums import PaymentIntentStatus, WebhookOutcomeStatus
from app.modules.payments.models import PaymentIntent
from app.modules.payments.webhooks import handle_asaas_webhook, verify_webhook_token


@pytest.mark.parametrize(
    "received, expected, ok",
    [
        (None, None, True),
        ("anything", "", True),
        ("secret", "secret", True),
        ("wrong", "secret", False),
        (None, "secret", False),
    ],
)
def test_verify_webhook_token(received, expected, ok):
    assert verify_webhook_token(received, expected) is ok


def _payload(event, provider_id):
    return {"event": event, "payment": {"id": provider_id, "status": "CONFIRMED"}}


@pytest.mark.asyncio
async def test_confirmed_webhook_commits_and_notifies(
    db_session, session_factory, payment_service, provider, create_intent, dispatcher, notifier
):
    intent = await create_intent(qty=5)
    await db_session.commit()

    outcome = await handle_asaas_webhook(
        db_session, _payload("PAYMENT_CONFIRMED", intent.provider_id),
        service=payment_service, provider=provider, dispatcher=dispatcher,
    )

    assert outcome.status == WebhookOutcomeStatus.OK
    assert notifier.names() == ["credits_purchased", "payment_confirmed"]
    assert notifier.calls[0][1]["qty"] == 5

    # El commit es visible desde otra sesión
    async with session_factory() as other:
        stored = await other.get(PaymentIntent, intent.id)
        assert stored.status == PaymentIntentStatus.PAID
        balance = (
            await other.execute(
                select(StudentClassBalance).where(StudentClassBalance.student_id == "student-1")
            )
        ).scalar_one()
        assert balance.total_purchased == 5


@pytest.mark.asyncio
async def test_duplicate_webhook_sends_nothing(
    db_session, payment_service, provider, create_intent, dispatcher, notifier
):
    intent = await create_intent()
    await db_session.commit()
    payload = _payload("PAYMENT_RECEIVED", intent.provider_id)

    await handle_asaas_webhook(db_session, payload, service=payment_service, provider=provider, dispatcher=dispatcher)
    notifier.calls.clear()
    outcome = await handle_asaas_webhook(
        db_session, payload, service=payment_service, provider=provider, dispatcher=dispatcher
    )

    assert outcome.status == WebhookOutcomeStatus.DUPLICATE
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_refund_event_on_pending_intent(
    db_session, payment_service, provider, create_intent, dispatcher, notifier
):
    intent = await create_intent()
    await db_session.commit()

    outcome = await handle_asaas_webhook(
        db_session, _payload("PAYMENT_REFUNDED", intent.provider_id),
        service=payment_service, provider=provider, dispatcher=dispatcher,
    )

    assert outcome.new_status == PaymentIntentStatus.CANCELED
    assert notifier.names() == ["payment_refunded"]


@pytest.mark.asyncio
async def test_processing_error_rolls_back(
    db_session, payment_service, provider, create_intent, dispatcher, notifier, mocker
):
    intent = await create_intent()
    await db_session.commit()
    mocker.patch.object(payment_service, "credit_package", side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await handle_asaas_webhook(
            db_session, _payload("PAYMENT_CONFIRMED", intent.provider_id),
            service=payment_service, provider=provider, dispatcher=dispatcher,
        )

    assert notifier.calls == []
    await db_session.refresh(intent)
    assert intent.status == PaymentIntentStatus.PENDING
