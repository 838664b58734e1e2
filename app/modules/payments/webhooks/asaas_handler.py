# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/webhooks/asaas_handler.py

Fachada de alto nivel para webhooks de Asaas.

1. Verifica el token compartido (header asaas-access-token)
2. Normaliza el payload con el proveedor
3. Aplica el evento (PaymentIntentService.process_webhook)
4. Commit y despacho de eventos

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.notifications.dispatcher import LedgerEventDispatcher, get_event_dispatcher
from ..providers import PaymentProvider
from ..services import PaymentIntentService, WebhookOutcome, get_payment_intent_service

logger = logging.getLogger(__name__)

WEBHOOK_TOKEN_HEADER = "asaas-access-token"


def verify_webhook_token(received: Optional[str], expected: Optional[str]) -> bool:
    """Sin token configurado no se exige verificación."""
    if not expected:
        return True
    if not received:
        return False
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


async def handle_asaas_webhook(
    session: AsyncSession,
    payload: Dict[str, Any],
    *,
    service: Optional[PaymentIntentService] = None,
    provider: Optional[PaymentProvider] = None,
    dispatcher: Optional[LedgerEventDispatcher] = None,
) -> WebhookOutcome:
    """
    Procesa un webhook ya autenticado.

    Raises:
        Cualquier error de procesamiento (tras rollback); la ruta decide
        cómo responder al proveedor.
    """
    service = service or get_payment_intent_service()
    provider = provider or service.provider
    dispatcher = dispatcher or get_event_dispatcher()

    parsed = provider.parse_webhook(payload)
    logger.info(
        "Asaas webhook received: event=%s provider_id=%s status=%s",
        parsed.event, parsed.provider_id, parsed.status,
    )

    try:
        outcome = await service.process_webhook(
            session, parsed.provider_id, parsed.status, event=parsed.event
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await dispatcher.dispatch(outcome.events)
    return outcome


__all__ = ["handle_asaas_webhook", "verify_webhook_token", "WEBHOOK_TOKEN_HEADER"]

# Fin del archivo backend/app/modules/payments/webhooks/asaas_handler.py
