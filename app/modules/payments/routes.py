# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes.py

Webhook endpoint para Asaas.

Endpoint:
- POST /api/webhooks/asaas

Una vez autenticado siempre responde 200 (también ante errores de
procesamiento, que quedan en logs) para no provocar reintentos en cadena.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.config.settings_payments import get_payments_settings
from app.shared.database.database import get_async_session
from .schemas import WebhookAck
from .webhooks import WEBHOOK_TOKEN_HEADER, handle_asaas_webhook, verify_webhook_token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/webhooks",
    tags=["payments:webhooks"],
)


@router.post("/asaas", status_code=status.HTTP_200_OK, response_model=WebhookAck)
async def asaas_webhook(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
) -> WebhookAck:
    """Webhook de Asaas (eventos PAYMENT_*)."""
    expected = get_payments_settings().asaas_webhook_token
    if not verify_webhook_token(request.headers.get(WEBHOOK_TOKEN_HEADER), expected):
        logger.warning("Asaas webhook rejected: invalid access token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook token")

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Asaas webhook with invalid JSON body acknowledged")
        return WebhookAck(status="invalid_payload")

    if not isinstance(payload, dict):
        logger.warning("Asaas webhook with non-object body acknowledged")
        return WebhookAck(status="invalid_payload")

    try:
        outcome = await handle_asaas_webhook(session, payload)
    except Exception:
        payment = payload.get("payment") or {}
        logger.error(
            "Asaas webhook processing error acknowledged: event=%s payment=%s",
            payload.get("event"), payment.get("id") if isinstance(payment, dict) else None,
            exc_info=True,
        )
        return WebhookAck(status="error")

    return WebhookAck(status=outcome.status.value)


# Fin del archivo backend/app/modules/payments/routes.py
