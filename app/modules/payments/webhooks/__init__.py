# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/webhooks/__init__.py

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .asaas_handler import WEBHOOK_TOKEN_HEADER, handle_asaas_webhook, verify_webhook_token

__all__ = ["WEBHOOK_TOKEN_HEADER", "handle_asaas_webhook", "verify_webhook_token"]
