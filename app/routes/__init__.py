# -*- coding: utf-8 -*-
"""
backend/app/routes/__init__.py

Ensamblador de ruteadores de la API.

Responsabilidades:
- Incluir el router de health (/health).
- Montar bajo /api la frontera HTTP del ledger (webhook de Asaas).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from fastapi import APIRouter

from app.modules.payments.routes import router as payments_webhooks_router
from .health_routes import router as health_router

router = APIRouter()

# Health check sin prefijo adicional
router.include_router(health_router)

api = APIRouter(prefix="/api")
api.include_router(payments_webhooks_router)

router.include_router(api)

__all__ = ["router"]

# Fin del archivo backend/app/routes/__init__.py
