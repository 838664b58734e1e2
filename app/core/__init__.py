# -*- coding: utf-8 -*-
"""
backend/app/core/__init__.py

Fachada unificada para componentes centrales del backend:
- Configuración (settings)
- Logging

La capa de base de datos se importa explícitamente desde `app.core.db`
para no crear el engine al importar el paquete.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .settings import get_settings, get_payments_settings
from .logging import setup_logging

__all__ = [
    "get_settings",
    "get_payments_settings",
    "setup_logging",
]

# Fin del archivo backend/app/core/__init__.py
