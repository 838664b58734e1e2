# -*- coding: utf-8 -*-
"""
backend/app/shared/core/__init__.py

Utilidades compartidas de observabilidad (métricas Prometheus).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .metrics_helpers import get_or_create_counter, get_or_create_histogram

__all__ = [
    "get_or_create_counter",
    "get_or_create_histogram",
]
