# -*- coding: utf-8 -*-
"""
backend/app/observability/__init__.py

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .prom import setup_observability

__all__ = ["setup_observability"]
