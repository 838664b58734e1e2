# -*- coding: utf-8 -*-
"""
backend/app/modules/tenants/__init__.py

Modelo de lectura de franqueadoras (tenants).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .models import Franqueadora
from .repositories import FranqueadoraRepository

__all__ = ["Franqueadora", "FranqueadoraRepository"]
