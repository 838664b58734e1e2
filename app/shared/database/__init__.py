# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Los modelos importan `app.shared.database.base` directamente para no
crear el engine al importar (tests con SQLite en memoria).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, as_db_enum, BigIntPK, JSONType
from .repository import BaseRepository, dialect_insert

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_db_enum",
    "BigIntPK",
    "JSONType",
    "BaseRepository",
    "dialect_insert",
]

# Fin del archivo backend/app/shared/database/__init__.py
