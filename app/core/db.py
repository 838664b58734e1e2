# -*- coding: utf-8 -*-
"""
backend/app/core/db.py

Fachada para la capa de acceso a datos basada en SQLAlchemy async.
Envuelve el módulo `app.shared.database.database`:

- engine
- SessionLocal
- Base
- get_async_session
- session_scope()
- check_database_health()

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from app.shared.database.database import (
    engine,
    SessionLocal,
    Base,
    get_async_session,
    session_scope,
    check_database_health,
)


__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "get_async_session",
    "session_scope",
    "check_database_health",
]

# Fin del archivo backend/app/core/db.py
