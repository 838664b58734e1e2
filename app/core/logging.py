# -*- coding: utf-8 -*-
"""
backend/app/core/logging.py

Configuración centralizada de logging.
Actúa como fachada del módulo `app.shared.config.logging_config` para
mantener un punto de entrada único bajo `app.core`.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from typing import Literal, Optional

from app.shared.config.logging_config import setup_logging as _setup_logging


def setup_logging(
    level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None,
    fmt: Optional[Literal["plain", "pretty", "json"]] = None,
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Si no se indican nivel o formato, se toman de settings
    (LOG_LEVEL / LOG_FORMAT).
    """
    if level is None or fmt is None:
        from app.core.settings import get_settings

        settings = get_settings()
        level = level or settings.log_level
        fmt = fmt or settings.log_format
    _setup_logging(level=level, fmt=fmt)

# Fin del archivo backend/app/core/logging.py
