# -*- coding: utf-8 -*-
"""
backend/app/shared/config/logging_config.py

Configuración centralizada de logging para MeuPersonal.

- plain/pretty: una línea legible por evento (desarrollo, tests)
- json: un objeto por línea con `service` fijo (producción, agregadores)

Autor: MeuPersonal
Fecha: 2026-10-19
"""

import logging.config
from typing import Literal

SERVICE_NAME = "meupersonal-ledger"

# Bajan a WARNING salvo cuando se pide DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler", "sqlalchemy.engine", "asyncpg", "aiosqlite")


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain"
) -> None:
    """
    Configura el logging raíz de la aplicación.

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    level = level.upper()
    formatter = "json" if fmt == "json" else "default"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "rename_fields": {"asctime": "timestamp", "levelname": "level"},
                "static_fields": {"service": SERVICE_NAME},
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            name: {"level": "DEBUG" if level == "DEBUG" else "WARNING"}
            for name in _NOISY_LOGGERS
        },
        "root": {"handlers": ["console"], "level": level},
    })


__all__ = ["setup_logging", "SERVICE_NAME"]
# Fin del archivo backend/app/shared/config/logging_config.py
