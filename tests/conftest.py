# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para MeuPersonal.

- PYTHON_ENV=test antes de importar cualquier módulo de app
  (settings de test: sin scheduler, notificaciones en línea).
- Los tests de servicios usan SQLite en memoria (ver tests/modules/conftest.py);
  ningún test requiere PostgreSQL ni red.
"""

import os

import pytest

os.environ.setdefault("PYTHON_ENV", "test")
# Evita llamadas reales al proveedor si algún test no inyecta transporte
os.environ.setdefault("ASAAS_API_KEY", "test-asaas-key")


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Limpia el singleton de settings entre tests."""
    from app.shared.config import config_loader
    import app.shared.config.settings_payments as settings_payments

    config_loader.get_settings.cache_clear()
    settings_payments._payments_settings = None
    yield
    config_loader.get_settings.cache_clear()
    settings_payments._payments_settings = None

# Fin del archivo backend/tests/conftest.py
