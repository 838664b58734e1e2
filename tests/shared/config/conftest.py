# -*- coding: utf-8 -*-
import os
import pytest


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """
    Aísla variables de entorno: no heredamos PYTHON_ENV ni secretos
    del shell del dev.
    """
    for k in list(os.environ.keys()):
        if k.startswith(("DB_", "CORS_", "APP_", "LEDGER_", "ASAAS_", "PAYMENTS_", "LOG_")):
            monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("PYTHON_ENV", "development")
    yield
# Fin del archivo backend/tests/shared/config/conftest.py
