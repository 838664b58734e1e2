# -*- coding: utf-8 -*-
"""
backend/tests/test_main_app.py

Smoke tests de la app FastAPI: health, raíz, métricas y manejo de
errores de dominio. La base de datos se simula (sin PostgreSQL).
"""

import httpx
import pytest

from app.main import app
from app.modules.ledger.errors import InsufficientBalance
from app.modules.payments.errors import PaymentIntentNotFound


@pytest.fixture
async def client():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "active"


@pytest.mark.asyncio
@pytest.mark.parametrize("db_ok, expected", [(True, "ok"), (False, "degraded")])
async def test_health(client, mocker, db_ok, expected):
    mocker.patch("app.routes.health_routes.check_database_health", return_value=db_ok)

    response = await client.get("/health")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == expected
    assert body["database"]["reachable"] is db_ok
    assert body["environment"] == "test"


@pytest.mark.asyncio
async def test_metrics_exposes_ledger_counters(client):
    await client.get("/")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "ledger_mutations_total" in response.text
    assert "http_requests_total" in response.text


def test_domain_errors_carry_http_status():
    assert PaymentIntentNotFound("x").http_status == 404
    assert InsufficientBalance.http_status == 400
    assert any(getattr(r, "path", None) == "/api/webhooks/asaas" for r in app.routes)
