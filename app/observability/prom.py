# -*- coding: utf-8 -*-
"""
backend/app/observability/prom.py

Observabilidad Prometheus de MeuPersonal.

Incluye:
- Middleware HTTP para conteo y latencia por ruta/estado
- Endpoint /metrics (pull model), con soporte multiproceso si
  PROMETHEUS_MULTIPROC_DIR está definido

Los contadores del ledger y de pagos se registran en sus módulos
(ledger/metrics.py, payments/metrics.py) y salen por este endpoint.

Autor: MeuPersonal
Fecha: 2026-10-19
"""
from __future__ import annotations

import os
from time import perf_counter
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from prometheus_client import CollectorRegistry, multiprocess, generate_latest, CONTENT_TYPE_LATEST

from app.shared.core.metrics_helpers import get_or_create_counter, get_or_create_histogram

REQUEST_COUNT = get_or_create_counter(
    "http_requests_total",
    "Total HTTP requests",
    ("method", "path", "status"),
)
REQUEST_LATENCY = get_or_create_histogram(
    "http_request_latency_seconds",
    "Latency per request (s)",
    ("method", "path", "status"),
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0),
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware para instrumentar peticiones HTTP en FastAPI."""

    async def dispatch(self, request, call_next):
        method = request.method
        # Ruta de plantilla (no el path crudo) para acotar cardinalidad
        route = request.scope.get("route")
        start = perf_counter()
        resp = await call_next(request)
        elapsed = perf_counter() - start

        route = request.scope.get("route") or route
        path = getattr(route, "path", request.url.path)
        status = str(resp.status_code)
        REQUEST_LATENCY.labels(method, path, status).observe(elapsed)
        REQUEST_COUNT.labels(method, path, status).inc()
        return resp


def _build_registry() -> Optional[CollectorRegistry]:
    """CollectorRegistry multiproceso (gunicorn con varios workers)."""
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return registry
    return None


def mount_metrics(app: FastAPI, path: str = "/metrics") -> None:
    """Registra el endpoint /metrics en la app FastAPI."""
    registry = _build_registry()

    @app.get(path, include_in_schema=False)
    def metrics():
        data = generate_latest(registry) if registry else generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)


def setup_observability(app: FastAPI) -> None:
    """Agrega middleware de Prometheus y monta el endpoint /metrics."""
    app.add_middleware(PrometheusMiddleware)
    mount_metrics(app)


# Fin del archivo backend/app/observability/prom.py
