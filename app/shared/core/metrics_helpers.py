# -*- coding: utf-8 -*-
"""
backend/app/shared/core/metrics_helpers.py

Registro idempotente de métricas Prometheus.

Los módulos de métricas (ledger, payments, observability) se importan
varias veces en tests y con recarga de uvicorn; registrar dos veces el
mismo nombre en el REGISTRY global lanza ValueError, así que se
reutiliza el colector existente.

Autor: MeuPersonal
Fecha: 2026-10-19
"""
from typing import Optional, Sequence

from prometheus_client import Counter, Histogram, REGISTRY


def _lookup(name: str):
    collectors = getattr(REGISTRY, "_names_to_collectors", {})
    # Counter se registra con y sin sufijo _total
    return collectors.get(name) or collectors.get(f"{name}_total")


def get_or_create_counter(name: str, description: str, labelnames: Sequence[str] = ()) -> Counter:
    existing = _lookup(name)
    if existing is not None:
        return existing
    try:
        return Counter(name, description, labelnames=tuple(labelnames))
    except ValueError:
        return _lookup(name)


def get_or_create_histogram(
    name: str,
    description: str,
    labelnames: Sequence[str] = (),
    buckets: Optional[Sequence[float]] = None,
) -> Histogram:
    """`buckets=None` usa los buckets por defecto de prometheus_client."""
    existing = _lookup(name)
    if existing is not None:
        return existing
    kwargs = {"buckets": tuple(buckets)} if buckets else {}
    try:
        return Histogram(name, description, labelnames=tuple(labelnames), **kwargs)
    except ValueError:
        return _lookup(name)


__all__ = [
    "get_or_create_counter",
    "get_or_create_histogram",
]
