# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/jobs/__init__.py

Jobs programados del ledger.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .expired_locks_job import register_expired_locks_job, release_expired_locks
from .locked_hours_sync_job import register_locked_hours_sync_job, sync_all_locked_hours


def register_ledger_jobs(scheduler) -> list:
    """Registra todos los jobs del ledger y devuelve sus ids."""
    return [
        register_expired_locks_job(scheduler),
        register_locked_hours_sync_job(scheduler),
    ]


__all__ = [
    "release_expired_locks",
    "register_expired_locks_job",
    "sync_all_locked_hours",
    "register_locked_hours_sync_job",
    "register_ledger_jobs",
]
