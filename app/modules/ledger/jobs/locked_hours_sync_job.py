# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/jobs/locked_hours_sync_job.py

Job programado de reconciliación de horas bloqueadas de profesores.

Recorre los saldos de horas en lotes (keyset por id) y sobrescribe
locked_hours con lo que dicen las reservas activas. Es idempotente.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..services import ProfessorHourService, get_professor_hour_service

logger = logging.getLogger(__name__)

JOB_ID = "ledger_sync_locked_hours"


def _default_session_scope():
    from app.shared.database.database import session_scope
    return session_scope()


async def sync_all_locked_hours(
    session_factory: Optional[Callable[[], Any]] = None,
    *,
    hour_service: Optional[ProfessorHourService] = None,
    batch_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Reconcilia locked_hours de todos los saldos de profesor.

    Se hace commit por lote; un saldo que falla se registra y se salta.
    """
    hour_service = hour_service or get_professor_hour_service()
    factory = session_factory or _default_session_scope
    if batch_size is None:
        from app.shared.config import settings
        batch_size = int(settings.ledger_sync_batch)

    started = datetime.now(timezone.utc)
    checked = corrected = failed = 0
    after_id = 0

    async with factory() as session:
        while True:
            page = await hour_service.balances.list_page(
                session, after_id=after_id, limit=batch_size
            )
            if not page:
                break
            keys = [(b.id, b.professor_id, b.franqueadora_id, b.unit_id) for b in page]
            after_id = keys[-1][0]

            for balance_id, professor_id, franqueadora_id, unit_id in keys:
                try:
                    async with session.begin_nested():
                        balance = await hour_service.balances.get(
                            session, professor_id, franqueadora_id, unit_id, for_update=True
                        )
                        if balance is None:
                            continue
                        result = await hour_service.sync_balance(session, balance)
                    checked += 1
                    if result.corrected:
                        corrected += 1
                except Exception:
                    failed += 1
                    logger.error(
                        "[sync_locked_hours] failed for balance=%s professor=%s",
                        balance_id, professor_id,
                        exc_info=True,
                    )

            await session.commit()
            if len(keys) < batch_size:
                break

    logger.info(
        "[sync_locked_hours] checked=%d corrected=%d failed=%d", checked, corrected, failed
    )
    return {
        "timestamp": started.isoformat(),
        "checked": checked,
        "corrected": corrected,
        "failed": failed,
    }


def register_locked_hours_sync_job(scheduler, hours: Optional[int] = None) -> str:
    """Registra la reconciliación periódica (default: cada 24 h)."""
    if hours is None:
        from app.shared.config import settings
        hours = int(settings.ledger_sync_locked_hours_interval_hours)

    scheduler.add_interval_job(func=sync_all_locked_hours, job_id=JOB_ID, hours=hours, jitter=300)
    logger.info("[sync_locked_hours] Job '%s' registered: every %d h", JOB_ID, hours)
    return JOB_ID


# Fin del archivo backend/app/modules/ledger/jobs/locked_hours_sync_job.py
