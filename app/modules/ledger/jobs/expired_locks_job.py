# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/jobs/expired_locks_job.py

Job programado que libera bloqueos vencidos.

Cada corrida procesa un lote (LEDGER_EXPIRED_LOCKS_BATCH) de:
- LOCK de alumno con unlock_at <= now y sin booking
- BONUS_LOCK de profesor con unlock_at <= now y sin booking

Cada bloqueo se libera en su propio savepoint: un fallo no aborta el lote.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from app.shared.core.metrics_helpers import get_or_create_counter
from ..services import (
    ProfessorHourService,
    StudentBalanceService,
    get_professor_hour_service,
    get_student_balance_service,
)

logger = logging.getLogger(__name__)

JOB_ID = "ledger_release_expired_locks"

EXPIRED_LOCKS_RELEASED_TOTAL = get_or_create_counter(
    "ledger_expired_locks_released_total",
    "Bloqueos vencidos procesados por el job",
    ("resource", "result"),
)


def _default_session_scope():
    from app.shared.database.database import session_scope
    return session_scope()


async def _release_batch(session, locks, release, resource: str) -> Dict[str, int]:
    released = failed = 0
    for lock_tx in locks:
        lock_id = lock_tx.id
        try:
            async with session.begin_nested():
                await release(session, lock_tx)
            released += 1
            EXPIRED_LOCKS_RELEASED_TOTAL.labels(resource=resource, result="released").inc()
        except Exception:
            failed += 1
            EXPIRED_LOCKS_RELEASED_TOTAL.labels(resource=resource, result="failed").inc()
            logger.error(
                "[expired_locks] failed to release %s lock tx=%s", resource, lock_id,
                exc_info=True,
            )
    return {"found": len(locks), "released": released, "failed": failed}


async def release_expired_locks(
    session_factory: Optional[Callable[[], Any]] = None,
    *,
    student_service: Optional[StudentBalanceService] = None,
    hour_service: Optional[ProfessorHourService] = None,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Libera un lote de bloqueos vencidos de alumnos y profesores.

    Args:
        session_factory: callable que devuelve un async context manager
            de AsyncSession (default: session_scope)
        limit: tamaño de lote (default: LEDGER_EXPIRED_LOCKS_BATCH)

    Returns:
        Dict con estadísticas por recurso
    """
    student_service = student_service or get_student_balance_service()
    hour_service = hour_service or get_professor_hour_service()
    factory = session_factory or _default_session_scope
    now = datetime.now(timezone.utc)

    async with factory() as session:
        student_locks = await student_service.list_expired_locks(session, now, limit)
        students = await _release_batch(
            session, student_locks, student_service.release_expired_lock, "student_credits"
        )

        hour_locks = await hour_service.list_expired_locks(session, now, limit)
        hours = await _release_batch(
            session, hour_locks, hour_service.release_expired_lock, "professor_hours"
        )

        await session.commit()

    result = {"timestamp": now.isoformat(), "students": students, "professors": hours}
    if students["found"] or hours["found"]:
        logger.info(
            "[expired_locks] students released=%d failed=%d professors released=%d failed=%d",
            students["released"], students["failed"], hours["released"], hours["failed"],
        )
    return result


def register_expired_locks_job(scheduler, minutes: Optional[int] = None) -> str:
    """
    Registra el job de liberación de bloqueos vencidos.

    Args:
        scheduler: Instancia de SchedulerService
        minutes: intervalo (default: LEDGER_EXPIRED_LOCKS_INTERVAL_MINUTES)

    Returns:
        ID del job registrado
    """
    if minutes is None:
        from app.shared.config import settings
        minutes = int(settings.ledger_expired_locks_interval_minutes)

    scheduler.add_interval_job(
        func=release_expired_locks, job_id=JOB_ID, minutes=minutes, jitter=30, run_immediately=True
    )
    logger.info("[expired_locks] Job '%s' registered: every %d min", JOB_ID, minutes)
    return JOB_ID


# Fin del archivo backend/app/modules/ledger/jobs/expired_locks_job.py
