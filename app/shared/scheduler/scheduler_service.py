# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/scheduler_service.py

Programación de los jobs periódicos del ledger con APScheduler.

Jobs registrados hoy:
- Liberación de locks vencidos (cada N minutos)
- Reconciliación de horas bloqueadas de profesores (cada N horas)

Reglas:
- Un job por id: re-registrar reemplaza (reinicios en caliente, tests)
- max_instances=1: una pasada lenta no se solapa con la siguiente
- Ejecuciones perdidas se combinan en una sola (coalesce)

Autor: MeuPersonal
Fecha: 2026-10-19
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

_JOB_DEFAULTS = {
    "coalesce": True,
    "max_instances": 1,
    "misfire_grace_time": 60,
}


class SchedulerService:
    """Envoltura delgada sobre AsyncIOScheduler (zona UTC, store en memoria)."""

    def __init__(self, job_defaults: Optional[Dict[str, Any]] = None):
        self._scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": AsyncIOExecutor()},
            job_defaults={**_JOB_DEFAULTS, **(job_defaults or {})},
            timezone="UTC",
        )
        self._started = False

    def start(self) -> None:
        """Requiere un event loop activo (lifespan de FastAPI)."""
        if self._started:
            return
        self._scheduler.start()
        self._started = True
        logger.info("Scheduler started with %d job(s)", len(self._scheduler.get_jobs()))

    def shutdown(self, wait: bool = True) -> None:
        if not self._started:
            return
        self._scheduler.shutdown(wait=wait)
        self._started = False
        logger.info("Scheduler stopped")

    def add_interval_job(
        self,
        func: Callable,
        job_id: str,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        *,
        jitter: Optional[int] = None,
        run_immediately: bool = False,
        **kwargs: Any,
    ) -> str:
        """
        Programa `func` cada hours/minutes/seconds.

        Args:
            jitter: segundos aleatorios sumados a cada disparo (varios workers)
            run_immediately: primera ejecución al arrancar en lugar de
                esperar un intervalo completo
            **kwargs: argumentos para `func`

        Raises:
            ValueError: intervalo nulo
        """
        interval = timedelta(hours=hours, minutes=minutes, seconds=seconds)
        if interval.total_seconds() <= 0:
            raise ValueError(f"Invalid interval for job '{job_id}'")

        options: Dict[str, Any] = {}
        if run_immediately:
            options["next_run_time"] = datetime.now(timezone.utc)

        self._scheduler.add_job(
            func=func,
            trigger=IntervalTrigger(hours=hours, minutes=minutes, seconds=seconds, jitter=jitter),
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs,
            **options,
        )
        logger.info("Job '%s' scheduled every %s", job_id, interval)
        return job_id

    def remove_job(self, job_id: str) -> bool:
        """False si el job no existía."""
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning("Job '%s' not found, nothing to remove", job_id)
            return False
        logger.info("Job '%s' removed", job_id)
        return True

    def get_jobs(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": getattr(job, "next_run_time", None),
                "trigger": str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler.running


# Singleton global
_scheduler_instance: Optional[SchedulerService] = None


def get_scheduler() -> SchedulerService:
    global _scheduler_instance
    if _scheduler_instance is None:
        _scheduler_instance = SchedulerService()
    return _scheduler_instance


# Fin del archivo backend/app/shared/scheduler/scheduler_service.py
