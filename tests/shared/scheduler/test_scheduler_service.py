# -*- coding: utf-8 -*-
"""
Tests para SchedulerService y el registro de jobs del ledger.

Cubre:
- Alta de jobs por intervalo (replace_existing)
- Intervalo inválido
- Registro de los jobs del ledger con sus ids
"""

import pytest

from app.shared.scheduler import SchedulerService
from app.modules.ledger.jobs import register_ledger_jobs
from app.modules.ledger.jobs.expired_locks_job import JOB_ID as EXPIRED_LOCKS_JOB_ID
from app.modules.ledger.jobs.locked_hours_sync_job import JOB_ID as SYNC_JOB_ID


async def _noop():
    return None


def test_add_interval_job_replaces_existing():
    scheduler = SchedulerService()
    scheduler.add_interval_job(_noop, job_id="demo", minutes=5)
    scheduler.add_interval_job(_noop, job_id="demo", minutes=10)

    jobs = scheduler.get_jobs()
    assert [j["id"] for j in jobs] == ["demo"]


def test_add_interval_job_rejects_zero_interval():
    scheduler = SchedulerService()
    with pytest.raises(ValueError):
        scheduler.add_interval_job(_noop, job_id="bad")


def test_remove_missing_job_returns_false():
    scheduler = SchedulerService()
    assert scheduler.remove_job("missing") is False


def test_register_ledger_jobs():
    scheduler = SchedulerService()
    job_ids = register_ledger_jobs(scheduler)

    assert job_ids == [EXPIRED_LOCKS_JOB_ID, SYNC_JOB_ID]
    assert {j["id"] for j in scheduler.get_jobs()} == {EXPIRED_LOCKS_JOB_ID, SYNC_JOB_ID}
    assert scheduler.is_running is False


def test_run_immediately_sets_first_run():
    scheduler = SchedulerService()
    scheduler.add_interval_job(_noop, job_id="now", minutes=15, run_immediately=True)
    scheduler.add_interval_job(_noop, job_id="later", minutes=15)

    jobs = {j["id"]: j for j in scheduler.get_jobs()}
    assert jobs["now"]["next_run"] is not None
    assert jobs["later"]["next_run"] is None
