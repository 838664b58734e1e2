# backend/tests/modules/conftest.py
# -*- coding: utf-8 -*-
"""
Conftest compartido para los tests de módulos (ledger, pagos, notificaciones).

Ajustes clave:
- Motor ASYNC: sqlite+aiosqlite en memoria (StaticPool: una sola conexión
  compartida por las sesiones del test).
- SAVEPOINT habilitado en pysqlite/aiosqlite: el driver no emite BEGIN por
  sí mismo, lo hacemos en el evento "begin" (receta de SQLAlchemy).
- Base.metadata.create_all con TODOS los modelos registrados.
- Fixtures de tenants: franqueadora principal activa y una inactiva.
- RecordingNotifier: guarda las llamadas recibidas.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Tuple

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.shared.database.base import Base

# Registro de modelos en Base.metadata
from app.modules.tenants.models import Franqueadora
from app.modules.bookings.models import Booking  # noqa: F401
from app.modules.ledger.models import (  # noqa: F401
    CreditGrant,
    HourTransaction,
    ProfHourBalance,
    StudentClassBalance,
    StudentClassTransaction,
)
from app.modules.payments.models import PaymentCustomer, PaymentIntent  # noqa: F401
from app.modules.notifications.dispatcher import LedgerEventDispatcher

PRINCIPAL_ID = "00000000-0000-0000-0000-00000000f001"
SECOND_ID = "00000000-0000-0000-0000-00000000f002"
INACTIVE_ID = "00000000-0000-0000-0000-00000000f099"


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        # Desactiva el BEGIN implícito del driver
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session
        if session.in_transaction():
            await session.rollback()


@pytest.fixture
async def tenants(session_factory):
    """
    Principal (activa, la más antigua), una segunda activa y una inactiva.
    """
    now = datetime.now(timezone.utc)
    async with session_factory() as session:
        session.add_all([
            Franqueadora(
                id=PRINCIPAL_ID, name="Principal", is_active=True,
                asaas_wallet_id="wallet-principal", created_at=now - timedelta(days=30),
            ),
            Franqueadora(
                id=SECOND_ID, name="Segunda", is_active=True,
                asaas_wallet_id=None, created_at=now - timedelta(days=10),
            ),
            Franqueadora(
                id=INACTIVE_ID, name="Inactiva", is_active=False,
                created_at=now - timedelta(days=60),
            ),
        ])
        await session.commit()
    return {"principal": PRINCIPAL_ID, "second": SECOND_ID, "inactive": INACTIVE_ID}


class RecordingNotifier:
    """Notifier de prueba: registra (método, kwargs)."""

    def __init__(self):
        self.calls: List[Tuple[str, dict]] = []

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        async def _record(**kwargs):
            self.calls.append((name, kwargs))

        return _record


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    return LedgerEventDispatcher(notifier, background=False)

# Fin del archivo backend/tests/modules/conftest.py
