# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend MeuPersonal (ledger y cobros).

Ajustes clave:
- Uso de app.core.settings como fachada de configuración.
- Logging centralizado (plain en desarrollo, JSON en producción).
- Montaje de observabilidad Prometheus (/metrics) vía app.observability.prom
- Scheduler con los jobs del ledger (locks vencidos y reconciliación)
- Ciclo de vida con cierre ordenado (scheduler, notificaciones, proveedor)

Autor: MeuPersonal
Fecha: 2026-10-19
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# Cargar .env ANTES de cualquier import que use settings
# Fuera de producción: override=True para que .env mande sobre el entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().strip('"').strip("'").lower()
_override_env = _PYTHON_ENV not in ("production", "prod")
load_dotenv(dotenv_path=_ENV_PATH, override=_override_env)

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.logging import setup_logging
from app.core.settings import get_settings
from app.modules.ledger.errors import GrantValidationError, LedgerError
from app.modules.payments.errors import PaymentError
from app.observability import setup_observability

setup_logging()
logger = logging.getLogger(__name__)

logger.info("[dotenv] Loaded %s (override=%s, PYTHON_ENV=%s)", _ENV_PATH, _override_env, _PYTHON_ENV)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    settings = get_settings()

    if settings.scheduler_enabled:
        from app.shared.scheduler import get_scheduler
        from app.modules.ledger.jobs import register_ledger_jobs

        scheduler = get_scheduler()
        job_ids = register_ledger_jobs(scheduler)
        scheduler.start()
        logger.info("Scheduler started with jobs: %s", ", ".join(job_ids))
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")

    logger.info("MeuPersonal backend started (env=%s)", settings.python_env)
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        logger.info("Starting ordered shutdown...")
        if settings.scheduler_enabled:
            from app.shared.scheduler import get_scheduler
            get_scheduler().shutdown(wait=True)

        from app.modules.notifications import get_event_dispatcher
        await get_event_dispatcher().drain()

        from app.modules.payments.providers import get_payment_provider
        provider = get_payment_provider()
        if hasattr(provider, "aclose"):
            await provider.aclose()

        logger.info("MeuPersonal backend stopped.")


app = FastAPI(
    title="MeuPersonal Ledger API",
    description="Ledger de créditos/horas y conciliación de pagos",
    version="1.0.0",
    lifespan=lifespan,
)


def _configure_cors(app_instance: FastAPI) -> None:
    origins = get_settings().get_cors_origins()
    if not origins:
        logger.warning("CORS: no origins configured, cross-origin requests will be blocked")
        return
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        max_age=600,
    )


# Observabilidad primero; CORS al final para ejecutarse primero (outermost)
setup_observability(app)
_configure_cors(app)


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION HANDLERS (errores de dominio -> http_status)
# ═══════════════════════════════════════════════════════════════════════════════

@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.__class__.__name__, "message": str(exc)},
    )


@app.exception_handler(GrantValidationError)
async def grant_validation_error_handler(request: Request, exc: GrantValidationError):
    return JSONResponse(status_code=400, content={"error": exc.code, "message": exc.message})


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.__class__.__name__, "message": exc.message},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        content={"detail": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


# Incluye router maestro
from app.routes import router as main_router  # noqa: E402

app.include_router(main_router)


@app.get("/")
async def root():
    return {"service": "MeuPersonal Ledger", "status": "active"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)

# Fin del archivo backend/app/main.py
