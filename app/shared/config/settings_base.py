# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para el backend MeuPersonal.
- Esta clase NO instancia singletons ni resuelve .env; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from typing import Literal, Optional
from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="MeuPersonal Ledger", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="meupersonal", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, validation_alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=5, validation_alias="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(default=1800, validation_alias="DB_POOL_RECYCLE")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        Genera la URL de conexión completa para SQLAlchemy + asyncpg.
        Prioriza DB_URL si existe, sino construye desde componentes individuales.
        """
        from urllib.parse import quote_plus

        # Si se provee DB_URL completa, úsala (normaliza el esquema)
        if self.db_url:
            url = self.db_url
            if url.startswith("postgres://"):
                url = "postgresql+asyncpg://" + url[len("postgres://"):]
            elif url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Ledger de créditos / horas
    # =========================
    ledger_principal_franqueadora_id: Optional[str] = Field(
        default=None,
        validation_alias="LEDGER_PRINCIPAL_FRANQUEADORA_ID",
        description="Franqueadora de respaldo cuando el scope solicitado no está activo",
    )
    ledger_low_balance_threshold: int = Field(default=2, validation_alias="LEDGER_LOW_BALANCE_THRESHOLD")
    ledger_expired_locks_batch: int = Field(default=100, validation_alias="LEDGER_EXPIRED_LOCKS_BATCH")
    ledger_expired_locks_interval_minutes: int = Field(
        default=15, validation_alias="LEDGER_EXPIRED_LOCKS_INTERVAL_MINUTES"
    )
    ledger_sync_locked_hours_interval_hours: int = Field(
        default=24, validation_alias="LEDGER_SYNC_LOCKED_HOURS_INTERVAL_HOURS"
    )
    ledger_sync_batch: int = Field(default=200, validation_alias="LEDGER_SYNC_BATCH")
    scheduler_enabled: bool = Field(default=True, validation_alias="SCHEDULER_ENABLED")

    # Notificaciones fire-and-forget (tarea en background)
    notifications_background: bool = Field(default=True, validation_alias="NOTIFICATIONS_BACKGROUND")

    # Paginación del historial de grants
    page_size_default: int = Field(20, validation_alias="DEFAULT_PAGE_SIZE")
    page_size_max: int = Field(100, validation_alias="MAX_PAGE_SIZE")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_and_payments_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        if self.ledger_low_balance_threshold < 1:
            raise ValueError("LEDGER_LOW_BALANCE_THRESHOLD debe ser ≥ 1")
        if self.ledger_expired_locks_batch < 1:
            raise ValueError("LEDGER_EXPIRED_LOCKS_BATCH debe ser ≥ 1")
        if self.page_size_default > self.page_size_max:
            raise ValueError("DEFAULT_PAGE_SIZE no puede superar MAX_PAGE_SIZE")

        if self.is_prod and not self.ledger_principal_franqueadora_id:
            logger.info(
                "LEDGER_PRINCIPAL_FRANQUEADORA_ID no configurado: se usará la franqueadora activa más antigua"
            )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo backend/app/shared/config/settings_base.py
