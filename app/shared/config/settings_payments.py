# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_payments.py

Configuración de pagos (Asaas) para MeuPersonal.

Descripción:
    Centraliza credenciales del proveedor, entorno (sandbox/producción),
    tiempos de espera, token de webhook y reglas de split.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ASAAS_SANDBOX_URL = "https://sandbox.asaas.com/api/v3"
ASAAS_PRODUCTION_URL = "https://api.asaas.com/v3"

ASAAS_SANDBOX_INVOICE_URL = "https://sandbox.asaas.com"
ASAAS_PRODUCTION_INVOICE_URL = "https://www.asaas.com"


class PaymentsSettings(BaseSettings):
    """Configuración del sistema de pagos."""

    # =========================================================================
    # FEATURE FLAGS
    # =========================================================================

    payments_enabled: bool = Field(
        default=True,
        description="Habilita la creación de checkouts globalmente"
    )

    # =========================================================================
    # ASAAS
    # =========================================================================

    asaas_api_key: Optional[str] = Field(
        default=None,
        description="API key de Asaas ($aact_...)"
    )

    asaas_env: Literal["sandbox", "production"] = Field(
        default="sandbox",
        description="Entorno de Asaas: 'sandbox' o 'production'"
    )

    asaas_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout de llamadas HTTP al proveedor"
    )

    asaas_webhook_token: Optional[str] = Field(
        default=None,
        description="Token compartido que Asaas envía en el header asaas-access-token"
    )

    @field_validator('asaas_api_key', mode='before')
    @classmethod
    def _load_asaas_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Fallback a ASAAS_ACCESS_TOKEN (nombre legacy) si no está en settings."""
        if v:
            return v
        return os.getenv("ASAAS_ACCESS_TOKEN")

    @field_validator('asaas_env', mode='before')
    @classmethod
    def _normalize_asaas_env(cls, v: Optional[str]) -> str:
        """Acepta 'prod'/'live' como alias de production."""
        if not v:
            return "sandbox"
        value = str(v).strip().lower()
        if value in {"prod", "live", "production"}:
            return "production"
        return "sandbox"

    # =========================================================================
    # SPLIT / COBRO
    # =========================================================================

    payments_split_percent: Decimal = Field(
        default=Decimal("0"),
        description="Porcentaje del cobro enviado a la wallet de la franqueadora"
    )

    payments_default_billing_type: Literal["PIX", "BOLETO", "CREDIT_CARD", "UNDEFINED"] = Field(
        default="PIX",
        description="Método de cobro usado cuando el paquete no indica uno"
    )

    @property
    def asaas_base_url(self) -> str:
        return ASAAS_PRODUCTION_URL if self.asaas_env == "production" else ASAAS_SANDBOX_URL

    @property
    def asaas_invoice_base_url(self) -> str:
        return (
            ASAAS_PRODUCTION_INVOICE_URL
            if self.asaas_env == "production"
            else ASAAS_SANDBOX_INVOICE_URL
        )

    # =========================================================================
    # CONFIGURACIÓN DE PYDANTIC
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton global
_payments_settings: Optional[PaymentsSettings] = None


def get_payments_settings() -> PaymentsSettings:
    """
    Obtiene la instancia global de configuración de pagos.

    Returns:
        PaymentsSettings: Configuración de pagos
    """
    global _payments_settings
    if _payments_settings is None:
        _payments_settings = PaymentsSettings()
    return _payments_settings


__all__ = [
    "PaymentsSettings",
    "get_payments_settings",
    "ASAAS_SANDBOX_URL",
    "ASAAS_PRODUCTION_URL",
]
# Fin del archivo backend/app/shared/config/settings_payments.py
