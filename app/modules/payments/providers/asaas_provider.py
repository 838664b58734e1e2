# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/providers/asaas_provider.py

Implementación de PaymentProvider sobre la API v3 de Asaas (httpx).

Notas:
- Autenticación por header `access_token`.
- Base URL según ASAAS_ENV (sandbox | production).
- Un 400 cuyos errores mencionan CPF/CNPJ se traduce a BusinessRuleError;
  cualquier otro non-2xx o error de transporte a ExternalProviderError.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import httpx

from ..errors import BusinessRuleError, ConfigurationError, ExternalProviderError
from .base import ParsedWebhook, PaymentLink, ProviderCustomer, ProviderPayment, SplitRule

if TYPE_CHECKING:
    from app.shared.config.settings_payments import PaymentsSettings

logger = logging.getLogger(__name__)

# Evento Asaas -> estado canónico
WEBHOOK_EVENT_STATUS = {
    "PAYMENT_CONFIRMED": "PAID",
    "PAYMENT_RECEIVED": "PAID",
    "PAYMENT_OVERDUE": "FAILED",
    "PAYMENT_DELETED": "CANCELED",
    "PAYMENT_REFUNDED": "CANCELED",
}

_IDENTITY_MARKERS = ("cpf", "cnpj", "identidade", "document")


def _mentions_identity(errors: List[Dict[str, Any]]) -> bool:
    for err in errors:
        text = f"{err.get('code', '')} {err.get('description', '')}".lower()
        if any(marker in text for marker in _IDENTITY_MARKERS):
            return True
    return False


def _money(value: Decimal) -> float:
    # Asaas espera número JSON con 2 decimales
    return float(Decimal(value).quantize(Decimal("0.01")))


class AsaasProvider:
    """Cliente async de Asaas."""

    name = "asaas"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 15.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: "PaymentsSettings",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsaasProvider":
        logger.info("[Asaas] config: env=%s timeout=%ss", settings.asaas_env, settings.asaas_timeout_seconds)
        return cls(
            api_key=settings.asaas_api_key,
            base_url=settings.asaas_base_url,
            timeout=settings.asaas_timeout_seconds,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("ASAAS_API_KEY is not configured")

        headers = {"access_token": self.api_key, "Content-Type": "application/json"}
        try:
            response = await self._get_client().request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("[Asaas] transport error on %s %s: %s", method, path, exc)
            raise ExternalProviderError(f"Asaas request failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            errors = (body.get("errors") or []) if isinstance(body, dict) else []
            logger.warning(
                "[Asaas] %s %s -> %d errors=%s", method, path, response.status_code, errors
            )
            if response.status_code == 400 and _mentions_identity(errors):
                raise BusinessRuleError(
                    "Customer identity data (CPF/CNPJ) is missing or invalid",
                    details=errors,
                )
            raise ExternalProviderError(
                f"Asaas returned HTTP {response.status_code}",
                details=errors or None,
            )

        if not response.content:
            return {}
        return response.json()

    # ------------------------------------------------------------------
    # PaymentProvider
    # ------------------------------------------------------------------

    async def create_customer(
        self,
        name: str,
        email: str,
        tax_id: Optional[str],
        phone: Optional[str] = None,
    ) -> ProviderCustomer:
        if not tax_id:
            raise BusinessRuleError("CPF/CNPJ is required to create a payment customer")

        payload: Dict[str, Any] = {"name": name, "email": email, "cpfCnpj": tax_id}
        if phone:
            payload["mobilePhone"] = phone

        data = await self._request("POST", "/customers", json=payload)
        logger.info("[Asaas] customer created: %s", data.get("id"))
        return ProviderCustomer(id=data["id"])

    async def create_payment(
        self,
        customer_id: str,
        billing_type: str,
        value: Decimal,
        due_date: date,
        description: str,
        external_reference: Optional[str] = None,
        split: Optional[List[SplitRule]] = None,
    ) -> ProviderPayment:
        payload: Dict[str, Any] = {
            "customer": customer_id,
            "billingType": billing_type,
            "value": _money(value),
            "dueDate": due_date.isoformat(),
            "description": description,
        }
        if external_reference:
            payload["externalReference"] = external_reference
        if split:
            rules = []
            for rule in split:
                item: Dict[str, Any] = {"walletId": rule.wallet_id}
                if rule.percentual_value is not None:
                    item["percentualValue"] = float(rule.percentual_value)
                if rule.fixed_value is not None:
                    item["fixedValue"] = _money(rule.fixed_value)
                rules.append(item)
            payload["split"] = rules

        data = await self._request("POST", "/payments", json=payload)
        logger.info(
            "[Asaas] payment created: id=%s ref=%s split=%d",
            data.get("id"), external_reference, len(split or []),
        )
        return self._to_payment(data)

    async def generate_payment_link(self, payment_id: str) -> PaymentLink:
        data = await self._request("GET", f"/payments/{payment_id}/billingInfo")
        pix = data.get("pix") or {}
        bank_slip = data.get("bankSlip") or {}
        credit_card = data.get("creditCard") or {}
        return PaymentLink(
            payment_url=credit_card.get("paymentUrl") or data.get("invoiceUrl"),
            bank_slip_url=bank_slip.get("bankSlipUrl"),
            pix_code=pix.get("payload"),
        )

    async def get_payment(self, payment_id: str) -> ProviderPayment:
        data = await self._request("GET", f"/payments/{payment_id}")
        return self._to_payment(data)

    async def cancel_payment(self, payment_id: str) -> None:
        await self._request("DELETE", f"/payments/{payment_id}")
        logger.info("[Asaas] payment canceled: %s", payment_id)

    def parse_webhook(self, raw_event: Dict[str, Any]) -> ParsedWebhook:
        event = str((raw_event or {}).get("event") or "")
        payment = (raw_event or {}).get("payment") or {}
        return ParsedWebhook(
            provider_id=payment.get("id"),
            status=WEBHOOK_EVENT_STATUS.get(event, "PENDING"),
            event=event or None,
        )

    @staticmethod
    def _to_payment(data: Dict[str, Any]) -> ProviderPayment:
        return ProviderPayment(
            id=data.get("id", ""),
            checkout_url=data.get("invoiceUrl") or data.get("bankSlipUrl"),
            status=data.get("status"),
            raw=data,
        )


__all__ = ["AsaasProvider", "WEBHOOK_EVENT_STATUS"]

# Fin del archivo backend/app/modules/payments/providers/asaas_provider.py
