# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/payment_intent_service.py

Servicio de PaymentIntent: checkout de paquetes y conciliación de webhooks.

Flujo de compra:
1) Cliente del proveedor (cacheado en payment_customers)
2) Cobro en el proveedor con split hacia la wallet de la franqueadora
3) URL de checkout: respuesta -> link -> fetch del cobro -> URL convencional
4) PaymentIntent PENDING persistido

Flujo de webhook:
- PENDING -> PAID una sola vez (UPDATE condicional + rowcount)
- Solo esa transición acredita el paquete en el ledger

El servicio solo hace flush; commit y despacho de eventos son del llamador.

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.ledger.enums import TxSource
from app.modules.ledger.services import (
    BalanceScope,
    LedgerResult,
    ProfessorHourService,
    ScopeResolver,
    StudentBalanceService,
    get_professor_hour_service,
    get_student_balance_service,
)
from app.modules.notifications import events as ev
from app.modules.notifications.events import LedgerEvent, LedgerEventType
from app.modules.tenants.repositories import FranqueadoraRepository
from app.shared.config.settings_payments import PaymentsSettings, get_payments_settings
from ..enums import PaymentIntentStatus, PaymentIntentType, WebhookOutcomeStatus
from ..errors import (
    BusinessRuleError,
    CheckoutUnavailable,
    ExternalProviderError,
    InvalidState,
    PaymentIntentNotFound,
    ProviderError,
    Unauthorized,
)
from ..metrics import PAYMENTS_CREDIT_APPLIED_TOTAL, PAYMENTS_WEBHOOK_OUTCOME_TOTAL
from ..models import PaymentIntent
from ..providers import PaymentProvider, ProviderPayment, SplitRule, get_payment_provider
from ..repositories import PaymentCustomerRepository, PaymentIntentRepository
from ..schemas import PaymentActor

logger = logging.getLogger(__name__)

# Estado crudo del proveedor -> estado canónico
_RAW_STATUS_MAP = {
    "CONFIRMED": PaymentIntentStatus.PAID,
    "RECEIVED": PaymentIntentStatus.PAID,
    "RECEIVED_IN_CASH": PaymentIntentStatus.PAID,
    "PAID": PaymentIntentStatus.PAID,
    "FAILED": PaymentIntentStatus.FAILED,
    "OVERDUE": PaymentIntentStatus.FAILED,
    "CANCELED": PaymentIntentStatus.CANCELED,
    "CANCELLED": PaymentIntentStatus.CANCELED,
    "DELETED": PaymentIntentStatus.CANCELED,
    "REFUNDED": PaymentIntentStatus.CANCELED,
}

_QTY_KEY = {
    PaymentIntentType.STUDENT_PACKAGE: "classes_qty",
    PaymentIntentType.PROF_HOURS: "hours_qty",
}

_QTY_UNIT = {
    PaymentIntentType.STUDENT_PACKAGE: "aulas",
    PaymentIntentType.PROF_HOURS: "horas",
}


def map_provider_status(raw_status: Optional[str]) -> PaymentIntentStatus:
    """Normaliza el estado del proveedor; lo desconocido queda PENDING."""
    return _RAW_STATUS_MAP.get(str(raw_status or "").strip().upper(), PaymentIntentStatus.PENDING)


def _is_refund(raw_status: Optional[str], event: Optional[str]) -> bool:
    return str(raw_status or "").upper() == "REFUNDED" or str(event or "").upper() == "PAYMENT_REFUNDED"


@dataclass
class WebhookOutcome:
    status: WebhookOutcomeStatus
    intent_id: Optional[str] = None
    new_status: Optional[PaymentIntentStatus] = None
    credited: bool = False
    events: List[LedgerEvent] = field(default_factory=list)


class PaymentIntentService:
    def __init__(
        self,
        provider: Optional[PaymentProvider] = None,
        intents: Optional[PaymentIntentRepository] = None,
        customers: Optional[PaymentCustomerRepository] = None,
        student_service: Optional[StudentBalanceService] = None,
        hour_service: Optional[ProfessorHourService] = None,
        tenants: Optional[FranqueadoraRepository] = None,
        scopes: Optional[ScopeResolver] = None,
        payments_settings: Optional[PaymentsSettings] = None,
    ):
        self._provider = provider
        self.intents = intents or PaymentIntentRepository()
        self.customers = customers or PaymentCustomerRepository()
        self.student_service = student_service or get_student_balance_service()
        self.hour_service = hour_service or get_professor_hour_service()
        self.tenants = tenants or FranqueadoraRepository()
        self.scopes = scopes or ScopeResolver(self.tenants)
        self._settings = payments_settings

    @property
    def provider(self) -> PaymentProvider:
        return self._provider or get_payment_provider()

    @property
    def settings(self) -> PaymentsSettings:
        return self._settings or get_payments_settings()

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    async def create_payment_intent(
        self,
        session: AsyncSession,
        type: PaymentIntentType,
        actor: PaymentActor,
        scope: BalanceScope,
        amount: Decimal,
        metadata: Dict[str, Any],
    ) -> PaymentIntent:
        """
        Crea el cobro en el proveedor y persiste el PaymentIntent PENDING.

        Raises:
            BusinessRuleError: falta CPF/CNPJ del actor
            ConfigurationError: proveedor sin credenciales
            ExternalProviderError: otro fallo del proveedor
            CheckoutUnavailable: pagos deshabilitados o sin URL de checkout
        """
        if not self.settings.payments_enabled:
            raise CheckoutUnavailable("Payments are disabled")

        qty = int(metadata.get(_QTY_KEY[type]) or 0)
        if qty <= 0:
            raise ValueError(f"{_QTY_KEY[type]} must be positive")
        amount = Decimal(amount)
        if amount <= 0:
            raise ValueError("amount must be positive")

        resolved = await self.scopes.resolve(session, scope)
        tenant = await self.tenants.get_active(session, resolved.franqueadora_id)

        # a) cliente del proveedor
        customer_id = await self._resolve_customer(session, actor)

        # b) cobro con split
        intent_id = str(uuid4())
        billing_type = metadata.get("billing_type") or self.settings.payments_default_billing_type
        package_title = metadata.get("package_title") or "Pacote"
        external_reference = f"{type.value}_{intent_id}_{int(time.time())}"
        split = self._build_split(tenant.asaas_wallet_id if tenant else None)

        payment = await self._call_provider(
            "create_payment",
            customer_id=customer_id,
            billing_type=billing_type,
            value=amount,
            due_date=date.today() + timedelta(days=1),
            description=f"{package_title} - {qty} {_QTY_UNIT[type]}",
            external_reference=external_reference,
            split=split or None,
        )

        # c) URL de checkout
        checkout_url = await self._resolve_checkout_url(payment)

        # d) persistencia
        now = datetime.now(timezone.utc).isoformat()
        intent = PaymentIntent(
            id=intent_id,
            type=type,
            provider=getattr(self.provider, "name", "asaas"),
            provider_id=payment.id,
            amount=amount,
            status=PaymentIntentStatus.PENDING,
            checkout_url=checkout_url,
            metadata_json={
                **metadata,
                "billing_type": billing_type,
                "package_title": package_title,
                "external_reference": external_reference,
                "status_history": [{"status": "PENDING", "reason": "created", "at": now}],
            },
            actor_user_id=actor.id,
            franqueadora_id=resolved.franqueadora_id,
            unit_id=resolved.unit_id,
        )
        session.add(intent)
        try:
            await session.flush()
        except SQLAlchemyError:
            logger.error(
                "Charge created at provider but intent was not persisted: provider_id=%s intent=%s",
                payment.id, intent_id,
                exc_info=True,
            )
            raise

        logger.info(
            "Payment intent created: id=%s type=%s actor=%s provider_id=%s amount=%s",
            intent_id, type.value, actor.id, payment.id, amount,
        )
        return intent

    async def _resolve_customer(self, session: AsyncSession, actor: PaymentActor) -> str:
        provider_name = getattr(self.provider, "name", "asaas")
        cached = await self.customers.get_customer_id(session, actor.id, provider_name)
        if cached:
            return cached

        if not actor.tax_id:
            raise BusinessRuleError("CPF/CNPJ is required to create a payment customer")

        customer = await self._call_provider(
            "create_customer",
            name=actor.name,
            email=actor.email,
            tax_id=actor.tax_id,
            phone=actor.phone,
        )
        await self.customers.save(session, actor.id, customer.id, provider_name)
        return customer.id

    def _build_split(self, wallet_id: Optional[str]) -> List[SplitRule]:
        percent = Decimal(self.settings.payments_split_percent or 0)
        if not wallet_id or percent <= 0:
            return []
        return [SplitRule(wallet_id=wallet_id, percentual_value=percent)]

    async def _call_provider(self, method: str, **kwargs: Any) -> Any:
        try:
            return await getattr(self.provider, method)(**kwargs)
        except ProviderError:
            raise
        except Exception as exc:
            raise ExternalProviderError(f"Provider call {method} failed: {exc}") from exc

    async def _resolve_checkout_url(self, payment: ProviderPayment) -> str:
        if payment.checkout_url:
            return payment.checkout_url

        try:
            link = await self.provider.generate_payment_link(payment.id)
            url = link.payment_url or link.bank_slip_url
            if url:
                return url
        except ProviderError as exc:
            logger.warning("Payment link generation failed for %s: %s", payment.id, exc)

        try:
            fetched = await self.provider.get_payment(payment.id)
            if fetched.checkout_url:
                return fetched.checkout_url
        except ProviderError as exc:
            logger.warning("Payment fetch failed for %s: %s", payment.id, exc)

        if payment.id:
            fallback = f"{self.settings.asaas_invoice_base_url}/i/{payment.id.removeprefix('pay_')}"
            logger.warning("Using conventional invoice URL for %s: %s", payment.id, fallback)
            return fallback

        raise CheckoutUnavailable("Could not resolve a checkout URL for the charge")

    # ------------------------------------------------------------------
    # Webhook
    # ------------------------------------------------------------------

    async def process_webhook(
        self,
        session: AsyncSession,
        provider_id: Optional[str],
        raw_status: Optional[str],
        *,
        event: Optional[str] = None,
    ) -> WebhookOutcome:
        """
        Aplica un evento del proveedor al PaymentIntent.

        Idempotente: un intent PAID no se toca y solo la transición que
        afecta una fila hacia PAID acredita el paquete.
        """
        try:
            outcome = await self._process_webhook(session, provider_id, raw_status, event)
        except Exception:
            PAYMENTS_WEBHOOK_OUTCOME_TOTAL.labels(outcome="error").inc()
            logger.error(
                "Webhook processing failed: provider_id=%s raw_status=%s",
                provider_id, raw_status,
                exc_info=True,
            )
            raise
        PAYMENTS_WEBHOOK_OUTCOME_TOTAL.labels(outcome=outcome.status.value).inc()
        return outcome

    async def _process_webhook(
        self,
        session: AsyncSession,
        provider_id: Optional[str],
        raw_status: Optional[str],
        event: Optional[str] = None,
    ) -> WebhookOutcome:
        intent = await self.intents.get_by_provider_id(session, provider_id) if provider_id else None
        if intent is None:
            logger.warning("Webhook for unknown provider_id=%s ignored", provider_id)
            return WebhookOutcome(WebhookOutcomeStatus.IGNORED)

        if intent.status == PaymentIntentStatus.PAID:
            logger.info("Payment intent %s already PAID, webhook ignored", intent.id)
            return WebhookOutcome(WebhookOutcomeStatus.DUPLICATE, intent.id, PaymentIntentStatus.PAID)

        new_status = map_provider_status(raw_status)
        affected = await self.intents.transition_status(session, intent.id, new_status)
        if affected != 1:
            logger.info(
                "Payment intent %s transition to %s lost (already PAID)", intent.id, new_status.value
            )
            return WebhookOutcome(WebhookOutcomeStatus.DUPLICATE, intent.id, PaymentIntentStatus.PAID)

        self._record_status(intent, new_status, raw_status)
        await session.flush()

        outcome = WebhookOutcome(WebhookOutcomeStatus.OK, intent.id, new_status)
        if new_status == PaymentIntentStatus.PAID:
            result = await self.credit_package(session, intent)
            outcome.credited = True
            outcome.events.extend(result.events)
            outcome.events.append(self._payment_event(LedgerEventType.PAYMENT_CONFIRMED, intent))
        elif new_status == PaymentIntentStatus.FAILED:
            outcome.events.append(
                self._payment_event(LedgerEventType.PAYMENT_FAILED, intent, raw_status=raw_status)
            )
        elif new_status == PaymentIntentStatus.CANCELED and _is_refund(raw_status, event):
            outcome.events.append(self._payment_event(LedgerEventType.PAYMENT_REFUNDED, intent))

        logger.info(
            "Webhook applied: intent=%s provider_id=%s raw=%s -> %s credited=%s",
            intent.id, provider_id, raw_status, new_status.value, outcome.credited,
        )
        return outcome

    async def credit_package(self, session: AsyncSession, intent: PaymentIntent) -> LedgerResult:
        """Acredita el paquete del intent en el ledger del comprador."""
        metadata = intent.metadata_json or {}
        scope = BalanceScope(franqueadora_id=intent.franqueadora_id, unit_id=intent.unit_id)
        meta = {
            "payment_intent_id": intent.id,
            "provider_id": intent.provider_id,
            "package_title": metadata.get("package_title"),
        }

        if intent.type == PaymentIntentType.STUDENT_PACKAGE:
            result = await self.student_service.purchase(
                session, intent.actor_user_id, scope, int(metadata["classes_qty"]),
                source=TxSource.ALUNO, meta=meta,
            )
        elif intent.type == PaymentIntentType.PROF_HOURS:
            result = await self.hour_service.purchase(
                session, intent.actor_user_id, scope, int(metadata["hours_qty"]),
                source=TxSource.PROFESSOR, meta=meta,
            )
        else:
            raise InvalidState(f"Unsupported payment intent type {intent.type!r}")

        PAYMENTS_CREDIT_APPLIED_TOTAL.labels(intent_type=intent.type.value).inc()
        logger.info(
            "Package credited: intent=%s type=%s user=%s", intent.id, intent.type.value, intent.actor_user_id
        )
        return result

    # ------------------------------------------------------------------
    # Cancelación y consultas
    # ------------------------------------------------------------------

    async def cancel_payment_intent(
        self,
        session: AsyncSession,
        intent_id: str,
        requester_id: str,
    ) -> PaymentIntent:
        """
        Cancela un intent PENDING del propio usuario.

        El cambio de estado es un UPDATE condicional sobre PENDING: si un
        webhook confirmó el pago en medio, se lanza InvalidState y no se
        cancela en el proveedor. La cancelación local procede aunque falle
        la del proveedor.
        """
        intent = await self.intents.get(session, intent_id)
        if intent is None:
            raise PaymentIntentNotFound(intent_id)
        if intent.actor_user_id != requester_id:
            raise Unauthorized("Only the owner can cancel this payment intent")
        if intent.status != PaymentIntentStatus.PENDING:
            raise InvalidState(f"Payment intent is {intent.status.value}, only PENDING can be canceled")

        updated = await self.intents.cancel_if_pending(session, intent_id)
        await session.refresh(intent)
        if updated == 0:
            logger.warning(
                "Payment intent %s changed to %s before cancel, keeping it",
                intent_id, intent.status.value,
            )
            raise InvalidState(f"Payment intent is {intent.status.value}, only PENDING can be canceled")

        if intent.provider_id:
            try:
                await self.provider.cancel_payment(intent.provider_id)
            except Exception:
                logger.warning(
                    "Provider cancel failed for %s (canceling locally anyway)",
                    intent.provider_id,
                    exc_info=True,
                )

        self._record_status(intent, PaymentIntentStatus.CANCELED, "canceled_by_user")
        await session.flush()
        logger.info("Payment intent %s canceled by %s", intent_id, requester_id)
        return intent

    async def get_payment_intent(self, session: AsyncSession, intent_id: str) -> Optional[PaymentIntent]:
        return await self.intents.get(session, intent_id)

    async def list_intents_by_user(
        self,
        session: AsyncSession,
        user_id: str,
        status: Optional[PaymentIntentStatus] = None,
    ) -> Sequence[PaymentIntent]:
        return await self.intents.list_by_actor(session, user_id, status)

    async def list_intents_by_unit(
        self,
        session: AsyncSession,
        unit_id: str,
        status: Optional[PaymentIntentStatus] = None,
    ) -> Sequence[PaymentIntent]:
        return await self.intents.list_by_unit(session, unit_id, status)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    @staticmethod
    def _record_status(intent: PaymentIntent, status: PaymentIntentStatus, reason: Optional[str]) -> None:
        metadata = dict(intent.metadata_json or {})
        history = list(metadata.get("status_history") or [])
        history.append({
            "status": status.value,
            "reason": reason,
            "at": datetime.now(timezone.utc).isoformat(),
        })
        metadata["status_history"] = history
        intent.status = status
        intent.metadata_json = metadata

    @staticmethod
    def _payment_event(event_type: LedgerEventType, intent: PaymentIntent, **extra: Any) -> LedgerEvent:
        return ev.payment_event(
            event_type,
            intent.actor_user_id,
            intent.id,
            str(intent.amount),
            intent_type=intent.type.value,
            **extra,
        )


# Singleton global
_service: Optional[PaymentIntentService] = None


def get_payment_intent_service() -> PaymentIntentService:
    global _service
    if _service is None:
        _service = PaymentIntentService()
    return _service


__all__ = [
    "PaymentIntentService",
    "WebhookOutcome",
    "map_provider_status",
    "get_payment_intent_service",
]
