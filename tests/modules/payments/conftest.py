# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/conftest.py

Fixtures de pagos: proveedor fake en memoria, settings aislados y
servicio de PaymentIntent cableado con servicios del ledger reales.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from app.modules.ledger.services import BalanceScope, ProfessorHourService, StudentBalanceService
from app.modules.payments.enums import PaymentIntentType
from app.modules.payments.providers import (
    AsaasProvider,
    PaymentLink,
    ProviderCustomer,
    ProviderPayment,
)
from app.modules.payments.schemas import PaymentActor
from app.modules.payments.services import PaymentIntentService
from app.shared.config.settings_payments import PaymentsSettings


class FakeProvider:
    """PaymentProvider en memoria que registra cada llamada."""

    name = "asaas"

    def __init__(self):
        self.calls: List[tuple] = []
        self.checkout_url: Optional[str] = "https://sandbox.asaas.com/i/abc"
        self.link: Optional[PaymentLink] = None
        self.link_error: Optional[Exception] = None
        self.fetched_url: Optional[str] = None
        self.create_payment_error: Optional[Exception] = None
        self.cancel_error: Optional[Exception] = None
        self._seq = 0
        self._parser = AsaasProvider(api_key=None, base_url="http://asaas.invalid")

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def last(self, method: str) -> Dict[str, Any]:
        return [kwargs for name, kwargs in self.calls if name == method][-1]

    async def create_customer(self, name, email, tax_id, phone=None):
        self.calls.append(("create_customer", {"name": name, "email": email, "tax_id": tax_id, "phone": phone}))
        return ProviderCustomer(id=f"cus_{len(self.calls)}")

    async def create_payment(self, customer_id, billing_type, value, due_date, description,
                             external_reference=None, split=None):
        self.calls.append(("create_payment", {
            "customer_id": customer_id, "billing_type": billing_type, "value": value,
            "due_date": due_date, "description": description,
            "external_reference": external_reference, "split": split,
        }))
        if self.create_payment_error is not None:
            raise self.create_payment_error
        self._seq += 1
        return ProviderPayment(id=f"pay_{self._seq:04d}", checkout_url=self.checkout_url, status="PENDING")

    async def generate_payment_link(self, payment_id):
        self.calls.append(("generate_payment_link", {"payment_id": payment_id}))
        if self.link_error is not None:
            raise self.link_error
        return self.link or PaymentLink()

    async def get_payment(self, payment_id):
        self.calls.append(("get_payment", {"payment_id": payment_id}))
        return ProviderPayment(id=payment_id, checkout_url=self.fetched_url, status="PENDING")

    async def cancel_payment(self, payment_id):
        self.calls.append(("cancel_payment", {"payment_id": payment_id}))
        if self.cancel_error is not None:
            raise self.cancel_error

    def parse_webhook(self, raw_event):
        return self._parser.parse_webhook(raw_event)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def payments_settings():
    return PaymentsSettings(_env_file=None, payments_split_percent=Decimal("10"))


@pytest.fixture
def payment_service(provider, payments_settings):
    return PaymentIntentService(
        provider=provider,
        student_service=StudentBalanceService(),
        hour_service=ProfessorHourService(),
        payments_settings=payments_settings,
    )


@pytest.fixture
def student_actor():
    return PaymentActor(id="student-1", name="Ana", email="ana@example.com", tax_id="12345678909", phone="11999990000")


@pytest.fixture
def create_intent(db_session, payment_service, student_actor, tenants):
    """Crea un intent PENDING de paquete de alumno (o de horas de profesor)."""

    async def _create(
        type: PaymentIntentType = PaymentIntentType.STUDENT_PACKAGE,
        actor: Optional[PaymentActor] = None,
        qty: int = 4,
        amount: Decimal = Decimal("199.90"),
    ):
        key = "classes_qty" if type == PaymentIntentType.STUDENT_PACKAGE else "hours_qty"
        return await payment_service.create_payment_intent(
            db_session,
            type,
            actor or student_actor,
            BalanceScope(franqueadora_id=tenants["principal"]),
            amount,
            {key: qty, "package_title": "Pacote Basico"},
        )

    return _create
