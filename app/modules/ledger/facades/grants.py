# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/facades/grants.py

Fachada de grant manual de créditos/horas por un administrador.

Orquesta:
- Validación de la solicitud (cantidad, confirmación, rol del destinatario)
- Grant en el ledger (StudentBalanceService / ProfessorHourService)
- Fila de auditoría CreditGrant con el id del movimiento
- Commit y despacho de eventos

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.notifications.dispatcher import LedgerEventDispatcher, get_event_dispatcher
from ..enums import CreditType
from ..errors import GrantValidationError
from ..models import CreditGrant
from ..schemas import AdminContext, CreditGrantCreate, GrantRequest
from ..services import (
    BalanceScope,
    CreditGrantService,
    LedgerResult,
    ProfessorHourService,
    StudentBalanceService,
    get_credit_grant_service,
    get_professor_hour_service,
    get_student_balance_service,
)

logger = logging.getLogger(__name__)

HIGH_QUANTITY_THRESHOLD = 100

STUDENT_ROLES = frozenset({"STUDENT", "ALUNO"})
TEACHER_ROLES = frozenset({"TEACHER", "PROFESSOR"})


@dataclass
class GrantOutcome:
    grant: CreditGrant
    result: LedgerResult


def validate_grant_request(request: GrantRequest) -> None:
    """
    Raises:
        GrantValidationError: con code INVALID_QUANTITY,
            HIGH_QUANTITY_NOT_CONFIRMED o INVALID_CREDIT_TYPE
    """
    if request.quantity <= 0:
        raise GrantValidationError("INVALID_QUANTITY", "Quantity must be greater than zero")

    if request.quantity > HIGH_QUANTITY_THRESHOLD and not request.confirm_high_quantity:
        raise GrantValidationError(
            "HIGH_QUANTITY_NOT_CONFIRMED",
            f"Granting more than {HIGH_QUANTITY_THRESHOLD} credits requires explicit confirmation",
        )

    role = (request.recipient.role or "").upper()
    if request.credit_type == CreditType.STUDENT_CLASS and role not in STUDENT_ROLES:
        raise GrantValidationError(
            "INVALID_CREDIT_TYPE", "STUDENT_CLASS credits can only be granted to students"
        )
    if request.credit_type == CreditType.PROFESSOR_HOUR and role not in TEACHER_ROLES:
        raise GrantValidationError(
            "INVALID_CREDIT_TYPE", "PROFESSOR_HOUR credits can only be granted to teachers"
        )


async def grant_credits(
    session: AsyncSession,
    request: GrantRequest,
    admin: AdminContext,
    *,
    student_service: Optional[StudentBalanceService] = None,
    hour_service: Optional[ProfessorHourService] = None,
    grant_service: Optional[CreditGrantService] = None,
    dispatcher: Optional[LedgerEventDispatcher] = None,
) -> GrantOutcome:
    """
    Aplica un grant manual y registra su auditoría en la misma transacción.
    """
    # 1) Validaciones de negocio
    validate_grant_request(request)

    student_service = student_service or get_student_balance_service()
    hour_service = hour_service or get_professor_hour_service()
    grant_service = grant_service or get_credit_grant_service()
    dispatcher = dispatcher or get_event_dispatcher()

    scope = BalanceScope(franqueadora_id=request.franqueadora_id, unit_id=request.unit_id)
    recipient = request.recipient

    try:
        # 2) Grant en el ledger
        if request.credit_type == CreditType.STUDENT_CLASS:
            result = await student_service.grant(
                session, recipient.id, scope, request.quantity, admin.id, request.reason
            )
        else:
            result = await hour_service.grant(
                session, recipient.id, scope, request.quantity, admin.id, request.reason
            )

        # 3) Auditoría (scope efectivo del saldo, tras un posible fallback)
        grant = await grant_service.append(
            session,
            CreditGrantCreate(
                recipient_id=recipient.id,
                recipient_email=recipient.email,
                recipient_name=recipient.name or recipient.email,
                credit_type=request.credit_type,
                quantity=request.quantity,
                reason=request.reason,
                granted_by_id=admin.id,
                granted_by_email=admin.email,
                franqueadora_id=result.balance.franqueadora_id,
                franchise_id=request.franchise_id,
                transaction_id=result.transaction.id,
            ),
        )
        await session.commit()
    except Exception:
        await session.rollback()
        logger.error(
            "Manual grant failed: recipient=%s type=%s qty=%d admin=%s",
            recipient.id, request.credit_type.value, request.quantity, admin.email,
            exc_info=True,
        )
        raise

    # 4) Eventos después del commit
    await dispatcher.dispatch(result.events)
    return GrantOutcome(grant=grant, result=result)


__all__ = ["grant_credits", "validate_grant_request", "GrantOutcome"]

# Fin del archivo backend/app/modules/ledger/facades/grants.py
