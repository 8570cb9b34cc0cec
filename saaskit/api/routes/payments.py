"""
Payments RPC procedures - pricing, membership status and payment history.

- GET /rpc/payments.getPlans?locale=en|de          (public)
- GET /rpc/payments.getMembershipStatus?locale=... (signed in)
- GET /rpc/payments.getPaymentHistory?limit=20     (signed in)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from saaskit.api.dependencies import get_current_user_id
from saaskit.database.models import Language, MembershipPlan
from saaskit.models.rpc import MembershipOut, MembershipStatusOut, PaymentOut, PlanOut
from saaskit.services.membership_service import MembershipService, get_membership_service

router = APIRouter(prefix="/rpc", tags=["RPC: payments"])

LOCALE_PATTERN = "^(en|de)$"


def _plan_out(plan: MembershipPlan, locale: str) -> PlanOut:
    german = locale == Language.DE.value
    return PlanOut(
        id=plan.id,
        name=plan.name_de if german and plan.name_de else plan.name,
        description=plan.description_de if german and plan.description_de else plan.description,
        price=plan.price,
        currency=plan.currency,
        duration_type=plan.duration_type,
        duration_days=plan.duration_days,
        features=plan.features or [],
        sort_order=plan.sort_order,
    )


@router.get("/payments.getPlans", response_model=List[PlanOut])
def get_plans(
    locale: str = Query(default="en", pattern=LOCALE_PATTERN),
    service: MembershipService = Depends(get_membership_service),
):
    """Active plans in display order, for the pricing page."""
    return [_plan_out(plan, locale) for plan in service.list_plans()]


@router.get("/payments.getMembershipStatus", response_model=MembershipStatusOut)
def get_membership_status(
    locale: str = Query(default="en", pattern=LOCALE_PATTERN),
    user_id: str = Depends(get_current_user_id),
    service: MembershipService = Depends(get_membership_service),
):
    """Whether the user has an active membership, and on which plan."""
    state = service.get_state(user_id)
    current_plan: Optional[PlanOut] = _plan_out(state.plan, locale) if state.plan else None
    membership = MembershipOut.model_validate(state.membership) if state.membership else None
    return MembershipStatusOut(
        has_active_membership=state.has_active_membership,
        current_plan=current_plan,
        membership=membership,
    )


@router.get("/payments.getPaymentHistory", response_model=List[PaymentOut])
def get_payment_history(
    limit: int = Query(default=20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    service: MembershipService = Depends(get_membership_service),
):
    return service.payment_history(user_id, limit=limit)
