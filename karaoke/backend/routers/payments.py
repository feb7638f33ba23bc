"""Payments router: plans, payment methods, FAQ, WhatsApp checkout."""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from karaoke.backend.dependencies import get_current_user
from karaoke.backend.schemas.auth import AuthUser
from karaoke.backend.schemas.common import ApiResponse
from karaoke.backend.schemas.payment import CheckoutRequest
from karaoke.backend.services import payment

router = APIRouter()


@router.get("/plans")
def list_plans():
    return ApiResponse(data=payment.get_plans())


@router.get("/methods")
def list_methods():
    return ApiResponse(data=payment.get_payment_methods())


@router.get("/faq")
def list_faq():
    return ApiResponse(data=payment.get_faq())


@router.get("/status")
def account_status():
    """Status card shown to a user without a subscription."""
    return ApiResponse(data=payment.get_free_account_status())


@router.post("/checkout")
def checkout(req: CheckoutRequest, user: AuthUser = Depends(get_current_user)):
    """Build the pre-filled WhatsApp chat the user continues in to pay."""
    plan = payment.get_plan(req.plan_id)
    if not plan:
        raise HTTPException(404, "Plan not found")
    logger.info(f"[payment] {user.email} requested plan {plan.id}")
    return ApiResponse(data=payment.checkout(plan, user))
