"""
Payment endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from skillverse.api.deps import get_payment_gateway
from skillverse.core.config import settings
from skillverse.core.database import get_db
from skillverse.core.security import get_current_user
from skillverse.models import User
from skillverse.schemas.payments import CheckoutRequest, CheckoutResponse, VerifyPaymentResponse
from skillverse.services.payments import PaymentService, StripePaymentGateway

router = APIRouter()


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    data: CheckoutRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
):
    """Start a hosted checkout for a paid course"""
    url = await PaymentService.create_checkout_session(
        db, gateway, current_user, data.course_id, settings.CLIENT_URL
    )
    return {"url": url}


@router.get("/verify/{session_id}", response_model=VerifyPaymentResponse)
async def verify_session(
    session_id: str,
    course_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
):
    """Verify a completed checkout and enroll the buyer"""
    return await PaymentService.verify_and_enroll(db, gateway, session_id, course_id, current_user)


@router.post("/verify-session/{session_id}", response_model=VerifyPaymentResponse)
async def verify_session_post(
    session_id: str,
    course_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
):
    return await PaymentService.verify_and_enroll(db, gateway, session_id, course_id, current_user)
