"""
Payment service for SkillVerse
Paid enrollment through Stripe hosted Checkout
"""

import logging
from typing import Any, Dict, Optional

import stripe
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from skillverse.core.exceptions import (
    AuthorizationException,
    DuplicateException,
    ExternalServiceException,
    InvalidOperationException,
    PaymentIncompleteException,
)
from skillverse.core.logging import LoggerFactory
from skillverse.models import Course, Enrollment, User
from skillverse.services.courses import CourseService
from skillverse.services.enrollment import EnrollmentService

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()


class StripePaymentGateway:
    """Thin wrapper over Stripe Checkout sessions"""

    def __init__(self, api_key: Optional[str], currency: str = "inr"):
        self.api_key = api_key
        self.currency = currency
        if not api_key:
            logger.warning("Stripe not configured - missing secret key")

    def _require_key(self) -> str:
        if not self.api_key:
            raise ExternalServiceException("Stripe", "Payments are not configured")
        return self.api_key

    def create_session(
        self,
        line_item: Dict[str, Any],
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        customer_email: Optional[str] = None,
    ) -> str:
        """Create a checkout session and return its redirect URL"""
        api_key = self._require_key()
        try:
            session = stripe.checkout.Session.create(
                api_key=api_key,
                payment_method_types=["card"],
                mode="payment",
                customer_email=customer_email,
                line_items=[line_item],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe session creation error: {e}")
            raise ExternalServiceException("Stripe", "Could not create checkout session")
        return session.url

    def get_session(self, session_id: str) -> Dict[str, Any]:
        """Fetch ``{"payment_status", "metadata"}`` for a checkout session"""
        api_key = self._require_key()
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=api_key)
        except stripe.InvalidRequestError as e:
            logger.warning(f"Unknown checkout session {session_id}: {e}")
            raise PaymentIncompleteException("Checkout session not found")
        except stripe.StripeError as e:
            logger.error(f"Stripe session verification error: {e}")
            raise ExternalServiceException("Stripe", "Could not verify payment")

        metadata = getattr(session, "metadata", None)
        return {
            "payment_status": getattr(session, "payment_status", None),
            "metadata": {
                key: getattr(metadata, key, None) for key in ("userId", "courseId")
            }
            if metadata
            else {},
        }


class PaymentService:
    """Checkout creation and verification"""

    @staticmethod
    async def create_checkout_session(
        db: Session, gateway: StripePaymentGateway, user: User, course_id: int, client_url: str
    ) -> str:
        """
        Start a hosted checkout for a paid course

        Raises:
            NotFoundException: If the course does not exist
            InvalidOperationException: If the caller created the course or it is free
            DuplicateException: If the caller is already enrolled
        """
        course = CourseService.get_course_or_404(db, course_id)

        if course.creator_id == user.id:
            raise InvalidOperationException("You can't purchase your own course")
        if not course.is_paid:
            raise InvalidOperationException("This course is free, enroll directly")
        if EnrollmentService.get_enrollment(db, user.id, course.id) is not None:
            raise DuplicateException("Already enrolled in this course")

        line_item = {
            "price_data": {
                "currency": gateway.currency,
                "product_data": {"name": course.title, "description": course.description},
                "unit_amount": int(round(course.price * 100)),
            },
            "quantity": 1,
        }

        url = await run_in_threadpool(
            gateway.create_session,
            line_item,
            f"{client_url}/success?session_id={{CHECKOUT_SESSION_ID}}&courseId={course.id}",
            f"{client_url}/courses/{course.id}",
            {"userId": str(user.id), "courseId": str(course.id)},
            user.email,
        )

        logger.info(f"Checkout session created for user {user.id} on course {course.id}")
        return url

    @staticmethod
    async def verify_and_enroll(
        db: Session, gateway: StripePaymentGateway, session_id: str, course_id: int, user: User
    ) -> dict:
        """
        Confirm a paid checkout session and enroll the buyer

        The enrollment insert and the earnings increment share one
        transaction; the unique (user, course) constraint lets exactly one
        verification credit the creator.

        Raises:
            PaymentIncompleteException: If the session is not paid
            AuthorizationException: If the session belongs to another user or course
        """
        course = CourseService.get_course_or_404(db, course_id)
        if course.creator_id == user.id:
            raise InvalidOperationException("You can't purchase your own course")

        session = await run_in_threadpool(gateway.get_session, session_id)
        if session.get("payment_status") != "paid":
            raise PaymentIncompleteException("Payment not completed yet")

        metadata = session.get("metadata") or {}
        if metadata.get("userId") not in (None, str(user.id)) or metadata.get(
            "courseId"
        ) not in (None, str(course.id)):
            raise AuthorizationException("Checkout session does not match this purchase")

        result = {"course_id": course.id, "enrolled": True}

        if EnrollmentService.get_enrollment(db, user.id, course.id) is not None:
            return {**result, "message": "Payment already processed.", "already_processed": True}

        try:
            db.add(
                Enrollment(user_id=user.id, course_id=course.id, checkout_session_id=session_id)
            )
            db.flush()
            db.query(Course).filter(Course.id == course.id).update(
                {Course.earnings: Course.earnings + Course.price}, synchronize_session=False
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"Checkout session {session_id} was verified concurrently")
            return {**result, "message": "Payment already processed.", "already_processed": True}

        db.refresh(course)
        audit_logger.info(
            "Paid enrollment",
            extra={
                "user_id": user.id,
                "course_id": course.id,
                "session_id": session_id,
                "amount": course.price,
                "earnings": course.earnings,
            },
        )
        return {
            **result,
            "message": "Payment verified and enrollment successful.",
            "already_processed": False,
        }
