"""Webhook endpoints for the payment provider."""
import hmac
import logging
from typing import Optional
from fastapi import APIRouter, Header, HTTPException
from app.core.config import settings
from app.core.errors import PersistenceError, ValidationError
from app.db.session import AsyncSessionLocal
from app.schemas.events import PaymentWebhookRequest
from app.services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def verify_webhook_secret(x_webhook_secret: Optional[str]) -> None:
    """Timing-safe shared-secret check."""
    expected = settings.WEBHOOK_SECRET
    if not expected or not x_webhook_secret:
        raise HTTPException(status_code=403, detail="forbidden")
    if not hmac.compare_digest(x_webhook_secret, expected):
        logger.warning("Payment webhook secret mismatch")
        raise HTTPException(status_code=403, detail="forbidden")


@router.post("/payment")
async def payment_webhook(
    body: PaymentWebhookRequest,
    x_webhook_secret: Optional[str] = Header(None),
):
    """Payment captured: confirm the booking it was for."""
    verify_webhook_secret(x_webhook_secret)

    booking_id = body.resolved_booking_id
    if not booking_id:
        raise ValidationError("missing_booking_id")

    async with AsyncSessionLocal() as session:
        confirmed = await BookingService(session).confirm_booking_paid(booking_id)

    if not confirmed:
        # Non-2xx makes the provider retry delivery
        raise PersistenceError("failed_to_confirm_booking")

    logger.info(f"Payment webhook confirmed booking {booking_id}")
    return {"status": "ok"}
