"""
app/routes/payments.py
Stripe Checkout: session creation, verification and webhook.
A paid session materialises exactly one booking, keyed on the session id.
"""
import logging
from datetime import datetime
from typing import Optional, Tuple

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_club_or_404
from app.limiter import limiter
from app.models import Booking, BookingStatus, Club
from app.utils.email import send_booking_confirmation
from app.utils.ids import new_id

logger = logging.getLogger(__name__)

router = APIRouter()

stripe.api_key = settings.STRIPE_SECRET_KEY


# ─────────────────────────────────────────────
# MODELS
# ─────────────────────────────────────────────
class CheckoutCustomer(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    image: Optional[str] = None

class CheckoutSessionCreate(BaseModel):
    club_id: str
    customer: CheckoutCustomer
    quantity: int = Field(default=1, ge=1)


def _gateway_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"message": "Payment gateway error", "error": str(e)},
    )


# ─────────────────────────────────────────────
# BOOKING MATERIALISATION
# ─────────────────────────────────────────────
def _booking_for_session(db: Session, session_id: str) -> Optional[Booking]:
    return db.query(Booking).filter(Booking.session_id == session_id).first()


def materialize_booking(db: Session, session) -> Tuple[Booking, bool]:
    """
    Returns (booking, created). A second call for the same session returns the
    booking written by the first one; the unique session_id column backs this
    up when two verifications race.
    """
    session_id = session["id"]
    existing = _booking_for_session(db, session_id)
    if existing:
        return existing, False

    metadata = session.get("metadata") or {}
    club = db.query(Club).filter(Club.id == metadata.get("club_id")).first()
    if not club:
        logger.warning("Paid session %s references unknown club %s", session_id, metadata.get("club_id"))
        raise HTTPException(status_code=404, detail="Club not found")

    amount_total = session.get("amount_total") or 0
    booking = Booking(
        id=new_id(),
        session_id=session_id,
        transaction_id=session.get("payment_intent"),
        club_id=club.id,
        customer_email=(metadata.get("customer_email") or session.get("customer_email") or "").lower(),
        customer_name=metadata.get("customer_name"),
        customer_image=metadata.get("customer_image") or None,
        seller_email=metadata.get("seller_email") or club.seller_email,
        seller_name=metadata.get("seller_name") or club.seller_name,
        seller_image=metadata.get("seller_image") or club.seller_image,
        name=club.name,
        category=club.category,
        image=club.image,
        status=BookingStatus.CONFIRMED,
        quantity=int(metadata.get("quantity") or 1),
        price=amount_total / 100,
        created_at=datetime.utcnow(),
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _booking_for_session(db, session_id)
        if existing is None:
            raise
        return existing, False
    db.refresh(booking)

    logger.info("Booking %s created for session %s", booking.id, session_id)
    send_booking_confirmation(booking.customer_email, booking.customer_name, club.name, booking.price)
    return booking, True


# ─────────────────────────────────────────────
# CHECKOUT SESSION
# ─────────────────────────────────────────────
@router.post("/create-checkout-session")
@limiter.limit("10/minute")
def create_checkout_session(
    request: Request,
    data: CheckoutSessionCreate,
    db: Session = Depends(get_db),
):
    club = get_club_or_404(db, data.club_id)
    if not club.price or club.price <= 0:
        raise HTTPException(status_code=400, detail="Free clubs are joined without checkout")

    product_data = {"name": club.name}
    if club.description:
        product_data["description"] = club.description
    if club.image:
        product_data["images"] = [club.image]

    try:
        checkout_session = stripe.checkout.Session.create(
            line_items=[{
                "price_data": {
                    "currency": settings.CURRENCY,
                    "product_data": product_data,
                    "unit_amount": int(round(club.price * 100)),
                },
                "quantity": data.quantity,
            }],
            customer_email=data.customer.email,
            mode="payment",
            metadata={
                "club_id": club.id,
                "quantity": str(data.quantity),
                "customer_email": data.customer.email.lower(),
                "customer_name": data.customer.name or "",
                "customer_image": data.customer.image or "",
                "seller_email": club.seller_email or "",
                "seller_name": club.seller_name or "",
                "seller_image": club.seller_image or "",
            },
            success_url=f"{settings.CLIENT_DOMAIN}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.CLIENT_DOMAIN}/club/{club.id}",
        )
    except stripe.StripeError as e:
        logger.exception("Stripe checkout creation failed for club %s", club.id)
        raise _gateway_error(e)

    logger.info("Checkout session %s created for club %s", checkout_session["id"], club.id)
    return {"session_id": checkout_session["id"], "url": checkout_session["url"]}


# ─────────────────────────────────────────────
# VERIFY, called by the payment-success page
# ─────────────────────────────────────────────
@router.get("/verify-payment/{session_id}")
def verify_payment(session_id: str, db: Session = Depends(get_db)):
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.exception("Stripe session %s could not be retrieved", session_id)
        raise _gateway_error(e)

    if session.get("payment_status") != "paid":
        logger.info("Session %s not paid (%s)", session_id, session.get("payment_status"))
        return {
            "success": False,
            "session_id": session["id"],
            "payment_status": session.get("payment_status"),
            "message": "Payment not completed",
        }

    booking, created = materialize_booking(db, session)
    return {
        "success": True,
        "session_id": session["id"],
        "payment_status": "paid",
        "booking_id": booking.id,
        "message": "Booking created successfully" if created else "Booking already recorded",
    }


# ─────────────────────────────────────────────
# WEBHOOK
# ─────────────────────────────────────────────
@router.post("/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    try:
        event = stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    if event["type"] == "checkout.session.completed":
        session = event["data"]["object"]
        if session.get("payment_status") == "paid":
            booking, created = materialize_booking(db, session)
            return {"received": True, "booking_id": booking.id, "created": created}

    return {"received": True}
