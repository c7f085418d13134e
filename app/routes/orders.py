import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db, commit_or_500
from app.dependencies import get_current_email, require_manager
from app.models import User, Booking, BookingStatus
from app.schemas import BookingResponse, BookingStatusUpdate
from app.services.lifecycle import InvalidTransition, cancel_booking, set_booking_status
from app.utils.ids import parse_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_booking_or_404(db: Session, order_id: str) -> Booking:
    booking = db.query(Booking).filter(Booking.id == parse_id(order_id)).first()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return booking


def _status_filter(query, value: Optional[str]):
    if not value:
        return query
    try:
        return query.filter(Booking.status == BookingStatus(value))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid status value")


@router.get("/my-orders", response_model=List[BookingResponse])
def my_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    query = _status_filter(db.query(Booking).filter(Booking.customer_email == email), status_filter)
    return query.order_by(Booking.created_at.desc()).all()


@router.get("/manage-orders", response_model=List[BookingResponse])
def manage_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    query = _status_filter(db.query(Booking).filter(Booking.seller_email == current_user.email), status_filter)
    return query.order_by(Booking.created_at.desc()).all()


@router.patch("/orders/{order_id}", response_model=BookingResponse)
def update_order_status(
    order_id: str,
    body: BookingStatusUpdate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Seller-side status change; completing an order stamps completed_at."""
    booking = _get_booking_or_404(db, order_id)
    if booking.seller_email != current_user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not manage this order")

    try:
        set_booking_status(booking, body.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidTransition as e:
        logger.warning("Order %s: %s", booking.id, e)
        raise HTTPException(status_code=400, detail=str(e))

    commit_or_500(db, "Error updating order status")
    db.refresh(booking)
    logger.info("Order %s set to %s by %s", booking.id, booking.status.value, current_user.email)
    return booking


@router.delete("/orders/{order_id}")
def cancel_order(
    order_id: str,
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    """Cancels instead of deleting; the customer or the seller may do it."""
    booking = _get_booking_or_404(db, order_id)
    if email not in (booking.customer_email, booking.seller_email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot cancel this order")

    try:
        cancel_booking(booking)
    except InvalidTransition as e:
        logger.warning("Order %s: %s", booking.id, e)
        raise HTTPException(status_code=400, detail=str(e))

    commit_or_500(db, "Error cancelling order")
    logger.info("Order %s cancelled by %s", booking.id, email)
    return {"success": True, "message": "Order cancelled successfully"}
