"""
app/routes/manager.py
Manager dashboard: statistics, clubs, upcoming events and pending requests
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.database import get_db, commit_or_500
from app.dependencies import require_manager
from app.models import User, Club, Booking, BookingStatus, Event, EventRegistration, RegistrationStatus
from app.schemas import ClubResponse, BookingResponse, EventResponse
from app.services.lifecycle import InvalidTransition, ACTIVE_BOOKING_STATUSES, decide_pending_booking
from app.services.statistics import manager_statistics
from app.utils.ids import parse_id

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Schemas ─────────────────────────────────────────────────────────────────

class ManagerStatistics(BaseModel):
    total_clubs: int
    total_members: int
    members_trend: int
    total_bookings: int
    bookings_trend: int
    growth_rate: int
    total_revenue: float
    revenue_trend: int
    active_bookings: int
    pending_requests: int
    completed_bookings: int
    cancelled_bookings: int
    completion_rate: int
    total_events: int
    upcoming_events: int
    total_registrations: int
    attendance_rate: int


class PendingDecision(BaseModel):
    action: str     # "approve" | "reject"


class ManagerRegistrationView(BaseModel):
    id: str
    event_id: str
    event_title: str
    event_date: datetime
    user_email: str
    user_name: Optional[str]
    status: RegistrationStatus
    registered_at: datetime


class MemberView(BaseModel):
    email: str
    name: Optional[str]
    image: Optional[str]
    bookings: int
    active_bookings: int
    first_joined_at: Optional[datetime]


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _manager_clubs(db: Session, manager: User) -> List[Club]:
    return db.query(Club).filter(Club.seller_email == manager.email).all()


def _club_bookings(db: Session, club_ids: List[str]) -> List[Booking]:
    if not club_ids:
        return []
    return db.query(Booking).filter(Booking.club_id.in_(club_ids)).all()


def _manager_events(db: Session, manager: User, club_ids: List[str]) -> List[Event]:
    if not club_ids:
        return []
    return db.query(Event).filter(
        Event.club_id.in_(club_ids),
        Event.manager_email == manager.email,
    ).all()


# ─── Endpoints ───────────────────────────────────────────────────────────────

@router.get("/statistics", response_model=ManagerStatistics)
def statistics(
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    clubs = _manager_clubs(db, current_user)
    club_ids = [c.id for c in clubs]
    bookings = _club_bookings(db, club_ids)
    events = _manager_events(db, current_user, club_ids)
    registrations = db.query(EventRegistration).filter(
        EventRegistration.event_id.in_([e.id for e in events])
    ).all() if events else []

    return manager_statistics(clubs, bookings, events, registrations, now=datetime.utcnow())


@router.get("/clubs", response_model=List[ClubResponse])
def my_clubs(
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    return db.query(Club).filter(Club.seller_email == current_user.email).order_by(Club.created_at.desc()).all()


@router.get("/upcoming-events", response_model=List[EventResponse])
def upcoming_events(
    limit: int = 10,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    return db.query(Event).filter(
        Event.manager_email == current_user.email,
        Event.event_date >= datetime.utcnow(),
    ).order_by(Event.event_date.asc()).limit(limit).all()


@router.get("/pending-requests", response_model=List[BookingResponse])
def pending_requests(
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    club_ids = [c.id for c in _manager_clubs(db, current_user)]
    if not club_ids:
        return []
    return db.query(Booking).filter(
        Booking.club_id.in_(club_ids),
        Booking.status == BookingStatus.PROCESSING,
    ).order_by(Booking.created_at.asc()).all()


@router.patch("/pending-requests/{booking_id}", response_model=BookingResponse)
def decide_pending_request(
    booking_id: str,
    body: PendingDecision,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    if body.action not in ("approve", "reject"):
        raise HTTPException(status_code=400, detail="Action must be approve or reject")

    booking = db.query(Booking).filter(Booking.id == parse_id(booking_id)).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Order not found")
    club = db.query(Club).filter(Club.id == booking.club_id).first()
    if not club or club.seller_email != current_user.email:
        raise HTTPException(status_code=403, detail="You do not manage this club")

    try:
        decide_pending_booking(booking, approve=body.action == "approve")
    except InvalidTransition as e:
        logger.warning("Order %s: %s", booking.id, e)
        raise HTTPException(status_code=400, detail=str(e))

    commit_or_500(db, "Error updating request")
    db.refresh(booking)
    logger.info("Request %s %sd by %s", booking.id, body.action, current_user.email)
    return booking


@router.get("/all-registrations", response_model=List[ManagerRegistrationView])
def all_registrations(
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    rows = db.query(EventRegistration, Event).join(
        Event, EventRegistration.event_id == Event.id
    ).filter(
        Event.manager_email == current_user.email
    ).order_by(EventRegistration.registered_at.desc()).all()

    return [
        ManagerRegistrationView(
            id=r.id,
            event_id=e.id,
            event_title=e.title,
            event_date=e.event_date,
            user_email=r.user_email,
            user_name=r.user_name,
            status=r.status,
            registered_at=r.registered_at,
        )
        for r, e in rows
    ]


@router.get("/members", response_model=List[MemberView])
def members(
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    bookings = _club_bookings(db, [c.id for c in _manager_clubs(db, current_user)])

    by_email = {}
    for b in bookings:
        m = by_email.setdefault(b.customer_email, {
            "email": b.customer_email,
            "name": b.customer_name,
            "image": b.customer_image,
            "bookings": 0,
            "active_bookings": 0,
            "first_joined_at": b.created_at,
        })
        m["bookings"] += 1
        if b.status in ACTIVE_BOOKING_STATUSES:
            m["active_bookings"] += 1
        if b.created_at and (m["first_joined_at"] is None or b.created_at < m["first_joined_at"]):
            m["first_joined_at"] = b.created_at

    return sorted(by_email.values(), key=lambda m: m["first_joined_at"] or datetime.min, reverse=True)
