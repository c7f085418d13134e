"""
app/routes/events.py
Events created by club managers, and member registrations to them
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db, commit_or_500
from app.dependencies import (
    get_current_email, get_current_user, require_manager, get_club_or_404, get_event_or_404, get_owned_event,
)
from app.models import User, Event, EventRegistration, RegistrationStatus
from app.schemas import EventCreate, EventUpdate, EventResponse, RegistrationResponse, RegistrationDecision
from app.services.lifecycle import (
    InvalidTransition, ACTIVE_REGISTRATION_STATUSES,
    cancel_registration, decide_registration, reactivate_registration,
)
from app.utils.ids import new_id, parse_id

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_ORDERS = {
    "newest": Event.created_at.desc(),
    "oldest": Event.created_at.asc(),
    "fee-high": Event.event_fee.desc(),
    "fee-low": Event.event_fee.asc(),
}


def _registration_for(db: Session, event_id: str, email: str) -> Optional[EventRegistration]:
    return db.query(EventRegistration).filter(
        EventRegistration.event_id == event_id,
        EventRegistration.user_email == email,
    ).first()


def _active_registrations(db: Session, event_id: str) -> int:
    return db.query(EventRegistration).filter(
        EventRegistration.event_id == event_id,
        EventRegistration.status.in_(ACTIVE_REGISTRATION_STATUSES),
    ).count()


# ─── Events ──────────────────────────────────────────────────────────────────

@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    body: EventCreate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    club = get_club_or_404(db, body.club_id)
    if club.seller_email != current_user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not manage this club")

    event = Event(
        id=new_id(),
        manager_email=current_user.email,
        created_at=datetime.utcnow(),
        **body.dict(exclude={"club_id"}),
        club_id=club.id,
    )
    if not event.is_paid:
        event.event_fee = 0
    db.add(event)
    commit_or_500(db, "Error creating event")
    db.refresh(event)
    logger.info("Event %s created on club %s by %s", event.id, club.id, current_user.email)
    return event


@router.get("/events", response_model=List[EventResponse])
def list_events(
    sort: Optional[str] = None,
    club_id: Optional[str] = None,
    search: Optional[str] = None,
    upcoming: bool = False,
    db: Session = Depends(get_db),
):
    """Sorted by event date, latest first, unless `sort` is newest|oldest|fee-high|fee-low."""
    query = db.query(Event)
    if club_id:
        query = query.filter(Event.club_id == parse_id(club_id))
    if search:
        query = query.filter(or_(Event.title.ilike(f"%{search}%"), Event.location.ilike(f"%{search}%")))
    if upcoming:
        query = query.filter(Event.event_date >= datetime.utcnow())

    if sort is None:
        order = Event.event_date.desc()
    elif sort in SORT_ORDERS:
        order = SORT_ORDERS[sort]
    else:
        raise HTTPException(status_code=400, detail=f"Invalid sort key, expected one of {', '.join(SORT_ORDERS)}")
    return query.order_by(order).all()


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return get_event_or_404(db, event_id)


@router.patch("/events/{event_id}", response_model=EventResponse)
def update_event(
    body: EventUpdate,
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    update_data = body.dict(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No changes provided")
    for field, value in update_data.items():
        setattr(event, field, value)
    if not event.is_paid:
        event.event_fee = 0

    commit_or_500(db, "Error updating event")
    db.refresh(event)
    logger.info("Event %s updated", event.id)
    return event


@router.delete("/events/{event_id}")
def delete_event(
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    registrations = db.query(EventRegistration).filter(EventRegistration.event_id == event.id).count()
    if registrations:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete an event with {registrations} registration(s)",
        )
    db.delete(event)
    commit_or_500(db, "Error deleting event")
    logger.info("Event %s deleted by %s", event.id, event.manager_email)
    return {"success": True, "message": "Event deleted successfully"}


# ─── Registrations ───────────────────────────────────────────────────────────

@router.post("/events/{event_id}/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
def register_for_event(
    event_id: str,
    email: str = Depends(get_current_email),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event = get_event_or_404(db, event_id)
    if event.event_date < datetime.utcnow():
        raise HTTPException(status_code=400, detail="This event has already taken place")

    existing = _registration_for(db, event.id, email)
    if existing and existing.status != RegistrationStatus.CANCELLED:
        raise HTTPException(status_code=409, detail="Already registered for this event")

    if event.max_attendees and _active_registrations(db, event.id) >= event.max_attendees:
        raise HTTPException(status_code=409, detail="This event is full")

    if existing:
        registration = reactivate_registration(existing)
    else:
        registration = EventRegistration(
            id=new_id(),
            event_id=event.id,
            user_email=email,
            user_name=current_user.name if current_user else None,
            status=RegistrationStatus.REGISTERED,
            registered_at=datetime.utcnow(),
        )
        db.add(registration)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Already registered for this event")
    db.refresh(registration)

    logger.info("%s registered for event %s", email, event.id)
    return registration


@router.patch("/events/{event_id}/cancel", response_model=RegistrationResponse)
def cancel_event_registration(
    event_id: str,
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    registration = db.query(EventRegistration).filter(
        EventRegistration.event_id == parse_id(event_id),
        EventRegistration.user_email == email,
        EventRegistration.status != RegistrationStatus.CANCELLED,
    ).first()
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")

    try:
        cancel_registration(registration)
    except InvalidTransition as e:
        raise HTTPException(status_code=400, detail=str(e))

    commit_or_500(db, "Error cancelling registration")
    db.refresh(registration)
    logger.info("%s cancelled registration to event %s", email, registration.event_id)
    return registration


@router.get("/events/{event_id}/registrations", response_model=List[RegistrationResponse])
def list_event_registrations(
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    return db.query(EventRegistration).filter(
        EventRegistration.event_id == event.id
    ).order_by(EventRegistration.registered_at).all()


@router.patch("/events/{event_id}/registrations/{registration_id}", response_model=RegistrationResponse)
def decide_event_registration(
    registration_id: str,
    body: RegistrationDecision,
    event: Event = Depends(get_owned_event),
    db: Session = Depends(get_db),
):
    registration = db.query(EventRegistration).filter(
        EventRegistration.id == parse_id(registration_id),
        EventRegistration.event_id == event.id,
    ).first()
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")

    try:
        decide_registration(registration, body.status)
    except (ValueError, InvalidTransition) as e:
        raise HTTPException(status_code=400, detail=str(e))

    commit_or_500(db, "Error updating registration")
    db.refresh(registration)
    logger.info("Registration %s %s for event %s", registration.id, registration.status.value, event.id)
    return registration


@router.get("/my-registrations", response_model=List[RegistrationResponse])
def my_registrations(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    return db.query(EventRegistration).filter(
        EventRegistration.user_email == email
    ).order_by(EventRegistration.registered_at.desc()).all()
