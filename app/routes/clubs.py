import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db, commit_or_500
from app.dependencies import (
    get_current_email, get_current_user, require_admin, require_manager, require_manager_or_admin,
    get_club_or_404, ensure_club_access,
)
from app.models import User, Club, ClubStatus, Booking, BookingStatus, Event
from app.schemas import ClubCreate, ClubUpdate, ClubStatusUpdate, ClubResponse, BookingResponse
from app.services.lifecycle import ACTIVE_BOOKING_STATUSES
from app.utils.email import send_booking_confirmation
from app.utils.ids import new_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _active_join(db: Session, club_id: str, email: str):
    return db.query(Booking).filter(
        Booking.club_id == club_id,
        Booking.customer_email == email,
        Booking.status != BookingStatus.CANCELLED,
    ).first()


@router.post("", response_model=ClubResponse, status_code=status.HTTP_201_CREATED)
def create_club(
    club_data: ClubCreate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """New clubs wait for admin approval before they are listed."""
    club = Club(
        id=new_id(),
        seller_email=current_user.email,
        seller_name=current_user.name,
        seller_image=current_user.image,
        status=ClubStatus.PENDING,
        **club_data.dict(),
    )
    db.add(club)
    commit_or_500(db, "Error adding club")
    db.refresh(club)
    logger.info("Club %s created by %s", club.id, current_user.email)
    return club


@router.get("", response_model=List[ClubResponse])
def list_clubs(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Approved clubs by default; `?status=all` lists every club."""
    query = db.query(Club)
    wanted = status_filter or ClubStatus.APPROVED.value
    if wanted != "all":
        try:
            query = query.filter(Club.status == ClubStatus(wanted))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid status filter")
    if category:
        query = query.filter(Club.category == category)
    if search:
        query = query.filter(or_(Club.name.ilike(f"%{search}%"), Club.description.ilike(f"%{search}%")))
    return query.order_by(Club.created_at.desc()).all()


@router.get("/{club_id}", response_model=ClubResponse)
def get_club(club_id: str, db: Session = Depends(get_db)):
    return get_club_or_404(db, club_id)


@router.patch("/{club_id}", response_model=ClubResponse)
def update_club(
    club_id: str,
    club_data: ClubUpdate,
    current_user: User = Depends(require_manager_or_admin),
    db: Session = Depends(get_db),
):
    club = get_club_or_404(db, club_id)
    ensure_club_access(club, current_user)

    changed = False
    for field, value in club_data.dict(exclude_unset=True).items():
        if getattr(club, field) != value:
            setattr(club, field, value)
            changed = True
    if not changed:
        raise HTTPException(status_code=400, detail="No changes made to club")

    commit_or_500(db, "Error updating club")
    db.refresh(club)
    logger.info("Club %s updated by %s", club.id, current_user.email)
    return club


@router.delete("/{club_id}")
def delete_club(
    club_id: str,
    current_user: User = Depends(require_manager_or_admin),
    db: Session = Depends(get_db),
):
    club = get_club_or_404(db, club_id)
    ensure_club_access(club, current_user)

    active = db.query(Booking).filter(
        Booking.club_id == club.id,
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
    ).first()
    if active:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete club with active bookings. Please complete or cancel all bookings first.",
        )

    events = db.query(Event).filter(Event.club_id == club.id).count()
    if events:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete club with {events} event(s). Please delete its events first.",
        )

    db.delete(club)
    commit_or_500(db, "Error deleting club")
    logger.info("Club %s deleted by %s", club_id, current_user.email)
    return {"success": True, "message": "Club deleted successfully", "deleted_count": 1}


@router.patch("/{club_id}/status", response_model=ClubResponse)
def set_club_status(
    club_id: str,
    body: ClubStatusUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    club = get_club_or_404(db, club_id)
    club.status = body.status
    commit_or_500(db, "Error updating club status")
    db.refresh(club)
    logger.info("Club %s marked %s by %s", club.id, body.status.value, current_user.email)
    return club


@router.post("/{club_id}/join", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def join_free_club(
    club_id: str,
    email: str = Depends(get_current_email),
    current_user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Free clubs skip checkout: the booking is confirmed straight away."""
    club = get_club_or_404(db, club_id)
    if club.price and club.price > 0:
        raise HTTPException(status_code=400, detail="This club requires payment")

    if _active_join(db, club.id, email):
        raise HTTPException(status_code=409, detail="You have already joined this club")

    # A cancelled join releases its key so the customer can join again
    db.query(Booking).filter(
        Booking.free_join_key == f"{club.id}:{email}",
        Booking.status == BookingStatus.CANCELLED,
    ).update({"free_join_key": None})

    booking = Booking(
        id=new_id(),
        club_id=club.id,
        free_join_key=f"{club.id}:{email}",
        customer_email=email,
        customer_name=current_user.name if current_user else None,
        customer_image=current_user.image if current_user else None,
        seller_email=club.seller_email,
        seller_name=club.seller_name,
        seller_image=club.seller_image,
        name=club.name,
        category=club.category,
        image=club.image,
        status=BookingStatus.CONFIRMED,
        price=0,
        quantity=1,
        created_at=datetime.utcnow(),
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="You have already joined this club")
    db.refresh(booking)

    logger.info("%s joined free club %s", email, club.id)
    send_booking_confirmation(email, booking.customer_name, club.name, 0)
    return booking
