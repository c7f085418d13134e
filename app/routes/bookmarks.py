import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db, commit_or_500
from app.dependencies import get_current_email, get_club_or_404, get_event_or_404
from app.models import Bookmark, BookmarkType
from app.schemas import BookmarkResponse
from app.utils.ids import new_id, parse_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _add_bookmark(db: Session, email: str, target_id: str, type: BookmarkType) -> Bookmark:
    existing = db.query(Bookmark).filter(
        Bookmark.user_id == email,
        Bookmark.target_id == target_id,
        Bookmark.type == type,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"This {type.value} is already bookmarked")

    bookmark = Bookmark(id=new_id(), user_id=email, target_id=target_id, type=type, created_at=datetime.utcnow())
    db.add(bookmark)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"This {type.value} is already bookmarked")
    db.refresh(bookmark)
    logger.info("%s bookmarked %s %s", email, type.value, target_id)
    return bookmark


def _remove_bookmark(db: Session, email: str, target_id: str, type: BookmarkType) -> dict:
    deleted = db.query(Bookmark).filter(
        Bookmark.user_id == email,
        Bookmark.target_id == target_id,
        Bookmark.type == type,
    ).delete()
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    commit_or_500(db, "Error removing bookmark")
    return {"success": True, "message": "Bookmark removed"}


@router.post("/clubs/{club_id}/bookmark", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
def bookmark_club(club_id: str, email: str = Depends(get_current_email), db: Session = Depends(get_db)):
    club = get_club_or_404(db, club_id)
    return _add_bookmark(db, email, club.id, BookmarkType.CLUB)


@router.delete("/clubs/{club_id}/bookmark")
def unbookmark_club(club_id: str, email: str = Depends(get_current_email), db: Session = Depends(get_db)):
    # The club may already be gone
    return _remove_bookmark(db, email, parse_id(club_id), BookmarkType.CLUB)


@router.post("/events/{event_id}/bookmark", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
def bookmark_event(event_id: str, email: str = Depends(get_current_email), db: Session = Depends(get_db)):
    event = get_event_or_404(db, event_id)
    return _add_bookmark(db, email, event.id, BookmarkType.EVENT)


@router.delete("/events/{event_id}/bookmark")
def unbookmark_event(event_id: str, email: str = Depends(get_current_email), db: Session = Depends(get_db)):
    return _remove_bookmark(db, email, parse_id(event_id), BookmarkType.EVENT)


@router.get("/bookmarks", response_model=List[BookmarkResponse])
def my_bookmarks(
    type: Optional[BookmarkType] = None,
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    query = db.query(Bookmark).filter(Bookmark.user_id == email)
    if type:
        query = query.filter(Bookmark.type == type)
    return query.order_by(Bookmark.created_at.desc()).all()
