"""
app/dependencies.py
Access guard: bearer principal, role checks and ownership loaders
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import User, UserRole, Club, Event
from app.utils.auth import verify_token, InvalidToken
from app.utils.ids import parse_id

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized():
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized Access!",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Verified principal email, or 401."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    try:
        return verify_token(credentials.credentials)
    except InvalidToken as e:
        logger.info("Rejected bearer token: %s", e)
        raise _unauthorized()


def get_current_user(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Stored user row for the principal; None if they never hit POST /user."""
    return db.query(User).filter(User.email == email).first()


def _role_value(user: Optional[User]) -> Optional[str]:
    if user is None or user.role is None:
        return None
    return user.role.value if hasattr(user.role, "value") else user.role


def require_role(*roles: UserRole):
    allowed = {r.value for r in roles}

    def dependency(user: Optional[User] = Depends(get_current_user)) -> User:
        role = _role_value(user)
        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": "Forbidden Access!", "role": role},
            )
        return user

    return dependency


require_admin = require_role(UserRole.ADMIN)
require_manager = require_role(UserRole.MANAGER)
require_manager_or_admin = require_role(UserRole.MANAGER, UserRole.ADMIN)


# ─── Ownership ───────────────────────────────────────────────────────────────

def get_club_or_404(db: Session, club_id: str) -> Club:
    club = db.query(Club).filter(Club.id == parse_id(club_id)).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club not found")
    return club


def get_event_or_404(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.id == parse_id(event_id)).first()
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def get_owned_event(
    event_id: str,
    user: User = Depends(require_manager),
    db: Session = Depends(get_db),
) -> Event:
    """Event whose club belongs to the acting manager, or 404/403."""
    event = get_event_or_404(db, event_id)
    club = db.query(Club).filter(Club.id == event.club_id).first()
    owner = club.seller_email if club else None
    if event.manager_email != user.email or owner != user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not manage this event")
    return event


def ensure_club_access(club: Club, user: User) -> None:
    """Admins may touch any club; managers only their own."""
    if _role_value(user) == UserRole.ADMIN.value:
        return
    if club.seller_email != user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not manage this club")
