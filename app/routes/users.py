import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db, commit_or_500
from app.dependencies import get_current_email, get_current_user
from app.limiter import limiter
from app.models import User, UserRole, ManagerRequest
from app.schemas import UserUpsert, UserResponse
from app.utils.ids import new_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


@router.post("/user", response_model=UserResponse)
@limiter.limit("20/minute")
def upsert_user(request: Request, body: UserUpsert, db: Session = Depends(get_db)):
    """
    Called on every login. The first call stores the user with the default role;
    later calls only refresh last_loggedIn.
    """
    email = body.email.lower()
    now = datetime.utcnow()

    user = _user_by_email(db, email)
    if user:
        user.last_loggedIn = now
        commit_or_500(db, "Error updating user")
        db.refresh(user)
        return user

    role = UserRole.ADMIN if email in settings.admin_emails else UserRole.MEMBER
    user = User(
        id=new_id(),
        email=email,
        name=body.name,
        image=body.image,
        role=role,
        created_at=now,
        last_loggedIn=now,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent first login: the other request created the row
        db.rollback()
        user = _user_by_email(db, email)
        user.last_loggedIn = now
        commit_or_500(db, "Error updating user")
    else:
        logger.info("New user %s saved with role %s", email, role.value)
    db.refresh(user)
    return user


@router.get("/user/role")
def get_user_role(user: User = Depends(get_current_user)):
    return {"role": user.role.value if user else None}


@router.post("/become-manager", status_code=201)
@limiter.limit("5/minute")
def become_manager(
    request: Request,
    email: str = Depends(get_current_email),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if user and user.role in (UserRole.MANAGER, UserRole.ADMIN):
        raise HTTPException(status_code=409, detail=f"You are already {user.role.value}")

    if db.query(ManagerRequest).filter(ManagerRequest.email == email).first():
        raise HTTPException(status_code=409, detail="Already requested, wait for admin approval")

    req = ManagerRequest(id=new_id(), email=email, name=user.name if user else None)
    db.add(req)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Already requested, wait for admin approval")

    logger.info("Manager request from %s", email)
    return {"success": True, "message": "Request sent to admin"}
