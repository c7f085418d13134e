"""
app/routes/admin.py
Role administration, admin only
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.database import get_db, commit_or_500
from app.dependencies import require_admin
from app.models import User, UserRole, ManagerRequest
from app.schemas import UserResponse, RoleUpdate
from app.utils.email import send_role_changed

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Schemas ─────────────────────────────────────────────────────────────────

class ManagerRequestView(BaseModel):
    id: str
    email: str
    name: Optional[str]
    role: Optional[UserRole] = None


# ─── Users ───────────────────────────────────────────────────────────────────

@router.get("/users", response_model=List[UserResponse])
def admin_list_users(
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_admin),
):
    query = db.query(User).filter(User.email != current_admin.email)
    if search:
        query = query.filter((User.email.ilike(f"%{search}%")) | (User.name.ilike(f"%{search}%")))
    if role:
        query = query.filter(User.role == role)
    return query.order_by(desc(User.created_at)).all()


# ─── Manager requests ────────────────────────────────────────────────────────

@router.get("/manager-requests", response_model=List[ManagerRequestView])
def admin_manager_requests(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    requests = db.query(ManagerRequest).order_by(ManagerRequest.requested_at).all()
    users = {
        u.email: u
        for u in db.query(User).filter(User.email.in_([r.email for r in requests])).all()
    } if requests else {}
    return [
        ManagerRequestView(
            id=r.id,
            email=r.email,
            name=r.name,
            role=users[r.email].role if r.email in users else None,
        )
        for r in requests
    ]


@router.patch("/update-role")
def admin_update_role(
    body: RoleUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_admin),
):
    """Assigns a role; any pending manager request for that email is closed."""
    email = body.email.lower()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.email == current_admin.email and body.role != UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="You cannot demote yourself")

    user.role = body.role
    db.query(ManagerRequest).filter(ManagerRequest.email == email).delete()
    commit_or_500(db, "Error updating role")

    logger.info("Role of %s set to %s by %s", email, body.role.value, current_admin.email)
    background_tasks.add_task(send_role_changed, email, body.role.value)
    return {"success": True, "email": email, "role": body.role.value}
