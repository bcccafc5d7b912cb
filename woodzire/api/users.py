import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, require_admin, get_or_404
from woodzire.models.user import User
from woodzire.schemas import UserOut, RoleUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("")
def list_users(role: Optional[str] = None, db: Session = Depends(get_db), user=Depends(require_admin)):
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    return [UserOut.model_validate(u) for u in q.order_by(User.created_at.desc(), User.id.desc()).all()]


@router.put("/{user_id}/role")
def set_role(user_id: int, payload: RoleUpdate, db: Session = Depends(get_db), user=Depends(require_admin)):
    target = get_or_404(db, User, user_id, "User")
    if target.id == user.id and payload.role != "admin":
        raise HTTPException(status_code=400, detail="You cannot remove your own admin role")
    previous = target.role
    target.role = payload.role
    db.commit(); db.refresh(target)
    logger.info("User %s role %s -> %s by %s", target.email, previous, target.role, user.email)
    return UserOut.model_validate(target)
