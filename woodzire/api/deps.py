from fastapi import Request, HTTPException, Depends
from sqlalchemy.orm import Session
from woodzire.db.session import SessionLocal
from woodzire.models.user import User

# DB Session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Get current user from session
def current_user(request: Request, db: Session = Depends(get_db)):
    email = request.session.get("user_email")
    if not email:
        return None
    return db.query(User).filter(User.email == email).first()

# Require login
def require_login(user: User = Depends(current_user)):
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user

# Require role(s)
def require_role(roles: list[str]):
    def role_checker(user: User = Depends(require_login)):
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user
    return role_checker

require_admin = require_role(["admin"])
require_moderator = require_role(["admin", "moderator"])

def get_or_404(db: Session, model, id: int, label: str = None):
    obj = db.get(model, id)
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label or model.__name__} not found")
    return obj

def require_confirmation(confirm: bool = False):
    # destructive admin actions must be confirmed explicitly
    if not confirm:
        raise HTTPException(status_code=400, detail="Confirmation required: pass confirm=true")
    return True
