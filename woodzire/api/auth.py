from fastapi import APIRouter, Request, Form, Depends, HTTPException
from pydantic import EmailStr
from sqlalchemy.orm import Session
from woodzire.api.deps import get_db, require_login
from woodzire.core.security import verify_password, hash_password
from woodzire.models.user import User
from woodzire.core.config import settings

router = APIRouter(tags=["auth"])

@router.post("/login")
async def login(request: Request,
email: str = Form(...),
password: str = Form(...),
db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email==email).first()
    if user and verify_password(password, user.hashed_password):
        request.session["user_email"] = user.email
        return {"email": user.email, "name": user.name, "role": user.role}
    raise HTTPException(status_code=401, detail="Invalid credentials")

@router.post("/register", status_code=201)
def register(name: str = Form(...), email: EmailStr = Form(...), password: str = Form(..., min_length=8),
             phone: str = Form(None), db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(email=email, name=name, phone=phone, hashed_password=hash_password(password), role="user")
    db.add(user); db.commit()
    return {"email": user.email, "name": user.name, "role": user.role}

@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return {"ok": True}

@router.get("/me")
def me(user: User = Depends(require_login)):
    return {"email": user.email, "name": user.name, "phone": user.phone, "role": user.role}

def seed_admin(db: Session):
    user = db.query(User).filter_by(email=settings.ADMIN_EMAIL).first()
    if not user:
        user = User(email=settings.ADMIN_EMAIL, name=settings.ADMIN_NAME,
                    hashed_password=hash_password(settings.ADMIN_PASSWORD),
                    role="admin")
        db.add(user); db.commit()
