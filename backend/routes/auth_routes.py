# ---------- routes/auth_routes.py ----------
"""
Auth routes backed by the SQLAlchemy session.
Sign-in doubles as registration for an email seen for the first time.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import get_current_user, get_token_payload
from database import get_db
from models.user import User
from services.serializers import user_to_dict
from services.user_service import UserService, InvalidCredentialsError, normalize_email

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class SignInRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ── Routes ────────────────────────────────────────────────────────
@router.post("/signin")
def signin(body: SignInRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate with email + password; the first sign-in creates the account."""
    email = normalize_email(body.email)
    if "@" not in email or not body.password:
        raise HTTPException(status_code=400, detail="A valid email and a password are required")

    try:
        user, token, created = UserService.sign_in(
            db,
            email,
            body.password,
            ip_address=request.client.host if request.client else "unknown",
            user_agent=request.headers.get("user-agent", "unknown"),
        )
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))

    content = {"token": token, "user": {"id": user.id, "email": user.email}}
    return JSONResponse(status_code=201 if created else 200, content=content)


@router.get("/me")
def me(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return the current user's profile."""
    user = db.get(User, user_id)
    return {"user": user_to_dict(user)}


@router.post("/logout")
def logout(payload: dict = Depends(get_token_payload), db: Session = Depends(get_db)):
    """Revoke the session behind the presented token."""
    UserService.revoke_session(db, payload["jti"])
    return {"status": "success"}
