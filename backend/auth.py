from datetime import datetime, timedelta, timezone
import logging
import uuid

from fastapi import Depends, Request, HTTPException, status
from jose import jwt, JWTError
from sqlalchemy.orm import Session
import bcrypt

from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS
from database import get_db
from models.session import Session as UserSession
from models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except ValueError as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


def create_token(data: dict) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS)
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def is_session_valid(db: Session, jti: str) -> bool:
    """A token is usable only while its session row exists and is not revoked."""
    session = db.query(UserSession).filter_by(token_jti=jti).first()
    if session is None:
        return False
    return not session.is_revoked


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_payload(request: Request, db: Session = Depends(get_db)) -> dict:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it and its session, and returns the decoded payload.
    Raises HTTP 401 if the token is missing, invalid or revoked.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise _unauthorized("Missing or invalid Authorization header")

    token = auth_header.split(" ", 1)[1]
    payload = verify_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    if not payload.get("email") or not payload.get("jti"):
        raise _unauthorized("Token payload missing required claims")

    if not is_session_valid(db, payload["jti"]):
        raise _unauthorized("Session has been revoked or logged out")

    return payload


def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> int:
    """
    FastAPI dependency — resolves the authenticated email to a user id.
    Raises HTTP 404 if no user carries that email.
    """
    user_id = (
        db.query(User.id)
        .filter(User.email == payload["email"])
        .scalar()
    )
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user_id
