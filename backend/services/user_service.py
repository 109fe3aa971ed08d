"""
user_service.py — Sign-in and session bookkeeping
First sign-in for an unknown email creates the account.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import hash_password, verify_password, create_token, verify_token
from models.session import Session as UserSession
from models.user import User

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Raised when a known email is paired with the wrong password."""


def normalize_email(email) -> str:
    return ("" if email is None else str(email)).strip().lower()


class UserService:
    @staticmethod
    def _find_user(db: Session, email: str) -> User | None:
        return db.query(User).filter_by(email=email).first()

    @staticmethod
    def sign_in(db: Session, email: str, password: str,
                ip_address: str = None, user_agent: str = None) -> tuple[User, str, bool]:
        """
        Authenticate (or register on first sign-in) and open a session.
        Returns (user, token, created).
        """
        email = normalize_email(email)
        try:
            user = UserService._find_user(db, email)
            created = user is None
            if created:
                user = User(email=email, hashed_password=hash_password(password))
                db.add(user)
                db.flush()
        except IntegrityError:
            # A concurrent first sign-in registered this email first
            db.rollback()
            logger.info(f"Sign-up conflict for {email}, re-reading")
            user = UserService._find_user(db, email)
            created = False
            if user is None:
                raise RuntimeError(f"User {email} vanished after sign-up conflict")
        except Exception:
            db.rollback()
            raise

        try:
            if not created and not verify_password(password, user.hashed_password):
                raise InvalidCredentialsError("Invalid email or password")

            token = create_token({"email": user.email, "user_id": user.id})
            jti = verify_token(token)["jti"]
            db.add(UserSession(
                user_id=user.id,
                token_jti=jti,
                ip_address=ip_address,
                user_agent=user_agent,
                is_revoked=False,
            ))
            db.commit()
            db.refresh(user)
        except Exception:
            db.rollback()
            raise

        if created:
            logger.info(f"Registered user {user.id} on first sign-in")
        logger.info(f"User {user.id} signed in from {ip_address or 'unknown'}")
        return user, token, created

    @staticmethod
    def revoke_session(db: Session, jti: str) -> bool:
        try:
            session = db.query(UserSession).filter_by(token_jti=jti).first()
            if session is None:
                return False
            session.is_revoked = True
            db.commit()
            return True
        except Exception:
            db.rollback()
            raise
