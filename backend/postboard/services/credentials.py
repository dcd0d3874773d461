"""Credential service: registration, login and session token verification."""

import logging
from datetime import UTC, datetime

from jose import JWTError
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from postboard.auth import (
    BCRYPT_MAX_BYTES,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from postboard.errors import (
    AuthError,
    ConflictError,
    StorageError,
    TokenRejectedError,
    ValidationError,
)
from postboard.models.user import User

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


class PublicUser(BaseModel):
    id: int
    username: str


class AuthResult(BaseModel):
    token: str
    user: PublicUser


class TokenClaims(BaseModel):
    user_id: int
    username: str
    issued_at: datetime | None = None
    expires_at: datetime


def _field_error(field: str, message: str) -> dict:
    return {"field": field, "message": message}


def _issue(user: User) -> AuthResult:
    return AuthResult(
        token=create_access_token(user.id, user.username),
        user=PublicUser(id=user.id, username=user.username),
    )


def _find_user(session: Session, username: str) -> User | None:
    try:
        return session.exec(select(User).where(User.username == username)).first()
    except SQLAlchemyError:
        logger.exception(f"User lookup failed for {username!r}")
        raise StorageError()


def register(session: Session, username: str, password: str) -> AuthResult:
    errors = []
    if len(username) < MIN_USERNAME_LENGTH:
        errors.append(
            _field_error("username", "Username must be at least 3 characters")
        )
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            _field_error("password", "Password must be at least 6 characters")
        )
    elif len(password.encode()) > BCRYPT_MAX_BYTES:
        errors.append(
            _field_error("password", "Password must be at most 72 bytes")
        )
    if errors:
        raise ValidationError(errors)

    if _find_user(session, username):
        raise ConflictError()

    user = User(username=username, password_hash=hash_password(password))
    try:
        session.add(user)
        session.commit()
        session.refresh(user)
    except IntegrityError:
        # lost a race against a concurrent registration of the same name
        session.rollback()
        raise ConflictError()
    except SQLAlchemyError:
        session.rollback()
        logger.exception(f"Failed to create user {username!r}")
        raise StorageError("Failed to create user")

    logger.info(f"Registered user {user.id} ({user.username})")
    return _issue(user)


def login(session: Session, username: str, password: str) -> AuthResult:
    errors = []
    if not username:
        errors.append(_field_error("username", "Username is required"))
    if not password:
        errors.append(_field_error("password", "Password is required"))
    if errors:
        raise ValidationError(errors)

    user = _find_user(session, username)
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Rejected login for {username!r}")
        raise AuthError("Invalid credentials")

    logger.info(f"User {user.id} logged in")
    return _issue(user)


def verify(token: str | None) -> TokenClaims:
    """Check signature and expiry of a session token and return its claims.

    Tokens are stateless: nothing is looked up server-side, so a token stays
    valid until it expires.
    """
    if not token:
        raise AuthError("Access token required")
    try:
        payload = decode_token(token)
        claims = TokenClaims(
            user_id=int(payload["sub"]),
            username=payload["username"],
            issued_at=datetime.fromtimestamp(payload["iat"], UTC)
            if "iat" in payload
            else None,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
    except (JWTError, KeyError, TypeError, ValueError) as exc:
        logger.info(f"Rejected session token: {exc}")
        raise TokenRejectedError()
    return claims
