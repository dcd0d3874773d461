from datetime import UTC, datetime, timedelta

import bcrypt
from jose import jwt

from postboard.config import settings

# bcrypt ignores input past this many bytes
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(plain: str, hashed: str) -> bool:
    if len(plain.encode()) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def create_access_token(
    user_id: int, username: str, issued_at: datetime | None = None
) -> str:
    issued_at = issued_at or datetime.now(UTC)
    expire = issued_at + timedelta(minutes=settings.access_token_expire_minutes)
    return jwt.encode(
        {"sub": str(user_id), "username": username, "iat": issued_at, "exp": expire},
        settings.secret_key,
        algorithm=settings.token_algorithm,
    )


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.token_algorithm])
