import logging
import time
from typing import Optional

import jwt
from fastapi import Header
from passlib.context import CryptContext

from .config import settings
from .exceptions import Unauthenticated

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def create_access_token(user_id: int, expires_delta: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_delta if expires_delta is not None else settings.token_ttl_seconds)
    payload = {"sub": str(user_id), "iat": now, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> int:
    """Verify a token and return the user id it was issued for.

    Raises Unauthenticated on a bad signature, a malformed token, a missing or
    non-numeric subject, or an elapsed expiry.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise Unauthenticated("Token has expired") from e
    except jwt.PyJWTError as e:
        raise Unauthenticated() from e
    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise Unauthenticated() from e


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_current_user_id(authorization: Optional[str] = Header(default=None)) -> int:
    """Dependency guarding protected routes: resolve the caller from a bearer token."""
    if not authorization:
        raise Unauthenticated("No token, authorization denied")
    parts = authorization.split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated("Authorization header must be 'Bearer <token>'")
    token = parts[1].strip()
    try:
        return decode_access_token(token)
    except Unauthenticated as e:
        logger.debug("rejected token: %s", e.msg)
        raise
