"""
app/utils/auth.py
Identity tokens: verification of the provider's bearer token, issuance for tooling and tests
"""
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError

from app.config import settings


class InvalidToken(Exception):
    pass


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> str:
    """Returns the principal email carried by a valid token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise InvalidToken(str(e)) from e

    email = payload.get("email") or payload.get("sub")
    if not email:
        raise InvalidToken("Token has no email claim")
    return email.lower()
