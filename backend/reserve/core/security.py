"""
Security utilities for device identity tokens and invite codes.
"""
from datetime import timedelta
from typing import Optional
import secrets
from jose import JWTError, jwt
from reserve.core.config import settings
from reserve.core.utils import utcnow


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


def generate_invite_code() -> str:
    """Generate a random hex invite code for Circle invitations."""
    return secrets.token_hex(settings.INVITE_CODE_BYTES)
