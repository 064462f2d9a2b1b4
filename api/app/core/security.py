"""Admin credential hashing and session token helpers."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings

ADMIN_TOKEN_TYPE = "admin_access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_admin_token(admin_id: str, email: str, *, expires_delta: timedelta | None = None) -> str:
    """Sign a session token identifying a back-office admin."""
    issued_at = datetime.utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expires_minutes)
    claims: Dict[str, Any] = {
        "sub": admin_id,
        "email": email,
        "type": ADMIN_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def read_admin_token(token: str) -> Optional[Dict[str, Any]]:
    """Return token claims when the signature, expiry and token type all check out."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if claims.get("type") != ADMIN_TOKEN_TYPE or not claims.get("sub"):
        return None
    return claims


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)
