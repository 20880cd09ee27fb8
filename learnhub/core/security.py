# learnhub/core/security.py
import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import jwt, JWTError
from .config import settings


def hash_token(token: str) -> str:
    """SHA-256 of a refresh token; only the hash is persisted."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


# --- JWT helpers ---
def create_access_token(user_id: str, extra_claims: Optional[Dict[str, Any]] = None) -> str:
    """
    Signs a short-lived access token. The canonical claim set is `{id}` plus the
    registered claims; `extra_claims` (e.g. role) are optional extensions.
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode: Dict[str, Any] = {
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "nbf": now,
        "exp": expire,
        "id": str(user_id),
        "token_type": "access",
    }
    if extra_claims:
        for key, value in extra_claims.items():
            if key not in to_encode:
                to_encode[key] = value
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict | None:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"verify_iss": True, "verify_aud": True}
        )
    except JWTError:
        return None
    if payload.get("token_type") != "access" or not payload.get("id"):
        return None
    return payload


def refresh_token_expiry() -> datetime:
    """Expiry of a refresh token issued now (UTC naive, as stored)."""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return expire.replace(tzinfo=None)


def create_refresh_token(user_id: str) -> tuple[str, datetime]:
    """
    Signs a refresh token for `user_id`. The `jti` makes every value unique, so
    reissuing for the same user never yields the same string twice.
    """
    expires_at = refresh_token_expiry()
    to_encode = {
        "iss": settings.JWT_ISSUER,
        "exp": expires_at.replace(tzinfo=timezone.utc),
        "id": str(user_id),
        "jti": uuid.uuid4().hex,
        "token_type": "refresh",
    }
    encoded_jwt = jwt.encode(to_encode, settings.REFRESH_SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt, expires_at


def decode_refresh_token(token: str) -> Dict | None:
    try:
        payload = jwt.decode(
            token,
            settings.REFRESH_SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            issuer=settings.JWT_ISSUER,
            options={"verify_iss": True, "verify_aud": False}
        )
    except JWTError:
        return None
    if payload.get("token_type") != "refresh" or not payload.get("id"):
        return None
    return payload
