import hashlib
import hmac
import secrets
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from taskboard.config import settings

JWT_ALGORITHM = "HS256"
# claims every access token must carry; role and org are re-read from the db per request
REQUIRED_CLAIMS = ["sub", "iss", "aud", "iat", "exp"]

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in utc
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt

# magic links: the raw token goes to the user, only its keyed hash is stored

def new_magic_token() -> str:
    return secrets.token_urlsafe(32)

def hash_magic_token(token: str) -> str:
    key = settings.magic_link_pepper.encode("utf-8")
    return hmac.new(key, token.encode("utf-8"), hashlib.sha256).hexdigest()

def magic_link_expiry(issued_at: datetime | None = None) -> datetime:
    return (issued_at or now_utc()) + timedelta(minutes=settings.magic_link_expires_minutes)

# access tokens

def issue_access_token(user_id: str | uuid.UUID, expires_minutes: int | None = None) -> str:
    ttl = settings.jwt_expires_minutes if expires_minutes is None else expires_minutes
    iat = now_utc()
    payload = {
        "sub": str(user_id),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(iat.timestamp()),
        "exp": int((iat + timedelta(minutes=ttl)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[JWT_ALGORITHM],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options={"require": REQUIRED_CLAIMS},
    )
