import uuid
from datetime import datetime, timedelta, timezone

import jwt

from taskboard.config import settings

ALGORITHM = "HS256"

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def issue_access_token(user_id: str | uuid.UUID, expires_in: timedelta | None = None) -> str:
    iat = now_utc()
    exp = iat + (expires_in or timedelta(minutes=settings.jwt_expires_minutes))
    # no role claim; the role is read from the users row per request
    payload = {
        "sub": str(user_id),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)

def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[ALGORITHM],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options={"require": ["sub", "exp"]},
    )

def token_subject(token: str) -> uuid.UUID:
    """User id carried by a valid token; raises jwt or ValueError errors otherwise."""
    return uuid.UUID(decode_access_token(token)["sub"])
