from dataclasses import dataclass
from urllib.parse import urlencode

import requests
import structlog

from taskboard.config import settings

logger = structlog.get_logger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

class GoogleAuthError(Exception):
    pass

@dataclass
class GoogleProfile:
    google_id: str
    email: str
    name: str
    picture: str | None = None
    email_verified: bool = False

def is_configured() -> bool:
    return bool(settings.google_client_id and settings.google_client_secret)

def authorization_url(state: str | None = None) -> str:
    params = {
        "response_type": "code",
        "client_id": settings.google_client_id or "",
        "redirect_uri": settings.google_callback_url,
        "scope": "openid profile email",
        "access_type": "online",
    }
    if state:
        params["state"] = state
    return f"{AUTHORIZE_URL}?{urlencode(params)}"

def fetch_profile(code: str, timeout: float = 10.0) -> GoogleProfile:
    """Exchange an authorization code and read the signed-in Google account."""
    r = requests.post(
        TOKEN_URL,
        data={
            "grant_type": "authorization_code",
            "code": code,
            "client_id": settings.google_client_id,
            "client_secret": settings.google_client_secret,
            "redirect_uri": settings.google_callback_url,
        },
        headers={"Accept": "application/json"},
        timeout=timeout,
    )
    if r.status_code != 200:
        raise GoogleAuthError(f"token exchange failed: {r.status_code}")

    access_token = r.json().get("access_token")
    if not access_token:
        raise GoogleAuthError("token exchange returned no access_token")

    r = requests.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}, timeout=timeout)
    if r.status_code != 200:
        raise GoogleAuthError(f"userinfo failed: {r.status_code}")
    info = r.json()

    email = (info.get("email") or "").lower().strip()
    sub = info.get("sub")
    if not email or not sub:
        raise GoogleAuthError("google profile missing email or id")
    verified = info.get("email_verified") in (True, "true")
    if not verified:
        raise GoogleAuthError("google email not verified")

    logger.info("auth.google_profile_fetched", google_id=sub)
    return GoogleProfile(
        google_id=str(sub),
        email=email,
        name=info.get("name") or email.split("@", 1)[0],
        picture=info.get("picture"),
        email_verified=verified,
    )
