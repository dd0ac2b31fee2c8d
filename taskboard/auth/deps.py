import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskboard.auth.tokens import token_subject
from taskboard.db import get_db
from taskboard.models.user import User
from taskboard.rbac.errors import Unauthenticated

bearer = HTTPBearer(auto_error=False)

def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if creds is None or creds.scheme.lower() != "bearer":
        raise Unauthenticated("missing bearer token")

    try:
        user_id = token_subject(creds.credentials)
    except (jwt.PyJWTError, ValueError):
        raise Unauthenticated("invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("user not found")

    return user
