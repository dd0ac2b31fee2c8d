from __future__ import annotations

import secrets
from urllib.parse import quote, urlencode

import requests
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from taskboard.auth import google
from taskboard.auth.deps import get_current_user
from taskboard.auth.passwords import hash_password, verify_password
from taskboard.auth.tokens import issue_access_token
from taskboard.config import settings
from taskboard.db import get_db
from taskboard.models.enums import AuthProvider, ProjectStatus, Role, TaskStatus
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.ratelimit import rate_limit
from taskboard.rbac.deps import Principal, get_principal, require_permission
from taskboard.rbac.perms import Permission, PermissionTable, get_permission_table
from taskboard.schemas.auth import (
    AuthOut,
    ChangePasswordIn,
    LoginIn,
    PermissionsOut,
    ProfileOut,
    ProfileUpdateIn,
    RegisterIn,
    UserOut,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

OAUTH_STATE_COOKIE = "oauth_state"

def avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=667eea&color=fff"

def default_role() -> Role:
    return Role.parse(settings.default_role)

def _auth_out(user: User) -> AuthOut:
    return AuthOut(access_token=issue_access_token(user.id), user=UserOut.model_validate(user))

@router.post("/register", response_model=AuthOut, status_code=201)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:register",
            limit_per_window=settings.rate_limit_auth_register_per_min,
            window_seconds=60,
        )
    ),
) -> AuthOut:
    email = payload.email.lower().strip()

    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise HTTPException(status_code=400, detail="user already exists")

    role = default_role()
    if payload.role is not None and settings.allow_self_role_change:
        if not Role.is_known(payload.role):
            raise HTTPException(status_code=400, detail="invalid role")
        role = Role.parse(payload.role)

    user = User(
        name=payload.name,
        email=email,
        password_hash=hash_password(payload.password),
        role=role.value,
        department=payload.department or "Engineering",
        avatar=avatar_url(payload.name),
        provider=AuthProvider.email.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("auth.registered", user_id=str(user.id), role=user.role)
    return _auth_out(user)

@router.post("/login", response_model=AuthOut)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:login",
            limit_per_window=settings.rate_limit_auth_login_per_min,
            window_seconds=60,
        )
    ),
) -> AuthOut:
    email = payload.email.lower().strip()
    user = db.scalar(select(User).where(User.email == email))

    # same answer for unknown email, wrong password and oauth-only accounts
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("auth.login_failed", email_domain=email.rsplit("@", 1)[-1])
        raise HTTPException(status_code=401, detail="invalid credentials")

    return _auth_out(user)

@router.get("/google")
def google_login() -> RedirectResponse:
    if not google.is_configured():
        raise HTTPException(status_code=400, detail="google oauth not configured")

    state = secrets.token_urlsafe(24)
    resp = RedirectResponse(google.authorization_url(state), status_code=307)
    resp.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=600,
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "prod",
    )
    return resp

def _oauth_failure(reason: str) -> RedirectResponse:
    resp = RedirectResponse(f"{settings.frontend_url}/login?{urlencode({'error': reason})}", status_code=307)
    resp.delete_cookie(OAUTH_STATE_COOKIE)
    return resp

@router.get("/google/callback")
def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
) -> RedirectResponse:
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if error or not code:
        return _oauth_failure("auth_failed")
    if not expected_state or not state or not secrets.compare_digest(expected_state, state):
        logger.warning("auth.google_failed", reason="state_mismatch")
        return _oauth_failure("auth_failed")

    try:
        profile = google.fetch_profile(code)
    except (google.GoogleAuthError, requests.RequestException) as e:
        logger.warning("auth.google_failed", reason=type(e).__name__, error=str(e))
        return _oauth_failure("auth_failed")
    if not profile.email_verified:
        logger.warning("auth.google_failed", reason="email_unverified")
        return _oauth_failure("auth_failed")

    user = db.scalar(select(User).where(User.google_id == profile.google_id))
    if user is None:
        user = db.scalar(select(User).where(User.email == profile.email))
        if user is not None:
            # link the google identity to the existing email account
            user.google_id = profile.google_id
        else:
            user = User(
                name=profile.name,
                email=profile.email,
                password_hash=None,
                role=default_role().value,
                department="Engineering",
                avatar=profile.picture or avatar_url(profile.name),
                provider=AuthProvider.google.value,
                google_id=profile.google_id,
            )
            db.add(user)
    db.commit()
    db.refresh(user)

    token = issue_access_token(user.id)
    resp = RedirectResponse(
        f"{settings.frontend_url}/auth/callback?{urlencode({'token': token})}",
        status_code=307,
    )
    resp.delete_cookie(OAUTH_STATE_COOKIE)
    return resp

def _profile_out(db: Session, user: User) -> ProfileOut:
    tasks_completed = db.scalar(
        select(func.count())
        .select_from(Task)
        .join(Project, Project.id == Task.project_id)
        .where(Project.owner_id == user.id, Task.status == TaskStatus.done)
    ) or 0
    active_projects = db.scalar(
        select(func.count())
        .select_from(Project)
        .where(Project.owner_id == user.id, Project.status == ProjectStatus.active)
    ) or 0
    base = UserOut.model_validate(user).model_dump()
    return ProfileOut(**base, tasks_completed=tasks_completed, active_projects=active_projects)

@router.get("/profile", response_model=ProfileOut)
def get_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfileOut:
    return _profile_out(db, user)

# role is deliberately absent from ProfileUpdateIn; see PUT /users/{user_id}/role
@router.put("/profile", response_model=ProfileOut)
def update_profile(
    payload: ProfileUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfileOut:
    if payload.name is None and payload.department is None:
        raise HTTPException(status_code=400, detail="no fields to update")

    if payload.name is not None:
        user.name = payload.name
        user.avatar = avatar_url(user.name) if user.provider == AuthProvider.email.value else user.avatar
    if payload.department is not None:
        user.department = payload.department

    db.add(user)
    db.commit()
    db.refresh(user)
    return _profile_out(db, user)

@router.put("/change-password")
def change_password(
    payload: ChangePasswordIn,
    principal: Principal = Depends(require_permission(Permission.change_own_password)),
    db: Session = Depends(get_db),
) -> dict:
    user = db.get(User, principal.id)
    if user is None:
        raise HTTPException(status_code=404, detail="user not found")

    if user.provider != AuthProvider.email.value or not user.password_hash:
        raise HTTPException(status_code=400, detail="cannot change password for oauth users")

    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=401, detail="current password is incorrect")

    user.password_hash = hash_password(payload.new_password)
    db.add(user)
    db.commit()
    return {"changed": True}

@router.get("/permissions", response_model=PermissionsOut)
def get_permissions(
    principal: Principal = Depends(get_principal),
    table: PermissionTable = Depends(get_permission_table),
) -> PermissionsOut:
    perms = sorted(p.value for p in table.permissions_for(principal.role))
    return PermissionsOut(role=principal.role.value, permissions=perms)
