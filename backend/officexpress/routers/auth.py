"""Auth routes: login, refresh, profile, password change, first-run setup.

Route overview:
  POST /login               - phone + password login
  POST /refresh             - exchange a refresh token for a new pair
  GET  /user                - current user profile + effective permissions
  POST /change-password     - change own password (clears temporary flag)
  GET  /setup-status        - whether a superadmin still needs creating
  POST /setup-superadmin    - create the first superadmin
  GET  /permissions/check   - ask whether the caller holds a capability
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from officexpress.auth.deps import get_current_user, require_staff
from officexpress.auth.jwt import create_access_token, create_refresh_token, decode_token
from officexpress.auth.password import hash_password, verify_password
from officexpress.auth.permissions import (
    empty_permissions,
    has_permission,
    resolve_effective_permissions,
)
from officexpress.auth.sections import Capability, Section
from officexpress.database import get_db
from officexpress.models.user import User, UserRole
from officexpress.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    SetupStatus,
    SetupSuperadminRequest,
    TokenResponse,
    UserOut,
)
from officexpress.schemas.permissions import PermissionCheckOut

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def build_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        phone=user.phone,
        email=user.email,
        name=user.name,
        role=user.role.value,
        is_active=user.is_active,
        permissions=user.permissions or {},
        effective_permissions=resolve_effective_permissions(user).to_dict(),
        needs_password_change=bool(user.temporary_password),
        office_location=user.office_location,
        home_location=user.home_location,
    )


def _build_token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user_id=user.id, role=user.role.value),
        refresh_token=create_refresh_token(user_id=user.id, role=user.role.value),
        user=build_user_out(user),
    )


async def _superadmin_exists(db: AsyncSession) -> bool:
    result = await db.execute(
        select(func.count()).select_from(User).where(User.role == UserRole.SUPERADMIN)
    )
    return result.scalar_one() > 0


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.phone == body.phone))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return _build_token_response(user)


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new access + refresh token pair."""
    payload = decode_token(body.refresh_token)
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    result = await db.execute(select(User).where(User.id == payload.get("sub")))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    return _build_token_response(user)


# ── GET /user ────────────────────────────────────────────────

@router.get("/user", response_model=UserOut)
async def current_user(user: User = Depends(get_current_user)):
    """Return the caller's profile, stored grants and effective grants."""
    return build_user_out(user)


# ── POST /change-password ────────────────────────────────────

@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(body.current_password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.hashed_password = hash_password(body.new_password)
    user.temporary_password = False
    await db.flush()


# ── First-run superadmin setup ───────────────────────────────

@router.get("/setup-status", response_model=SetupStatus)
async def setup_status(db: AsyncSession = Depends(get_db)):
    return SetupStatus(needs_setup=not await _superadmin_exists(db))


@router.post("/setup-superadmin", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def setup_superadmin(body: SetupSuperadminRequest, db: AsyncSession = Depends(get_db)):
    """Create the first superadmin. Only allowed while none exists."""
    if await _superadmin_exists(db):
        raise HTTPException(status_code=403, detail="Superadmin already exists")

    existing = await db.execute(select(User).where(User.phone == body.phone))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Phone already registered")

    user = User(
        phone=body.phone,
        email=body.email,
        name=body.name,
        hashed_password=hash_password(body.password),
        role=UserRole.SUPERADMIN,
        permissions=empty_permissions(),
    )
    db.add(user)
    await db.flush()

    logger.info("Superadmin %s created via first-run setup", user.id)
    return _build_token_response(user)


# ── GET /permissions/check ───────────────────────────────────

@router.get("/permissions/check", response_model=PermissionCheckOut)
async def check_permission(
    section: Section = Query(...),
    capability: Capability | None = Query(None),
    user: User = Depends(require_staff),
):
    """Answer "may I?" for one section, e.g. before showing an export button.

    Customers never hold admin permissions, so the endpoint is staff-only.
    """
    return PermissionCheckOut(
        section=section,
        capability=capability,
        allowed=has_permission(user, section, capability),
    )
