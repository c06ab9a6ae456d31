"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_user           → decode JWT, load user from DB, return User
  require_role(...)          → restrict to specific roles
  require_staff              → employees and superadmins
  require_superadmin         → superadmins only
  require_permission(...)    → restrict by section capability
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officexpress.auth.jwt import decode_token
from officexpress.auth.permissions import has_permission, is_staff
from officexpress.auth.sections import Capability, Section, get_section
from officexpress.database import get_db
from officexpress.middleware.exceptions import PermissionDeniedError
from officexpress.models.user import User, UserRole

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ── Core user dependency ────────────────────────────────────

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the JWT and load the user row.

    The row (not the token) carries role and permissions, so changes made
    by a superadmin apply on the user's next request.
    """
    payload = decode_token(token)
    user_id: str | None = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return user


# ── Role-based access control ───────────────────────────────

async def require_staff(user: User = Depends(get_current_user)) -> User:
    """Restrict to employees and superadmins (the admin area)."""
    if not is_staff(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Employee access required",
        )
    return user


def require_role(*roles: UserRole):
    """Dependency factory: restrict to one or more roles.

    Usage:
        @router.get("/superadmin-only")
        async def view(user: User = Depends(require_role(UserRole.SUPERADMIN))):
            ...
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return user

    return _check


require_superadmin = require_role(UserRole.SUPERADMIN)


# ── Permission-based access control ─────────────────────────

def require_permission(section: Section, capability: Capability | None = None):
    """Dependency factory: restrict to users holding `capability` on `section`.

    The section is validated when the route is declared, so a typo fails
    at import time rather than on a request.

    Usage:
        @router.get("/rental-bookings/export")
        async def export(
            user: User = Depends(
                require_permission(Section.RENTAL_BOOKINGS, Capability.DOWNLOAD_CSV)
            ),
        ):
            ...
    """
    definition = get_section(section)

    async def _check(user: User = Depends(require_staff)) -> User:
        if not has_permission(user, definition.key, capability):
            logger.info(
                "Denied %s on %s for user %s",
                capability.value if capability else "access",
                definition.key.value,
                user.id,
            )
            raise PermissionDeniedError(f"Forbidden: {definition.key.value} permission required")
        return user

    return _check
