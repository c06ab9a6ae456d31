from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

# bcrypt only accepts passwords up to this many bytes
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class UserOut(BaseModel):
    id: str
    phone: str
    email: str | None
    name: str
    role: str
    is_active: bool
    permissions: dict[str, Any]
    effective_permissions: dict[str, Any]
    needs_password_change: bool = False
    office_location: str | None = None
    home_location: str | None = None


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    phone: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserOut


class RefreshRequest(BaseModel):
    refresh_token: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)

    @field_validator("new_password")
    @classmethod
    def _new_password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


# ── First-run setup ──────────────────────────────────────────

class SetupStatus(BaseModel):
    needs_setup: bool


class SetupSuperadminRequest(BaseModel):
    """Creates the very first superadmin; refused once one exists."""
    phone: str
    name: str
    email: EmailStr | None = None
    password: str = Field(min_length=8)

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)
