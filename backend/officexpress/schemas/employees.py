"""Pydantic schemas for employee management."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr

from officexpress.auth.permissions import UserRole


class EmployeeSummary(BaseModel):
    id: str
    phone: str
    email: str | None = None
    name: str
    role: UserRole
    is_active: bool
    permissions: dict[str, Any]
    temporary_password: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CreateEmployeeRequest(BaseModel):
    phone: str
    name: str
    email: EmailStr | None = None
    office_location: str | None = None


class EmployeeCreated(BaseModel):
    employee: EmployeeSummary
    # Shown once; the employee must change it on first login
    temporary_password: str
