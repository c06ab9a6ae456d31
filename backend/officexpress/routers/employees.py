"""Employee management: accounts and their section permissions.

Endpoints:
    GET    /api/employees                              List employees
    POST   /api/employees                              Create employee (superadmin)
    GET    /api/employees/{user_id}                    Employee detail
    DELETE /api/employees/{user_id}                    Deactivate employee (superadmin)
    PUT    /api/employees/{user_id}/permissions        Replace permission blob (superadmin)
    GET    /api/employees/{user_id}/permission-matrix  Matrix editor rows (superadmin)
    POST   /api/employees/{user_id}/permission-matrix  Apply one toggle (superadmin)

Reading requires `employeeManagement.view`; every mutation is reserved for
superadmins, who are the only role allowed to change permissions.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from officexpress.auth.deps import require_permission, require_superadmin
from officexpress.auth.matrix import PERMISSION_LEVEL_HELP, PermissionMatrix
from officexpress.auth.password import generate_temporary_password, hash_password
from officexpress.auth.permissions import empty_permissions
from officexpress.auth.sections import Capability, Section
from officexpress.database import get_db
from officexpress.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from officexpress.models.user import User, UserRole
from officexpress.schemas.common import PaginatedResponse
from officexpress.schemas.employees import (
    CreateEmployeeRequest,
    EmployeeCreated,
    EmployeeSummary,
)
from officexpress.schemas.permissions import (
    MatrixOut,
    MatrixRowOut,
    MatrixToggle,
    PermissionsUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

can_view_employees = require_permission(Section.EMPLOYEE_MANAGEMENT, Capability.VIEW)


async def _get_employee(db: AsyncSession, user_id: str, editing: bool = True) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id, User.role == UserRole.EMPLOYEE)
    )
    employee = result.scalar_one_or_none()
    if not employee and editing:
        # Superadmins are never edited through permission records
        other = await db.execute(select(User.role).where(User.id == user_id))
        if other.scalar_one_or_none() == UserRole.SUPERADMIN:
            raise BusinessLogicError(
                "Superadmin permissions cannot be edited",
                error_code="SUPERADMIN_NOT_EDITABLE",
            )
    if not employee:
        raise ResourceNotFoundError("Employee", user_id)
    return employee


def _matrix_out(employee: User) -> MatrixOut:
    matrix = PermissionMatrix(employee.permissions, on_change=lambda _: None)
    return MatrixOut(
        help=PERMISSION_LEVEL_HELP,
        rows=[MatrixRowOut.from_row(r) for r in matrix.rows()],
        permissions=employee.permissions or {},
    )


# ── GET /api/employees ───────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[EmployeeSummary])
async def list_employees(
    include_inactive: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(can_view_employees),
):
    base = select(User).where(User.role == UserRole.EMPLOYEE)
    if not include_inactive:
        base = base.where(User.is_active == True)  # noqa: E712

    total = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar_one()
    result = await db.execute(base.order_by(User.created_at.desc()).limit(limit).offset(offset))
    items = [EmployeeSummary.model_validate(u) for u in result.scalars().all()]
    return PaginatedResponse[EmployeeSummary](items=items, total=total, limit=limit, offset=offset)


# ── POST /api/employees ──────────────────────────────────────

@router.post("/", response_model=EmployeeCreated, status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: CreateEmployeeRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_superadmin),
):
    """Create an employee with no permissions and a one-time password."""
    existing = await db.execute(select(User).where(User.phone == body.phone))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Phone already registered")

    if body.email:
        existing_email = await db.execute(select(User).where(User.email == body.email))
        if existing_email.scalar_one_or_none():
            raise HTTPException(status_code=400, detail="Email already registered")

    temp_password = generate_temporary_password()
    employee = User(
        phone=body.phone,
        email=body.email,
        name=body.name,
        hashed_password=hash_password(temp_password),
        role=UserRole.EMPLOYEE,
        permissions=empty_permissions(),
        temporary_password=True,
        office_location=body.office_location,
        created_by=admin.id,
    )
    db.add(employee)
    await db.flush()
    await db.refresh(employee)

    logger.info("Employee %s created by %s", employee.id, admin.id)
    return EmployeeCreated(
        employee=EmployeeSummary.model_validate(employee),
        temporary_password=temp_password,
    )


# ── GET /api/employees/{user_id} ─────────────────────────────

@router.get("/{user_id}", response_model=EmployeeSummary)
async def get_employee(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(can_view_employees),
):
    return EmployeeSummary.model_validate(await _get_employee(db, user_id, editing=False))


# ── DELETE /api/employees/{user_id} ──────────────────────────

@router.delete("/{user_id}", response_model=EmployeeSummary)
async def deactivate_employee(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_superadmin),
):
    employee = await _get_employee(db, user_id)
    employee.is_active = False
    await db.flush()
    await db.refresh(employee)

    logger.info("Employee %s deactivated by %s", employee.id, admin.id)
    return EmployeeSummary.model_validate(employee)


# ── PUT /api/employees/{user_id}/permissions ─────────────────

@router.put("/{user_id}/permissions", response_model=EmployeeSummary)
async def replace_permissions(
    user_id: str,
    body: PermissionsUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_superadmin),
):
    """Save the whole permission object produced by the editor."""
    employee = await _get_employee(db, user_id)
    employee.permissions = body.permissions
    await db.flush()
    await db.refresh(employee)

    logger.info(
        "Permissions of %s replaced by %s (%d sections)",
        employee.id, admin.id, len(body.permissions),
    )
    return EmployeeSummary.model_validate(employee)


# ── Permission matrix editor ─────────────────────────────────

@router.get("/{user_id}/permission-matrix", response_model=MatrixOut)
async def get_permission_matrix(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_superadmin),
):
    return _matrix_out(await _get_employee(db, user_id))


@router.post("/{user_id}/permission-matrix", response_model=MatrixOut)
async def toggle_permission(
    user_id: str,
    body: MatrixToggle,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_superadmin),
):
    """Flip one switch and persist the resulting blob."""
    employee = await _get_employee(db, user_id)

    def _save(updated: dict) -> None:
        employee.permissions = updated

    PermissionMatrix(employee.permissions, on_change=_save).toggle(
        body.section, body.action, body.value
    )
    await db.flush()
    await db.refresh(employee)

    logger.info(
        "Permission %s.%s=%s set on %s by %s",
        body.section.value, body.action.value, body.value, employee.id, admin.id,
    )
    return _matrix_out(employee)
