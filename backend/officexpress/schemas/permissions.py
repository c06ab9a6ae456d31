"""Pydantic schemas for permission blobs, the registry and the matrix editor."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from officexpress.auth.matrix import MatrixAction, MatrixRow
from officexpress.auth.sections import SECTIONS, Capability, Section, lookup_section


class PermissionLevel(BaseModel):
    """Stored grant of one CRUD section."""
    view: bool = False
    edit: bool = False
    download_csv: bool | None = Field(default=None, alias="downloadCsv")

    model_config = {"populate_by_name": True, "extra": "forbid"}


class PermissionsUpdate(BaseModel):
    """Whole-object save from the employee editor.

    Keys must be registered sections; flag sections take a boolean and
    CRUD sections take a PermissionLevel.
    """
    permissions: dict[str, Any]

    @field_validator("permissions")
    @classmethod
    def _check_shape(cls, value: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, grant in value.items():
            section = lookup_section(key)
            if section is None:
                raise ValueError(f"Unknown permission section: {key}")

            if section.is_flag:
                if not isinstance(grant, bool):
                    raise ValueError(f"{key} is a standalone action and takes true/false")
                cleaned[key] = grant
                continue

            level = PermissionLevel.model_validate(grant)
            if level.download_csv is not None and not section.has_csv:
                raise ValueError(f"{key} does not support CSV download")
            cleaned[key] = level.model_dump(by_alias=True, exclude_none=True)
        return cleaned


class SectionOut(BaseModel):
    key: Section
    label: str
    description: str
    icon: str
    kind: str
    capabilities: list[Capability]


def section_catalog() -> list[SectionOut]:
    return [
        SectionOut(
            key=s.key,
            label=s.label,
            description=s.description,
            icon=s.icon,
            kind=s.kind.value,
            capabilities=sorted(s.capabilities, key=lambda c: list(Capability).index(c)),
        )
        for s in SECTIONS
    ]


class MatrixCellOut(BaseModel):
    available: bool
    checked: bool = False
    action: MatrixAction | None = None
    test_id: str | None = None

    model_config = {"from_attributes": True}


class MatrixRowOut(BaseModel):
    key: Section
    label: str
    description: str
    icon: str
    is_flag: bool
    view: MatrixCellOut
    edit: MatrixCellOut
    csv: MatrixCellOut

    model_config = {"from_attributes": True}

    @classmethod
    def from_row(cls, row: MatrixRow) -> "MatrixRowOut":
        return cls.model_validate(row)


class MatrixOut(BaseModel):
    help: dict[str, str]
    rows: list[MatrixRowOut]
    permissions: dict[str, Any]


class MatrixToggle(BaseModel):
    """One switch flipped in the matrix editor."""
    section: Section
    action: MatrixAction
    value: bool


class PermissionCheckOut(BaseModel):
    section: Section
    capability: Capability | None = None
    allowed: bool
