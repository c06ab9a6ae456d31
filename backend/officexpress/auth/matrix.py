"""Permission-matrix editor model.

The admin UI renders one row per registered section with three columns
(View / Edit / Download CSV). This module produces exactly that table
from a permission blob and computes the next blob for a single toggle.
It never stores or persists anything: `PermissionMatrix` hands every new
blob to its `on_change` callback and the caller decides what to do.

Usage:
    matrix = PermissionMatrix(user.permissions, on_change=save)
    matrix.toggle("rentalBookings", "downloadCsv", True)
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from officexpress.auth.sections import SECTIONS, Capability, Section, SectionDef, get_section

PERMISSION_LEVEL_HELP: dict[str, str] = {
    "view": "Can see and read data in this section",
    "edit": "Can create, update, and delete data in this section",
    "downloadCsv": "Can export data to spreadsheet files",
}


class MatrixAction(str, enum.Enum):
    VIEW = "view"
    EDIT = "edit"
    DOWNLOAD_CSV = "downloadCsv"
    SPECIAL = "special"  # the standalone boolean of a flag section


class InvalidPermissionChange(ValueError):
    """The requested toggle does not exist for that section."""


@dataclass(frozen=True)
class MatrixCell:
    available: bool
    checked: bool = False
    action: MatrixAction | None = None
    test_id: str | None = None

    @classmethod
    def not_applicable(cls) -> "MatrixCell":
        return cls(available=False)


@dataclass(frozen=True)
class MatrixRow:
    key: Section
    label: str
    description: str
    icon: str
    is_flag: bool
    view: MatrixCell
    edit: MatrixCell
    csv: MatrixCell


def _switch(section: Section, action: MatrixAction, checked: bool, suffix: str) -> MatrixCell:
    return MatrixCell(
        available=True,
        checked=checked,
        action=action,
        test_id=f"switch-{section.value}-{suffix}",
    )


def _row(section: SectionDef, permissions: Mapping[str, Any]) -> MatrixRow:
    stored = permissions.get(section.key.value)

    if section.is_flag:
        return MatrixRow(
            key=section.key,
            label=section.label,
            description=section.description,
            icon=section.icon,
            is_flag=True,
            view=MatrixCell.not_applicable(),
            edit=_switch(section.key, MatrixAction.SPECIAL, stored is True, "assign"),
            csv=MatrixCell.not_applicable(),
        )

    record = stored if isinstance(stored, Mapping) else {}
    csv = (
        _switch(section.key, MatrixAction.DOWNLOAD_CSV, record.get("downloadCsv") is True, "csv")
        if section.has_csv
        else MatrixCell.not_applicable()
    )
    return MatrixRow(
        key=section.key,
        label=section.label,
        description=section.description,
        icon=section.icon,
        is_flag=False,
        view=_switch(section.key, MatrixAction.VIEW, record.get("view") is True, "view"),
        edit=_switch(section.key, MatrixAction.EDIT, record.get("edit") is True, "edit"),
        csv=csv,
    )


def build_matrix(permissions: Mapping[str, Any] | None) -> list[MatrixRow]:
    """One row per registered section, in registry order."""
    perms = permissions if isinstance(permissions, Mapping) else {}
    return [_row(s, perms) for s in SECTIONS]


def apply_change(
    permissions: Mapping[str, Any] | None,
    section: Section | str,
    action: MatrixAction | str,
    value: bool,
) -> dict[str, Any]:
    """Return a new blob with one toggle applied.

    The input is never mutated and every other key is carried over as-is.
    CRUD toggles start from the stored record (or {view: false, edit: false})
    and overwrite one leaf; `special` stores the bare boolean of a flag.
    """
    definition = get_section(section)
    try:
        act = MatrixAction(action)
    except ValueError:
        raise InvalidPermissionChange(f"Unknown matrix action: {action!r}")

    current = dict(permissions) if isinstance(permissions, Mapping) else {}
    key = definition.key.value

    if definition.is_flag:
        if act is not MatrixAction.SPECIAL:
            raise InvalidPermissionChange(f"{key} is a standalone action; only 'special' applies")
        return {**current, key: bool(value)}

    if act is MatrixAction.SPECIAL or not definition.supports(Capability(act.value)):
        raise InvalidPermissionChange(f"{key} does not support '{act.value}'")

    stored = current.get(key)
    base = dict(stored) if isinstance(stored, Mapping) else {"view": False, "edit": False}
    return {**current, key: {**base, act.value: bool(value)}}


class PermissionMatrix:
    """Editor state holder mirroring the UI props contract.

    Holds the blob it was given and forwards each edit through `on_change`.
    """

    def __init__(
        self,
        permissions: Mapping[str, Any] | None,
        on_change: Callable[[dict[str, Any]], None],
    ):
        self.permissions = permissions if isinstance(permissions, Mapping) else {}
        self.on_change = on_change

    def rows(self) -> list[MatrixRow]:
        return build_matrix(self.permissions)

    def toggle(self, section: Section | str, action: MatrixAction | str, value: bool) -> dict[str, Any]:
        updated = apply_change(self.permissions, section, action, value)
        self.on_change(updated)
        return updated
