"""Section-based permission model for the OfficeXpress admin.

Design:
  - Sections and the capabilities each one supports are declared once in
    `auth.sections` (not in the DB).
  - A user's grants live in `User.permissions`, a JSON blob keyed by
    section:
        CRUD section → {"view": bool, "edit": bool, "downloadCsv": bool}
        FLAG section → bool
  - Anything missing, malformed, or of the wrong shape for its section
    resolves to "not permitted" (default-deny).
  - Superadmins bypass the blob entirely; every check is true.

`has_permission` answers a single question; `resolve_effective_permissions`
computes the full matrix for a user (profile endpoint, editor state).
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from officexpress.auth.sections import (
    REGISTRY,
    SECTIONS,
    Capability,
    Section,
    SectionDef,
    capability_known_or_deny,
    parse_capability,
    resolve_section_or_deny,
)


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    EMPLOYEE = "employee"
    SUPERADMIN = "superadmin"


# ── Resolved grants (tagged variants) ───────────────────────

@dataclass(frozen=True)
class CrudAccess:
    view: bool = False
    edit: bool = False
    download_csv: bool = False

    def grants(self, capability: Capability) -> bool:
        if capability is Capability.VIEW:
            return self.view
        if capability is Capability.EDIT:
            return self.edit
        return self.download_csv

    @property
    def any(self) -> bool:
        return self.view or self.edit or self.download_csv


@dataclass(frozen=True)
class FlagAccess:
    granted: bool = False


Access = Union[CrudAccess, FlagAccess]


class EffectivePermissions(dict):
    """Ordered Section → Access mapping covering every registered section."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape (camelCase keys)."""
        out: dict[str, Any] = {}
        for section, access in self.items():
            if isinstance(access, FlagAccess):
                out[section.value] = access.granted
                continue
            record: dict[str, bool] = {"view": access.view, "edit": access.edit}
            if REGISTRY[section].has_csv:
                record["downloadCsv"] = access.download_csv
            out[section.value] = record
        return out


# ── Defaults ────────────────────────────────────────────────

def empty_permissions() -> dict[str, Any]:
    """The permission blob a new employee starts with (grants nothing)."""
    return {}


# ── Role helpers ────────────────────────────────────────────

def _attr(user: Any, name: str) -> Any:
    # Accept ORM rows, pydantic models and plain {"role", "permissions"} dicts.
    if isinstance(user, Mapping):
        return user.get(name)
    return getattr(user, name, None)


def _role_value(user: Any) -> str | None:
    role = _attr(user, "role")
    if isinstance(role, enum.Enum):
        return role.value
    return role


def is_superadmin(user: Any) -> bool:
    return user is not None and _role_value(user) == UserRole.SUPERADMIN.value


def is_staff(user: Any) -> bool:
    """Employees and superadmins may enter the admin area at all."""
    return user is not None and _role_value(user) in (
        UserRole.EMPLOYEE.value,
        UserRole.SUPERADMIN.value,
    )


def _stored_permissions(user: Any) -> Mapping[str, Any]:
    perms = _attr(user, "permissions")
    return perms if isinstance(perms, Mapping) else {}


# ── Per-section resolution ──────────────────────────────────

def _leaf(record: Mapping[str, Any], capability: Capability) -> bool:
    # Only a real JSON `true` grants; 1, "yes" and friends do not.
    return record.get(capability.value) is True


def _resolve_section(section: SectionDef, stored: Mapping[str, Any]) -> Access:
    value = stored.get(section.key.value)

    if section.is_flag:
        return FlagAccess(granted=value is True)

    if not isinstance(value, Mapping):
        return CrudAccess()
    return CrudAccess(
        view=section.supports(Capability.VIEW) and _leaf(value, Capability.VIEW),
        edit=section.supports(Capability.EDIT) and _leaf(value, Capability.EDIT),
        download_csv=section.supports(Capability.DOWNLOAD_CSV)
        and _leaf(value, Capability.DOWNLOAD_CSV),
    )


def _superadmin_access(section: SectionDef) -> Access:
    if section.is_flag:
        return FlagAccess(granted=True)
    return CrudAccess(
        view=section.supports(Capability.VIEW),
        edit=section.supports(Capability.EDIT),
        download_csv=section.supports(Capability.DOWNLOAD_CSV),
    )


# ── Public API ──────────────────────────────────────────────

def has_permission(
    user: Any,
    section: Section | str,
    capability: Capability | str | None = None,
) -> bool:
    """Can `user` exercise `capability` on `section`?

    Resolution order:
      1. Superadmin → True.
      2. Flag section → the stored boolean; `capability` is ignored.
      3. CRUD section → the stored leaf for `capability`, False when the
         section does not declare it. With no capability, True if any
         declared capability is granted.

    `user` needs `role` and `permissions` (attributes or mapping keys).
    An unregistered `section` raises `UnregisteredSectionError` outside
    production and is denied in production. Unknown capability names on
    CRUD sections are handled the same way (`UnknownCapabilityError`).
    """
    if user is None:
        return False
    if is_superadmin(user):
        return True

    definition = resolve_section_or_deny(section)
    if definition is None:
        return False

    access = _resolve_section(definition, _stored_permissions(user))
    if isinstance(access, FlagAccess):
        return access.granted

    if not capability_known_or_deny(capability):
        return False
    cap = parse_capability(capability)
    if cap is None:
        return access.any
    return access.grants(cap)


def resolve_effective_permissions(user: Any) -> EffectivePermissions:
    """Compute the concrete grant for every registered section.

    Pure: the same user state always yields an equal result.
    """
    if is_superadmin(user):
        return EffectivePermissions((s.key, _superadmin_access(s)) for s in SECTIONS)

    stored = _stored_permissions(user)
    return EffectivePermissions((s.key, _resolve_section(s, stored)) for s in SECTIONS)
