"""Conversion of legacy permission blobs.

Old format (one boolean per section):
    {"blogPosts": true, "drivers": false, "driverAssignment": true}

Current format:
    {"blogPosts": {"view": true, "edit": true},
     "driverManagement": {"view": false, "edit": false, "downloadCsv": false},
     "driverAssignment": true}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from officexpress.auth.sections import CSV_SECTIONS, FLAG_SECTIONS, Section

RENAMED_KEYS: dict[str, str] = {
    "drivers": Section.DRIVER_MANAGEMENT.value,
}

_CSV_KEYS = {s.value for s in CSV_SECTIONS}
_FLAG_KEYS = {s.value for s in FLAG_SECTIONS}


def is_already_migrated(blob: Any) -> bool:
    """True if any value is already a granular record with a `view` key."""
    if not isinstance(blob, Mapping):
        return False
    return any(isinstance(v, Mapping) and "view" in v for v in blob.values())


def convert_legacy_permissions(blob: Any) -> dict[str, Any]:
    """Turn a legacy boolean blob into the granular format.

    Flag sections keep their boolean; every other boolean grants (or denies)
    view and edit together, plus downloadCsv where the section exports CSV.
    Records already in the new format are copied unchanged.
    """
    if not isinstance(blob, Mapping):
        return {}

    converted: dict[str, Any] = {}
    for key, value in blob.items():
        if key in _FLAG_KEYS:
            converted[key] = value is True
            continue

        new_key = RENAMED_KEYS.get(key, key)

        if isinstance(value, bool):
            record = {"view": value, "edit": value}
            if new_key in _CSV_KEYS:
                record["downloadCsv"] = value
            converted[new_key] = record
        elif isinstance(value, Mapping):
            converted[new_key] = dict(value)

    return converted
