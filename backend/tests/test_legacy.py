"""Tests for legacy permission blob conversion."""

import pytest

from officexpress.auth.legacy import convert_legacy_permissions, is_already_migrated
from officexpress.auth.permissions import has_permission


@pytest.mark.unit
class TestConvertLegacyPermissions:
    def test_boolean_becomes_view_and_edit(self):
        assert convert_legacy_permissions({"blogPosts": True}) == {
            "blogPosts": {"view": True, "edit": True},
        }

    def test_csv_sections_gain_download(self):
        assert convert_legacy_permissions({"rentalBookings": True, "contactMessages": False}) == {
            "rentalBookings": {"view": True, "edit": True, "downloadCsv": True},
            "contactMessages": {"view": False, "edit": False, "downloadCsv": False},
        }

    def test_drivers_renamed(self):
        converted = convert_legacy_permissions({"drivers": True})
        assert "drivers" not in converted
        assert converted["driverManagement"] == {"view": True, "edit": True, "downloadCsv": True}

    def test_flags_keep_boolean(self):
        converted = convert_legacy_permissions({"driverAssignment": True, "walletRefunds": False})
        assert converted == {"driverAssignment": True, "walletRefunds": False}

    def test_granular_records_copied(self):
        blob = {"blogPosts": {"view": True, "edit": False}, "legalPages": True}
        converted = convert_legacy_permissions(blob)
        assert converted["blogPosts"] == {"view": True, "edit": False}
        assert converted["blogPosts"] is not blob["blogPosts"]

    def test_non_mapping(self):
        assert convert_legacy_permissions(None) == {}
        assert convert_legacy_permissions(["blogPosts"]) == {}

    def test_converted_blob_is_honoured(self):
        """A legacy grant stops being inert once converted."""
        legacy = {"role": "employee", "permissions": {"rentalBookings": True}}
        assert has_permission(legacy, "rentalBookings", "view") is False

        migrated = {"role": "employee", "permissions": convert_legacy_permissions(legacy["permissions"])}
        assert has_permission(migrated, "rentalBookings", "view") is True
        assert has_permission(migrated, "rentalBookings", "downloadCsv") is True


@pytest.mark.unit
class TestIsAlreadyMigrated:
    def test_detects_granular_record(self):
        assert is_already_migrated({"blogPosts": {"view": False, "edit": False}})

    def test_flags_only_is_not_migrated(self):
        assert not is_already_migrated({"driverAssignment": True, "blogPosts": True})

    def test_empty(self):
        assert not is_already_migrated({})
        assert not is_already_migrated(None)
