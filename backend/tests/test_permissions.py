"""Tests for the section permission model."""

import itertools
import logging
from types import SimpleNamespace

import pytest

from officexpress.auth.permissions import (
    CrudAccess,
    FlagAccess,
    UserRole,
    empty_permissions,
    has_permission,
    is_staff,
    is_superadmin,
    resolve_effective_permissions,
)
from officexpress.auth.sections import (
    CSV_SECTIONS,
    FLAG_SECTIONS,
    SECTIONS,
    Capability,
    Section,
    UnknownCapabilityError,
    UnregisteredSectionError,
    get_section,
)
from officexpress.config import settings

ALL_CAPABILITIES = [None, *Capability]


def make_user(role="employee", permissions=None):
    return SimpleNamespace(role=role, permissions=permissions)


@pytest.mark.unit
class TestRegistry:
    def test_every_section_registered_once(self):
        assert len(SECTIONS) == len(Section)
        assert {s.key for s in SECTIONS} == set(Section)

    def test_flag_sections_declare_no_capabilities(self):
        for key in FLAG_SECTIONS:
            assert get_section(key).capabilities == frozenset()

    def test_csv_sections(self):
        assert Section.RENTAL_BOOKINGS in CSV_SECTIONS
        assert Section.BLOG_POSTS not in CSV_SECTIONS
        assert Section.DRIVER_ASSIGNMENT not in CSV_SECTIONS

    def test_get_section_accepts_string_keys(self):
        assert get_section("walletRefunds").key is Section.WALLET_REFUNDS

    def test_get_section_rejects_unknown_key(self):
        with pytest.raises(UnregisteredSectionError):
            get_section("carpoolAiTrips")


@pytest.mark.unit
class TestHasPermission:
    def test_default_deny_for_empty_permissions(self):
        """No grants means every section and capability is denied."""
        user = make_user(permissions=empty_permissions())
        for section, capability in itertools.product(Section, ALL_CAPABILITIES):
            assert has_permission(user, section, capability) is False

    def test_superadmin_bypass(self):
        """Superadmins pass every check regardless of stored data."""
        for permissions in ({}, None, {"blogPosts": {"view": False}}, {"driverAssignment": False}):
            user = make_user(role="superadmin", permissions=permissions)
            for section, capability in itertools.product(Section, ALL_CAPABILITIES):
                assert has_permission(user, section, capability) is True

    def test_superadmin_role_enum(self):
        user = make_user(role=UserRole.SUPERADMIN, permissions={})
        assert has_permission(user, "employeeManagement", "edit") is True

    def test_missing_leaf_is_false(self):
        user = make_user(permissions={"blogPosts": {"view": True}})
        assert has_permission(user, Section.BLOG_POSTS, Capability.VIEW) is True
        assert has_permission(user, Section.BLOG_POSTS, Capability.EDIT) is False

    def test_undeclared_capability_is_inert(self):
        """downloadCsv on a section without CSV export never grants."""
        user = make_user(permissions={"blogPosts": {"view": True, "edit": True, "downloadCsv": True}})
        assert has_permission(user, "blogPosts", "downloadCsv") is False

    def test_flag_section_ignores_record_shape(self):
        """A CRUD-shaped record stored at a flag key must not grant the flag."""
        user = make_user(permissions={"driverAssignment": {"view": True, "edit": True}})
        assert has_permission(user, "driverAssignment") is False
        assert has_permission(user, "driverAssignment", "edit") is False

    def test_boolean_at_crud_key_is_inert(self):
        """Legacy boolean grants are not honoured until migrated."""
        user = make_user(permissions={"rentalBookings": True})
        assert has_permission(user, "rentalBookings", "view") is False

    def test_only_json_true_grants(self):
        user = make_user(permissions={
            "blogPosts": {"view": 1, "edit": "yes"},
            "walletRefunds": "true",
        })
        assert has_permission(user, "blogPosts", "view") is False
        assert has_permission(user, "blogPosts", "edit") is False
        assert has_permission(user, "walletRefunds") is False

    def test_no_capability_means_any_on_crud_section(self):
        user = make_user(permissions={"contactMessages": {"view": False, "edit": False, "downloadCsv": True}})
        assert has_permission(user, "contactMessages") is True
        assert has_permission(make_user(permissions={"contactMessages": {"view": False}}), "contactMessages") is False

    def test_missing_or_malformed_blob(self):
        for permissions in (None, [], "blogPosts", 42):
            user = make_user(permissions=permissions)
            assert has_permission(user, "blogPosts", "view") is False

    def test_anonymous_user(self):
        assert has_permission(None, "blogPosts", "view") is False

    def test_plain_dict_user(self):
        user = {"role": "employee", "permissions": {"legalPages": {"view": True, "edit": True}}}
        assert has_permission(user, "legalPages", "edit") is True

    def test_unregistered_section_raises_outside_production(self):
        user = make_user(permissions={"carpoolAiTrips": {"view": True}})
        with pytest.raises(UnregisteredSectionError):
            has_permission(user, "carpoolAiTrips", "view")

    def test_unregistered_section_denied_in_production(self, monkeypatch, caplog):
        monkeypatch.setattr(settings, "environment", "production")
        user = make_user(permissions={"carpoolAiTrips": {"view": True}})

        with caplog.at_level(logging.WARNING):
            assert has_permission(user, "carpoolAiTrips", "view") is False
        assert "carpoolAiTrips" in caplog.text

    def test_unknown_capability_raises_outside_production(self):
        user = make_user(permissions={"blogPosts": {"view": True}})
        with pytest.raises(UnknownCapabilityError):
            has_permission(user, "blogPosts", "delete")

    def test_unknown_capability_denied_in_production(self, monkeypatch, caplog):
        monkeypatch.setattr(settings, "environment", "production")
        user = make_user(permissions={"blogPosts": {"view": True, "edit": True}})

        with caplog.at_level(logging.WARNING):
            assert has_permission(user, "blogPosts", "delete") is False
        assert "delete" in caplog.text

    def test_unknown_capability_is_an_assertion(self):
        assert issubclass(UnknownCapabilityError, AssertionError)


@pytest.mark.unit
class TestScenarios:
    def test_employee_without_grants_cannot_view_rentals(self):
        user = make_user(permissions={})
        assert has_permission(user, "rentalBookings", "view") is False

    def test_absent_csv_key_denies_export(self):
        user = make_user(permissions={"rentalBookings": {"view": True, "edit": False}})
        assert has_permission(user, "rentalBookings", "downloadCsv") is False

    def test_superadmin_manages_employees(self):
        user = make_user(role="superadmin", permissions={})
        assert has_permission(user, "employeeManagement", "edit") is True

    def test_flag_grant_ignores_capability_argument(self):
        user = make_user(permissions={"driverAssignment": True})
        assert has_permission(user, "driverAssignment") is True
        assert has_permission(user, "driverAssignment", "edit") is True
        assert has_permission(user, "driverAssignment", "downloadCsv") is True


@pytest.mark.unit
class TestResolveEffectivePermissions:
    def test_covers_every_section_in_registry_order(self):
        effective = resolve_effective_permissions(make_user(permissions={}))
        assert list(effective) == [s.key for s in SECTIONS]

    def test_variant_per_section_kind(self):
        effective = resolve_effective_permissions(make_user(permissions={}))
        for section in SECTIONS:
            expected = FlagAccess if section.is_flag else CrudAccess
            assert isinstance(effective[section.key], expected)

    def test_idempotent(self):
        user = make_user(permissions={
            "rentalBookings": {"view": True, "downloadCsv": True},
            "walletRefunds": True,
        })
        assert resolve_effective_permissions(user) == resolve_effective_permissions(user)
        assert resolve_effective_permissions(user).to_dict() == resolve_effective_permissions(user).to_dict()

    def test_does_not_mutate_stored_blob(self):
        blob = {"blogPosts": {"view": True}}
        resolve_effective_permissions(make_user(permissions=blob))
        assert blob == {"blogPosts": {"view": True}}

    def test_employee_values(self):
        effective = resolve_effective_permissions(make_user(permissions={
            "rentalBookings": {"view": True, "edit": False, "downloadCsv": True},
            "blogPosts": {"view": True, "downloadCsv": True},
            "walletRefunds": True,
        }))
        assert effective[Section.RENTAL_BOOKINGS] == CrudAccess(view=True, edit=False, download_csv=True)
        assert effective[Section.BLOG_POSTS] == CrudAccess(view=True)
        assert effective[Section.WALLET_REFUNDS] == FlagAccess(granted=True)
        assert effective[Section.USER_BAN_MANAGEMENT] == FlagAccess(granted=False)

    def test_superadmin_gets_every_declared_capability(self):
        effective = resolve_effective_permissions(make_user(role="superadmin"))
        assert effective[Section.CORPORATE_BOOKINGS] == CrudAccess(True, True, True)
        assert effective[Section.LEGAL_PAGES] == CrudAccess(True, True, False)
        assert effective[Section.SUBSCRIPTION_CANCELLATION] == FlagAccess(True)

    def test_to_dict_shape(self):
        out = resolve_effective_permissions(make_user(permissions={"walletRefunds": True})).to_dict()
        assert out["blogPosts"] == {"view": False, "edit": False}
        assert out["rentalBookings"] == {"view": False, "edit": False, "downloadCsv": False}
        assert out["walletRefunds"] is True
        assert out["driverAssignment"] is False


@pytest.mark.unit
class TestRoleHelpers:
    def test_is_superadmin(self):
        assert is_superadmin(make_user(role="superadmin"))
        assert not is_superadmin(make_user(role="employee"))
        assert not is_superadmin(None)

    def test_is_staff(self):
        assert is_staff(make_user(role=UserRole.EMPLOYEE))
        assert is_staff(make_user(role="superadmin"))
        assert not is_staff(make_user(role="customer"))
