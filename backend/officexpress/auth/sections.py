"""Static registry of administrable sections.

Every admin screen is gated by one section key. The key doubles as the
JSON key in `User.permissions`, so enum values are the persisted
camelCase names and must never be renamed without a data migration.

Two kinds of section:
  - CRUD: granted per capability ({view, edit, downloadCsv} subset).
  - FLAG: a single action permission stored as a bare boolean.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from officexpress.config import settings

logger = logging.getLogger(__name__)


class Section(str, enum.Enum):
    BLOG_POSTS = "blogPosts"
    PORTFOLIO_CLIENTS = "portfolioClients"
    CORPORATE_BOOKINGS = "corporateBookings"
    RENTAL_BOOKINGS = "rentalBookings"
    VENDOR_REGISTRATIONS = "vendorRegistrations"
    CONTACT_MESSAGES = "contactMessages"
    MARKETING_SETTINGS = "marketingSettings"
    WEBSITE_SETTINGS = "websiteSettings"
    LEGAL_PAGES = "legalPages"
    DRIVER_MANAGEMENT = "driverManagement"
    DRIVER_ASSIGNMENT = "driverAssignment"
    DRIVER_ASSIGNMENT_VIEW_PII = "driverAssignmentViewPII"
    CARPOOL_ROUTE_MANAGEMENT = "carpoolRouteManagement"
    CARPOOL_BOOKINGS = "carpoolBookings"
    CARPOOL_BLACKOUT_DATES = "carpoolBlackoutDates"
    COMPLAINT_MANAGEMENT = "complaintManagement"
    EMPLOYEE_MANAGEMENT = "employeeManagement"
    SUBSCRIPTION_MANAGEMENT = "subscriptionManagement"
    WALLET_MANAGEMENT = "walletManagement"
    SUBSCRIPTION_CANCELLATION = "subscriptionCancellation"
    WALLET_REFUNDS = "walletRefunds"
    USER_BAN_MANAGEMENT = "userBanManagement"


class Capability(str, enum.Enum):
    VIEW = "view"
    EDIT = "edit"
    DOWNLOAD_CSV = "downloadCsv"


class SectionKind(str, enum.Enum):
    CRUD = "crud"
    FLAG = "flag"


class UnregisteredSectionError(AssertionError):
    """A call site referenced a section key missing from the registry."""

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"Unregistered permission section: {key!r}")


class UnknownCapabilityError(AssertionError):
    """A call site asked for a capability name that does not exist."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown permission capability: {name!r}")


@dataclass(frozen=True)
class SectionDef:
    key: Section
    label: str
    description: str
    icon: str
    kind: SectionKind = SectionKind.CRUD
    capabilities: frozenset[Capability] = frozenset()

    @property
    def is_flag(self) -> bool:
        return self.kind is SectionKind.FLAG

    @property
    def has_csv(self) -> bool:
        return Capability.DOWNLOAD_CSV in self.capabilities

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities


_VIEW_EDIT = frozenset({Capability.VIEW, Capability.EDIT})
_VIEW_EDIT_CSV = frozenset({Capability.VIEW, Capability.EDIT, Capability.DOWNLOAD_CSV})


def _crud(key, label, description, icon, *, csv=False) -> SectionDef:
    return SectionDef(
        key=key,
        label=label,
        description=description,
        icon=icon,
        kind=SectionKind.CRUD,
        capabilities=_VIEW_EDIT_CSV if csv else _VIEW_EDIT,
    )


def _flag(key, label, description, icon) -> SectionDef:
    return SectionDef(key=key, label=label, description=description, icon=icon, kind=SectionKind.FLAG)


# ── Registry (matrix row order) ─────────────────────────────

SECTIONS: tuple[SectionDef, ...] = (
    _crud(Section.BLOG_POSTS, "Blog Posts",
          "Manage blog posts and articles", "Edit"),
    _crud(Section.PORTFOLIO_CLIENTS, "Portfolio Clients",
          "Manage portfolio client showcase", "Users"),
    _crud(Section.CORPORATE_BOOKINGS, "Corporate Bookings",
          "View and manage corporate booking submissions", "Building2", csv=True),
    _crud(Section.RENTAL_BOOKINGS, "Rental Bookings",
          "View and manage rental booking submissions", "Car", csv=True),
    _crud(Section.VENDOR_REGISTRATIONS, "Vendor Registrations",
          "View and manage vendor registration submissions", "UserPlus", csv=True),
    _crud(Section.CONTACT_MESSAGES, "Contact Messages",
          "View and manage contact form submissions", "MessageSquare", csv=True),
    _crud(Section.MARKETING_SETTINGS, "Marketing Settings",
          "Configure marketing integrations (GA4, Facebook Pixel)", "TrendingUp"),
    _crud(Section.WEBSITE_SETTINGS, "Website Settings",
          "Configure website appearance and branding", "Settings"),
    _crud(Section.LEGAL_PAGES, "Legal Pages",
          "Manage Terms of Service and Privacy Policy", "FileCheck"),
    _crud(Section.DRIVER_MANAGEMENT, "Driver Management",
          "Manage driver records and vehicle details", "Car", csv=True),
    _flag(Section.DRIVER_ASSIGNMENT, "Driver Assignment",
          "Assign drivers to rental bookings", "Car"),
    _flag(Section.DRIVER_ASSIGNMENT_VIEW_PII, "View Passenger Contact Details",
          "See passenger phone numbers on the driver assignment screen", "Eye"),
    _crud(Section.CARPOOL_ROUTE_MANAGEMENT, "Carpool Routes",
          "Manage carpool routes, pickup points and time slots", "MapPin"),
    _crud(Section.CARPOOL_BOOKINGS, "Carpool Bookings",
          "View and manage carpool seat bookings", "Calendar"),
    _crud(Section.CARPOOL_BLACKOUT_DATES, "Carpool Blackout Dates",
          "Manage service blackout dates for carpool routes", "CalendarOff"),
    _crud(Section.COMPLAINT_MANAGEMENT, "Complaint Management",
          "Review and resolve customer complaints", "AlertTriangle", csv=True),
    _crud(Section.EMPLOYEE_MANAGEMENT, "Employee Management",
          "Manage employee accounts and permissions (Superadmin only)", "Users"),
    _crud(Section.SUBSCRIPTION_MANAGEMENT, "Subscription Management",
          "View and manage user subscriptions and invoices", "CreditCard", csv=True),
    _crud(Section.WALLET_MANAGEMENT, "Wallet Management",
          "Manage user wallets and perform adjustments", "Wallet", csv=True),
    _flag(Section.SUBSCRIPTION_CANCELLATION, "Cancel Subscriptions",
          "Cancel user subscriptions with prorated refunds", "XCircle"),
    _flag(Section.WALLET_REFUNDS, "Issue Refunds",
          "Manually issue refunds to user wallets", "RefreshCw"),
    _flag(Section.USER_BAN_MANAGEMENT, "Ban/Unban Users",
          "Ban or unban users from the platform", "Ban"),
)

REGISTRY: dict[Section, SectionDef] = {s.key: s for s in SECTIONS}

# Every enum member must have exactly one registry entry.
assert set(REGISTRY) == set(Section), "section registry out of sync with Section enum"

CSV_SECTIONS: frozenset[Section] = frozenset(s.key for s in SECTIONS if s.has_csv)
FLAG_SECTIONS: frozenset[Section] = frozenset(s.key for s in SECTIONS if s.is_flag)


# ── Lookup ──────────────────────────────────────────────────

def lookup_section(key: Section | str) -> SectionDef | None:
    """Return the registry entry for `key`, or None if it is not registered."""
    try:
        return REGISTRY[Section(key)]
    except ValueError:
        return None


def get_section(key: Section | str) -> SectionDef:
    """Return the registry entry for `key` or raise `UnregisteredSectionError`.

    Permission checks use `resolve_section_or_deny` instead, which only
    raises outside production.
    """
    section = lookup_section(key)
    if section is None:
        raise UnregisteredSectionError(key)
    return section


def resolve_section_or_deny(key: Section | str) -> SectionDef | None:
    """Registry lookup used by permission checks.

    Returns None (deny) for unregistered keys in production and raises
    `UnregisteredSectionError` everywhere else.
    """
    section = lookup_section(key)
    if section is not None:
        return section
    if not settings.is_production:
        raise UnregisteredSectionError(key)
    logger.warning("Permission check against unregistered section %r denied", key)
    return None


def parse_capability(value: Capability | str | None) -> Capability | None:
    """Coerce a capability name. Unknown names raise `UnknownCapabilityError`."""
    if value is None or isinstance(value, Capability):
        return value
    try:
        return Capability(value)
    except ValueError:
        raise UnknownCapabilityError(value) from None


def capability_known_or_deny(value: Capability | str | None) -> bool:
    """Capability check used by permission checks.

    True for None and declared names. An unknown name raises
    `UnknownCapabilityError` outside production; in production it is
    logged and the check is denied.
    """
    try:
        parse_capability(value)
    except UnknownCapabilityError:
        if not settings.is_production:
            raise
        logger.warning("Permission check with unknown capability %r denied", value)
        return False
    return True
