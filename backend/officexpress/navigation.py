"""Admin sidebar registry and per-user visibility.

Each item optionally names the section whose `view` capability unlocks
it. Items without a section are visible to all staff, except the
Employees screen which is reserved for superadmins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from officexpress.auth.permissions import has_permission, is_superadmin
from officexpress.auth.sections import Capability, Section

EMPLOYEES_HREF = "/admin/settings/employees"


@dataclass(frozen=True)
class NavItem:
    title: str
    href: str
    icon: str
    section: Section | None = None


@dataclass(frozen=True)
class NavGroup:
    title: str
    icon: str
    items: tuple[NavItem, ...]


NAV_GROUPS: tuple[NavGroup, ...] = (
    NavGroup("Content", "FileText", (
        NavItem("Blog Posts", "/admin/content/blog", "Edit", Section.BLOG_POSTS),
        NavItem("Portfolio", "/admin/content/portfolio", "Users", Section.PORTFOLIO_CLIENTS),
        NavItem("Legal Pages", "/admin/content/legal", "Scale", Section.LEGAL_PAGES),
    )),
    NavGroup("Bookings & Forms", "ClipboardList", (
        NavItem("Corporate", "/admin/bookings/corporate", "Building", Section.CORPORATE_BOOKINGS),
        NavItem("Rental", "/admin/bookings/rental", "Car", Section.RENTAL_BOOKINGS),
        NavItem("Vendor", "/admin/bookings/vendor", "UserPlus", Section.VENDOR_REGISTRATIONS),
        NavItem("Contact", "/admin/bookings/contact", "MessageSquare", Section.CONTACT_MESSAGES),
    )),
    NavGroup("Operations", "Truck", (
        NavItem("Carpool Routes", "/admin/operations/routes", "MapPin", Section.CARPOOL_ROUTE_MANAGEMENT),
        NavItem("Carpool Bookings", "/admin/operations/bookings", "Calendar", Section.CARPOOL_BOOKINGS),
        NavItem("Drivers", "/admin/operations/drivers", "Car", Section.DRIVER_MANAGEMENT),
        NavItem("Driver Assignment", "/admin/operations/driver-assignment", "Truck", Section.DRIVER_ASSIGNMENT),
        NavItem("Blackout Dates", "/admin/operations/blackout", "CalendarOff", Section.CARPOOL_BLACKOUT_DATES),
    )),
    NavGroup("Finance", "Wallet", (
        NavItem("Wallets", "/admin/finance/wallets", "CreditCard", Section.WALLET_MANAGEMENT),
        NavItem("Refunds", "/admin/finance/refunds", "RefreshCw", Section.WALLET_MANAGEMENT),
        NavItem("Subscriptions", "/admin/finance/subscriptions", "Calendar", Section.SUBSCRIPTION_MANAGEMENT),
    )),
    NavGroup("Settings", "Settings", (
        NavItem("Website", "/admin/settings/website", "Palette", Section.WEBSITE_SETTINGS),
        NavItem("Marketing", "/admin/settings/marketing", "Target", Section.MARKETING_SETTINGS),
        NavItem("Employees", EMPLOYEES_HREF, "UserCog"),
        NavItem("Complaints", "/admin/settings/complaints", "AlertTriangle", Section.COMPLAINT_MANAGEMENT),
    )),
)


def _item_visible(user: Any, item: NavItem) -> bool:
    if item.section is None:
        if item.href == EMPLOYEES_HREF:
            return is_superadmin(user)
        return True
    return has_permission(user, item.section, Capability.VIEW)


def visible_navigation(user: Any) -> list[NavGroup]:
    """Sidebar groups filtered for `user`; groups left empty are dropped."""
    groups = []
    for group in NAV_GROUPS:
        items = tuple(i for i in group.items if _item_visible(user, i))
        if items:
            groups.append(NavGroup(group.title, group.icon, items))
    return groups
