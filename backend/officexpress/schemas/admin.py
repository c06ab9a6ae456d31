"""Pydantic schemas for the admin shell (sidebar navigation)."""

from pydantic import BaseModel


class NavItemOut(BaseModel):
    title: str
    href: str
    icon: str
    permission: str | None = None


class NavGroupOut(BaseModel):
    title: str
    icon: str
    items: list[NavItemOut]
