"""Tests for the admin shell endpoints and health checks."""

import pytest
from httpx import AsyncClient


@pytest.mark.api
@pytest.mark.asyncio
class TestAdminShell:
    async def test_sections_catalog(self, client: AsyncClient, employee_headers: dict):
        response = await client.get("/api/admin/sections", headers=employee_headers)

        assert response.status_code == 200
        sections = {s["key"]: s for s in response.json()}
        assert sections["rentalBookings"]["capabilities"] == ["view", "edit", "downloadCsv"]
        assert sections["legalPages"]["capabilities"] == ["view", "edit"]
        assert sections["walletRefunds"]["kind"] == "flag"
        assert sections["walletRefunds"]["capabilities"] == []

    async def test_sections_require_staff(self, client: AsyncClient, customer_headers: dict):
        response = await client.get("/api/admin/sections", headers=customer_headers)

        assert response.status_code == 403

    async def test_employee_navigation(self, client: AsyncClient, employee_headers: dict):
        """Only sections the employee can view show up in the sidebar."""
        response = await client.get("/api/admin/navigation", headers=employee_headers)

        assert response.status_code == 200
        groups = response.json()
        assert [g["title"] for g in groups] == ["Bookings & Forms", "Operations"]
        assert [i["permission"] for g in groups for i in g["items"]] == [
            "rentalBookings",
            "driverAssignment",
        ]

    async def test_superadmin_navigation_includes_employees(
        self, client: AsyncClient, superadmin_headers: dict
    ):
        response = await client.get("/api/admin/navigation", headers=superadmin_headers)

        items = [i for g in response.json() for i in g["items"]]
        employees = next(i for i in items if i["title"] == "Employees")
        assert employees["permission"] is None


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_ready(self, client: AsyncClient):
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "ok"
