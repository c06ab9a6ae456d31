"""Admin shell router: section registry and the caller's sidebar.

Endpoints:
    GET /api/admin/sections     Registered sections with their capabilities
    GET /api/admin/navigation   Sidebar groups visible to the caller
"""

from fastapi import APIRouter, Depends

from officexpress.auth.deps import require_staff
from officexpress.models.user import User
from officexpress.navigation import visible_navigation
from officexpress.schemas.admin import NavGroupOut, NavItemOut
from officexpress.schemas.permissions import SectionOut, section_catalog

router = APIRouter()


@router.get("/sections", response_model=list[SectionOut])
async def list_sections(_user: User = Depends(require_staff)):
    return section_catalog()


@router.get("/navigation", response_model=list[NavGroupOut])
async def navigation(user: User = Depends(require_staff)):
    return [
        NavGroupOut(
            title=group.title,
            icon=group.icon,
            items=[
                NavItemOut(
                    title=item.title,
                    href=item.href,
                    icon=item.icon,
                    permission=item.section.value if item.section else None,
                )
                for item in group.items
            ],
        )
        for group in visible_navigation(user)
    ]
