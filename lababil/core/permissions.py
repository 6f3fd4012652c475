from enum import Enum
from typing import Dict, FrozenSet

from fastapi import Depends, HTTPException, Request, status

from ..models.user import Identity, UserRole
from .errors import PermissionDeniedError


class Section(str, Enum):
    DASHBOARD = "dashboard"
    PRODUCTS = "products"
    SALES = "sales"
    PURCHASES = "purchases"
    REPORTS = "reports"
    SETTINGS = "settings"


ROLE_SECTIONS: Dict[UserRole, FrozenSet[Section]] = {
    UserRole.KASIR: frozenset({Section.DASHBOARD, Section.SALES}),
    UserRole.ADMIN1: frozenset({Section.DASHBOARD, Section.PURCHASES}),
    UserRole.ADMIN: frozenset(Section),
    UserRole.USER: frozenset({Section.DASHBOARD}),
    UserRole.DEMO: frozenset({Section.DASHBOARD}),
}


def allowed_sections(role: UserRole) -> FrozenSet[Section]:
    return ROLE_SECTIONS.get(role, frozenset())


def is_section_allowed(role: UserRole, section: Section) -> bool:
    return section in allowed_sections(role)


def ensure_section_allowed(identity: Identity, section: Section) -> None:
    if not is_section_allowed(identity.role, section):
        raise PermissionDeniedError(
            f"Role {identity.role.value} does not have permission to access {section.value}"
        )


async def get_current_identity(request: Request) -> Identity:
    provider = request.app.state.context.identity_provider
    identity = provider.identify(request)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid session identity",
        )
    return identity


def require_section(section: Section):
    """Dependency factory gating an endpoint on the caller's role"""

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not is_section_allowed(identity.role, section):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to access this section",
            )
        return identity

    return dependency


require_dashboard_access = require_section(Section.DASHBOARD)
require_products_access = require_section(Section.PRODUCTS)
require_sales_access = require_section(Section.SALES)
require_purchases_access = require_section(Section.PURCHASES)
require_reports_access = require_section(Section.REPORTS)
require_settings_access = require_section(Section.SETTINGS)
