from fastapi import APIRouter, Depends

from ..context import AppContext
from ..core.permissions import allowed_sections, require_dashboard_access, require_reports_access
from ..models.user import Identity
from .dependencies import get_context

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard")
async def dashboard_overview(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_dashboard_access),
):
    """Landing page data every role can see"""
    state = context.state
    return {
        "user": {
            "username": identity.username,
            "display_name": identity.label,
            "role": identity.role.value,
            "sections": sorted(section.value for section in allowed_sections(identity.role)),
        },
        "company_name": state.settings.company_name,
        "total_products": len(state.products),
        "total_sales": len(state.sales),
        "total_purchases": len(state.purchases),
        "low_stock": [alert.model_dump() for alert in context.reports.low_stock()],
    }


@router.get("/summary")
async def report_summary(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_reports_access),
):
    return context.reports.summary().model_dump(mode="json")
