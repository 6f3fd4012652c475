from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..context import AppContext
from ..core.permissions import require_settings_access
from ..models.settings import SettingsUpdate
from ..models.user import Identity
from .dependencies import get_context, raise_for_result

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/settings")
async def get_settings(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_settings_access),
):
    return context.state.settings.to_document()


@router.put("/settings")
async def update_settings(
    changes: SettingsUpdate,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_settings_access),
):
    result = await context.catalog.update_settings(changes, identity)
    raise_for_result(result)
    return result.value.to_document()


@router.get("/export")
async def export_data(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_settings_access),
):
    """Download the whole state as a JSON backup"""
    result = context.snapshots.export_snapshot(identity)
    raise_for_result(result)
    filename = context.snapshots.export_filename()
    return JSONResponse(
        content=result.value,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_data(
    request: Request,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_settings_access),
):
    """Replace the dashboard state with an uploaded JSON backup"""
    body = await request.body()
    result = await context.snapshots.import_snapshot(body, identity)
    raise_for_result(result)
    return {"message": "Data imported successfully", **result.value.model_dump()}
