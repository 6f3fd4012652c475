from fastapi import APIRouter, Depends, Query, status

from ..context import AppContext
from ..core.permissions import require_purchases_access
from ..models.transaction import PurchaseRequest
from ..models.user import Identity
from .dependencies import get_context, raise_for_result

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.get("")
async def list_purchases(
    limit: int = Query(5, ge=1, le=500),
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_purchases_access),
):
    return [purchase.to_document() for purchase in context.state.purchases[:limit]]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_purchase(
    purchase_data: PurchaseRequest,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_purchases_access),
):
    result = await context.transactions.commit_purchase(purchase_data, identity)
    raise_for_result(result)
    return {
        "purchase": result.record.to_document(),
        "unsynced_products": result.unsynced_products,
    }
