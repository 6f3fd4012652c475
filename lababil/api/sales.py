from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..context import AppContext
from ..core.permissions import require_sales_access
from ..models.customer import Customer
from ..models.transaction import SaleRequest
from ..models.user import Identity
from .dependencies import get_context, raise_for_result

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("")
async def list_sales(
    limit: int = Query(5, ge=1, le=500),
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_sales_access),
):
    """Most recent sales first"""
    return [sale.to_document() for sale in context.state.sales[:limit]]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleRequest,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_sales_access),
):
    result = await context.transactions.commit_sale(sale_data, identity)
    raise_for_result(result)
    return {
        "sale": result.record.to_document(),
        "unsynced_products": result.unsynced_products,
    }


@router.get("/customers")
async def list_customers(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_sales_access),
):
    return [customer.to_document() for customer in context.state.customers]


@router.post("/customers", status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: Customer,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_sales_access),
):
    result = await context.catalog.add_customer(customer, identity)
    raise_for_result(result)
    return result.value.to_document()


@router.get("/{sale_id}/receipt")
async def get_receipt(
    sale_id: str,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_sales_access),
):
    """Receipt data; the layout is rendered by the front-end"""
    sale = context.state.find_sale(sale_id)
    if sale is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")

    totals = context.reports.receipt_totals(sale)
    return {
        "company_name": context.state.settings.company_name,
        "currency": context.state.settings.currency,
        "sale": sale.to_document(),
        "totals": totals.model_dump(mode="json"),
    }
