from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..context import AppContext
from ..core.permissions import require_products_access
from ..models.inventory import ProductCreate, ProductUpdate
from ..models.user import Identity
from .dependencies import get_context, raise_for_result

router = APIRouter(prefix="/inventory", tags=["Inventory"])


class CategoryCreate(BaseModel):
    name: Optional[str] = None


@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    """Paginated catalog, with a flag telling the front-end whether to offer "load more" """
    products = context.state.products
    start = (page - 1) * limit
    end = start + limit
    return {
        "products": [
            {**product.to_document(), "status": product.status.value}
            for product in products[start:end]
        ],
        "page": page,
        "has_more": end < len(products),
        "total": len(products),
    }


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    result = await context.catalog.add_product(product_data, identity)
    raise_for_result(result)
    return result.value.to_document()


@router.patch("/products/{product_id}")
async def update_product(
    product_id: str,
    changes: ProductUpdate,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    result = await context.catalog.update_product(product_id, changes, identity)
    raise_for_result(result)
    return result.value.to_document()


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: str,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    result = await context.catalog.delete_product(product_id, identity)
    raise_for_result(result)
    return {"message": "Product deleted successfully", "id": product_id}


@router.get("/categories")
async def list_categories(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    return context.categories.sorted_names()


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    result = await context.categories.add_category(category_data.name, identity)
    raise_for_result(result)
    return result.value.to_document()


@router.get("/alerts/stock")
async def low_stock_alerts(
    context: AppContext = Depends(get_context),
    identity: Identity = Depends(require_products_access),
):
    return [alert.model_dump() for alert in context.reports.low_stock()]
