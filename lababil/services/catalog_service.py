import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.activity_logger import ActivityLogger
from ..core.errors import LababilError, NotFoundError, PersistenceError, ValidationError
from ..core.permissions import Section, ensure_section_allowed
from ..core.results import OperationResult
from ..models.customer import Customer
from ..models.inventory import Product, ProductCreate, ProductUpdate
from ..models.settings import SettingsUpdate, StoreSettings
from ..models.user import Identity
from ..utils.identifiers import timestamp_id
from .remote_store import RemoteStore
from .state import DomainState

logger = logging.getLogger(__name__)

SETTINGS_DOCUMENT_ID = "general"


def validate_product_data(
    name: Optional[str],
    price,
    stock: Optional[int],
    category: Optional[str],
    cost_price=Decimal("0"),
    min_stock: Optional[int] = 0,
) -> None:
    if not name or len(name.strip()) < 2:
        raise ValidationError("Product name must be at least 2 characters")
    if price is None or price <= 0:
        raise ValidationError("Price must be greater than 0")
    if stock is None or stock < 0:
        raise ValidationError("Stock cannot be negative")
    if not category:
        raise ValidationError("Please select a category")
    if cost_price is None or cost_price < 0:
        raise ValidationError("Cost price cannot be negative")
    if min_stock is None or min_stock < 0:
        raise ValidationError("Minimum stock cannot be negative")


class CatalogService:
    """Products, customers and settings; remote write first, then memory and cache"""

    def __init__(self, state: DomainState, store: RemoteStore, activity: ActivityLogger):
        self.state = state
        self.store = store
        self.activity = activity

    async def add_product(self, data: ProductCreate, identity: Identity) -> OperationResult:
        try:
            ensure_section_allowed(identity, Section.PRODUCTS)
            validate_product_data(
                data.name, data.price, data.stock, data.category, data.cost_price, data.min_stock
            )

            product = Product(
                id=timestamp_id(datetime.now(timezone.utc), (p.id for p in self.state.products)),
                name=data.name.strip(),
                price=data.price,
                cost_price=data.cost_price,
                stock=data.stock,
                category=data.category,
                min_stock=data.min_stock,
                supplier=data.supplier,
            )
            await self._save("products", product.id, product.to_document(), "product")
            self.state.mutate(lambda: self.state.products.append(product), "products")
            await self.activity.log_activity(identity, "create", "product", product.id, {"name": product.name})
            return OperationResult.success(product)
        except LababilError as e:
            logger.info("Product rejected: %s", e.message)
            return OperationResult.failure(e)

    async def update_product(self, product_id: str, changes: ProductUpdate, identity: Identity) -> OperationResult:
        """Edit catalog fields; stock only moves through sales and purchases"""
        try:
            ensure_section_allowed(identity, Section.PRODUCTS)
            # The edited copy replaces the product, so no commit may move its stock meanwhile
            async with self.state.write_lock:
                product = self.state.find_product(product_id)
                if product is None:
                    raise NotFoundError(f"Product {product_id} not found")

                updated = product.model_copy(update=changes.model_dump(exclude_none=True))
                validate_product_data(
                    updated.name, updated.price, updated.stock, updated.category,
                    updated.cost_price, updated.min_stock,
                )

                result = await self.store.update("products", product.id, updated.to_document())
                if not result.success:
                    logger.error("Error updating product %s: %s", product.id, result.error)
                    raise PersistenceError("Failed to update product")

                def apply() -> None:
                    index = self.state.products.index(product)
                    self.state.products[index] = updated

                self.state.mutate(apply, "products")
            await self.activity.log_activity(identity, "update", "product", product.id)
            return OperationResult.success(updated)
        except LababilError as e:
            logger.info("Product update rejected: %s", e.message)
            return OperationResult.failure(e)

    async def delete_product(self, product_id: str, identity: Identity) -> OperationResult:
        """Remove a product from the active catalog; past transactions keep their snapshots"""
        try:
            ensure_section_allowed(identity, Section.PRODUCTS)
            async with self.state.write_lock:
                product = self.state.find_product(product_id)
                if product is None:
                    raise NotFoundError(f"Product {product_id} not found")

                result = await self.store.delete("products", product.id)
                if not result.success:
                    logger.error("Error deleting product %s: %s", product.id, result.error)
                    raise PersistenceError("Failed to delete product")

                self.state.mutate(lambda: self.state.products.remove(product), "products")
            await self.activity.log_activity(identity, "delete", "product", product.id, {"name": product.name})
            return OperationResult.success(product)
        except LababilError as e:
            logger.info("Product delete rejected: %s", e.message)
            return OperationResult.failure(e)

    async def add_customer(self, customer: Customer, identity: Identity) -> OperationResult:
        try:
            ensure_section_allowed(identity, Section.SALES)
            if len(customer.name.strip()) < 2:
                raise ValidationError("Customer name must be at least 2 characters")

            record = customer.model_copy(
                update={
                    "id": customer.id or timestamp_id(
                        datetime.now(timezone.utc), (c.id for c in self.state.customers if c.id)
                    ),
                    "name": customer.name.strip(),
                }
            )
            await self._save("customers", record.id, record.to_document(), "customer")

            def apply() -> None:
                self.state.customers.append(record)
                self.state.customers.sort(key=lambda c: c.name.lower())

            self.state.mutate(apply, "customers")
            await self.activity.log_activity(identity, "create", "customer", record.id)
            return OperationResult.success(record)
        except LababilError as e:
            logger.info("Customer rejected: %s", e.message)
            return OperationResult.failure(e)

    async def update_settings(self, changes: SettingsUpdate, identity: Identity) -> OperationResult:
        try:
            ensure_section_allowed(identity, Section.SETTINGS)
            try:
                merged = {**self.state.settings.model_dump(), **changes.model_dump(exclude_none=True)}
                updated = StoreSettings.model_validate(merged)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid settings: {e.errors()[0]['msg']}")

            await self._save("settings", SETTINGS_DOCUMENT_ID, updated.to_document(), "settings")

            def apply() -> None:
                self.state.settings = updated

            self.state.mutate(apply, "settings")
            await self.activity.log_activity(identity, "update", "settings", SETTINGS_DOCUMENT_ID)
            return OperationResult.success(updated)
        except LababilError as e:
            logger.info("Settings rejected: %s", e.message)
            return OperationResult.failure(e)

    async def _save(self, collection: str, doc_id: str, document: dict, kind: str) -> None:
        result = await self.store.create_with_id(collection, doc_id, document)
        if not result.success:
            logger.error("Error saving %s %s: %s", kind, doc_id, result.error)
            raise PersistenceError(f"Failed to save {kind}")
