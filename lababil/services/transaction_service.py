"""Sale and purchase commits.

A commit validates against the current in-memory stock, writes the record
to the remote store and only then adjusts stock, prepends the record and
flushes the local cache. If the remote write fails nothing changes.
Commits hold the state write lock across that await, so two overlapping
commits never validate against the same stock or pick the same id.

Known consistency window: if the process dies after the remote write but
before the in-memory update, the record exists remotely while stock lags
until the next full reload.
"""
import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pytz

from ..core.activity_logger import ActivityLogger
from ..core.errors import LababilError, NotFoundError, PersistenceError, ValidationError
from ..core.permissions import Section, ensure_section_allowed
from ..core.results import CommitResult
from ..models.inventory import Product
from ..models.transaction import (
    Purchase,
    PurchaseItem,
    PurchaseRequest,
    Sale,
    SaleItem,
    SaleRequest,
    TransactionStatus,
)
from ..models.user import Identity
from ..utils.identifiers import timestamp_id
from .remote_store import RemoteStore
from .state import DomainState

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


def _kind(collection: str) -> str:
    return "sale" if collection == "sales" else "purchase"


def validate_party_name(name: Optional[str], label: str) -> str:
    trimmed = (name or "").strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        raise ValidationError(f"{label} name must be at least {MIN_NAME_LENGTH} characters")
    return trimmed


def validate_quantity(qty: object) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise ValidationError("Invalid quantity")
    return qty


class TransactionService:
    def __init__(
        self,
        state: DomainState,
        store: RemoteStore,
        activity: ActivityLogger,
        timezone: str = "Asia/Jakarta",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.state = state
        self.store = store
        self.activity = activity
        self.tz = pytz.timezone(timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))

    # Validation
    def _product(self, product_id: str) -> Product:
        product = self.state.find_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def validate_sale(self, request: SaleRequest) -> Tuple[str, List[SaleItem]]:
        customer = validate_party_name(request.customer, "Customer")
        if not request.items:
            raise ValidationError("Add at least one item")

        requested: Dict[str, int] = defaultdict(int)
        items = []
        for line in request.items:
            qty = validate_quantity(line.qty)
            product = self._product(line.product_id)
            requested[product.id] += qty
            if requested[product.id] > product.stock:
                raise ValidationError(
                    f"Insufficient stock for {product.name}: {product.stock} available"
                )
            price = product.price if line.price is None else line.price
            if price < 0:
                raise ValidationError("Invalid price")
            items.append(SaleItem(product_id=product.id, name=product.name, qty=qty, price=price))
        return customer, items

    def validate_purchase(self, request: PurchaseRequest) -> Tuple[str, List[PurchaseItem]]:
        supplier = validate_party_name(request.supplier, "Supplier")
        if not request.items:
            raise ValidationError("Add at least one item")

        items = []
        for line in request.items:
            qty = validate_quantity(line.qty)
            if line.cost_price is None or line.cost_price <= 0:
                raise ValidationError("Invalid cost price")
            product = self._product(line.product_id)
            items.append(
                PurchaseItem(product_id=product.id, name=product.name, qty=qty, cost_price=line.cost_price)
            )
        return supplier, items

    # Commits
    async def commit_sale(self, request: SaleRequest, identity: Identity) -> CommitResult:
        """Validate and record a sale, decrementing stock"""
        try:
            ensure_section_allowed(identity, Section.SALES)
            async with self.state.write_lock:
                customer, items = self.validate_sale(request)
                now = self.clock()
                sale = Sale(
                    id=timestamp_id(now, self.state.transaction_ids()),
                    date=now.date(),
                    customer=customer,
                    phone=request.phone,
                    items=items,
                    total=sum((item.line_total for item in items), Decimal("0")),
                    status=TransactionStatus.COMPLETED,
                    created_at=now,
                    created_by=identity.username,
                )
                touched = await self._commit("sales", sale, items, self._apply_sale)
            return await self._finish(
                "sales", sale, touched, identity, {"items": len(items), "total": str(sale.total)}
            )
        except LababilError as e:
            logger.info("Sale rejected: %s", e.message)
            return CommitResult.failure(e)

    async def commit_purchase(self, request: PurchaseRequest, identity: Identity) -> CommitResult:
        """Validate and record a purchase, incrementing stock"""
        try:
            ensure_section_allowed(identity, Section.PURCHASES)
            async with self.state.write_lock:
                supplier, items = self.validate_purchase(request)
                now = self.clock()
                purchase = Purchase(
                    id=timestamp_id(now, self.state.transaction_ids()),
                    date=now.date(),
                    supplier=supplier,
                    phone=request.phone,
                    items=items,
                    total_items=sum(item.qty for item in items),
                    total_cost=sum((item.line_total for item in items), Decimal("0")),
                    status=TransactionStatus.COMPLETED,
                    created_at=now,
                    created_by=identity.username,
                )
                touched = await self._commit("purchases", purchase, items, self._apply_purchase)
            return await self._finish(
                "purchases", purchase, touched, identity,
                {"items": purchase.total_items, "total_cost": str(purchase.total_cost)},
            )
        except LababilError as e:
            logger.info("Purchase rejected: %s", e.message)
            return CommitResult.failure(e)

    async def _commit(self, collection, record, items, apply_items) -> List[str]:
        """Persist remotely, then apply to memory; caller holds the write lock"""
        kind = _kind(collection)

        result = await self.store.create_with_id(collection, record.id, record.to_document())
        if not result.success:
            logger.error("Error saving %s %s: %s", kind, record.id, result.error)
            raise PersistenceError(f"Failed to save {kind}")

        def apply() -> List[str]:
            touched = apply_items(items)
            getattr(self.state, collection).insert(0, record)
            return touched

        return self.state.mutate(apply, "products", collection)

    async def _finish(self, collection, record, touched, identity, details) -> CommitResult:
        kind = _kind(collection)
        unsynced = await self._push_products(touched)

        await self.activity.log_activity(identity, "create", kind, record.id, details)
        logger.info("%s %s saved (%d items)", kind.capitalize(), record.id, len(record.items))
        return CommitResult(ok=True, value=record, unsynced_products=unsynced)

    def _apply_sale(self, items: Iterable[SaleItem]) -> List[str]:
        touched = []
        for item in items:
            product = self._product(item.product_id)
            product.stock -= item.qty
            touched.append(product.id)
        return touched

    def _apply_purchase(self, items: Iterable[PurchaseItem]) -> List[str]:
        touched = []
        for item in items:
            product = self._product(item.product_id)
            product.stock += item.qty
            # Highest cost seen wins
            if item.cost_price > product.cost_price:
                product.cost_price = item.cost_price
            touched.append(product.id)
        return touched

    async def _push_products(self, product_ids: Iterable[str]) -> List[str]:
        unsynced = []
        for product_id in dict.fromkeys(product_ids):
            product = self.state.find_product(product_id)
            if product is None:
                continue
            result = await self.store.update("products", product.id, product.to_document())
            if not result.success:
                logger.warning("Stock for product %s not synced to remote store: %s", product.id, result.error)
                unsynced.append(product.id)
        return unsynced
