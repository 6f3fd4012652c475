from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

import pytz
from pydantic import BaseModel

from ..models.base import Money
from ..models.transaction import Sale
from .state import DomainState

ZERO = Decimal("0")


class TopProduct(BaseModel):
    name: str
    quantity: int


class LowStockAlert(BaseModel):
    product_id: str
    name: str
    stock: int
    min_stock: int


class ReceiptTotals(BaseModel):
    subtotal: Money
    tax_rate: Money
    tax: Money
    total: Money


class ReportSummary(BaseModel):
    total_revenue: Money
    monthly_revenue: Money
    total_cogs: Money
    profit: Money
    top_product: Optional[TopProduct] = None
    low_stock: List[LowStockAlert] = []
    sales_by_product: Dict[str, Money] = {}
    stock_by_category: Dict[str, int] = {}
    generated_at: datetime


class ReportingService:
    """Read-only aggregates over the dashboard state, recomputed on every call"""

    def __init__(self, state: DomainState, timezone: str = "Asia/Jakarta"):
        self.state = state
        self.tz = pytz.timezone(timezone)

    def today(self) -> date:
        return datetime.now(self.tz).date()

    def total_revenue(self) -> Decimal:
        return sum((sale.total for sale in self.state.sales), ZERO)

    def monthly_revenue(self, today: Optional[date] = None) -> Decimal:
        """Revenue of sales dated in the current calendar month"""
        today = today or self.today()
        return sum(
            (
                sale.total
                for sale in self.state.sales
                if sale.date.month == today.month and sale.date.year == today.year
            ),
            ZERO,
        )

    def total_cogs(self) -> Decimal:
        """Cost of goods sold at the products' current cost price, matched by name"""
        total = ZERO
        for sale in self.state.sales:
            for item in sale.items:
                product = self.state.find_product_by_name(item.name)
                if product and product.cost_price:
                    total += product.cost_price * item.qty
        return total

    def profit(self) -> Decimal:
        return self.total_revenue() - self.total_cogs()

    def quantities_by_product(self) -> Dict[str, int]:
        quantities: Dict[str, int] = defaultdict(int)
        for sale in self.state.sales:
            for item in sale.items:
                quantities[item.name] += item.qty
        return dict(quantities)

    def top_product(self) -> Optional[TopProduct]:
        quantities = self.quantities_by_product()
        if not quantities:
            return None
        # Highest quantity first, ties go to the alphabetically first name
        name = min(quantities, key=lambda n: (-quantities[n], n))
        return TopProduct(name=name, quantity=quantities[name])

    def low_stock(self) -> List[LowStockAlert]:
        return [
            LowStockAlert(product_id=p.id, name=p.name, stock=p.stock, min_stock=p.min_stock)
            for p in self.state.products
            if p.stock <= p.min_stock
        ]

    def sales_by_product(self) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        for sale in self.state.sales:
            for item in sale.items:
                totals[item.name] += item.line_total
        return dict(totals)

    def stock_by_category(self) -> Dict[str, int]:
        stock: Dict[str, int] = {category.name: 0 for category in self.state.categories}
        for product in self.state.products:
            stock[product.category] = stock.get(product.category, 0) + product.stock
        return {category: units for category, units in stock.items() if units > 0}

    def receipt_totals(self, sale: Sale, tax_rate: Optional[Decimal] = None) -> ReceiptTotals:
        rate = self.state.settings.tax_rate if tax_rate is None else tax_rate
        tax = sale.total * rate / Decimal("100")
        return ReceiptTotals(subtotal=sale.total, tax_rate=rate, tax=tax, total=sale.total + tax)

    def summary(self, today: Optional[date] = None) -> ReportSummary:
        revenue = self.total_revenue()
        cogs = self.total_cogs()
        return ReportSummary(
            total_revenue=revenue,
            monthly_revenue=self.monthly_revenue(today),
            total_cogs=cogs,
            profit=revenue - cogs,
            top_product=self.top_product(),
            low_stock=self.low_stock(),
            sales_by_product=self.sales_by_product(),
            stock_by_category=self.stock_by_category(),
            generated_at=datetime.now(self.tz),
        )
