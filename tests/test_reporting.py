from datetime import date
from decimal import Decimal

import pytest

from lababil.models.inventory import Category
from lababil.models.transaction import Sale, SaleItem

TODAY = date(2024, 5, 20)


def make_sale(sale_id, day, *items):
    lines = [SaleItem(product_id=name.lower(), name=name, qty=qty, price=Decimal(price)) for name, qty, price in items]
    return Sale(
        id=sale_id,
        date=day,
        customer="Budi",
        items=lines,
        total=sum((line.line_total for line in lines), Decimal("0")),
    )


@pytest.fixture
def reports(context):
    return context.reports


def test_monthly_revenue_only_counts_current_month(context, reports):
    context.state.sales = [
        make_sale("3", date(2024, 5, 3), ("Mouse", 1, 100)),
        make_sale("2", date(2024, 4, 30), ("Mouse", 1, 50)),
        make_sale("1", date(2023, 5, 10), ("Mouse", 1, 25)),
    ]

    assert reports.monthly_revenue(TODAY) == Decimal("100")
    assert reports.total_revenue() == Decimal("175")


def test_cogs_uses_current_cost_price_by_name(context, reports, make_product):
    make_product("p1", "Mouse", stock=5, price=100, cost_price=60)
    context.state.sales = [
        make_sale("2", TODAY, ("Mouse", 2, 100), ("Ghost", 1, 500)),
    ]

    assert reports.total_cogs() == Decimal("120")
    assert reports.profit() == Decimal("580")


def test_top_product_ties_go_to_first_name(context, reports):
    context.state.sales = [
        make_sale("2", TODAY, ("Beta", 3, 10)),
        make_sale("1", TODAY, ("Alpha", 1, 10), ("Alpha", 2, 10), ("Gamma", 2, 10)),
    ]

    top = reports.top_product()

    assert top.name == "Alpha"
    assert top.quantity == 3


def test_top_product_is_none_without_sales(reports):
    assert reports.top_product() is None


def test_low_stock_includes_products_at_minimum(context, reports, make_product):
    make_product("p1", "Mouse", stock=5, min_stock=5)
    make_product("p2", "Keyboard", stock=6, min_stock=5)
    make_product("p3", "Cable", stock=0, min_stock=2)

    assert [alert.product_id for alert in reports.low_stock()] == ["p1", "p3"]


def test_receipt_totals_apply_tax_rate(context, reports):
    sale = make_sale("1", TODAY, ("Mouse", 2, 500))

    totals = reports.receipt_totals(sale)

    assert totals.subtotal == Decimal("1000")
    assert totals.tax == Decimal("110")
    assert totals.total == Decimal("1110")
    assert reports.receipt_totals(sale, tax_rate=Decimal("0")).total == Decimal("1000")


def test_breakdowns_by_product_and_category(context, reports, make_product):
    context.state.categories = [Category(id="Books", name="Books"), Category(id="Sports", name="Sports")]
    make_product("p1", "Mouse", stock=5, category="Electronics")
    make_product("p2", "Novel", stock=2, category="Books")
    context.state.sales = [make_sale("1", TODAY, ("Mouse", 2, 100), ("Novel", 1, 40), ("Mouse", 1, 100))]

    assert reports.sales_by_product() == {"Mouse": Decimal("300"), "Novel": Decimal("40")}
    assert reports.stock_by_category() == {"Books": 2, "Electronics": 5}


def test_summary_combines_every_figure(context, reports, make_product):
    make_product("p1", "Mouse", stock=1, price=100, cost_price=40)
    context.state.sales = [make_sale("1", TODAY, ("Mouse", 2, 100))]

    summary = reports.summary(TODAY)

    assert summary.total_revenue == Decimal("200")
    assert summary.monthly_revenue == Decimal("200")
    assert summary.total_cogs == Decimal("80")
    assert summary.profit == Decimal("120")
    assert summary.top_product.name == "Mouse"
    assert [alert.name for alert in summary.low_stock] == ["Mouse"]
