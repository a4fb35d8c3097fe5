# Overview: Service-layer operations for reporting; low stock, sales summary and profit figures.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from ..decorators import require_permission
from ..extensions import DataStores
from ..models import Product
from ..permissions import VIEW_REPORTS
from ..validation import MONEY_PLACES, require_int
from .session_service import Session

ZERO = Decimal("0.00")


def _money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SalesSummary:
    transactions: int
    units_sold: int
    revenue: Decimal
    average_sale: Decimal

    def to_dict(self) -> dict:
        return {
            "transactions": self.transactions,
            "units_sold": self.units_sold,
            "revenue": f"{self.revenue:.2f}",
            "average_sale": f"{self.average_sale:.2f}",
        }


@dataclass(frozen=True)
class ProfitAnalysis:
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    margin_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "revenue": f"{self.revenue:.2f}",
            "cost": f"{self.cost:.2f}",
            "profit": f"{self.profit:.2f}",
            "margin_percent": f"{self.margin_percent:.2f}",
        }


@require_permission(VIEW_REPORTS)
def low_stock_report(stores: DataStores, session: Session, threshold: int | None = None) -> list[Product]:
    """
    Products with stock <= threshold.

    Without a threshold each product is compared to its own min_stock_level.
    """
    if threshold is not None:
        require_int(threshold, "threshold", minimum=0)
        return [p for p in stores.products.scan() if p.stock <= threshold]
    return [p for p in stores.products.scan() if p.is_low_stock]


@require_permission(VIEW_REPORTS)
def sales_summary(stores: DataStores, session: Session) -> SalesSummary:
    transactions = 0
    units = 0
    revenue = ZERO
    for sale in stores.sales.scan():
        transactions += 1
        units += sale.quantity
        revenue += sale.total_price

    average = _money(revenue / transactions) if transactions else ZERO
    return SalesSummary(
        transactions=transactions,
        units_sold=units,
        revenue=_money(revenue),
        average_sale=average,
    )


@require_permission(VIEW_REPORTS)
def profit_analysis(stores: DataStores, session: Session) -> ProfitAnalysis:
    """
    Revenue against cost of goods sold.

    Cost uses each product's current cost_price; a sale whose product has
    since disappeared counts at zero cost.
    """
    cost_by_product = {p.id: p.cost_price for p in stores.products.scan()}

    revenue = ZERO
    cost = ZERO
    for sale in stores.sales.scan():
        revenue += sale.total_price
        cost += cost_by_product.get(sale.product_id, ZERO) * sale.quantity

    profit = revenue - cost
    margin = _money(profit / revenue * 100) if revenue > 0 else ZERO
    return ProfitAnalysis(
        revenue=_money(revenue),
        cost=_money(cost),
        profit=_money(profit),
        margin_percent=margin,
    )
