from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Product:
    """
    Stock-keeping item.

    Invariants (enforced by products_service, not here):
    - cost_price >= 0 and sell_price >= cost_price
    - stock never negative; adjustments clamp at zero
    """
    id: int
    name: str
    category: str
    brand: str
    cost_price: Decimal
    sell_price: Decimal
    stock: int
    min_stock_level: int

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock_level

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "brand": self.brand,
            "cost_price": f"{self.cost_price:.2f}",
            "sell_price": f"{self.sell_price:.2f}",
            "stock": self.stock,
            "min_stock_level": self.min_stock_level,
        }
