from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Sale:
    """
    One recorded sale line. Append-only: sales are never edited or deleted.

    product_id / customer_id are advisory references; nothing enforces them
    after creation.
    """
    id: int
    product_id: int
    customer_id: int
    quantity: int
    total_price: Decimal
    timestamp: str
    cashier: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "customer_id": self.customer_id,
            "quantity": self.quantity,
            "total_price": f"{self.total_price:.2f}",
            "timestamp": self.timestamp,
            "cashier": self.cashier,
        }
