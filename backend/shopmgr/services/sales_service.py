# Overview: Service-layer operations for sales; validated sale recording with a recovery journal.

"""
Sales Service

A sale is two writes: append to sales.csv, then decrement the product's stock.
Neither store supports transactions, so the pair is bracketed by a journal:

    1. all validation (product, quantity, customer) - nothing written yet
    2. write .sale_journal atomically: sale, stock before, inline customer
    3. append inline customer (if any), append sale, decrement stock
    4. remove .sale_journal

If the process dies between 2 and 4, recover_pending_sale() (run by
create_app and before every new sale) replays whatever is missing:
- customer / sale appended only when their id is absent from the store
- stock decremented only when it still equals the recorded stock-before

Replaying a completed journal is therefore a no-op.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation

from ..decorators import require_permission
from ..extensions import DataStores
from ..models import Customer, Sale
from ..permissions import MANAGE_CUSTOMERS, MANAGE_SALES
from ..storage import StorageError, atomic_write_text
from ..time_utils import now_str
from ..validation import ValidationError, require_int, require_text
from . import permission_service
from .customers_service import build_customer, find_customer
from .identifier_service import next_id
from .products_service import apply_stock_delta, find_product
from .session_service import Session

logger = logging.getLogger(__name__)

# customer_id value that asks create_sale to register a new customer inline
NEW_CUSTOMER_ID = 0


# ---- journal ----

def _write_journal(stores: DataStores, sale: Sale, stock_before: int, customer: Customer | None) -> None:
    payload = {
        "sale": sale.to_dict(),
        "stock_before": stock_before,
        "customer": customer.to_dict() if customer is not None else None,
    }
    atomic_write_text(stores.config.sale_journal_path, json.dumps(payload, sort_keys=True))


def _clear_journal(stores: DataStores) -> None:
    try:
        stores.config.sale_journal_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise StorageError(f"Unable to remove sale journal: {exc}") from exc


def _read_journal(stores: DataStores) -> dict | None:
    path = stores.config.sale_journal_path
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageError(f"Unable to read sale journal: {exc}") from exc

    try:
        payload = json.loads(text)
        sale_data = payload["sale"]
        sale = Sale(
            id=int(sale_data["id"]),
            product_id=int(sale_data["product_id"]),
            customer_id=int(sale_data["customer_id"]),
            quantity=int(sale_data["quantity"]),
            total_price=Decimal(sale_data["total_price"]),
            timestamp=sale_data["timestamp"],
            cashier=sale_data["cashier"],
        )
        customer_data = payload.get("customer")
        customer = Customer(**customer_data) if customer_data else None
        stock_before = int(payload["stock_before"])
    except (ValueError, KeyError, TypeError, InvalidOperation) as exc:
        raise StorageError(
            f"Sale journal {path} is unreadable ({exc}); inspect it and remove it manually"
        ) from exc

    return {"sale": sale, "customer": customer, "stock_before": stock_before}


def recover_pending_sale(stores: DataStores) -> Sale | None:
    """
    Complete a sale interrupted between its writes.

    Returns the journalled Sale if a journal was found, else None.
    """
    entry = _read_journal(stores)
    if entry is None:
        return None

    sale: Sale = entry["sale"]
    customer: Customer | None = entry["customer"]
    logger.warning("Recovering interrupted sale", extra={"extra": {"sale_id": sale.id}})

    if customer is not None and stores.customers.find_by_id(customer.id) is None:
        stores.customers.append(customer)

    if stores.sales.find_by_id(sale.id) is None:
        stores.sales.append(sale)

    product = stores.products.find_by_id(sale.product_id)
    if product is None:
        logger.warning(
            "Product of interrupted sale no longer exists; stock not adjusted",
            extra={"extra": {"sale_id": sale.id, "product_id": sale.product_id}},
        )
    elif product.stock == entry["stock_before"]:
        apply_stock_delta(stores, sale.product_id, -sale.quantity)

    _clear_journal(stores)
    return sale


# ---- operations ----

@require_permission(MANAGE_SALES)
def create_sale(
    stores: DataStores,
    session: Session,
    product_id: int,
    customer_id: int,
    quantity: int,
    cashier: str | None = None,
    new_customer: dict | None = None,
) -> Sale:
    """
    Record a sale and decrement stock.

    customer_id == NEW_CUSTOMER_ID registers ``new_customer`` (name, phone,
    email, address) first; that also requires MANAGE_CUSTOMERS.

    Raises:
        NotFoundError: product or customer absent
        ValidationError: quantity not in 1..stock, bad inline customer
        PermissionDeniedError: inline customer without MANAGE_CUSTOMERS

    Every check runs before the first write.
    """
    recover_pending_sale(stores)

    require_int(product_id, "product_id", minimum=1)
    require_int(customer_id, "customer_id", minimum=NEW_CUSTOMER_ID)
    require_int(quantity, "quantity", minimum=1)

    product = find_product(stores, product_id)
    if quantity > product.stock:
        raise ValidationError(
            f"Insufficient stock for product {product_id}: {product.stock} available, {quantity} requested"
        )

    inline_customer = None
    if customer_id == NEW_CUSTOMER_ID:
        permission_service.require_permission(session, MANAGE_CUSTOMERS, resource="create_sale")
        if not new_customer:
            raise ValidationError("new customer details are required when customer_id is 0")
        inline_customer = build_customer(
            customer_id=next_id(stores.customers),
            name=new_customer.get("name"),
            phone=new_customer.get("phone"),
            email=new_customer.get("email"),
            address=new_customer.get("address"),
        )
        customer_id = inline_customer.id
    else:
        find_customer(stores, customer_id)

    sale = Sale(
        id=next_id(stores.sales),
        product_id=product_id,
        customer_id=customer_id,
        quantity=quantity,
        total_price=product.sell_price * quantity,
        timestamp=now_str(),
        cashier=require_text(cashier if cashier is not None else session.username, "cashier"),
    )

    _write_journal(stores, sale, product.stock, inline_customer)
    if inline_customer is not None:
        stores.customers.append(inline_customer)
    stores.sales.append(sale)
    apply_stock_delta(stores, product_id, -quantity)
    _clear_journal(stores)

    logger.info(
        "Sale recorded",
        extra={"extra": {"sale_id": sale.id, "product_id": product_id, "quantity": quantity,
                         "total_price": f"{sale.total_price:.2f}", "user_id": session.user_id}},
    )
    return sale


@require_permission(MANAGE_SALES)
def list_sales(stores: DataStores, session: Session) -> list[Sale]:
    return list(stores.sales.scan())
