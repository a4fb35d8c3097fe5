# backend/shopmgr/services/products_service.py
"""
Products Service

Every public operation requires MANAGE_PRODUCTS, including reads, except
products_for_sale, which the sales screen reads under MANAGE_SALES.

STOCK RULES:
- New products start with stock >= 0 and sell_price >= cost_price >= 0
- adjust_stock applies a signed delta and clamps the result at zero
- apply_stock_delta is the unchecked counterpart used by sales_service
"""
from __future__ import annotations

import logging

from ..decorators import require_permission
from ..extensions import DataStores
from ..models import Product
from ..permissions import MANAGE_PRODUCTS, MANAGE_SALES
from ..validation import (
    NotFoundError,
    ValidationError,
    enforce_rules_product,
    require_int,
    require_text,
    to_money,
)
from .identifier_service import next_id
from .session_service import Session

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "category", "brand")


def build_product(
    *,
    product_id: int,
    name: str,
    category: str,
    brand: str,
    cost_price,
    sell_price,
    stock: int,
    min_stock_level: int,
) -> Product:
    """Validate raw input and return an unsaved Product."""
    cost = to_money(cost_price, "cost_price")
    sell = to_money(sell_price, "sell_price")
    enforce_rules_product(cost_price=cost, sell_price=sell, stock=stock, min_stock_level=min_stock_level)
    return Product(
        id=product_id,
        name=require_text(name, "name"),
        category=require_text(category, "category"),
        brand=require_text(brand, "brand"),
        cost_price=cost,
        sell_price=sell,
        stock=stock,
        min_stock_level=min_stock_level,
    )


@require_permission(MANAGE_PRODUCTS)
def create_product(
    stores: DataStores,
    session: Session,
    *,
    name: str,
    category: str,
    brand: str,
    cost_price,
    sell_price,
    stock: int = 0,
    min_stock_level: int = 0,
) -> Product:
    """
    Validate and append a new product with the next free id.

    Raises ValidationError before anything is written.
    """
    product = build_product(
        product_id=next_id(stores.products),
        name=name,
        category=category,
        brand=brand,
        cost_price=cost_price,
        sell_price=sell_price,
        stock=stock,
        min_stock_level=min_stock_level,
    )
    stores.products.append(product)
    logger.info(
        "Product created",
        extra={"extra": {"product_id": product.id, "user_id": session.user_id}},
    )
    return product


@require_permission(MANAGE_PRODUCTS)
def list_products(stores: DataStores, session: Session) -> list[Product]:
    return list(stores.products.scan())


@require_permission(MANAGE_PRODUCTS)
def search_products(stores: DataStores, session: Session, term: str) -> list[Product]:
    """Case-sensitive substring match over name, category and brand."""
    if not isinstance(term, str) or not term:
        raise ValidationError("search term cannot be empty")
    return [
        p for p in stores.products.scan()
        if any(term in getattr(p, f) for f in SEARCH_FIELDS)
    ]


def find_product(stores: DataStores, product_id: int) -> Product:
    """Unchecked lookup for other services. Raises NotFoundError."""
    product = stores.products.find_by_id(product_id)
    if product is None:
        raise NotFoundError(f"Product ID {product_id} not found")
    return product


@require_permission(MANAGE_SALES)
def products_for_sale(stores: DataStores, session: Session) -> list[Product]:
    """Catalogue read for the sales screen; needs MANAGE_SALES, not MANAGE_PRODUCTS."""
    return list(stores.products.scan())


@require_permission(MANAGE_PRODUCTS)
def get_product(stores: DataStores, session: Session, product_id: int) -> Product:
    return find_product(stores, product_id)


def apply_stock_delta(stores: DataStores, product_id: int, delta: int) -> Product:
    """
    Rewrite one product's stock as max(0, stock + delta).

    No permission check; callers are responsible for authorization.
    Raises NotFoundError if the product is absent (store unchanged).
    """
    require_int(delta, "delta")

    def _apply(p: Product) -> None:
        p.stock = max(0, p.stock + delta)

    updated = stores.products.update_in_place(product_id, _apply)
    if updated.is_low_stock:
        logger.info(
            "Product at or below minimum stock",
            extra={"extra": {"product_id": product_id, "stock": updated.stock,
                             "min_stock_level": updated.min_stock_level}},
        )
    return updated


@require_permission(MANAGE_PRODUCTS)
def adjust_stock(stores: DataStores, session: Session, product_id: int, delta: int) -> Product:
    """
    Signed stock adjustment (shrinkage, corrections).

    The result clamps at zero, so removing more than is on hand leaves 0.
    """
    updated = apply_stock_delta(stores, product_id, delta)
    logger.info(
        "Stock adjusted",
        extra={"extra": {"product_id": product_id, "delta": delta,
                         "stock": updated.stock, "user_id": session.user_id}},
    )
    return updated


@require_permission(MANAGE_PRODUCTS)
def restock_product(stores: DataStores, session: Session, product_id: int, quantity: int) -> Product:
    """Receive ``quantity`` units into stock. quantity must be positive."""
    require_int(quantity, "quantity", minimum=1)
    updated = apply_stock_delta(stores, product_id, quantity)
    logger.info(
        "Product restocked",
        extra={"extra": {"product_id": product_id, "quantity": quantity,
                         "stock": updated.stock, "user_id": session.user_id}},
    )
    return updated
