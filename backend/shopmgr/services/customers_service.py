# Overview: Service-layer operations for customers; create, list, search, lookup.

from __future__ import annotations

import logging

from ..decorators import require_permission
from ..extensions import DataStores
from ..models import Customer
from ..permissions import MANAGE_CUSTOMERS
from ..validation import NotFoundError, ValidationError, require_text
from .identifier_service import next_id
from .session_service import Session

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "phone", "email")


def build_customer(*, customer_id: int, name: str, phone: str, email: str, address: str) -> Customer:
    """Validate raw input and return an unsaved Customer. Address may contain commas."""
    return Customer(
        id=customer_id,
        name=require_text(name, "name"),
        phone=require_text(phone, "phone"),
        email=require_text(email, "email"),
        address=require_text(address, "address"),
    )


def add_customer(stores: DataStores, customer: Customer) -> Customer:
    """Append an already-validated customer. No permission check."""
    stores.customers.append(customer)
    logger.info("Customer created", extra={"extra": {"customer_id": customer.id}})
    return customer


@require_permission(MANAGE_CUSTOMERS)
def create_customer(
    stores: DataStores,
    session: Session,
    *,
    name: str,
    phone: str,
    email: str,
    address: str,
) -> Customer:
    customer = build_customer(
        customer_id=next_id(stores.customers),
        name=name,
        phone=phone,
        email=email,
        address=address,
    )
    return add_customer(stores, customer)


@require_permission(MANAGE_CUSTOMERS)
def list_customers(stores: DataStores, session: Session) -> list[Customer]:
    return list(stores.customers.scan())


@require_permission(MANAGE_CUSTOMERS)
def search_customers(stores: DataStores, session: Session, term: str) -> list[Customer]:
    """Case-sensitive substring match over name, phone and email."""
    if not isinstance(term, str) or not term:
        raise ValidationError("search term cannot be empty")
    return [
        c for c in stores.customers.scan()
        if any(term in getattr(c, f) for f in SEARCH_FIELDS)
    ]


def find_customer(stores: DataStores, customer_id: int) -> Customer:
    customer = stores.customers.find_by_id(customer_id)
    if customer is None:
        raise NotFoundError(f"Customer ID {customer_id} not found")
    return customer


@require_permission(MANAGE_CUSTOMERS)
def get_customer(stores: DataStores, session: Session, customer_id: int) -> Customer:
    return find_customer(stores, customer_id)
