# Overview: Per-entity field layouts for the delimited stores.

"""
Each schema maps a model to an ordered list of text fields and back.

Decoding follows the store's absent-field rule: a missing or empty numeric
field reads as 0 and a missing string field reads as "". A numeric field that
is present but not a number makes the whole line malformed, as does a missing
or non-integer id.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from ..models import Customer, Product, Sale, User
from ..permissions import PERMISSION_COLUMNS
from .codec import MalformedRecordError

T = TypeVar("T")


def _field(fields: Sequence[str], index: int) -> Optional[str]:
    if index >= len(fields):
        return None
    value = fields[index].strip()
    return value or None


def decode_id(fields: Sequence[str]) -> int:
    raw = _field(fields, 0)
    if raw is None:
        raise MalformedRecordError("missing id")
    try:
        return int(raw)
    except ValueError:
        raise MalformedRecordError(f"id is not an integer: {raw!r}")


def _int(fields: Sequence[str], index: int) -> int:
    raw = _field(fields, index)
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise MalformedRecordError(f"field {index} is not an integer: {raw!r}")


def _decimal(fields: Sequence[str], index: int) -> Decimal:
    raw = _field(fields, index)
    if raw is None:
        return Decimal("0.00")
    try:
        value = Decimal(raw)
        if not value.is_finite():
            raise MalformedRecordError(f"field {index} is not a finite number: {raw!r}")
        return value.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise MalformedRecordError(f"field {index} is not a number: {raw!r}")


def _str(fields: Sequence[str], index: int) -> str:
    if index >= len(fields):
        return ""
    return fields[index]


def _flag(fields: Sequence[str], index: int) -> bool:
    return _int(fields, index) != 0


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


@dataclass(frozen=True)
class RecordSchema(Generic[T]):
    name: str
    encode: Callable[[T], List[str]]
    decode: Callable[[Sequence[str]], T]

    def to_fields(self, record: T) -> List[str]:
        return self.encode(record)

    def from_fields(self, fields: Sequence[str]) -> T:
        return self.decode(fields)

    def record_id(self, record: T) -> int:
        return record.id  # type: ignore[attr-defined]


def _encode_product(p: Product) -> List[str]:
    return [
        str(p.id), p.name, p.category, p.brand,
        _money(p.cost_price), _money(p.sell_price),
        str(p.stock), str(p.min_stock_level),
    ]


def _decode_product(fields: Sequence[str]) -> Product:
    return Product(
        id=decode_id(fields),
        name=_str(fields, 1),
        category=_str(fields, 2),
        brand=_str(fields, 3),
        cost_price=_decimal(fields, 4),
        sell_price=_decimal(fields, 5),
        stock=_int(fields, 6),
        min_stock_level=_int(fields, 7),
    )


def _encode_customer(c: Customer) -> List[str]:
    return [str(c.id), c.name, c.phone, c.email, c.address]


def _decode_customer(fields: Sequence[str]) -> Customer:
    return Customer(
        id=decode_id(fields),
        name=_str(fields, 1),
        phone=_str(fields, 2),
        email=_str(fields, 3),
        address=_str(fields, 4),
    )


def _encode_sale(s: Sale) -> List[str]:
    return [
        str(s.id), str(s.product_id), str(s.customer_id), str(s.quantity),
        _money(s.total_price), s.timestamp, s.cashier,
    ]


def _decode_sale(fields: Sequence[str]) -> Sale:
    return Sale(
        id=decode_id(fields),
        product_id=_int(fields, 1),
        customer_id=_int(fields, 2),
        quantity=_int(fields, 3),
        total_price=_decimal(fields, 4),
        timestamp=_str(fields, 5),
        cashier=_str(fields, 6),
    )


def _encode_user(u: User) -> List[str]:
    flags = ["1" if code in u.permissions else "0" for code in PERMISSION_COLUMNS]
    return [str(u.id), u.username, u.password_hash, *flags, "1" if u.is_active else "0"]


def _decode_user(fields: Sequence[str]) -> User:
    permissions = frozenset(
        code for offset, code in enumerate(PERMISSION_COLUMNS) if _flag(fields, 3 + offset)
    )
    return User(
        id=decode_id(fields),
        username=_str(fields, 1),
        password_hash=_str(fields, 2),
        permissions=permissions,
        is_active=_flag(fields, 3 + len(PERMISSION_COLUMNS)),
    )


PRODUCT_SCHEMA: RecordSchema[Product] = RecordSchema(
    name="product",
    encode=_encode_product,
    decode=_decode_product,
)

CUSTOMER_SCHEMA: RecordSchema[Customer] = RecordSchema(
    name="customer",
    encode=_encode_customer,
    decode=_decode_customer,
)

SALE_SCHEMA: RecordSchema[Sale] = RecordSchema(
    name="sale",
    encode=_encode_sale,
    decode=_decode_sale,
)

USER_SCHEMA: RecordSchema[User] = RecordSchema(
    name="user",
    encode=_encode_user,
    decode=_decode_user,
)
