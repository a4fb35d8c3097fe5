# Overview: Flat-file storage layer (codec, per-entity schemas, record store).

from .codec import MalformedRecordError, parse_field, serialize, split_fields
from .schemas import (
    RecordSchema,
    PRODUCT_SCHEMA,
    CUSTOMER_SCHEMA,
    SALE_SCHEMA,
    USER_SCHEMA,
)
from .record_store import RecordStore, StorageError, atomic_write_text

__all__ = [
    "MalformedRecordError",
    "parse_field",
    "serialize",
    "split_fields",
    "RecordSchema",
    "PRODUCT_SCHEMA",
    "CUSTOMER_SCHEMA",
    "SALE_SCHEMA",
    "USER_SCHEMA",
    "RecordStore",
    "StorageError",
    "atomic_write_text",
]
