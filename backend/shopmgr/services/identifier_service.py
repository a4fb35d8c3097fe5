# Overview: Service-layer operations for identifier allocation over a record store.

"""
Identifier Service - next integer id for a store

Ids are max(existing) + 1, computed by scanning the first field of every line.
The floor is 1: zero or negative ids already in a file never pull it lower.
Line order does not matter and gaps are never reused below the maximum.

NOT CONCURRENCY-SAFE: two callers that allocate before either appends get the
same id. Single-process use only.
"""

from ..storage import RecordStore


def next_id(store: RecordStore) -> int:
    """Return 1 for an empty or missing store, else the largest positive id + 1."""
    return max(0, max(store.iter_ids(), default=0)) + 1
