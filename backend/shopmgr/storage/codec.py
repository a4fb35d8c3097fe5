# Overview: Delimited record codec; converts one record to one line of text and back.

"""
Quoted comma-delimited line codec.

Two write policies share one reader:

- ENHANCED (quote_all=True): every field is wrapped in double quotes, so text
  may contain commas.
- LEGACY (quote_all=False): nothing is quoted. A value containing a comma
  shifts every later field when read back; this is logged but not prevented.

KNOWN LIMITATION: there is no escape for a literal double quote. Every '"'
toggles the quoted state and is dropped, in both directions.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

DELIMITER = ","
QUOTE = '"'


class MalformedRecordError(ValueError):
    """A line could not be decoded into a record."""


def split_fields(line: str) -> List[str]:
    """
    Split one raw line into its fields.

    A comma separates fields only outside a quoted span. Quote characters
    toggle the span and are not part of the value. Trailing CR/LF is ignored.
    """
    line = line.rstrip("\r\n")
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for ch in line:
        if ch == QUOTE:
            in_quotes = not in_quotes
            continue
        if ch == DELIMITER and not in_quotes:
            fields.append("".join(current))
            current = []
            continue
        current.append(ch)

    fields.append("".join(current))
    return fields


def parse_field(line: str, index: int) -> Optional[str]:
    """
    Return field ``index`` of ``line``, or None when it is absent.

    Absent means out of range or empty. Callers treat absent numerics as
    zero and absent strings as "".
    """
    if index < 0:
        return None
    fields = split_fields(line)
    if index >= len(fields):
        return None
    value = fields[index]
    return value if value else None


def serialize(values: Iterable[str], *, quote_all: bool = True) -> str:
    """Join field values into one line (without the trailing newline)."""
    values = [str(v) for v in values]
    if quote_all:
        return DELIMITER.join(f"{QUOTE}{v}{QUOTE}" for v in values)

    for v in values:
        if DELIMITER in v:
            logger.warning(
                "Legacy record format cannot hold a comma; field boundaries will shift on read",
                extra={"extra": {"value": v}},
            )
    return DELIMITER.join(values)
