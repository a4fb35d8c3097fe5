# Overview: Generic append/scan/update-in-place operations over one delimited store file.

"""
Record Store

One file holds every record of one entity type, one record per line. There is
no cache: every read re-parses the file from disk.

UPDATE SAFETY:
- Appends write exactly one line through a short-lived append handle.
- In-place updates and deletes stream the live file into a temp file in the
  same directory, fsync it, then os.replace() it over the live path. The
  replace is the only mutation of the canonical path, so a reader never sees
  a half-written store, and any failure before it leaves the live file intact.
- A miss (no record with the target id) discards the temp file; the live file
  stays byte-for-byte unchanged.

NOT SAFE across processes: there is no locking. See DESIGN.md.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generic, Iterator, Optional, TypeVar

from ..validation import NotFoundError
from .codec import MalformedRecordError, serialize, split_fields
from .schemas import RecordSchema, decode_id

logger = logging.getLogger(__name__)

T = TypeVar("T")

_OMIT = object()


class StorageError(OSError):
    """A store file could not be opened, written, or replaced."""


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` via temp file + os.replace()."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        _discard(tmp_name)
        raise StorageError(f"Unable to write {path.name}: {exc}") from exc


def _discard(tmp_name) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


class RecordStore(Generic[T]):
    """Delimited-text store for one entity type."""

    def __init__(self, path, schema: RecordSchema[T], *, quote_all: bool = True) -> None:
        self.path = Path(path)
        self.schema = schema
        self.quote_all = quote_all

    def __repr__(self) -> str:
        return f"RecordStore({str(self.path)!r}, {self.schema.name})"

    # ---- codec ----

    def encode(self, record: T) -> str:
        return serialize(self.schema.to_fields(record), quote_all=self.quote_all) + "\n"

    def decode(self, line: str) -> T:
        return self.schema.from_fields(split_fields(line))

    # ---- reads ----

    def exists(self) -> bool:
        return self.path.is_file()

    def _lines(self) -> Iterator[tuple[int, str]]:
        try:
            f = open(self.path, "r", encoding="utf-8", newline="")
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Unable to read {self.path.name}: {exc}") from exc
        with f:
            for lineno, line in enumerate(f, start=1):
                if line.strip():
                    yield lineno, line

    def scan(self) -> Iterator[T]:
        """
        Yield every parseable record in file order.

        Lazy and single-pass; call again to re-scan. Malformed lines are
        skipped with a warning.
        """
        for lineno, line in self._lines():
            try:
                yield self.decode(line)
            except MalformedRecordError as exc:
                logger.warning(
                    "Skipping malformed record",
                    extra={"extra": {"store": self.path.name, "line": lineno, "reason": str(exc)}},
                )

    def iter_ids(self) -> Iterator[int]:
        """Ids of every line whose first field parses as an integer."""
        for _, line in self._lines():
            try:
                yield decode_id(split_fields(line))
            except MalformedRecordError:
                continue

    def find_by_id(self, record_id: int) -> Optional[T]:
        for record in self.scan():
            if self.schema.record_id(record) == record_id:
                return record
        return None

    def find_first(self, predicate: Callable[[T], bool]) -> Optional[T]:
        for record in self.scan():
            if predicate(record):
                return record
        return None

    # ---- writes ----

    def append(self, record: T) -> T:
        line = self.encode(record)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8", newline="") as f:
                f.write(line)
        except OSError as exc:
            raise StorageError(f"Unable to open {self.path.name} for append: {exc}") from exc
        return record

    def update_in_place(self, record_id: int, transform: Callable[[T], Optional[T]]) -> T:
        """
        Rewrite the record with ``record_id`` through ``transform``.

        ``transform`` may mutate the record and return None, or return a
        replacement. Exceptions it raises abort the rewrite with the live file
        untouched. Raises NotFoundError when no record matches.
        """
        def on_match(record: T):
            result = transform(record)
            return record if result is None else result

        updated, _ = self._rewrite(record_id, on_match)
        return updated

    def delete_by_id(self, record_id: int, confirm: Optional[Callable[[T], bool]] = None) -> bool:
        """
        Remove the record with ``record_id``.

        ``confirm`` is asked once with the matched record; a False answer
        leaves the store unchanged and returns False.
        """
        decision: dict[str, bool] = {}

        def on_match(record: T):
            if "keep" not in decision:
                decision["keep"] = confirm is not None and not confirm(record)
            return record if decision["keep"] else _OMIT

        _, changed = self._rewrite(record_id, on_match, commit_if=lambda: not decision.get("keep", False))
        return changed

    def _rewrite(self, record_id: int, on_match, commit_if: Optional[Callable[[], bool]] = None):
        if not self.exists():
            raise NotFoundError(f"{self.schema.name.capitalize()} ID {record_id} not found")

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as exc:
            raise StorageError(f"Unable to create temp file for {self.path.name}: {exc}") from exc

        found = False
        last = None
        try:
            with open(self.path, "r", encoding="utf-8", newline="") as src, \
                    os.fdopen(fd, "w", encoding="utf-8", newline="") as dst:
                for line in src:
                    if not line.strip():
                        continue
                    try:
                        record = self.decode(line)
                    except MalformedRecordError:
                        # unreadable lines are carried over untouched
                        dst.write(line if line.endswith("\n") else line + "\n")
                        continue
                    if self.schema.record_id(record) == record_id:
                        found = True
                        result = on_match(record)
                        if result is _OMIT:
                            continue
                        last = result
                        dst.write(self.encode(result))
                    else:
                        dst.write(self.encode(record))
                dst.flush()
                os.fsync(dst.fileno())
        except OSError as exc:
            _discard(tmp_name)
            raise StorageError(f"Unable to rewrite {self.path.name}: {exc}") from exc
        except BaseException:
            _discard(tmp_name)
            raise

        if not found:
            _discard(tmp_name)
            raise NotFoundError(f"{self.schema.name.capitalize()} ID {record_id} not found")

        if commit_if is not None and not commit_if():
            _discard(tmp_name)
            return last, False

        try:
            shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            _discard(tmp_name)
            raise StorageError(f"Unable to replace {self.path.name}: {exc}") from exc

        logger.debug("Rewrote store", extra={"extra": {"store": self.path.name, "id": record_id}})
        return last, True
