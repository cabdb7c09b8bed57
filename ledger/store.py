"""Ledger store: the authoritative, newest-first collection of expense records."""

from __future__ import annotations

import sys
from typing import Callable, Collection, Dict, Iterable, List, Mapping, Optional, Tuple
from uuid import uuid4

from .exceptions import NotFoundError
from .models import ExpenseRecord
from .validators import (
    MAX_METHOD_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTE_LENGTH,
    parse_amount,
    validate_date,
    validate_optional_str,
    validate_required_str,
)

DEFAULT_METHOD = "cash"

_LENGTH_LIMITS = {
    "category": MAX_NAME_LENGTH,
    "note": MAX_NOTE_LENGTH,
    "method": MAX_METHOD_LENGTH,
}


class LedgerStore:
    """Holds expense records and applies validated mutations.

    The store performs no I/O. Every mutation calls ``on_change`` once so a
    collaborator can persist the new snapshot and re-render.
    """

    def __init__(
        self,
        records: Optional[Iterable[ExpenseRecord]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._records: List[ExpenseRecord] = list(records or [])
        self._on_change = on_change

    # Public API -----------------------------------------------------------
    def add(self, payload: Mapping[str, object]) -> ExpenseRecord:
        data = self._validate_payload(payload)
        data.setdefault("method", DEFAULT_METHOD)
        record = ExpenseRecord(id=uuid4().hex, **data)
        self._records.insert(0, record)
        self._changed()
        return record

    def update(self, record_id: str, changes: Mapping[str, object]) -> ExpenseRecord:
        index = self._index_or_raise(record_id)
        existing = self._records[index]
        # id is immutable; anything else in the patch replaces the stored value.
        patch = {key: value for key, value in changes.items() if key != "id"}
        merged = {**existing.to_dict(), **patch}
        # Length limits bind only what the caller sends; imported text may be longer.
        data = self._validate_payload(merged, limited=patch.keys())
        updated = ExpenseRecord(id=existing.id, **data)
        self._records[index] = updated
        self._changed()
        return updated

    def remove(self, record_id: str) -> None:
        remaining = [record for record in self._records if record.id != record_id]
        if len(remaining) != len(self._records):
            self._records = remaining
            self._changed()

    def clear(self) -> None:
        self._records = []
        self._changed()

    def merge(self, records: Iterable[ExpenseRecord]) -> int:
        """Prepend imported records as one block, in the order given.

        An incoming record whose id is already stored replaces the stored
        one, so ids stay unique when a previous export is restored.
        """
        incoming: Dict[str, ExpenseRecord] = {}
        for record in records:
            incoming[record.id] = record
        if not incoming:
            return 0
        kept = [record for record in self._records if record.id not in incoming]
        self._records = list(incoming.values()) + kept
        self._changed()
        return len(incoming)

    def get(self, record_id: str) -> ExpenseRecord:
        return self._records[self._index_or_raise(record_id)]

    def records(self) -> Tuple[ExpenseRecord, ...]:
        """Return an immutable snapshot in storage order."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    # Internal helpers -----------------------------------------------------
    def _index_or_raise(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError(f"Expense {record_id} not found")

    def _validate_payload(
        self,
        payload: Mapping[str, object],
        limited: Optional[Collection[str]] = None,
    ) -> Dict[str, object]:
        limits = {
            field: size if limited is None or field in limited else sys.maxsize
            for field, size in _LENGTH_LIMITS.items()
        }
        data: Dict[str, object] = {
            "date": validate_date(payload.get("date"), "date"),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "category": validate_required_str(payload.get("category"), "category", limits["category"]),
            "note": validate_optional_str(payload.get("note"), "note", limits["note"]),
        }
        if payload.get("method") is not None:
            data["method"] = validate_optional_str(payload.get("method"), "method", limits["method"])
        return data

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
