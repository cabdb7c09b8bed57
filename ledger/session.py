"""Application session: the engine object collaborators hold on to."""

from __future__ import annotations

import json
import logging
from decimal import InvalidOperation
from typing import Callable, List, Optional, Tuple, Union

from .categories import CategoryRegistry
from .exceptions import PersistenceError
from .interchange import ImportResult, export_bytes, export_csv, parse_csv
from .models import Category, ExpenseRecord
from .query import FilterSpec, LedgerView, derive_view
from .storage import CATEGORIES_KEY, EXPENSES_KEY, Storage
from .store import LedgerStore

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]

_MALFORMED = (ValueError, KeyError, TypeError, AttributeError, InvalidOperation)


class LedgerSession:
    """Owns one ledger store and one category registry for a session.

    State is loaded once from ``storage`` at construction. Afterwards each
    mutation saves the affected collection and then notifies subscribers
    with the collection key (``expenses-v1`` or ``expense-categories-v1``).
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._listeners: List[Listener] = []
        self.ledger = LedgerStore(self._load_records(), on_change=self._ledger_changed)
        self.categories = CategoryRegistry(self._load_categories(), on_change=self._categories_changed)

    # Rendering collaborator contract --------------------------------------
    def current_ledger(self) -> Tuple[ExpenseRecord, ...]:
        return self.ledger.records()

    def current_categories(self) -> List[Category]:
        return self.categories.list()

    def derive_view(self, spec: Optional[FilterSpec] = None) -> LedgerView:
        return derive_view(self.ledger.records(), self.categories.list(), spec)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Interchange ----------------------------------------------------------
    def export_csv(self) -> str:
        return export_csv(self.ledger.records())

    def export_bytes(self) -> bytes:
        return export_bytes(self.ledger.records())

    def import_csv(self, data: Union[str, bytes]) -> ImportResult:
        # Parsing finishes (or raises) before the ledger is touched.
        result = parse_csv(data)
        self.ledger.merge(result.records)
        logger.info("Imported %d records (%d skipped)", len(result), result.skipped)
        return result

    # Persistence ----------------------------------------------------------
    def _load_records(self) -> List[ExpenseRecord]:
        payload = self._load_json(EXPENSES_KEY)
        if payload is None:
            return []
        try:
            return [ExpenseRecord.from_dict(item) for item in payload]
        except _MALFORMED as exc:
            logger.warning("Discarding malformed %s: %s", EXPENSES_KEY, exc)
            return []

    def _load_categories(self) -> Optional[List[Category]]:
        payload = self._load_json(CATEGORIES_KEY)
        if payload is None:
            # None makes the registry fall back to its seed set.
            return None
        try:
            categories = [Category.from_dict(item) for item in payload]
            if len({category.id for category in categories}) != len(categories):
                raise ValueError("duplicate category ids")
        except _MALFORMED as exc:
            logger.warning("Discarding malformed %s: %s", CATEGORIES_KEY, exc)
            return None
        return categories

    def _load_json(self, key: str) -> Optional[list]:
        raw = self._storage.load(key)
        if raw is None:
            return None
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Discarding unreadable %s: %s", key, exc)
            return None
        if not isinstance(payload, list):
            logger.warning("Discarding %s: expected a list payload", key)
            return None
        return payload

    def _save(self, key: str, items: list) -> None:
        data = json.dumps(items, ensure_ascii=False, indent=2).encode("utf-8")
        try:
            self._storage.save(key, data)
        except PersistenceError:
            raise
        except OSError as exc:
            raise PersistenceError(f"Unexpected error while saving {key}") from exc

    def _ledger_changed(self) -> None:
        self._save(EXPENSES_KEY, [record.to_dict() for record in self.ledger.records()])
        self._notify(EXPENSES_KEY)

    def _categories_changed(self) -> None:
        self._save(CATEGORIES_KEY, [category.to_dict() for category in self.categories.list()])
        self._notify(CATEGORIES_KEY)

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)
