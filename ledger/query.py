"""Query engine: pure derivation of views and per-category aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .exceptions import ValidationError
from .models import Category, ExpenseRecord
from .validators import validate_date

ALL_CATEGORIES = "all"


class SortOrder(str, Enum):
    DATE_DESC = "dateDesc"
    DATE_ASC = "dateAsc"
    AMOUNT_DESC = "amountDesc"
    AMOUNT_ASC = "amountAsc"


@dataclass(frozen=True)
class FilterSpec:
    """What to keep and how to order it. Every field defaults to unbounded."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    category_id: str = ALL_CATEGORIES
    query: str = ""
    sort_by: SortOrder = SortOrder.DATE_DESC

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "FilterSpec":
        """Build a filter from loosely-typed input such as query args.

        Recognised keys are ``from``, ``to``, ``category``, ``q`` and
        ``sort``; missing or empty values leave that dimension unbounded.
        """
        def _present(key: str) -> Optional[object]:
            value = raw.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                return None
            return value

        date_from = _present("from")
        date_to = _present("to")
        sort = _present("sort")
        return cls(
            date_from=validate_date(date_from, "from") if date_from is not None else None,
            date_to=validate_date(date_to, "to") if date_to is not None else None,
            category_id=str(_present("category") or ALL_CATEGORIES),
            query=str(raw.get("q") or ""),
            sort_by=_sort_order(sort) if sort is not None else SortOrder.DATE_DESC,
        )


@dataclass(frozen=True)
class CategoryTotal:
    category_id: str
    name: str
    color: str
    total: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "category_id": self.category_id,
            "name": self.name,
            "color": self.color,
            "total": str(self.total),
        }


@dataclass(frozen=True)
class LedgerView:
    records: Tuple[ExpenseRecord, ...]
    total: Decimal
    by_category: Tuple[CategoryTotal, ...]

    def __len__(self) -> int:
        return len(self.records)


_SORT_KEYS: Dict[SortOrder, Tuple[Callable[[ExpenseRecord], object], bool]] = {
    SortOrder.DATE_DESC: (lambda record: record.date, True),
    SortOrder.DATE_ASC: (lambda record: record.date, False),
    SortOrder.AMOUNT_DESC: (lambda record: record.amount, True),
    SortOrder.AMOUNT_ASC: (lambda record: record.amount, False),
}


def derive_view(
    records: Iterable[ExpenseRecord],
    categories: Sequence[Category],
    spec: Optional[FilterSpec] = None,
) -> LedgerView:
    """Filter, sort and aggregate ``records`` without touching them.

    Sorting is stable: records with equal keys keep their storage order
    (newest-inserted first), including under the descending orders.
    """
    spec = spec or FilterSpec()
    filtered = [record for record in records if _matches(record, spec)]

    key, reverse = _SORT_KEYS[spec.sort_by]
    ordered = sorted(filtered, key=key, reverse=reverse)

    total = sum((record.amount for record in ordered), Decimal("0"))
    return LedgerView(
        records=tuple(ordered),
        total=total,
        by_category=tuple(_by_category(ordered, categories)),
    )


def _matches(record: ExpenseRecord, spec: FilterSpec) -> bool:
    if spec.date_from is not None and record.date < spec.date_from:
        return False
    # Dates carry no time of day, so an inclusive day comparison covers the whole end day.
    if spec.date_to is not None and record.date > spec.date_to:
        return False
    if spec.category_id != ALL_CATEGORIES and record.category != spec.category_id:
        return False
    if spec.query.strip():
        needle = spec.query.lower()
        haystacks = (record.note.lower(), record.method.lower())
        if not any(needle in text for text in haystacks):
            return False
    return True


def _by_category(records: List[ExpenseRecord], categories: Sequence[Category]) -> List[CategoryTotal]:
    sums: Dict[str, Decimal] = {}
    for record in records:
        sums[record.category] = sums.get(record.category, Decimal("0")) + record.amount

    totals: List[CategoryTotal] = []
    for category in categories:
        amount = sums.get(category.id, Decimal("0"))
        if amount == 0:
            continue
        totals.append(
            CategoryTotal(category_id=category.id, name=category.name, color=category.color, total=amount)
        )
    return totals


def _sort_order(raw: object) -> SortOrder:
    if isinstance(raw, SortOrder):
        return raw
    try:
        return SortOrder(str(raw))
    except ValueError as exc:
        allowed = ", ".join(order.value for order in SortOrder)
        raise ValidationError("sort", f"must be one of: {allowed}") from exc
