"""Data models for the expense ledger domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict

__all__ = ["Category", "ExpenseRecord", "parse_date"]


def parse_date(value: str) -> date:
    """Parse an ISO 8601 calendar date, dropping any time-of-day component."""
    value = value.strip()
    if "T" in value or " " in value:
        # Accept full timestamps from older exports; only the day is meaningful.
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return date.fromisoformat(value)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(id=str(data["id"]), name=str(data["name"]), color=str(data["color"]))


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    date: date
    amount: Decimal
    category: str
    note: str = ""
    method: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            # Full precision is kept; two-decimal rounding happens at display time.
            "amount": str(self.amount),
            "category": self.category,
            "note": self.note,
            "method": self.method,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseRecord":
        """Hydrate a record from JSON-native data.

        Raises ``ValueError`` (or ``decimal.InvalidOperation``) for data that
        cannot describe a record, including non-finite amounts.
        """
        amount = Decimal(str(data["amount"]))
        if not amount.is_finite():
            raise ValueError(f"Amount must be finite, got {data['amount']!r}")
        return cls(
            id=str(data["id"]),
            date=parse_date(str(data["date"])),
            amount=amount,
            category=str(data["category"]),
            note=str(data.get("note") or ""),
            method=str(data.get("method") or ""),
        )
