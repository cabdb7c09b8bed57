"""CSV export and import for the ledger interchange format.

The format is deliberately the plain one earlier exports used: a header
row ``date,amount,category,note,method,id`` followed by one comma-joined
row per record. Values are not quoted or escaped, so a comma or newline
inside ``note`` or ``method`` will shift columns when the file is read
back. Keep free text free of commas if the file must round-trip.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
from uuid import uuid4

from .categories import FALLBACK_CATEGORY_ID
from .exceptions import LedgerImportError
from .models import ExpenseRecord, parse_date

logger = logging.getLogger(__name__)

FIELDS = ("date", "amount", "category", "note", "method", "id")
DELIMITER = ","
LINE_PATTERN = re.compile(r"\r?\n")
# Leading numeric prefix, the way a lenient float parser reads "12.5THB" as 12.5.
NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
BOM = "\ufeff"


@dataclass(frozen=True)
class ImportResult:
    records: Tuple[ExpenseRecord, ...]
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.records)


def export_csv(records: Iterable[ExpenseRecord]) -> str:
    """Serialise records in the order given, header first."""
    lines = [DELIMITER.join(FIELDS)]
    for record in records:
        row = record.to_dict()
        lines.append(DELIMITER.join(_text(row.get(name)) for name in FIELDS))
    return "\n".join(lines)


def export_bytes(records: Iterable[ExpenseRecord]) -> bytes:
    """UTF-8 with a byte order mark so spreadsheet tools pick the right encoding."""
    return (BOM + export_csv(records)).encode("utf-8")


def export_filename(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now()
    return f"expenses_{int(moment.timestamp() * 1000)}.csv"


def parse_csv(
    data: Union[str, bytes],
    *,
    id_factory: Callable[[], str] = lambda: uuid4().hex,
) -> ImportResult:
    """Parse interchange text into records without touching any ledger.

    Columns are located by header name. Unparsable amounts become zero and
    a missing category falls back to ``other``; a row whose date cannot be
    read is skipped. Raises ``LedgerImportError`` when the input cannot be
    decoded or carries no header fields at all.
    """
    text = _decode(data)
    lines = [line for line in LINE_PATTERN.split(text) if line.strip()]
    if not lines:
        raise LedgerImportError("File is empty: a header row is required")

    header = [name.strip() for name in lines[0].split(DELIMITER)]
    if not any(header):
        raise LedgerImportError("Header row has no field names")
    positions = _header_positions(header)

    records: List[ExpenseRecord] = []
    skipped = 0
    for line_number, line in enumerate(lines[1:], start=2):
        columns = line.split(DELIMITER)

        def value(name: str) -> str:
            index = positions.get(name)
            if index is None or index >= len(columns):
                return ""
            return columns[index].strip()

        try:
            record_date = parse_date(value("date"))
        except ValueError:
            logger.warning("Skipping line %d: unreadable date %r", line_number, value("date"))
            skipped += 1
            continue

        records.append(
            ExpenseRecord(
                id=value("id") or id_factory(),
                date=record_date,
                amount=_lenient_amount(value("amount")),
                category=value("category") or FALLBACK_CATEGORY_ID,
                note=value("note"),
                method=value("method"),
            )
        )

    logger.info("Parsed %d records from interchange text (%d skipped)", len(records), skipped)
    return ImportResult(records=tuple(records), skipped=skipped)


def _decode(data: Union[str, bytes]) -> str:
    if isinstance(data, bytes):
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise LedgerImportError("File is not valid UTF-8 text") from exc
    if not isinstance(data, str):
        raise LedgerImportError("Import data must be text or bytes")
    return data[1:] if data.startswith(BOM) else data


def _header_positions(header: List[str]) -> Dict[str, int]:
    positions: Dict[str, int] = {}
    for index, name in enumerate(header):
        # First occurrence wins when a header repeats a name.
        positions.setdefault(name, index)
    return positions


def _lenient_amount(raw: str) -> Decimal:
    match = NUMBER_PREFIX.match(raw)
    if match is None:
        return Decimal("0")
    return Decimal(match.group(0))


def _text(value: object) -> str:
    return "" if value is None else str(value)
