"""Tests for CSV export and import."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledger.exceptions import LedgerImportError
from ledger.interchange import export_bytes, export_csv, export_filename, parse_csv
from ledger.models import ExpenseRecord


def _record(record_id, day, amount, category="food", note="", method=""):
    return ExpenseRecord(
        id=record_id,
        date=date.fromisoformat(day),
        amount=Decimal(str(amount)),
        category=category,
        note=note,
        method=method,
    )


def test_export_header_and_rows_in_storage_order():
    text = export_csv([
        _record("b", "2024-01-10", "50", "bill", "power", "card"),
        _record("a", "2024-01-05", "100.5", "food"),
    ])

    assert text.split("\n") == [
        "date,amount,category,note,method,id",
        "2024-01-10,50,bill,power,card,b",
        "2024-01-05,100.5,food,,,a",
    ]


def test_export_empty_ledger_is_header_only():
    assert export_csv([]) == "date,amount,category,note,method,id"


def test_export_bytes_has_bom_and_parses_back():
    payload = export_bytes([_record("a", "2024-01-05", "1", note="ข้าว")])
    assert payload.startswith(b"\xef\xbb\xbf")
    assert parse_csv(payload).records[0].note == "ข้าว"


def test_export_filename_uses_epoch_millis():
    moment = datetime(2024, 1, 1, 12, 0, 0)
    assert export_filename(moment) == f"expenses_{int(moment.timestamp() * 1000)}.csv"


def test_round_trip_preserves_ids_fields_and_order():
    original = [
        _record("id-3", "2024-03-01", "12.345", "bill", "rent", "transfer"),
        _record("id-2", "2024-02-01", "7", "other", "", "cash"),
        _record("id-1", "2024-01-01", "0.1", "food", "snack", ""),
    ]

    result = parse_csv(export_csv(original))

    assert list(result.records) == original
    assert result.skipped == 0


def test_unparsable_amount_becomes_zero():
    result = parse_csv("date,amount,category\n2024-02-01,abc,food\n")

    assert len(result) == 1
    record = result.records[0]
    assert record.amount == 0
    assert record.category == "food"
    assert record.date == date(2024, 2, 1)


def test_amount_uses_leading_numeric_prefix():
    result = parse_csv("date,amount\n2024-02-01,12.5THB\n2024-02-02,-3\n2024-02-03,\n")
    assert [r.amount for r in result.records] == [Decimal("12.5"), Decimal("-3"), Decimal("0")]


def test_header_only_imports_nothing():
    result = parse_csv("date,amount,category,note,method,id\n")
    assert result.records == ()
    assert result.skipped == 0


def test_columns_are_found_by_name_in_any_order():
    result = parse_csv("id,method,note,category,amount,date\nx1,cash,tea,food,3.5,2024-04-04")
    assert result.records[0] == _record("x1", "2024-04-04", "3.5", "food", "tea", "cash")


def test_missing_columns_fall_back_to_defaults():
    result = parse_csv("date,amount\n2024-02-01,5", id_factory=lambda: "generated")
    record = result.records[0]

    assert record.id == "generated"
    assert record.category == "other"
    assert record.note == ""
    assert record.method == ""


def test_empty_id_and_category_cells_fall_back():
    ids = iter(["g1", "g2"])
    result = parse_csv(
        "date,amount,category,id\n2024-02-01,5,,\n2024-02-02,6,bill,",
        id_factory=lambda: next(ids),
    )
    assert [(r.id, r.category) for r in result.records] == [("g1", "other"), ("g2", "bill")]


def test_short_rows_and_blank_lines_are_tolerated():
    text = "date,amount,category,note\r\n\r\n2024-02-01,5\r\n   \r\n2024-02-02,6,bill,ok\r\n"
    result = parse_csv(text)
    assert [(r.category, r.note) for r in result.records] == [("other", ""), ("bill", "ok")]


def test_rows_with_unreadable_dates_are_skipped():
    result = parse_csv("date,amount\nnot-a-date,5\n,6\n2024-02-02,7")
    assert [r.amount for r in result.records] == [Decimal("7")]
    assert result.skipped == 2


def test_comma_in_note_shifts_columns():
    # Unescaped format: the extra comma pushes the method into the id column.
    text = export_csv([_record("a", "2024-01-01", "1", note="rice, eggs", method="cash")])
    record = parse_csv(text).records[0]
    assert record.note == "rice"
    assert record.method == "eggs"
    assert record.id == "cash"


@pytest.mark.parametrize("bad", ["", "\n\n", " , ,\n2024-01-01,1", b"\xff\xfe\x00bad"])
def test_structurally_unreadable_input_raises(bad):
    with pytest.raises(LedgerImportError):
        parse_csv(bad)
