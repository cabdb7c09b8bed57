"""Tests for the ledger store mutators."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger.exceptions import NotFoundError, ValidationError
from ledger.models import ExpenseRecord
from ledger.query import derive_view
from ledger.store import LedgerStore


@pytest.fixture
def store():
    return LedgerStore()


def _payload(**overrides):
    payload = {"date": "2024-01-05", "amount": "100", "category": "food"}
    payload.update(overrides)
    return payload


def test_add_assigns_id_and_prepends(store):
    first = store.add(_payload(note="first"))
    second = store.add(_payload(note="second"))

    assert first.id and second.id and first.id != second.id
    assert [record.note for record in store.records()] == ["second", "first"]
    assert second.date == date(2024, 1, 5)
    assert second.amount == Decimal("100")


def test_add_defaults_note_and_method(store):
    record = store.add(_payload())
    assert record.note == ""
    assert record.method == "cash"


def test_add_then_view_contains_record_once_and_total_grows(store):
    store.add(_payload(amount="12.5"))
    before = derive_view(store.records(), []).total

    record = store.add(_payload(amount="7.25"))
    view = derive_view(store.records(), [])

    assert [r.id for r in view.records].count(record.id) == 1
    assert view.total - before == Decimal("7.25")


@pytest.mark.parametrize("amount", ["0", "-5", "abc", "", None, "NaN", "Infinity", True])
def test_add_rejects_invalid_amount_without_mutating(store, amount):
    with pytest.raises(ValidationError) as excinfo:
        store.add(_payload(amount=amount))
    assert excinfo.value.field == "amount"
    assert len(store) == 0


@pytest.mark.parametrize("value", [None, "", "   ", "2024-13-45"])
def test_add_rejects_missing_or_bad_date(store, value):
    with pytest.raises(ValidationError) as excinfo:
        store.add(_payload(date=value))
    assert excinfo.value.field == "date"
    assert len(store) == 0


def test_add_requires_category(store):
    with pytest.raises(ValidationError) as excinfo:
        store.add(_payload(category=""))
    assert excinfo.value.field == "category"


def test_add_accepts_date_objects(store):
    record = store.add(_payload(date=date(2023, 12, 31)))
    assert record.date == date(2023, 12, 31)


def test_update_keeps_position_and_id(store):
    oldest = store.add(_payload(note="a"))
    middle = store.add(_payload(note="b"))
    store.add(_payload(note="c"))

    updated = store.update(middle.id, {"amount": "55", "note": "changed", "id": "hijack"})

    assert updated.id == middle.id
    assert updated.amount == Decimal("55")
    assert updated.category == "food"
    assert [r.note for r in store.records()] == ["c", "changed", "a"]
    assert store.get(oldest.id).note == "a"


def test_update_validates_merged_result(store):
    record = store.add(_payload())
    with pytest.raises(ValidationError):
        store.update(record.id, {"amount": "-1"})
    assert store.get(record.id).amount == Decimal("100")


def test_update_leaves_long_imported_text_alone(store):
    long_note = "n" * 250
    store.merge([
        ExpenseRecord(id="imp", date=date(2024, 1, 5), amount=Decimal("5"), category="food", note=long_note),
    ])

    updated = store.update("imp", {"amount": "6"})

    assert updated.amount == Decimal("6")
    assert updated.note == long_note
    with pytest.raises(ValidationError) as excinfo:
        store.update("imp", {"note": long_note})
    assert excinfo.value.field == "note"


def test_update_unknown_id_raises(store):
    with pytest.raises(NotFoundError):
        store.update("missing", {"amount": "1"})


def test_remove_is_idempotent(store):
    keep = store.add(_payload(note="keep"))
    drop = store.add(_payload(note="drop"))

    store.remove(drop.id)
    once = store.records()
    store.remove(drop.id)

    assert store.records() == once
    assert [r.id for r in store.records()] == [keep.id]


def test_clear_empties_everything(store):
    store.add(_payload())
    store.add(_payload())
    store.clear()

    view = derive_view(store.records(), [])
    assert len(store) == 0
    assert view.records == ()
    assert view.total == 0


def test_every_mutation_signals_change():
    calls = []
    store = LedgerStore(on_change=lambda: calls.append(1))

    record = store.add(_payload())
    store.update(record.id, {"note": "x"})
    store.remove(record.id)
    store.clear()
    assert len(calls) == 4


def test_failed_mutations_do_not_signal():
    calls = []
    store = LedgerStore(on_change=lambda: calls.append(1))

    with pytest.raises(ValidationError):
        store.add(_payload(amount="0"))
    store.remove("missing")
    assert calls == []


def test_merge_prepends_block_and_replaces_matching_ids(store):
    existing = store.add(_payload(note="existing"))
    other = store.add(_payload(note="other"))
    incoming = [
        ExpenseRecord(id="new-1", date=date(2024, 2, 1), amount=Decimal("1"), category="food"),
        ExpenseRecord(id=existing.id, date=date(2024, 2, 2), amount=Decimal("2"), category="bill"),
    ]

    count = store.merge(incoming)

    assert count == 2
    assert [r.id for r in store.records()] == ["new-1", existing.id, other.id]
    assert store.get(existing.id).category == "bill"


def test_merge_nothing_is_a_no_op():
    calls = []
    store = LedgerStore(on_change=lambda: calls.append(1))
    assert store.merge([]) == 0
    assert calls == []
