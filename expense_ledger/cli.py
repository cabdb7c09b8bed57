"""Console interface for the expense ledger."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from ledger.config import Settings, configure_logging
from ledger.exceptions import (
    DuplicateError,
    LedgerImportError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ledger.formatting import format_amount
from ledger.models import ExpenseRecord
from ledger.query import FilterSpec, SortOrder
from ledger.session import LedgerSession
from ledger.storage import FileStorage


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _format_record(record: ExpenseRecord, session: LedgerSession, currency: str) -> str:
    category = session.categories.display_name(record.category)
    return (
        f"[{record.id}] {record.date.isoformat()} {format_amount(record.amount, currency)}\n"
        f"  Category: {category} | Method: {record.method or '-'}\n"
        f"  Note: {record.note or '-'}\n"
    )


def handle_expense(args: argparse.Namespace, session: LedgerSession, currency: str) -> None:
    if args.command == "add":
        payload = {
            "date": args.date,
            "amount": args.amount,
            "category": args.category,
            "note": args.note,
            "method": args.method,
        }
        record = session.ledger.add({k: v for k, v in payload.items() if v is not None})
        print("Expense added:\n" + _format_record(record, session, currency))
    elif args.command == "list":
        spec = FilterSpec(
            date_from=date.fromisoformat(args.date_from) if args.date_from else None,
            date_to=date.fromisoformat(args.date_to) if args.date_to else None,
            category_id=args.category,
            query=args.query,
            sort_by=SortOrder(args.sort),
        )
        view = session.derive_view(spec)
        if not view.records:
            print("No expenses found.")
            return
        print(f"Found {len(view)} expenses (total {format_amount(view.total, currency)}):")
        for record in view.records:
            print(_format_record(record, session, currency))
        print("By category:")
        for entry in view.by_category:
            print(f"  {entry.name}: {format_amount(entry.total, currency)}")
    elif args.command == "edit":
        changes = {
            "date": args.date,
            "amount": args.amount,
            "category": args.category,
            "note": args.note,
            "method": args.method,
        }
        cleaned = {k: v for k, v in changes.items() if v is not None}
        record = session.ledger.update(args.id, cleaned)
        print("Expense updated:\n" + _format_record(record, session, currency))
    elif args.command == "delete":
        session.ledger.remove(args.id)
        print(f"Expense {args.id} deleted.")
    elif args.command == "clear":
        session.ledger.clear()
        print("All expenses deleted.")


def handle_category(args: argparse.Namespace, session: LedgerSession) -> None:
    if args.command == "add":
        category = session.categories.add(args.name, args.color)
        print(f"Category added: {category.id} ({category.name}, {category.color})")
    elif args.command == "rename":
        category = session.categories.rename(args.id, args.name)
        print(f"Category {category.id} renamed to {category.name}.")
    elif args.command == "recolor":
        category = session.categories.recolor(args.id, args.color)
        print(f"Category {category.id} recolored to {category.color}.")
    elif args.command == "delete":
        session.categories.remove(args.id)
        print(f"Category {args.id} deleted. Expenses that use it are kept.")
    elif args.command == "list":
        for category in session.current_categories():
            print(f"{category.id}\t{category.name}\t{category.color}")


def handle_export(args: argparse.Namespace, session: LedgerSession) -> None:
    if args.path is None:
        print(session.export_csv())
        return
    try:
        args.path.write_bytes(session.export_bytes())
    except OSError as exc:
        raise PersistenceError(f"Unable to write {args.path}") from exc
    print(f"Exported {len(session.ledger)} expenses to {args.path}.")


def handle_import(args: argparse.Namespace, session: LedgerSession) -> None:
    try:
        data = args.path.read_bytes()
    except OSError as exc:
        raise LedgerImportError(f"Unable to read {args.path}") from exc
    result = session.import_csv(data)
    print(f"Imported {len(result)} expenses ({result.skipped} rows skipped).")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Ledger CLI")
    parser.add_argument(
        "--data-dir",
        default=None,
        type=Path,
        help="Directory to store JSON data (default: $EXPENSE_LEDGER_DATA_DIR or ./data)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine activity to stderr")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    expense_parser = subparsers.add_parser("expense", help="Manage expenses")
    expense_sub = expense_parser.add_subparsers(dest="command", required=True)

    expense_add = expense_sub.add_parser("add", help="Add a new expense")
    expense_add.add_argument("date", type=_parse_date)
    expense_add.add_argument("amount", type=_parse_amount)
    expense_add.add_argument("category")
    expense_add.add_argument("--note")
    expense_add.add_argument("--method")

    expense_list = expense_sub.add_parser("list", help="List expenses")
    expense_list.add_argument("--from", dest="date_from", type=_parse_date)
    expense_list.add_argument("--to", dest="date_to", type=_parse_date)
    expense_list.add_argument("--category", default="all")
    expense_list.add_argument("--query", default="")
    expense_list.add_argument(
        "--sort",
        choices=[order.value for order in SortOrder],
        default=SortOrder.DATE_DESC.value,
    )

    expense_edit = expense_sub.add_parser("edit", help="Edit an existing expense")
    expense_edit.add_argument("id")
    expense_edit.add_argument("--date", type=_parse_date)
    expense_edit.add_argument("--amount", type=_parse_amount)
    expense_edit.add_argument("--category")
    expense_edit.add_argument("--note")
    expense_edit.add_argument("--method")

    expense_delete = expense_sub.add_parser("delete", help="Delete an expense")
    expense_delete.add_argument("id")

    expense_sub.add_parser("clear", help="Delete every expense")

    category_parser = subparsers.add_parser("category", help="Manage categories")
    category_sub = category_parser.add_subparsers(dest="command", required=True)

    category_add = category_sub.add_parser("add", help="Add a category")
    category_add.add_argument("name")
    category_add.add_argument("--color")

    category_rename = category_sub.add_parser("rename", help="Rename a category")
    category_rename.add_argument("id")
    category_rename.add_argument("name")

    category_recolor = category_sub.add_parser("recolor", help="Change a category color")
    category_recolor.add_argument("id")
    category_recolor.add_argument("color")

    category_delete = category_sub.add_parser("delete", help="Delete a category")
    category_delete.add_argument("id")

    category_sub.add_parser("list", help="List categories")

    export_parser = subparsers.add_parser("export", help="Export expenses as CSV")
    export_parser.add_argument("path", nargs="?", type=Path)

    import_parser = subparsers.add_parser("import", help="Import expenses from CSV")
    import_parser.add_argument("path", type=Path)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    if args.verbose:
        configure_logging("INFO")

    try:
        session = LedgerSession(FileStorage(args.data_dir or settings.data_dir))
        if args.entity == "expense":
            handle_expense(args, session, settings.currency)
        elif args.entity == "category":
            handle_category(args, session)
        elif args.entity == "export":
            handle_export(args, session)
        elif args.entity == "import":
            handle_import(args, session)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except NotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except DuplicateError as exc:
        print(f"Duplicate: {exc}", file=sys.stderr)
        return 1
    except LedgerImportError as exc:
        print(f"Import error: {exc}", file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
