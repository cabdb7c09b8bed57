"""Flask REST API exposing the expense ledger engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from ledger.config import Settings
from ledger.exceptions import (
    DuplicateError,
    LedgerImportError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ledger.formatting import format_amount
from ledger.interchange import export_filename
from ledger.query import FilterSpec
from ledger.session import LedgerSession
from ledger.storage import FileStorage, Storage


def create_app(
    data_dir: Optional[Path] = None,
    storage: Optional[Storage] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_dev:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": list(settings.allowed_origins)}}, supports_credentials=True)
    else:
        CORS(app)

    session = LedgerSession(storage or FileStorage(Path(data_dir or settings.data_dir)))
    app.extensions["ledger_session"] = session

    def _success(payload: Optional[Any], status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        app.logger.error("Validation error on %s: %s", exc.field, exc.reason)
        return jsonify({"error": "Validation error", "field": exc.field, "details": str(exc)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(DuplicateError)
    def handle_duplicate(exc: DuplicateError):
        return _handle_error(exc, 409, "Duplicate category")

    @app.errorhandler(LedgerImportError)
    def handle_import_error(exc: LedgerImportError):
        return _handle_error(exc, 400, "Import failed")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("body", "must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("body", "must be a JSON object")
        return data

    @app.get("/categories")
    def list_categories():
        categories = session.current_categories()
        return _success({"items": [category.to_dict() for category in categories]})

    @app.post("/categories")
    def create_category():
        payload = _json_body()
        category = session.categories.add(payload.get("name"), payload.get("color"))
        return _success(category.to_dict(), 201)

    @app.put("/categories/<category_id>")
    def update_category(category_id: str):
        payload = _json_body()
        changes = {key: payload[key] for key in ("name", "color") if key in payload}
        category = session.categories.update(category_id, **changes)
        return _success(category.to_dict())

    @app.delete("/categories/<category_id>")
    def delete_category(category_id: str):
        # Records keep pointing at the id; they show it raw from now on.
        session.categories.remove(category_id)
        return _success(None, 204)

    @app.get("/expenses")
    def list_expenses():
        spec = FilterSpec.from_mapping(request.args)
        view = session.derive_view(spec)
        return _success({
            "items": [record.to_dict() for record in view.records],
            "total": str(view.total),
            "total_display": format_amount(view.total, settings.currency),
            "by_category": [entry.to_dict() for entry in view.by_category],
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        record = session.ledger.add(payload)
        return _success(record.to_dict(), 201)

    @app.delete("/expenses")
    def clear_expenses():
        session.ledger.clear()
        return _success(None, 204)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        record = session.ledger.get(expense_id)
        return _success(record.to_dict())

    @app.put("/expenses/<expense_id>")
    def update_expense(expense_id: str):
        payload = _json_body()
        record = session.ledger.update(expense_id, payload)
        return _success(record.to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        session.ledger.remove(expense_id)
        return _success(None, 204)

    @app.get("/export")
    def export_expenses():
        return Response(
            session.export_bytes(),
            content_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
        )

    @app.post("/import")
    def import_expenses():
        upload = request.files.get("file")
        data = upload.read() if upload is not None else request.get_data()
        result = session.import_csv(data)
        app.logger.info("Imported %d expenses (%d rows skipped)", len(result), result.skipped)
        return _success({"imported": len(result), "skipped": result.skipped}, 201)

    return app
