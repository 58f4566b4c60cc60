"""Flask REST API exposing the budget tracker key-value services."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from budget_core.config import Settings
from budget_core.exceptions import ValidationError
from budget_core.models import isoformat_utc
from budget_core.services import ExpenseService, SalaryService, SavingsService
from budget_core.storage import JSONKeyValueStore, KeyValueStore


def create_app(
    data_dir: Optional[Path] = None,
    *,
    store: Optional[KeyValueStore] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_development:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    if store is None:
        store = JSONKeyValueStore(Path(data_dir or settings.data_dir))
    expense_service = ExpenseService(store)
    salary_service = SalaryService(store)
    savings_service = SavingsService(store)
    prefix = settings.api_prefix

    def _success(**payload: Any):
        return jsonify({"success": True, **payload}), 200

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"success": False, "error": message}), status

    def _fails_with(message: str) -> Callable:
        """Turn any failure inside the handler into the generic 500 envelope."""

        def decorator(handler: Callable) -> Callable:
            @wraps(handler)
            def wrapper(*args: Any, **kwargs: Any):
                try:
                    return handler(*args, **kwargs)
                except Exception as exc:
                    return _handle_error(exc, 500, message)

            return wrapper

        return decorator

    def _json_body() -> Dict[str, Any]:
        data = request.get_json(force=True, silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @app.after_request
    def log_request(response):
        app.logger.info("%s %s %s", request.method, request.path, response.status_code)
        return response

    @app.get(f"{prefix}/expenses/<user_id>")
    @_fails_with("Failed to fetch expenses")
    def list_expenses(user_id: str):
        expenses = expense_service.list(user_id)
        return _success(expenses=[expense.to_dict() for expense in expenses])

    @app.post(f"{prefix}/expenses/<user_id>")
    @_fails_with("Failed to add expense")
    def create_expense(user_id: str):
        payload = _json_body()
        expense = expense_service.add(user_id, payload)
        return _success(id=expense.id)

    @app.delete(f"{prefix}/expenses/<user_id>/<expense_id>")
    @_fails_with("Failed to delete expense")
    def delete_expense(user_id: str, expense_id: str):
        expense_service.delete(user_id, expense_id)
        return _success()

    @app.get(f"{prefix}/salary/<user_id>")
    @_fails_with("Failed to fetch salary")
    def get_salary(user_id: str):
        return _success(salary=salary_service.get(user_id).to_dict())

    @app.post(f"{prefix}/salary/<user_id>")
    @_fails_with("Failed to update salary")
    def update_salary(user_id: str):
        salary_service.update(user_id, _json_body())
        return _success()

    @app.get(f"{prefix}/savings/<user_id>")
    @_fails_with("Failed to fetch savings")
    def get_savings(user_id: str):
        return _success(savings=savings_service.get(user_id).to_dict())

    @app.post(f"{prefix}/savings/<user_id>")
    @_fails_with("Failed to update savings")
    def update_savings(user_id: str):
        savings_service.update(user_id, _json_body())
        return _success()

    @app.get(f"{prefix}/health")
    def health():
        return jsonify({"status": "ok", "timestamp": isoformat_utc(datetime.now(timezone.utc))})

    return app
