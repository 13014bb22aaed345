"""Flask REST API exposing the Lumina finance services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from lumina_core.catalog import AVATARS, CURRENCIES, predefined_categories
from lumina_core.exceptions import (
    OnboardingRequiredError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from lumina_core.models import THEMES, TRANSACTION_TYPES
from lumina_core.services import FinanceContext
from lumina_core.statistics import percentage_of_total
from lumina_core.validators import (
    coerce_amount,
    coerce_bool,
    validate_currency,
    validate_enum,
    validate_optional_str,
    validate_required_str,
)

PROFILE_FIELDS = {"name", "currency", "theme", "avatar", "monthly_budget"}


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("LUMINA_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("LUMINA_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    context = FinanceContext.open(Path(data_dir or os.getenv("LUMINA_DATA_DIR", "data")))
    app.extensions["lumina"] = context

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(OnboardingRequiredError)
    def handle_onboarding_required(exc: OnboardingRequiredError):
        return _handle_error(exc, 409, "Onboarding required")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _transaction_type(raw: str) -> str:
        return validate_enum(raw, "type", TRANSACTION_TYPES)

    @app.get("/currencies")
    def list_currencies():
        return _success({"items": [currency.to_dict() for currency in CURRENCIES]})

    @app.get("/avatars")
    def list_avatars():
        return _success({"items": list(AVATARS)})

    @app.get("/profile")
    def get_profile():
        return _success(context.profile.to_dict())

    @app.patch("/profile")
    def update_profile():
        context.require_onboarded()
        payload = _json_body()
        unknown = set(payload) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Unsupported profile fields: {', '.join(sorted(unknown))}")
        changes: Dict[str, Any] = {}
        if "name" in payload:
            changes["name"] = validate_required_str(payload["name"], "name", 50)
        if "currency" in payload:
            changes["currency"] = validate_currency(payload["currency"])
        if "theme" in payload:
            changes["theme"] = validate_enum(payload["theme"], "theme", THEMES)
        if "avatar" in payload:
            changes["avatar"] = validate_optional_str(payload["avatar"], "avatar", 2_000_000)
        if "monthly_budget" in payload:
            changes["monthly_budget"] = coerce_amount(payload["monthly_budget"])
        profile = context.profiles.update(changes)
        return _success(profile.to_dict())

    @app.post("/onboarding")
    def onboarding():
        payload = _json_body()
        profile = context.profiles.complete_onboarding(
            name=validate_required_str(payload.get("name"), "name", 50),
            currency=validate_currency(payload.get("currency", "USD")),
            initial_balance=coerce_amount(payload.get("initial_balance")),
            theme=validate_enum(payload.get("theme", "dark"), "theme", THEMES),
        )
        return _success(profile.to_dict(), 201)

    @app.get("/categories")
    def list_categories():
        context.require_onboarded()
        return _success({
            transaction_type: {
                "predefined": [
                    {"id": category_id, "label": label}
                    for category_id, label in predefined_categories(transaction_type)
                ],
                "used": context.ledger.categories(transaction_type),
            }
            for transaction_type in TRANSACTION_TYPES
        })

    @app.get("/transactions")
    def list_transactions():
        context.require_onboarded()
        raw_type = request.args.get("type")
        raw_limit = request.args.get("limit")
        try:
            limit = int(raw_limit) if raw_limit else None
        except ValueError as exc:
            raise ValidationError("limit must be an integer") from exc
        transactions = context.ledger.list(
            type=_transaction_type(raw_type) if raw_type else None,
            category=request.args.get("category") or None,
            limit=limit,
        )
        return _success({"items": [t.to_dict() for t in transactions]})

    @app.post("/transactions")
    def create_transaction():
        context.require_onboarded()
        transaction = context.ledger.add(_json_body())
        return _success(transaction.to_dict(), 201)

    @app.get("/transactions/<transaction_id>")
    def get_transaction(transaction_id: str):
        context.require_onboarded()
        return _success(context.ledger.get(transaction_id).to_dict())

    @app.delete("/transactions/<transaction_id>")
    def delete_transaction(transaction_id: str):
        context.require_onboarded()
        context.ledger.delete(transaction_id)
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        context.require_onboarded()
        return _success(context.statistics.summary())

    @app.get("/breakdown/<transaction_type>")
    def breakdown(transaction_type: str):
        context.require_onboarded()
        kind = _transaction_type(transaction_type)
        groups = context.statistics.category_breakdown(kind)
        return _success({
            "type": kind,
            "items": [
                {**group.to_dict(), "percentage": f"{percentage_of_total(group, groups):.2f}"}
                for group in groups
            ],
        })

    @app.get("/budget")
    def get_budget():
        context.require_onboarded()
        return _success(_budget_payload())

    @app.put("/budget")
    def set_budget():
        context.require_onboarded()
        payload = _json_body()
        context.profiles.update({"monthly_budget": coerce_amount(payload.get("monthly_budget"))})
        return _success(_budget_payload())

    def _budget_payload() -> Dict[str, Any]:
        budget = context.statistics.summary()["budget"]
        return {**budget, "daily_allowance": f"{context.statistics.daily_allowance():.2f}"}

    @app.post("/reset")
    def reset():
        payload = _json_body()
        if not coerce_bool(payload.get("confirm", False), "confirm"):
            raise ValidationError("Set confirm to true to erase all data")
        context.reset()
        return _success({}, 204)

    return app
