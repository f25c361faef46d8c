"""Admin i18n routes: committing, overrides, the review queue and re-seeding."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify, request

from wisenest_i18n.ai.service import validate_ai_config, TranslationError
from wisenest_i18n.core.database import ROLE_UI, ROLE_CONTENT
from wisenest_i18n.core.schema import get_db_version
from wisenest_i18n.i18n import initialize_ui_translations
from wisenest_i18n.logger import get_logger
import wisenest_i18n.language_codes as lc
from wisenest_i18n.translation.validator import (
    validate_smart_request,
    validate_override_request,
    validate_translated_form,
    FormValidationError,
)
from wisenest_i18n.web.auth import admin_required

admin_bp = Blueprint("i18n_admin", __name__)
logger = get_logger(__name__)


def _services() -> Dict[str, Any]:
    return current_app.extensions["wisenest_i18n"]


def ok(data: Any):
    return jsonify({"code": 0, "message": "OK", "data": data})


def store_error(code: str, e: sqlite3.Error):
    logger.error("Translation store error: %s", e)
    return jsonify({"code": code, "message": "Translation store unavailable"}), 500


@admin_bp.post("/commit")
@admin_required
def commit_translation():
    """Translate an authored text and persist both language records."""
    data: Dict[str, Any] = request.get_json(silent=True)
    errors = validate_smart_request(data, require_text=True)
    if errors:
        raise FormValidationError(errors)

    try:
        result = _services()["manager"].commit_translation(
            data["text"],
            data["key"].strip(),
            data.get("role", ROLE_CONTENT),
            data.get("sourceLanguage"),
        )
    except sqlite3.Error as e:
        return store_error("S012", e)

    logger.info("Admin %s committed %s", g.admin_user.username, data["key"])
    return ok(result.to_dict())


@admin_bp.put("/override")
@admin_required
def save_override():
    """Store a human correction for one language of a key."""
    data: Dict[str, Any] = request.get_json(silent=True)
    errors = validate_override_request(data)
    if errors:
        raise FormValidationError(errors)

    try:
        written = _services()["manager"].save_override(
            data["lang"], data["key"].strip(), data["value"], data.get("role", ROLE_UI)
        )
    except sqlite3.Error as e:
        return store_error("S013", e)

    logger.info("Admin %s overrode %s:%s", g.admin_user.username, data["lang"], data["key"])
    return ok({"written": written})


@admin_bp.get("/review")
@admin_required
def review_queue():
    """Records flagged for human review, optionally for one language."""
    lang = request.args.get("lang")
    code = None
    if lang:
        code = lc.normalize_language_code(lang)
        if code is None:
            raise FormValidationError([f"lang must be one of: {', '.join(lc.SUPPORTED_LANGUAGES)}"])

    try:
        records = _services()["store"].list_records(code, needs_review=True)
    except sqlite3.Error as e:
        return store_error("S014", e)
    return ok([record.to_dict() for record in records])


@admin_bp.post("/review/resolve")
@admin_required
def resolve_review():
    """Clear the review flag of a record once an editor accepted it."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    errors = validate_translated_form(data, ["lang", "key"])
    if not errors and not lc.is_supported(data["lang"]):
        errors.append(f"lang must be one of: {', '.join(lc.SUPPORTED_LANGUAGES)}")
    if errors:
        raise FormValidationError(errors)

    try:
        resolved = _services()["store"].mark_reviewed(lc.normalize_language_code(data["lang"]), data["key"])
    except sqlite3.Error as e:
        return store_error("S015", e)
    if not resolved:
        return jsonify({"code": "N001", "message": "Translation not found"}), 404
    return ok({"resolved": True})


@admin_bp.post("/init")
@admin_required
def init_translations():
    """Re-seed the base UI dictionary for both languages."""
    services = _services()
    manager = services["manager"] if services["config"].has_credentials else None
    try:
        result = initialize_ui_translations(services["store"], manager)
    except sqlite3.Error as e:
        return store_error("S011", e)
    return ok(result)


@admin_bp.get("/status")
@admin_required
def status():
    """Record counts and provider configuration state."""
    services = _services()
    store = services["store"]
    config = services["config"]

    provider: Dict[str, Any] = {"configured": True, "model": config.model}
    try:
        validate_ai_config(config)
    except TranslationError as e:
        provider.update({"configured": False, "code": e.code, "details": e.details})

    try:
        counts = {
            code: {
                "total": store.count(code),
                ROLE_UI: store.count(code, ROLE_UI),
                ROLE_CONTENT: store.count(code, ROLE_CONTENT),
            }
            for code in lc.SUPPORTED_LANGUAGES
        }
        needs_review = len(store.list_records(needs_review=True))
    except sqlite3.Error as e:
        return store_error("S016", e)

    return ok({
        "counts": counts,
        "needsReview": needs_review,
        "provider": provider,
        "line": services["line"].name,
        "dbVersion": get_db_version(store),
        "config": config.to_dict(redact=True),
    })
