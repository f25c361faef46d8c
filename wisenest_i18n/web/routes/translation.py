"""Public translation API routes: catalog reads, translation and previews."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from wisenest_i18n.logger import get_logger
import wisenest_i18n.language_codes as lc
from wisenest_i18n.translation.validator import (
    validate_translate_request,
    validate_smart_request,
    FormValidationError,
)

translation_bp = Blueprint("translation", __name__)
logger = get_logger(__name__)


def _services() -> Dict[str, Any]:
    return current_app.extensions["wisenest_i18n"]


def ok(data: Any):
    return jsonify({"code": 0, "message": "OK", "data": data})


def _require_language(lang: str) -> str:
    code = lc.normalize_language_code(lang)
    if code is None:
        raise FormValidationError([f"lang must be one of: {', '.join(lc.SUPPORTED_LANGUAGES)}"])
    return code


@translation_bp.get("/languages")
def get_languages():
    return ok(lc.get_available_languages())


@translation_bp.get("/translations/<lang>")
def get_translations(lang: str):
    """All committed translations of a language as {key: value}."""
    code = _require_language(lang)
    translations = _services()["manager"].get_all_translations(code)
    return ok(translations)


@translation_bp.get("/translation/<lang>/<key>")
def get_translation(lang: str, key: str):
    code = _require_language(lang)
    translation = _services()["manager"].get_translation(code, key)
    return ok({"translation": translation})


def _translate(kind: str):
    data: Dict[str, Any] = request.get_json(silent=True)
    errors = validate_translate_request(data)
    if errors:
        raise FormValidationError(errors)

    # A missing side is the other language of the pair
    source = lc.normalize_language_code(data.get("from"))
    target = lc.normalize_language_code(data.get("to"))
    if source is None:
        source = lc.other_language(target) if target else lc.SOURCE_LANGUAGE
    if target is None:
        target = lc.other_language(source)
    manager = _services()["manager"]

    if kind == "ui":
        outcome = manager.translate_ui_outcome(data["text"], source, target)
    else:
        outcome = manager.translate_content_outcome(data["text"], source, target)

    logger.debug("Translated %s text (%d chars, %s->%s, %s)", kind, len(data["text"]), source, target, outcome.status)
    return ok({"translated": outcome.text, "status": outcome.status})


@translation_bp.post("/translate/ui")
def translate_ui():
    """Translate a short UI string; body {text, from, to}."""
    return _translate("ui")


@translation_bp.post("/translate/content")
def translate_content():
    """Translate long-form content; body {text, from, to}."""
    return _translate("content")


@translation_bp.post("/smart-translate")
def smart_translate():
    """
    Preview both language variants of an authored text.

    Body {text, key, role, sourceLanguage?}. Nothing is persisted; committing
    goes through the admin API.
    """
    data: Dict[str, Any] = request.get_json(silent=True)
    errors = validate_smart_request(data)
    if errors:
        raise FormValidationError(errors)

    result = _services()["manager"].smart_translate(
        data["text"],
        data["key"],
        data.get("role", "content"),
        data.get("sourceLanguage"),
    )
    return ok(result.to_dict())
