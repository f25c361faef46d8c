"""
Translation Validation Module

Contains validation functions for translation input and output:
- Required-field checks for bilingual authoring forms
- Request payload validation for the translation endpoints
- Translation content sanity checks
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from wisenest_i18n.core.database import ROLES
from wisenest_i18n.logger import get_logger
import wisenest_i18n.language_codes as lc

logger = get_logger(__name__)


class FormValidationError(ValueError):
    """Raised when submitted data fails field-level validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_translated_form(data: Optional[Mapping[str, Any]], required_fields: Sequence[str]) -> List[str]:
    """
    Check that every required field of a form holds non-blank text.

    Returns one message per missing field, in the order the fields were given.

    Example:
        >>> validate_translated_form({"title_zh": "标题", "title_th": " "}, ["title_zh", "title_th"])
        ['title_th cannot be empty']
    """
    data = data or {}
    return [f"{field} cannot be empty" for field in required_fields if _is_blank(data.get(field))]


def validate_translate_request(data: Optional[Mapping[str, Any]]) -> List[str]:
    """Validate a {text, from, to} body of the ui/content translation endpoints."""
    if not isinstance(data, Mapping):
        return ["request body must be a JSON object"]

    errors = []
    if not isinstance(data.get("text"), str):
        errors.append("text must be a string")
    for field in ("from", "to"):
        if data.get(field) is not None and not lc.is_supported(data.get(field)):
            errors.append(f"{field} must be one of: {', '.join(lc.SUPPORTED_LANGUAGES)}")
    source = lc.normalize_language_code(data.get("from"))
    target = lc.normalize_language_code(data.get("to"))
    if source is not None and source == target:
        errors.append("from and to must be different languages")
    return errors


def validate_smart_request(data: Optional[Mapping[str, Any]], require_text: bool = False) -> List[str]:
    """Validate a {text, key, role, sourceLanguage} body."""
    if not isinstance(data, Mapping):
        return ["request body must be a JSON object"]

    errors = []
    text = data.get("text")
    if not isinstance(text, str):
        errors.append("text must be a string")
    elif require_text and not text.strip():
        errors.append("text cannot be empty")
    key = data.get("key")
    if not isinstance(key, str) or not key.strip():
        errors.append("key cannot be empty")
    if data.get("role", "content") not in ROLES:
        errors.append(f"role must be one of: {', '.join(ROLES)}")
    source_language = data.get("sourceLanguage")
    if source_language is not None and not lc.is_supported(source_language):
        errors.append(f"sourceLanguage must be one of: {', '.join(lc.SUPPORTED_LANGUAGES)}")
    return errors


def validate_override_request(data: Optional[Mapping[str, Any]]) -> List[str]:
    """Validate a {lang, key, value, role} override body."""
    if not isinstance(data, Mapping):
        return ["request body must be a JSON object"]

    errors = validate_translated_form(data, ["lang", "key", "value"])
    errors.extend(f"{field} must be a string" for field in ("lang", "key", "value")
                  if not _is_blank(data.get(field)) and not isinstance(data.get(field), str))
    if not _is_blank(data.get("lang")) and not lc.is_supported(data.get("lang")):
        errors.append(f"lang must be one of: {', '.join(lc.SUPPORTED_LANGUAGES)}")
    if data.get("role", "ui") not in ROLES:
        errors.append(f"role must be one of: {', '.join(ROLES)}")
    return errors


def is_translation_valid(
    source_text: str,
    translated_text: str,
    source_lang: str,
    target_lang: str,
) -> Tuple[bool, Optional[str]]:
    """
    Check a machine translation for obvious errors.

    Checks:
    1. Not empty - Translation must contain actual content
    2. Not identical - Translation must differ from source (unless same language or pure numbers)

    Returns:
        Tuple of (is_valid: bool, error_reason: Optional[str])
    """
    if not translated_text or not translated_text.strip():
        return False, "empty"

    if translated_text.strip() == source_text.strip():
        if lc.normalize_language_code(source_lang) != lc.normalize_language_code(target_lang):
            if not source_text.replace(" ", "").isdigit():
                return False, "identical_to_source"

    return True, None


def summarize_errors(errors: List[str]) -> Dict[str, Any]:
    """Shape validation messages the way the API reports them."""
    return {"code": "V001", "message": "Validation failed", "errors": errors}
