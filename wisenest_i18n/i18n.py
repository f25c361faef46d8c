"""
Internationalization (i18n) module for the WiseNest UI dictionary.

This module owns the base UI strings shipped with the platform. It loads the
JSON language packs under locales/, provides the static critical-strings
dictionary clients fall back to, and re-seeds the translation store.

Note: Log messages are NOT translated - they remain in English for debugging purposes.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from wisenest_i18n.core.database import TranslationStore, TranslationRecord
from wisenest_i18n.logger import get_logger
import wisenest_i18n.language_codes as lc

logger = get_logger(__name__)

# Language pack directory
LOCALES_DIR = Path(__file__).parent / "locales"

# Static dictionary of critical strings, keyed by language
FALLBACK_FILE = LOCALES_DIR / "fallback.json"

# Cache for loaded language packs
_language_cache: Dict[str, Dict[str, str]] = {}


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug(f"Language file not found: {path}")
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse language file {path}: {e}")
        return {}


def load_language(lang_code: str) -> Dict[str, str]:
    """
    Load a language pack from JSON file.

    Args:
        lang_code: The language code ('zh' or 'th')

    Returns:
        Flat key -> text dictionary, empty for unknown languages
    """
    code = lc.normalize_language_code(lang_code)
    if code is None:
        return {}

    if code in _language_cache:
        return _language_cache[code]

    translations = _read_json(LOCALES_DIR / f"{code}.json")
    _language_cache[code] = translations
    logger.debug(f"Loaded language pack: {code} ({len(translations)} keys)")
    return translations


def load_fallback_dictionary(lang_code: str) -> Dict[str, str]:
    """Static strings used when the translation catalog cannot be fetched."""
    code = lc.normalize_language_code(lang_code) or lc.TARGET_LANGUAGE
    cache_key = f"fallback:{code}"
    if cache_key not in _language_cache:
        _language_cache[cache_key] = _read_json(FALLBACK_FILE).get(code, {})
    return _language_cache[cache_key]


def get_base_dictionary() -> Dict[str, str]:
    """The source-language UI dictionary every deployment is seeded with."""
    return load_language(lc.SOURCE_LANGUAGE)


def clear_cache() -> None:
    """Clear the language cache (useful for development/testing)."""
    global _language_cache
    _language_cache = {}
    logger.debug("Language cache cleared")


def initialize_ui_translations(
    store: TranslationStore,
    manager=None,
    base_dictionary: Optional[Dict[str, str]] = None,
    target_dictionary: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Re-seed the UI dictionary for both languages.

    Every UI-role row of each language is replaced in a single transaction per
    language, so running this twice leaves the same state. Thai labels come
    from the pre-translated pack; keys missing there are machine translated
    when a manager is given, otherwise they carry the Chinese text. Both cases
    that could not be translated are flagged for review.

    Args:
        store: Translation store to seed
        manager: Optional TranslationManager used for missing Thai labels
        base_dictionary: Source strings, defaults to locales/zh.json
        target_dictionary: Pre-translated strings, defaults to locales/th.json

    Returns:
        Dict with success flag, total count and per-language details
    """
    base = base_dictionary if base_dictionary is not None else get_base_dictionary()
    translated = target_dictionary if target_dictionary is not None else load_language(lc.TARGET_LANGUAGE)

    logger.info(f"Initializing UI translations ({len(base)} keys)")

    source_records = [
        TranslationRecord(lang=lc.SOURCE_LANGUAGE, key=key, value=value)
        for key, value in base.items()
    ]

    target_records: List[TranslationRecord] = []
    machine_translated = 0
    needs_review = 0
    for key, value in base.items():
        if translated.get(key, "").strip():
            target_records.append(TranslationRecord(lang=lc.TARGET_LANGUAGE, key=key, value=translated[key]))
            continue

        if manager is not None:
            outcome = manager.translate_ui_outcome(value, lc.SOURCE_LANGUAGE, lc.TARGET_LANGUAGE)
            flagged = outcome.is_fallback
            text = outcome.text
            if not flagged:
                machine_translated += 1
        else:
            flagged = True
            text = value

        if flagged:
            needs_review += 1
        target_records.append(TranslationRecord(
            lang=lc.TARGET_LANGUAGE, key=key, value=text, needs_review=flagged,
        ))

    zh_count = store.reinitialize(lc.SOURCE_LANGUAGE, source_records)
    th_count = store.reinitialize(lc.TARGET_LANGUAGE, target_records)

    logger.info(
        f"UI translations initialized: {zh_count} zh, {th_count} th "
        f"({machine_translated} machine translated, {needs_review} need review)"
    )
    return {
        "success": True,
        "count": zh_count + th_count,
        "languages": {lc.SOURCE_LANGUAGE: zh_count, lc.TARGET_LANGUAGE: th_count},
        "machine_translated": machine_translated,
        "needs_review": needs_review,
    }
