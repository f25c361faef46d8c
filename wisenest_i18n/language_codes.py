"""
Language code mappings and utilities.

The platform is bilingual:
- 'zh' (Chinese) is the source language content is authored in
- 'th' (Thai) is the target language content is machine-translated into

Content may still be authored in Thai; the pair is symmetric for translation,
the distinction only decides which side is treated as source when detection
cannot tell.
"""

from typing import Optional, Dict, List

SOURCE_LANGUAGE = 'zh'
TARGET_LANGUAGE = 'th'
UNKNOWN_LANGUAGE = 'unknown'

SUPPORTED_LANGUAGES: Dict[str, Dict[str, str]] = {
    'zh': {'name': 'Chinese', 'native_name': '中文'},
    'th': {'name': 'Thai', 'native_name': 'ไทย'},
}

# Aliases seen in request payloads and browser headers
LANGUAGE_ALIASES = {
    'zh-cn': 'zh',
    'zh-hans': 'zh',
    'zh_cn': 'zh',
    'chinese': 'zh',
    'th-th': 'th',
    'th_th': 'th',
    'thai': 'th',
}


def normalize_language_code(lang_code: Optional[str]) -> Optional[str]:
    """
    Normalize a language code to one of the supported codes.

    Returns None for anything that is not Chinese or Thai.
    """
    if not lang_code or not isinstance(lang_code, str):
        return None
    lowered = lang_code.strip().lower()
    if lowered in SUPPORTED_LANGUAGES:
        return lowered
    if lowered in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[lowered]
    prefix = lowered.replace('_', '-').split('-')[0]
    return prefix if prefix in SUPPORTED_LANGUAGES else None


def is_supported(lang_code: Optional[str]) -> bool:
    return normalize_language_code(lang_code) is not None


def get_language_name(lang_code: str) -> Optional[str]:
    """Get the English name for a supported language code."""
    code = normalize_language_code(lang_code)
    return SUPPORTED_LANGUAGES[code]['name'] if code else None


def other_language(lang_code: str) -> str:
    """Return the counterpart of a language in the zh/th pair."""
    code = normalize_language_code(lang_code)
    if code is None:
        raise ValueError(f"Unsupported language: {lang_code}")
    return TARGET_LANGUAGE if code == SOURCE_LANGUAGE else SOURCE_LANGUAGE


def get_available_languages() -> List[Dict[str, str]]:
    return [
        {'code': code, 'name': info['name'], 'native_name': info['native_name']}
        for code, info in SUPPORTED_LANGUAGES.items()
    ]
