"""
Script-based language detection for authored content.

Detection is a presence test: a single Chinese character is enough to classify
a mixed string as Chinese, and Chinese is checked before Thai.
"""

import re
from typing import Optional

from wisenest_i18n import language_codes as lc

CHINESE_PATTERN = re.compile(r"[\u4e00-\u9fff]")
THAI_PATTERN = re.compile(r"[\u0e00-\u0e7f]")


def detect_language(text: Optional[str]) -> str:
    """
    Classify text as 'zh', 'th' or 'unknown'.

    Examples:
        >>> detect_language("你好 สวัสดี")
        'zh'
        >>> detect_language("สวัสดี")
        'th'
    """
    if not text or not text.strip():
        return lc.UNKNOWN_LANGUAGE

    if CHINESE_PATTERN.search(text):
        return 'zh'
    if THAI_PATTERN.search(text):
        return 'th'
    return lc.UNKNOWN_LANGUAGE


def resolve_source_language(text: Optional[str], declared: Optional[str] = None) -> str:
    """Pick the language a text was authored in, defaulting to the source language."""
    code = lc.normalize_language_code(declared)
    if code:
        return code
    detected = detect_language(text)
    if detected == lc.UNKNOWN_LANGUAGE:
        return lc.SOURCE_LANGUAGE
    return detected
