"""
AI Module

This module provides the AI translation service, language detection and related utilities.
"""

from wisenest_i18n.ai.exceptions import TranslationError
from wisenest_i18n.ai.detector import detect_language, resolve_source_language
from wisenest_i18n.ai.service import (
    AIService,
    TranslationOutcome,
    STATUS_TRANSLATED,
    STATUS_FALLBACK,
    validate_ai_config,
)

__all__ = [
    'TranslationError',
    'AIService',
    'TranslationOutcome',
    'STATUS_TRANSLATED',
    'STATUS_FALLBACK',
    'validate_ai_config',
    'detect_language',
    'resolve_source_language',
]
