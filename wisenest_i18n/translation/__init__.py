"""
Translation module - Core translation functionality

This module provides:
- TranslationManager: Main translation workflow coordinator
- Text chunking for long content
- Concurrent chunk processing
- Validation functions for forms, requests and translation output
"""

from wisenest_i18n.translation.manager import TranslationManager, SmartTranslationResult, CommitResult
from wisenest_i18n.translation.utils import split_text, join_chunks, make_content_key
from wisenest_i18n.translation.validator import (
    FormValidationError,
    validate_translated_form,
    is_translation_valid,
)
from wisenest_i18n.translation.processor import (
    translate_chunks_concurrent,
    merge_chunk_outcomes,
)
