"""
Client module - asyncio helpers for authoring screens and rendered pages

This module provides:
- api: TranslationApiClient over httpx.AsyncClient
- coordinator: debounced per-field previews and batch translation
- catalog: cached per-language dictionary with static fallback
"""

from wisenest_i18n.client.api import TranslationApiClient, TranslationApiError
from wisenest_i18n.client.coordinator import (
    PreviewState,
    PreviewSnapshot,
    FieldPreview,
    BatchItem,
    BatchResult,
    ClientTranslationCoordinator,
)
from wisenest_i18n.client.catalog import TranslationCatalog, retry_delay
from wisenest_i18n.translation.validator import validate_translated_form
