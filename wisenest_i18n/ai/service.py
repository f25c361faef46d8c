"""
AI Translation Service Module

This module provides the translation provider used by the rest of the system:
- AIService class wrapping the DashScope API with retry logic
- TranslationOutcome carrying the translated/fallback tag
- Configuration validation

The service never raises to its callers. Every failure path returns the
original text tagged as a fallback so user-facing strings never disappear.

For the HTTP call itself, see ai/providers.py
"""

import time
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from wisenest_i18n.config import TranslationConfig, get_prompt
from wisenest_i18n.logger import get_logger
from wisenest_i18n import language_codes as lc
from wisenest_i18n.ai.exceptions import TranslationError
from wisenest_i18n.ai.providers import call_dashscope_api

logger = get_logger(__name__)

STATUS_TRANSLATED = "translated"
STATUS_FALLBACK = "fallback"


@dataclass
class TranslationOutcome:
    """Result of a translation call, tagged with how it was produced."""
    text: str
    status: str = STATUS_TRANSLATED
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.status == STATUS_FALLBACK

    @classmethod
    def fallback(cls, original: str, error: Optional[str] = None) -> "TranslationOutcome":
        return cls(text=original, status=STATUS_FALLBACK, error=error)

    def to_dict(self):
        return {"text": self.text, "status": self.status, "error": self.error}


def validate_ai_config(config: TranslationConfig) -> None:
    """
    Validate that the translation provider configuration is usable.

    Raises:
        TranslationError: If configuration is invalid or missing, with code and details.
    """
    if not config.has_credentials:
        raise TranslationError(
            "DashScope API key not configured. Set DASHSCOPE_API_KEY.",
            code="ai_config_missing",
            details={"missing_field": "api_key"}
        )
    if not config.model:
        raise TranslationError(
            "Translation model not configured",
            code="ai_config_missing",
            details={"missing_field": "model"}
        )
    if not config.api_url:
        raise TranslationError(
            "Translation API URL not configured",
            code="ai_config_missing",
            details={"missing_field": "api_url"}
        )


class AIService:
    """AI service for translation."""

    def __init__(self, config: TranslationConfig, transport: Optional[httpx.BaseTransport] = None,
                 sleep=time.sleep):
        self.config = config
        self.transport = transport
        self._sleep = sleep
        logger.info(f"Initialized AI service with model: {config.model}")

    def _get_system_message(self) -> str:
        return self.config.system_message

    def build_messages(self, text: str, source_language: str, target_language: str):
        """Build the single-turn system + user message pair."""
        source_language_name = lc.get_language_name(source_language) or source_language
        target_language_name = lc.get_language_name(target_language) or target_language
        prompt_template = get_prompt('ui_translation_prompt')['prompt']
        prompt = prompt_template.format(
            source_language_name=source_language_name,
            target_language_name=target_language_name,
            text=text,
        )
        return [
            {"role": "system", "content": self._get_system_message()},
            {"role": "user", "content": prompt},
        ]

    def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        """Translate one piece of text, returning the original on any failure."""
        return self.translate_one(text, source_language, target_language).text

    def translate_one(self, text: str, source_language: str, target_language: str) -> TranslationOutcome:
        """
        Translate a single text.

        On failure, returns the original text (graceful degradation).

        Args:
            text: Text to translate
            source_language: Source language code
            target_language: Target language code

        Returns:
            TranslationOutcome with status 'translated' or 'fallback'
        """
        if not text or not text.strip():
            return TranslationOutcome(text=text or "", status=STATUS_TRANSLATED)

        if not self.config.has_credentials:
            logger.warning("Translation API key not set, returning original text")
            return TranslationOutcome.fallback(text, "ai_config_missing")

        messages = self.build_messages(text, source_language, target_language)
        max_retries = max(1, int(self.config.max_retries))
        last_error: Optional[Exception] = None

        for attempt in range(max_retries):
            try:
                if attempt > 0:
                    logger.info(f"  Retry attempt {attempt + 1}/{max_retries}")

                response_text = call_dashscope_api(self, messages)
                translated = response_text.strip()
                if not translated:
                    logger.warning("Provider returned an empty translation, using original text")
                    return TranslationOutcome.fallback(text, "empty_translation")

                logger.debug(f"Translated {len(text)} chars {source_language}->{target_language}")
                return TranslationOutcome(text=translated, status=STATUS_TRANSLATED)

            except Exception as e:
                last_error = e
                should_retry, wait_time = self._categorize_error(e, attempt)

                if should_retry and attempt < max_retries - 1:
                    logger.warning(f"  Attempt {attempt + 1} failed: {e}. Waiting {wait_time}s before retry...")
                    self._sleep(wait_time)
                elif not should_retry:
                    logger.error(f"  Non-recoverable error: {e}")
                    break

        logger.warning(f"Translation failed after retries: {last_error}. Returning original text.")
        return TranslationOutcome.fallback(text, str(last_error) if last_error else None)

    def _categorize_error(self, error: Exception, attempt: int) -> Tuple[bool, float]:
        """
        Categorize an error and determine retry strategy.

        Returns:
            Tuple of (should_retry, wait_time_seconds)
        """
        max_wait = float(self.config.retry_max_wait)
        status_code = getattr(error, "status_code", None)
        code = getattr(error, "code", None)
        error_str = str(error).lower()

        if code == "ai_config_missing":
            return False, 0

        # Rate limiting (429) - long backoff
        if status_code == 429 or 'rate limit' in error_str:
            return True, min(5.0 * (2 ** attempt), max_wait)

        # Authentication errors (401, 403) - don't retry
        if status_code in (401, 403):
            return False, 0

        # Invalid request (400) - don't retry
        if status_code == 400:
            return False, 0

        # Server errors (5xx) - standard backoff
        if status_code is not None and 500 <= status_code < 600:
            return True, min(float(2 ** attempt), max_wait)

        # Timeout - retry with backoff
        if code == "provider_timeout":
            return True, min(2.0 * (2 ** attempt), max_wait)

        # Malformed body - retry once
        if code == "provider_bad_response":
            return attempt < 1, min(1.0, max_wait)

        # Unknown errors - standard backoff
        return True, min(float(2 ** attempt), max_wait)
