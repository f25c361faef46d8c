"""
Client-side translation catalog.

Caches the per-language dictionary served by GET /api/i18n/translations/<lang>
for a short freshness window. A failed fetch is retried with capped
exponential backoff; when retries run out the built-in static dictionary of
critical strings is served so rendered pages never show blank text.
"""

import asyncio
import time
from typing import Callable, Dict, Optional, Tuple

from wisenest_i18n.client.api import TranslationApiClient
from wisenest_i18n.config import DEFAULT_CONFIG
from wisenest_i18n.i18n import load_fallback_dictionary
from wisenest_i18n.logger import get_logger
import wisenest_i18n.language_codes as lc

logger = get_logger(__name__)

RETRY_BASE_DELAY = 1.0
RETRY_MAX_DELAY = 30.0


def retry_delay(attempt: int) -> float:
    """Backoff before retry number attempt (0-based): 1s, 2s, 4s ... capped at 30s."""
    return min(RETRY_BASE_DELAY * (2 ** attempt), RETRY_MAX_DELAY)


class TranslationCatalog:
    """Read-path cache of translations for the current display language."""

    def __init__(self, api: TranslationApiClient, language: str = lc.TARGET_LANGUAGE,
                 ttl: float = DEFAULT_CONFIG["catalog_ttl_seconds"],
                 max_retries: int = DEFAULT_CONFIG["catalog_max_retries"],
                 sleep: Callable = asyncio.sleep, clock: Callable[[], float] = time.monotonic):
        self.api = api
        self.language = lc.normalize_language_code(language) or lc.TARGET_LANGUAGE
        self.ttl = ttl
        self.max_retries = max_retries
        self._sleep = sleep
        self._clock = clock
        # language -> (translations, fetched_at)
        self._cache: Dict[str, Tuple[Dict[str, str], float]] = {}
        self.using_fallback = False
        self.last_error: Optional[str] = None

    @property
    def translations(self) -> Dict[str, str]:
        cached = self._cache.get(self.language)
        return cached[0] if cached else {}

    def is_fresh(self, language: Optional[str] = None) -> bool:
        cached = self._cache.get(language or self.language)
        return cached is not None and (self._clock() - cached[1]) < self.ttl

    def invalidate(self, language: Optional[str] = None):
        if language is None:
            self._cache.clear()
        else:
            self._cache.pop(lc.normalize_language_code(language), None)

    async def load(self, force: bool = False) -> Dict[str, str]:
        """
        Return the dictionary for the current language, fetching when stale.

        Never raises; after max_retries failed retries the static dictionary
        is returned and using_fallback is set.
        """
        language = self.language
        if not force and self.is_fresh(language):
            return self._cache[language][0]

        for attempt in range(self.max_retries + 1):
            try:
                translations = await self.api.fetch_translations(language)
            except Exception as e:
                self.last_error = str(e)
                if attempt < self.max_retries:
                    delay = retry_delay(attempt)
                    logger.warning(f"Fetching {language} translations failed ({e}), retrying in {delay}s")
                    await self._sleep(delay)
                    continue
                logger.error(f"Fetching {language} translations failed after {attempt + 1} attempts: {e}")
                break
            else:
                self._cache[language] = (translations, self._clock())
                self.using_fallback = False
                self.last_error = None
                return translations

        # Not cached, so the next load tries the network again
        self.using_fallback = True
        self._cache.pop(language, None)
        return dict(load_fallback_dictionary(language))

    async def switch_language(self, language: str) -> Dict[str, str]:
        code = lc.normalize_language_code(language)
        if code is None:
            raise ValueError(f"Unsupported language: {language}")
        self.language = code
        return await self.load()

    def t(self, key: str, fallback: Optional[str] = None) -> str:
        """Resolve a key: catalog, then static dictionary, then fallback, then the key itself."""
        value = self.translations.get(key)
        if not value:
            value = load_fallback_dictionary(self.language).get(key)
        return value or fallback or key
