"""
Translation Manager Module

Main TranslationManager class that coordinates the translation workflow:
- Short UI strings go to the provider in one request
- Long content is chunked and translated concurrently
- Both language sides are produced for an authored text
- Committed results go to the translation store
"""

import sqlite3
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from wisenest_i18n.ai.detector import resolve_source_language
from wisenest_i18n.ai.service import AIService, TranslationOutcome, STATUS_TRANSLATED
from wisenest_i18n.config import TranslationConfig
from wisenest_i18n.core.database import TranslationStore, TranslationRecord, ROLE_UI, ROLE_CONTENT, ROLES
from wisenest_i18n.logger import get_logger
import wisenest_i18n.language_codes as lc

from wisenest_i18n.translation.processor import translate_chunks_concurrent, merge_chunk_outcomes
from wisenest_i18n.translation.utils import split_text
from wisenest_i18n.translation.validator import is_translation_valid

logger = get_logger(__name__)


@dataclass
class SmartTranslationResult:
    """Both language variants of one authored text."""
    key: str
    zh_text: str
    th_text: str
    source_language: str
    status: str = STATUS_TRANSLATED
    error: Optional[str] = None

    def text_for(self, lang: str) -> str:
        return self.zh_text if lc.normalize_language_code(lang) == lc.SOURCE_LANGUAGE else self.th_text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "zhText": self.zh_text,
            "thText": self.th_text,
            "sourceLanguage": self.source_language,
            "status": self.status,
        }


@dataclass
class CommitResult:
    """What commit_translation wrote for each language."""
    translation: SmartTranslationResult
    written: Dict[str, bool]

    def to_dict(self) -> Dict[str, Any]:
        result = self.translation.to_dict()
        result["written"] = self.written
        return result


class TranslationManager:
    """
    Coordinates provider calls, chunking and persistence.

    Features:
    - UI strings translated as one request
    - Content longer than the chunk threshold split at sentence boundaries
      and translated concurrently, one degraded chunk never fails the rest
    - Smart translation into both zh and th from text authored in either
    - Human overrides and review flags honored on commit
    """

    def __init__(self, ai_service: AIService, store: Optional[TranslationStore] = None,
                 config: Optional[TranslationConfig] = None):
        """
        Initialize translation manager.

        Args:
            ai_service: Provider used for every translation call
            store: Translation store; required only for the read and commit paths
            config: Runtime configuration, defaults to the provider's configuration
        """
        self.ai_service = ai_service
        self.store = store
        self.config = config or ai_service.config

    def _require_store(self) -> TranslationStore:
        if self.store is None:
            raise RuntimeError("TranslationManager was created without a store")
        return self.store

    # ============================================================
    # Translation
    # ============================================================

    def translate_ui_outcome(self, text: str, source_lang: str, target_lang: str) -> TranslationOutcome:
        return self.ai_service.translate_one(text, source_lang, target_lang)

    def translate_ui(self, text: str, source_lang: str, target_lang: str) -> str:
        """Translate a short UI string. Returns the original text when the provider fails."""
        return self.translate_ui_outcome(text, source_lang, target_lang).text

    def translate_content_outcome(self, text: str, source_lang: str, target_lang: str) -> TranslationOutcome:
        """
        Translate content of any length.

        Text up to the chunk threshold is sent as a single request. Longer text
        is split at sentence terminators, the chunks are translated concurrently
        and the results are concatenated in original order. Sentence
        terminators are not restored on reassembly, except that the original
        text is returned whole when no chunk could be translated. Without a
        provider credential nothing is split and the text passes through.
        """
        text = text or ""
        if not self.ai_service.config.has_credentials:
            logger.warning("Translation API key not set, returning original text")
            return TranslationOutcome.fallback(text, "ai_config_missing")

        threshold = int(self.config.chunk_threshold)
        if len(text) <= threshold:
            return self.ai_service.translate_one(text, source_lang, target_lang)

        start_time = time.time()
        chunks = split_text(text, threshold)
        logger.info(f"Translating {len(text)} chars as {len(chunks)} chunks ({source_lang}->{target_lang})")

        outcomes = translate_chunks_concurrent(
            chunks,
            source_lang,
            target_lang,
            self.ai_service,
            max_workers=self.config.max_workers,
            deadline=self.config.request_deadline,
        )
        merged = merge_chunk_outcomes(outcomes, original_text=text)

        logger.info(
            "Content translation %s in %.1f seconds (chunks=%d, fallback=%d)",
            merged.status,
            time.time() - start_time,
            len(outcomes),
            sum(1 for outcome in outcomes if outcome.is_fallback),
        )
        return merged

    def translate_content(self, text: str, source_lang: str, target_lang: str) -> str:
        """Translate long-form content. Failing chunks keep their original text."""
        return self.translate_content_outcome(text, source_lang, target_lang).text

    def smart_translate(self, text: str, key: str, role: str = ROLE_CONTENT,
                        source_language: Optional[str] = None) -> SmartTranslationResult:
        """
        Produce both language variants of an authored text.

        The authored text stays on its own side; the other side is filled by the
        provider. Nothing is persisted.

        Args:
            text: Text as typed by the author
            key: Translation key the result belongs to
            role: 'ui' for labels, 'content' for long-form text
            source_language: Declared language, detected from the text when omitted

        Returns:
            SmartTranslationResult with zh_text, th_text and the outcome status
        """
        if role not in ROLES:
            raise ValueError(f"Unsupported role: {role}")

        source = resolve_source_language(text, source_language)
        if not text or not text.strip():
            return SmartTranslationResult(key=key, zh_text="", th_text="", source_language=source)

        target = lc.other_language(source)
        if role == ROLE_UI:
            outcome = self.translate_ui_outcome(text, source, target)
        else:
            outcome = self.translate_content_outcome(text, source, target)

        if source == lc.SOURCE_LANGUAGE:
            zh_text, th_text = text, outcome.text
        else:
            zh_text, th_text = outcome.text, text

        return SmartTranslationResult(
            key=key,
            zh_text=zh_text,
            th_text=th_text,
            source_language=source,
            status=outcome.status,
            error=outcome.error,
        )

    # ============================================================
    # Persistence
    # ============================================================

    def commit_translation(self, text: str, key: str, role: str = ROLE_CONTENT,
                           source_language: Optional[str] = None) -> CommitResult:
        """
        Translate and persist both language records for a key.

        The authored side is stored as-is. The machine side is flagged for review
        when the provider fell back to the original text or the result looks
        wrong. Keys holding a human override keep their value (the store routes
        the update to review).

        Raises:
            ValueError: If the text or key is empty, or the role is unknown
            sqlite3.Error: If the store fails
        """
        if not key or not key.strip():
            raise ValueError("key field is required and cannot be empty")
        if not text or not text.strip():
            raise ValueError("text field is required and cannot be empty")

        store = self._require_store()
        result = self.smart_translate(text, key, role, source_language)
        source = result.source_language
        target = lc.other_language(source)

        machine_text = result.text_for(target)
        is_valid, reason = is_translation_valid(text, machine_text, source, target)
        if not is_valid:
            logger.warning(f"Machine translation for {key} flagged for review: {reason}")

        written = {
            source: store.put(TranslationRecord(
                lang=source, key=key, value=result.text_for(source), role=role,
            )),
            target: store.put(TranslationRecord(
                lang=target, key=key, value=machine_text, role=role,
                needs_review=result.status != STATUS_TRANSLATED or not is_valid,
            )),
        }
        logger.info(f"Committed {key} ({role}, source={source}, status={result.status}, written={written})")
        return CommitResult(translation=result, written=written)

    def save_override(self, lang: str, key: str, value: str, role: str = ROLE_UI) -> bool:
        """Store a human correction; later automatic writes will not replace it."""
        code = lc.normalize_language_code(lang)
        if code is None:
            raise ValueError(f"Unsupported language: {lang}")
        record = TranslationRecord(lang=code, key=key, value=value, role=role,
                                   is_override=True, needs_review=False)
        return self._require_store().put(record)

    def get_all_translations(self, lang: str) -> Dict[str, str]:
        """
        Read path for clients.

        A store failure is logged and yields an empty dictionary; callers fall
        back to their own static strings.
        """
        code = lc.normalize_language_code(lang)
        if code is None:
            return {}
        try:
            return self._require_store().get_all(code)
        except sqlite3.Error as e:
            logger.error(f"Failed to load {code} translations: {e}")
            return {}

    def get_translation(self, lang: str, key: str) -> Optional[str]:
        code = lc.normalize_language_code(lang)
        if code is None:
            return None
        try:
            record = self._require_store().get(code, key)
        except sqlite3.Error as e:
            logger.error(f"Failed to load translation {key}: {e}")
            return None
        return record.value if record else None
