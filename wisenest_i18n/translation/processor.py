"""
Translation Processing Module

Contains functions for processing translation chunks:
- Concurrent chunk translation over a thread pool
- Ordered reassembly of chunk outcomes
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, List, Optional

from wisenest_i18n.ai.service import TranslationOutcome, STATUS_FALLBACK, STATUS_TRANSLATED
from wisenest_i18n.logger import get_logger
from wisenest_i18n.translation.utils import join_chunks

logger = get_logger(__name__)


def _translate_chunk(ai_service, chunk: str, source_lang: str, target_lang: str) -> TranslationOutcome:
    try:
        return ai_service.translate_one(chunk, source_lang, target_lang)
    except Exception as e:
        # Providers are expected not to raise; a chunk that does still only degrades itself
        logger.error(f"Chunk translation raised unexpectedly: {e}. Returning original.")
        return TranslationOutcome.fallback(chunk, str(e))


def translate_chunks_concurrent(
    chunks: List[str],
    source_lang: str,
    target_lang: str,
    ai_service,
    max_workers: int = 4,
    cancel_check: Optional[Callable[[], bool]] = None,
    deadline: Optional[float] = None,
) -> List[TranslationOutcome]:
    """
    Translate multiple chunks concurrently.

    Returns outcomes in the same order as the input chunks. Whitespace-only
    chunks are passed through without a provider call. On failure a chunk
    carries its original text (graceful degradation).

    Args:
        chunks: Text segments produced by split_text
        source_lang: Source language code
        target_lang: Target language code
        ai_service: AIService instance for translation
        max_workers: Upper bound on concurrent provider requests
        cancel_check: Optional function to check for cancellation before dispatch
        deadline: Seconds the whole join may take; chunks still unfinished
            then keep their original text

    Returns:
        List of TranslationOutcome, one per chunk
    """
    results: List[Optional[TranslationOutcome]] = [None] * len(chunks)
    pending = {}

    for idx, chunk in enumerate(chunks):
        if not chunk.strip():
            results[idx] = TranslationOutcome(text=chunk, status=STATUS_TRANSLATED)
        else:
            pending[idx] = chunk

    if not pending:
        return results

    workers = max(1, min(int(max_workers), len(pending)))
    logger.debug(f"Translating {len(pending)} chunks with {workers} workers")

    executor = ThreadPoolExecutor(max_workers=workers)
    timed_out = False
    try:
        future_to_idx = {}
        for idx, chunk in pending.items():
            if cancel_check and cancel_check():
                results[idx] = TranslationOutcome.fallback(chunk, "cancelled")
                continue
            future = executor.submit(_translate_chunk, ai_service, chunk, source_lang, target_lang)
            future_to_idx[future] = idx

        try:
            for future in as_completed(future_to_idx, timeout=deadline or None):
                idx = future_to_idx[future]
                outcome = future.result()
                if outcome.is_fallback:
                    logger.warning(f"Chunk {idx + 1}/{len(chunks)} fell back to original text")
                results[idx] = outcome
        except FuturesTimeoutError:
            timed_out = True
            for future, idx in future_to_idx.items():
                if results[idx] is None:
                    future.cancel()
                    results[idx] = TranslationOutcome.fallback(pending[idx], "provider_timeout")
            logger.error(f"Chunk translation exceeded {deadline}s; unfinished chunks keep their original text")
    finally:
        # Stragglers keep running in their threads but are no longer waited for
        executor.shutdown(wait=not timed_out)

    return results


def merge_chunk_outcomes(outcomes: List[TranslationOutcome], original_text: Optional[str] = None) -> TranslationOutcome:
    """
    Concatenate chunk outcomes in order; any fallback chunk marks the whole as fallback.

    When every chunk with content fell back and original_text is given, the
    original is returned unchanged instead of the terminator-less concatenation.
    """
    text = join_chunks([outcome.text for outcome in outcomes])
    errors = [outcome.error for outcome in outcomes if outcome.is_fallback and outcome.error]
    fell_back = any(outcome.is_fallback for outcome in outcomes)
    translated_any = any(not outcome.is_fallback and outcome.text.strip() for outcome in outcomes)
    if original_text is not None and fell_back and not translated_any:
        return TranslationOutcome.fallback(original_text, "; ".join(dict.fromkeys(errors)) or None)
    if fell_back:
        return TranslationOutcome(text=text, status=STATUS_FALLBACK, error="; ".join(errors) or None)
    return TranslationOutcome(text=text, status=STATUS_TRANSLATED)
