"""
Live translation previews for authoring screens.

Each input field owns a FieldPreview that debounces edits, dispatches a
smart-translate request once the author pauses, and publishes snapshots of
its state to listeners:

    IDLE -> PENDING -> REQUESTING -> RESOLVED | FAILED

Any edit moves the field back to PENDING and restarts the debounce timer.
Requests already dispatched are not cancelled by edits; every dispatch is
numbered and only the response of the latest dispatch is applied.
"""

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from wisenest_i18n.ai.detector import resolve_source_language
from wisenest_i18n.ai.service import STATUS_FALLBACK
from wisenest_i18n.client.api import TranslationApiClient
from wisenest_i18n.config import DEFAULT_CONFIG
from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = DEFAULT_CONFIG["debounce_seconds"]


class PreviewState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    REQUESTING = "requesting"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class PreviewSnapshot:
    """Immutable view of a field preview handed to listeners."""
    name: str
    key: str
    state: PreviewState
    text: str = ""
    zh_text: str = ""
    th_text: str = ""
    source_language: Optional[str] = None
    # translated | fallback, from the server; None while nothing resolved
    status: Optional[str] = None
    error: Optional[str] = None
    sequence: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.status == STATUS_FALLBACK


@dataclass
class BatchItem:
    text: str
    key: str
    role: str = "content"
    source_language: Optional[str] = None


@dataclass
class BatchResult:
    key: str
    zh_text: str
    th_text: str
    source_language: Optional[str] = None
    status: Optional[str] = None
    ok: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "zhText": self.zh_text,
            "thText": self.th_text,
            "sourceLanguage": self.source_language,
            "status": self.status,
            "ok": self.ok,
            "error": self.error,
        }


def _result_from_payload(key: str, text: str, data: Dict[str, Any]) -> BatchResult:
    return BatchResult(
        key=key,
        zh_text=data.get("zhText", text),
        th_text=data.get("thText", text),
        source_language=data.get("sourceLanguage"),
        status=data.get("status"),
    )


def _failed_result(key: str, text: str, error: Exception) -> BatchResult:
    # Both sides show the original text so nothing renders blank
    return BatchResult(key=key, zh_text=text, th_text=text, status=STATUS_FALLBACK,
                       ok=False, error=str(error) or error.__class__.__name__)


class FieldPreview:
    """Debounced preview state machine for one input field."""

    def __init__(self, name: str, key: str, api: TranslationApiClient, role: str = "content",
                 debounce: float = DEFAULT_DEBOUNCE_SECONDS, source_language: Optional[str] = None):
        self.name = name
        self.key = key
        self.role = role
        self.api = api
        self.debounce = debounce
        self.source_language = source_language

        self._listeners: List[Callable[[PreviewSnapshot], None]] = []
        self._snapshot = PreviewSnapshot(name=name, key=key, state=PreviewState.IDLE)
        self._timer: Optional[asyncio.Task] = None
        self._requests: Dict[int, asyncio.Task] = {}
        self._sequence = 0
        self._accepted_sequence: Optional[int] = None
        self._closed = False

    @property
    def state(self) -> PreviewState:
        return self._snapshot.state

    @property
    def snapshot(self) -> PreviewSnapshot:
        return self._snapshot

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Callable[[PreviewSnapshot], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _publish(self, **changes):
        self._snapshot = replace(self._snapshot, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._snapshot)
            except Exception as e:
                logger.error(f"Preview listener for {self.name} failed: {e}")

    def _cancel_timer(self):
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def update(self, text: str):
        """
        Record an edit.

        Must be called from inside a running event loop. Blank text clears the
        preview at once; anything else (re)starts the debounce timer.
        """
        if self._closed:
            return
        self._cancel_timer()

        if not text or not text.strip():
            # Nothing in flight may repopulate a cleared preview
            self._accepted_sequence = None
            self._publish(state=PreviewState.IDLE, text=text or "", zh_text="", th_text="",
                          source_language=None, status=None, error=None)
            return

        self._publish(state=PreviewState.PENDING, text=text,
                      source_language=resolve_source_language(text, self.source_language))
        self._timer = asyncio.ensure_future(self._debounce_then_dispatch(text))

    async def _debounce_then_dispatch(self, text: str):
        await asyncio.sleep(self.debounce)
        self._timer = None
        self._dispatch(text)

    def _dispatch(self, text: str) -> asyncio.Task:
        self._sequence += 1
        sequence = self._sequence
        self._accepted_sequence = sequence
        self._publish(state=PreviewState.REQUESTING, sequence=sequence, error=None)
        logger.debug(f"Dispatching preview #{sequence} for {self.name}")

        task = asyncio.ensure_future(self._request(sequence, text))
        self._requests[sequence] = task
        task.add_done_callback(lambda _: self._requests.pop(sequence, None))
        return task

    async def _request(self, sequence: int, text: str):
        try:
            data = await self.api.smart_translate(text, self.key, self.role, self.source_language)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._apply(sequence, None, e)
            return
        self._apply(sequence, data, None)

    def _apply(self, sequence: int, data: Optional[Dict[str, Any]], error: Optional[Exception]):
        if self._closed or sequence != self._accepted_sequence:
            logger.debug(f"Discarding stale preview #{sequence} for {self.name}")
            return

        # A newer edit is waiting on its timer; keep showing PENDING
        newer_edit_waiting = self._timer is not None

        if error is not None:
            logger.warning(f"Preview #{sequence} for {self.name} failed: {error}")
            changes = dict(zh_text=self._snapshot.text, th_text=self._snapshot.text,
                           status=STATUS_FALLBACK, error=str(error) or error.__class__.__name__)
            if not newer_edit_waiting:
                changes["state"] = PreviewState.FAILED
        else:
            changes = dict(zh_text=data.get("zhText", ""), th_text=data.get("thText", ""),
                           source_language=data.get("sourceLanguage"), status=data.get("status"), error=None)
            if not newer_edit_waiting:
                changes["state"] = PreviewState.RESOLVED
        self._publish(**changes)

    async def flush(self) -> PreviewSnapshot:
        """Skip the remaining debounce window, dispatch now and wait for the result."""
        if self._closed:
            return self._snapshot
        if self._timer is not None:
            self._cancel_timer()
            await self._dispatch(self._snapshot.text)
        elif self._requests:
            await asyncio.gather(*self._requests.values(), return_exceptions=True)
        return self._snapshot

    async def wait(self) -> PreviewSnapshot:
        """Wait until the pending timer and every dispatched request have settled."""
        while not self._closed:
            pending = [task for task in [self._timer, *self._requests.values()] if task is not None]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        return self._snapshot

    def close(self):
        """Cancel the timer and every in-flight request; later responses are ignored."""
        if self._closed:
            return
        self._closed = True
        self._cancel_timer()
        for task in list(self._requests.values()):
            task.cancel()
        self._requests.clear()
        self._listeners.clear()


class ClientTranslationCoordinator:
    """
    Owns the preview fields of one authoring screen.

    Also offers one-shot and batch translation for forms that translate on
    submit rather than while typing.
    """

    def __init__(self, api: TranslationApiClient, debounce: float = DEFAULT_DEBOUNCE_SECONDS):
        self.api = api
        self.debounce = debounce
        self.fields: Dict[str, FieldPreview] = {}
        self._active = 0
        self.error: Optional[str] = None

    @property
    def is_translating(self) -> bool:
        return self._active > 0 or any(
            preview.state in (PreviewState.PENDING, PreviewState.REQUESTING) for preview in self.fields.values()
        )

    def field(self, name: str, key: str, role: str = "content",
              source_language: Optional[str] = None) -> FieldPreview:
        """Get or create the preview for an input field."""
        preview = self.fields.get(name)
        if preview is None or preview.closed:
            preview = FieldPreview(name, key, self.api, role=role, debounce=self.debounce,
                                   source_language=source_language)
            self.fields[name] = preview
        return preview

    async def translate(self, text: str, key: str, role: str = "content",
                        source_language: Optional[str] = None) -> BatchResult:
        """
        Translate one text immediately.

        Never raises; on failure both sides carry the original text and the
        error is recorded on the coordinator.
        """
        if not text or not text.strip():
            return BatchResult(key=key, zh_text="", th_text="")

        self._active += 1
        self.error = None
        try:
            data = await self.api.smart_translate(text, key, role, source_language)
            return _result_from_payload(key, text, data)
        except Exception as e:
            logger.warning(f"Translation of {key} failed: {e}")
            self.error = str(e) or e.__class__.__name__
            return _failed_result(key, text, e)
        finally:
            self._active -= 1

    async def batch_translate(self, items: List[Any]) -> Dict[str, BatchResult]:
        """
        Translate independent items concurrently.

        Items are BatchItem objects or dicts with text, key and optional role /
        sourceLanguage. Results are keyed by item key and tagged ok or failed
        individually; one failing item never affects the others.
        """
        batch = [item if isinstance(item, BatchItem) else BatchItem(
            text=item.get("text", ""),
            key=item["key"],
            role=item.get("role", "content"),
            source_language=item.get("sourceLanguage"),
        ) for item in items]

        results = await asyncio.gather(
            *(self.translate(item.text, item.key, item.role, item.source_language) for item in batch),
            return_exceptions=True,
        )

        aggregated: Dict[str, BatchResult] = {}
        failures = 0
        for item, result in zip(batch, results):
            if isinstance(result, BaseException):
                result = _failed_result(item.key, item.text, result)
            if not result.ok:
                failures += 1
            aggregated[item.key] = result

        self.error = f"{failures} of {len(batch)} translations failed" if failures else None
        logger.info(f"Batch translated {len(batch)} items ({failures} failed)")
        return aggregated

    def close(self):
        """Tear down every field; nothing is applied after this returns."""
        for preview in self.fields.values():
            preview.close()
        self.fields.clear()
