"""
Pytest configuration and fixtures for all tests.

Provides temporary translation stores, a scripted translation provider and
Flask test clients wired with injected collaborators.
"""

import sys
import threading
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from wisenest_i18n.ai.service import TranslationOutcome
from wisenest_i18n.config import TranslationConfig
from wisenest_i18n.core.database import TranslationStore
from wisenest_i18n.core.schema import initialize_database
from wisenest_i18n.integrations.line import MockLineCapability
from wisenest_i18n.translation.manager import TranslationManager
from wisenest_i18n.web import create_app

ADMIN_TOKEN = "test-admin-token"


class FakeAIService:
    """
    Scripted provider.

    Translates by tagging the text with the target language. Texts containing
    any of fail_markers fall back to the original, like a failed provider call.
    """

    def __init__(self, config, fail_markers=(), delay=0.0):
        self.config = config
        self.fail_markers = tuple(fail_markers)
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def translate_one(self, text, source_language, target_language):
        with self._lock:
            self.calls.append((text, source_language, target_language))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                threading.Event().wait(self.delay)
            if not text or not text.strip():
                return TranslationOutcome(text=text or "")
            if any(marker in text for marker in self.fail_markers):
                return TranslationOutcome.fallback(text, "provider_http_error")
            return TranslationOutcome(text=f"<{target_language}>{text}")
        finally:
            with self._lock:
                self.active -= 1

    def translate_text(self, text, source_language, target_language):
        return self.translate_one(text, source_language, target_language).text


@pytest.fixture
def config(tmp_path):
    return TranslationConfig(
        api_key="test-key",
        db_file=str(tmp_path / "translations.db"),
        admin_token=ADMIN_TOKEN,
        max_retries=2,
        retry_max_wait=0.01,
    )


@pytest.fixture
def store(config):
    store = TranslationStore(config.db_file)
    initialize_database(store)
    return store


@pytest.fixture
def fake_ai(config):
    return FakeAIService(config)


@pytest.fixture
def manager(fake_ai, store, config):
    return TranslationManager(fake_ai, store, config)


@pytest.fixture
def app(config, store, fake_ai):
    app = create_app(config=config, store=store, ai_service=fake_ai, line=MockLineCapability())
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
