"""Tests for the DashScope-backed translation provider."""

import json
import logging

import httpx
import pytest

from wisenest_i18n.ai.exceptions import TranslationError
from wisenest_i18n.ai.service import AIService, validate_ai_config, STATUS_FALLBACK, STATUS_TRANSLATED
from wisenest_i18n.config import TranslationConfig, DEFAULT_API_URL


class RecordingHandler:
    """MockTransport handler that records requests and replays scripted responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


def make_service(handler, **overrides):
    values = dict(api_key="sk-test", max_retries=2, retry_max_wait=10.0)
    values.update(overrides)
    sleeps = []
    service = AIService(TranslationConfig(**values), transport=httpx.MockTransport(handler),
                        sleep=sleeps.append)
    return service, sleeps


def ok_response(text):
    return httpx.Response(200, json={"output": {"text": text}, "request_id": "req-1"})


class TestMissingCredential:
    def test_returns_original_without_network_call(self, caplog):
        handler = RecordingHandler(ok_response("should not be used"))
        service, _ = make_service(handler, api_key="")

        with caplog.at_level(logging.WARNING):
            outcome = service.translate_one("Hello", "zh", "th")

        assert outcome.text == "Hello"
        assert outcome.status == STATUS_FALLBACK
        assert handler.requests == []
        assert "API key not set" in caplog.text

    def test_placeholder_key_counts_as_missing(self):
        handler = RecordingHandler(ok_response("x"))
        service, _ = make_service(handler, api_key="YOUR_API_KEY_HERE")

        assert service.translate_text("Hello", "zh", "th") == "Hello"
        assert handler.requests == []

    def test_warning_is_logged_on_every_call(self, caplog):
        service, _ = make_service(RecordingHandler(ok_response("x")), api_key="")

        with caplog.at_level(logging.WARNING):
            service.translate_one("a", "zh", "th")
            service.translate_one("b", "zh", "th")

        assert caplog.text.count("API key not set") == 2


class TestSuccessfulTranslation:
    def test_request_shape(self):
        handler = RecordingHandler(ok_response("สวัสดี"))
        service, _ = make_service(handler)

        service.translate_one("你好", "zh", "th")

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == DEFAULT_API_URL
        assert request.headers["Authorization"] == "Bearer sk-test"

        body = json.loads(request.content)
        assert body["model"] == "qwen-turbo"
        assert body["parameters"] == {"temperature": 0.1, "top_p": 0.8}
        system, user = body["input"]["messages"]
        assert system["role"] == "system"
        assert "translation" in system["content"].lower()
        assert user["role"] == "user"
        assert "Chinese" in user["content"] and "Thai" in user["content"]
        assert user["content"].endswith("你好")

    def test_result_is_trimmed(self):
        service, _ = make_service(RecordingHandler(ok_response("  สวัสดี \n")))

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.text == "สวัสดี"
        assert outcome.status == STATUS_TRANSLATED
        assert not outcome.is_fallback

    def test_blank_input_skips_provider(self):
        handler = RecordingHandler(ok_response("x"))
        service, _ = make_service(handler)

        outcome = service.translate_one("   ", "zh", "th")

        assert outcome.text == "   "
        assert outcome.status == STATUS_TRANSLATED
        assert handler.requests == []


class TestProviderFailures:
    def test_server_error_retries_then_returns_original(self):
        handler = RecordingHandler(httpx.Response(500, json={"code": "InternalError", "message": "boom"}))
        service, sleeps = make_service(handler)

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.text == "你好"
        assert outcome.status == STATUS_FALLBACK
        assert "500" in outcome.error
        assert len(handler.requests) == 2
        assert sleeps == [1.0]

    def test_server_error_then_success(self):
        handler = RecordingHandler(httpx.Response(503, text="unavailable"), ok_response("สวัสดี"))
        service, _ = make_service(handler)

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.text == "สวัสดี"
        assert len(handler.requests) == 2

    @pytest.mark.parametrize("status_code", [400, 401, 403])
    def test_client_errors_are_not_retried(self, status_code):
        handler = RecordingHandler(httpx.Response(status_code, json={"code": "InvalidApiKey", "message": "bad"}))
        service, sleeps = make_service(handler)

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.text == "你好"
        assert outcome.is_fallback
        assert len(handler.requests) == 1
        assert sleeps == []

    def test_missing_output_text_is_a_failure(self):
        handler = RecordingHandler(httpx.Response(200, json={"output": {}}))
        service, _ = make_service(handler)

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.text == "你好"
        assert outcome.is_fallback
        assert "output.text" in outcome.error

    def test_non_json_body_is_a_failure(self):
        handler = RecordingHandler(httpx.Response(200, text="<html>gateway</html>"))
        service, _ = make_service(handler)

        assert service.translate_text("你好", "zh", "th") == "你好"

    def test_empty_translation_falls_back(self):
        handler = RecordingHandler(ok_response("   "))
        service, _ = make_service(handler)

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.text == "你好"
        assert outcome.error == "empty_translation"
        assert len(handler.requests) == 1

    def test_timeout_falls_back(self):
        handler = RecordingHandler(httpx.ReadTimeout("read timed out"))
        service, sleeps = make_service(handler)

        outcome = service.translate_one("你好", "zh", "th")

        assert outcome.is_fallback
        assert "timeout" in outcome.error.lower()
        assert sleeps == [2.0]

    def test_network_error_falls_back(self):
        handler = RecordingHandler(httpx.ConnectError("connection refused"))
        service, _ = make_service(handler, max_retries=1)

        outcome = service.translate_one("สวัสดี", "th", "zh")

        assert outcome.text == "สวัสดี"
        assert outcome.is_fallback


class TestRetryCategorization:
    def test_rate_limit_backoff_is_capped(self):
        service, _ = make_service(RecordingHandler(ok_response("x")))
        error = TranslationError("rate limited", code="provider_http_error", status_code=429)

        assert service._categorize_error(error, 0) == (True, 5.0)
        assert service._categorize_error(error, 3) == (True, 10.0)

    def test_bad_response_retries_once(self):
        service, _ = make_service(RecordingHandler(ok_response("x")))
        error = TranslationError("bad", code="provider_bad_response")

        assert service._categorize_error(error, 0)[0] is True
        assert service._categorize_error(error, 1)[0] is False


class TestValidateConfig:
    def test_missing_key(self):
        with pytest.raises(TranslationError) as exc_info:
            validate_ai_config(TranslationConfig(api_key=""))
        assert exc_info.value.code == "ai_config_missing"
        assert exc_info.value.details == {"missing_field": "api_key"}

    def test_missing_model(self):
        with pytest.raises(TranslationError) as exc_info:
            validate_ai_config(TranslationConfig(api_key="sk", model=""))
        assert exc_info.value.details["missing_field"] == "model"

    def test_valid(self):
        validate_ai_config(TranslationConfig(api_key="sk"))
