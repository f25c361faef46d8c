"""
AI Provider API Implementation

This module contains the HTTP call to the DashScope text-generation endpoint
used for translation. It raises TranslationError on every failure; turning
failures into fallback text is the job of AIService.
"""

from typing import Any, Dict, List
import httpx

from wisenest_i18n.logger import get_logger
from wisenest_i18n.ai.exceptions import TranslationError

logger = get_logger(__name__)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (total timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 30.0),
            read=timeout_config.get('read', 30.0),
            pool=timeout_config.get('pool', 10.0),
        )
    else:
        timeout_value = float(timeout_config) if timeout_config else 30.0
        return httpx.Timeout(
            connect=10.0,
            write=timeout_value,
            read=timeout_value,
            pool=10.0,
        )


def handle_http_error(e: httpx.HTTPStatusError, provider: str):
    """Handle HTTP errors with detailed messages."""
    status_code = e.response.status_code
    error_text = "Unknown error"

    try:
        error_json = e.response.json()
        if isinstance(error_json, dict) and ("message" in error_json or "code" in error_json):
            # DashScope error body: {"code": "...", "message": "...", "request_id": "..."}
            error_text = error_json.get("message") or str(error_json.get("code"))
        elif isinstance(error_json, dict) and "error" in error_json:
            error_detail = error_json["error"]
            if isinstance(error_detail, dict):
                error_text = error_detail.get("message", str(error_detail))
            else:
                error_text = str(error_detail)
    except ValueError:
        error_text = e.response.text[:500] if e.response.text else "No details"

    raise TranslationError(
        f"{provider} API error ({status_code}): {error_text}",
        code="provider_http_error",
        details={"status_code": status_code},
        status_code=status_code,
    )


def build_request_body(service, messages: List[Dict[str, str]]) -> Dict[str, Any]:
    """Build the DashScope generation request body."""
    config = service.config
    return {
        "model": config.model,
        "input": {
            "messages": messages,
        },
        "parameters": {
            "temperature": config.temperature,
            "top_p": config.top_p,
        },
    }


def extract_output_text(result: Any) -> str:
    """Pull output.text out of a DashScope response body."""
    if not isinstance(result, dict):
        raise TranslationError("Malformed DashScope response: body is not an object", code="provider_bad_response")
    output = result.get("output")
    if not isinstance(output, dict):
        raise TranslationError("Malformed DashScope response: missing output", code="provider_bad_response")
    text = output.get("text")
    if not isinstance(text, str):
        raise TranslationError("Malformed DashScope response: missing output.text", code="provider_bad_response")
    return text


def call_dashscope_api(service, messages: List[Dict[str, str]]) -> str:
    """Call the DashScope text-generation API and return output.text."""
    config = service.config

    if not config.has_credentials:
        raise TranslationError("DashScope API key not configured", code="ai_config_missing")

    headers = {
        "Authorization": f"Bearer {config.api_key}",
        "Content-Type": "application/json"
    }
    body = build_request_body(service, messages)

    logger.debug(f"  Calling DashScope API (model: {config.model})...")

    try:
        httpx_timeout = get_httpx_timeout(config.timeout)
        with httpx.Client(timeout=httpx_timeout, transport=service.transport) as client:
            response = client.post(config.api_url, headers=headers, json=body)
            response.raise_for_status()

            try:
                result = response.json()
            except ValueError:
                raise TranslationError(
                    "Malformed DashScope response: body is not JSON",
                    code="provider_bad_response",
                )

            content = extract_output_text(result)
            logger.debug(f"  Received {len(content)} chars from DashScope")
            return content

    except httpx.HTTPStatusError as e:
        handle_http_error(e, "DashScope")
    except httpx.TimeoutException:
        raise TranslationError("DashScope API request timeout", code="provider_timeout")
    except httpx.HTTPError as e:
        raise TranslationError(f"DashScope API call failed: {e}", code="provider_network_error")
