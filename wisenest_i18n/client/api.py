"""
Async HTTP client for the i18n endpoints.

Used by authoring screens and other services that need live previews and
the per-language catalog without importing the server side.
"""

from typing import Any, Dict, Optional

import httpx

from wisenest_i18n.ai.providers import get_httpx_timeout
from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)


class TranslationApiError(Exception):
    """Raised when an i18n endpoint cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class TranslationApiClient:
    """Thin wrapper over httpx.AsyncClient speaking the {code, message, data} envelope."""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: Any = 30, admin_token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout
        self.admin_token = admin_token
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create a persistent HTTP client with connection pooling"""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.admin_token:
                headers["Authorization"] = f"Bearer {self.admin_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=get_httpx_timeout(self.timeout),
                transport=self.transport,
            )
        return self._client

    async def aclose(self):
        """Close the HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TranslationApiError(f"Request to {path} timed out: {e}")
        except httpx.HTTPError as e:
            raise TranslationApiError(f"Request to {path} failed: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            raise TranslationApiError(
                message or f"HTTP {response.status_code} from {path}",
                status_code=response.status_code,
                code=body.get("code") if isinstance(body, dict) else None,
            )

        if not isinstance(body, dict) or "data" not in body:
            raise TranslationApiError(f"Invalid response structure from {path}", status_code=response.status_code)
        if body.get("code", 0) != 0:
            raise TranslationApiError(body.get("message") or "Request failed",
                                      status_code=response.status_code, code=body.get("code"))
        return body["data"]

    async def smart_translate(self, text: str, key: str, role: str = "content",
                              source_language: Optional[str] = None) -> Dict[str, Any]:
        """Request both language variants of a text. Returns {zhText, thText, sourceLanguage, status}."""
        payload: Dict[str, Any] = {"text": text, "key": key, "role": role}
        if source_language:
            payload["sourceLanguage"] = source_language
        return await self._request("POST", "/api/i18n/smart-translate", json=payload)

    async def fetch_translations(self, lang: str) -> Dict[str, str]:
        data = await self._request("GET", f"/api/i18n/translations/{lang}")
        if not isinstance(data, dict):
            raise TranslationApiError(f"Invalid translation data structure for {lang}")
        return data
