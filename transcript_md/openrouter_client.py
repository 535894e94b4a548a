from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
from urllib.parse import urlparse

import requests
from requests import Response, Session
from requests.exceptions import RequestException

from .errors import RemoteServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "deepseek/deepseek-chat-v3-0324:free"


@dataclass(slots=True)
class OpenRouterSettings:
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_key: str = ""
    timeout: Optional[float] = 300.0
    temperature: Optional[float] = None


class OpenRouterClient:
    """Single-shot client for an OpenAI-compatible ``chat/completions`` endpoint."""

    def __init__(self, settings: OpenRouterSettings, session: Optional[Session] = None):
        if not settings.base_url:
            raise ValueError("Completion service base URL is required.")
        if not settings.model:
            raise ValueError("Completion service model is required.")
        self.settings = settings
        self._session = session or requests.Session()

    @property
    def session(self) -> Session:
        return self._session

    def chat_completion(self, messages: Sequence[dict]) -> str:
        """Send ``messages`` and return the first choice's content exactly as received."""
        payload: Dict[str, Any] = {
            "model": self.settings.model,
            "messages": list(messages),
        }
        if self.settings.temperature is not None:
            payload["temperature"] = self.settings.temperature
        data = self._post("chat/completions", payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise RemoteServiceError(
                f"Unexpected response format: {self._clip_text(str(data))}"
            ) from exc
        if not isinstance(content, str):
            raise RemoteServiceError(f"Response content is not text: {type(content).__name__}")
        return content

    def _post(self, path: str, payload: dict) -> dict:
        url = self._url(path)
        logger.debug("POST %s (model=%s)", url, payload.get("model"))
        try:
            response: Response = self._session.post(
                url, json=payload, headers=self._headers(), timeout=self.settings.timeout
            )
        except RequestException as exc:
            raise RemoteServiceError(f"Failed to reach completion service: {exc}") from exc

        if response.status_code >= 400:
            raise RemoteServiceError(
                f"Completion service error {response.status_code}: {self._clip_text(response.text)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteServiceError(
                f"Invalid JSON response from completion service: {self._clip_text(response.text)}",
                status_code=response.status_code,
            ) from exc

        provider_error = self._provider_error_payload(data)
        if provider_error:
            message, code = provider_error
            raise RemoteServiceError(message, status_code=code)
        if not isinstance(data, dict):
            raise RemoteServiceError(f"Unexpected response format: {self._clip_text(str(data))}")
        return data

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def _url(self, path: str) -> str:
        base = self.settings.base_url.rstrip("/")
        return f"{base}/{path.lstrip('/')}"

    @staticmethod
    def _clip_text(text: str, limit: int = 800) -> str:
        snippet = (text or "").strip()
        if not snippet:
            return "<empty response>"
        if len(snippet) <= limit:
            return snippet
        return f"{snippet[:limit]}…"

    @staticmethod
    def _provider_error_payload(payload: object) -> Optional[tuple[str, Optional[int]]]:
        # OpenRouter reports upstream provider failures inside a 200 body.
        if not isinstance(payload, dict):
            return None
        error_block = payload.get("error")
        if not isinstance(error_block, dict):
            return None
        message = str(error_block.get("message") or "Unknown completion service error")
        metadata = error_block.get("metadata")
        details: list[str] = []
        if isinstance(metadata, dict):
            raw = metadata.get("raw")
            provider = metadata.get("provider_name")
            if provider:
                details.append(f"provider={provider}")
            if raw:
                details.append(str(raw))
        if details:
            message = f"{message} ({'; '.join(details)})"
        code_raw = error_block.get("code")
        code: Optional[int] = None
        if isinstance(code_raw, int):
            code = code_raw
        else:
            try:
                code = int(str(code_raw))
            except (TypeError, ValueError):
                code = None
        if code is not None:
            formatted = f"Completion service error {code}: {message}"
        else:
            formatted = f"Completion service error: {message}"
        return formatted, code


def _is_local_url(url: str) -> bool:
    normalized = url or ""
    parsed = urlparse(normalized if "://" in normalized else f"http://{normalized}")
    host = (parsed.hostname or "").lower()
    return host in {"127.0.0.1", "localhost"} or host.startswith("192.168.") or host.startswith("10.")


def validate_settings(
    base_url: str,
    model: str,
    api_key: str = "",
    *,
    require_api_key: Optional[bool] = None,
) -> tuple[bool, str]:
    url = (base_url or "").strip()
    model_id = (model or "").strip()
    key = (api_key or "").strip()
    missing: list[str] = []
    if not url:
        missing.append("URL")
    if not model_id:
        missing.append("model")
    enforce_key = require_api_key if require_api_key is not None else bool(url and not _is_local_url(url))
    if enforce_key and not key:
        missing.append("API key")
    if missing:
        hint = ", ".join(missing)
        return False, f"Completion service settings incomplete: {hint} required."
    return True, ""
