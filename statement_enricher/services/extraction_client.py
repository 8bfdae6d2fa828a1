"""
Extraction service client.

Sends one prompt per request to Gemini ``generateContent`` and returns the
reply text. The client does not retry and does not swallow errors; the
enrichment driver decides what a failure means for the row.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Protocol

import httpx

from ..models.config_models import ExtractionConfig

logger = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"
MODEL_ENV = "GEMINI_MODEL"


class ExtractionError(Exception):
    """Raised when the service answers but the answer is unusable."""


class ExtractionClient(Protocol):
    async def extract(self, prompt: str) -> str: ...


def get_api_key() -> Optional[str]:
    """Read the Gemini API key from the environment (``.env`` already loaded)."""
    key = os.environ.get(API_KEY_ENV, "").strip()
    return key or None


def _reply_text(payload: Any) -> str:
    """Pull the concatenated text parts out of a generateContent response."""
    try:
        candidates = payload["candidates"]
        parts = candidates[0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        block = payload.get("promptFeedback", {}).get("blockReason") if isinstance(payload, dict) else None
        if block:
            raise ExtractionError(f"prompt blocked: {block}") from e
        raise ExtractionError("response has no candidates/content/parts") from e

    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        raise ExtractionError("response contains no text parts")
    return "".join(texts)


class GeminiClient:
    """
    Async Gemini client built on httpx.

    Args:
        api_key: Gemini API key
        config: model / endpoint / timeout settings
        transport: optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[ExtractionConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._config = config or ExtractionConfig()
        self._transport = transport
        self.model = os.environ.get(MODEL_ENV) or self._config.model

    @property
    def endpoint(self) -> str:
        return f"{self._config.api_base.rstrip('/')}/models/{self.model}:generateContent"

    async def extract(self, prompt: str) -> str:
        """
        Send ``prompt`` and return the reply text (untrimmed).

        Raises:
            ExtractionError: non-200 status, undecodable body, no text in reply
            httpx.TimeoutException / httpx.RequestError: transport failures
        """
        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds, transport=self._transport
        ) as client:
            response = await client.post(
                self.endpoint,
                headers={
                    "x-goog-api-key": self._api_key,
                    "Content-Type": "application/json",
                },
                json={"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            )

        if response.status_code != 200:
            raise ExtractionError(
                f"Gemini API error: {response.status_code} - {response.text[:200]}"
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise ExtractionError(f"Gemini API returned invalid JSON: {e}") from e

        text = _reply_text(payload)
        logger.debug(f"extraction reply length={len(text)}")
        return text


class OfflineExtractionClient:
    """Stand-in used without an API key: every reply is blank, so rows stay as read."""

    def __init__(self) -> None:
        self.calls = 0

    async def extract(self, prompt: str) -> str:
        self.calls += 1
        return ""


def build_client(config: ExtractionConfig, *, offline: bool = False) -> ExtractionClient:
    """Pick the real client when a key is configured, otherwise offline mode."""
    if offline:
        logger.info("extraction disabled (--offline) -> descriptions kept as read")
        return OfflineExtractionClient()
    api_key = get_api_key()
    if not api_key:
        logger.info(f"{API_KEY_ENV} not configured -> offline mode, descriptions kept as read")
        return OfflineExtractionClient()
    return GeminiClient(api_key, config)
