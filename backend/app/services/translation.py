"""Client for a LibreTranslate-compatible translation endpoint."""

from __future__ import annotations

import logging

import httpx

from app.config import get_settings
from app.monitoring.metrics import translation_requests_total

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    """Raised when the upstream service fails or answers with garbage."""


class TranslationClient:
    """Proxies translate calls upstream; one attempt per call, no retries."""

    def __init__(
        self,
        url: str | None = None,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.url = url or str(settings.translation_api_url)
        self.api_key = api_key if api_key is not None else settings.translation_api_key
        self.timeout = timeout if timeout is not None else settings.translation_timeout_seconds
        self._transport = transport

    def _payload(self, text: str, source: str | None, target: str) -> dict[str, str]:
        payload = {"q": text, "source": source or "auto", "target": target, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        return payload

    async def translate(self, text: str, target: str, source: str | None = None) -> str:
        """Return the translated text.

        Raises:
            TranslationError: If the request fails or the reply has no translation.
        """

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=self._payload(text, source, target))
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            translation_requests_total.labels("error").inc()
            logger.warning("Translation request to %s failed: %s", self.url, exc)
            raise TranslationError("Error in translation service") from exc

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str):
            translation_requests_total.labels("error").inc()
            logger.warning("Translation service returned an unexpected payload: %r", data)
            raise TranslationError("Error in translation service")

        translation_requests_total.labels("ok").inc()
        return translated


def get_translation_client() -> TranslationClient:
    return TranslationClient()
