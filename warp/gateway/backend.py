"""
Generative Backend - The opaque text completion service.

The gateway only needs one call: complete(prompt) -> text. The text carries
no schema guarantee. Every failure mode of the service (missing key, HTTP
error, transport error, non-JSON or empty envelope) surfaces as
UpstreamError. Timeouts and cancellation are handled by the gateway.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import logging
from typing import Any, Optional

import httpx

from ..errors import UpstreamError
from .config import GatewayConfig, GEMINI_BASE_URL


logger = logging.getLogger(__name__)


class GenerativeBackend(ABC):
    """Interface to a text completion service."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """
        Return the raw completion for prompt.

        Raises:
            UpstreamError: if the service cannot produce a completion
        """
        ...


class GeminiBackend(GenerativeBackend):
    """
    Gemini generateContent over REST.

    Usage:
        backend = GeminiBackend(api_key=key)
        text = await backend.complete("Hello")
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "GeminiBackend":
        return cls(
            api_key=config.api_key,
            model=config.model_name,
            base_url=config.api_url,
            timeout=config.backend_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def complete(self, prompt: str) -> str:
        if not self.configured:
            raise UpstreamError("Generative backend API key is not configured")

        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key}

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.endpoint, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.endpoint, json=payload, headers=headers)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Backend request failed: {type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamError("Backend returned a non-JSON envelope") from e

        return _completion_text(body)


def _completion_text(body: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = body["candidates"][0]["content"]["parts"]
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamError("Backend response has no candidates") from e

    if not text:
        logger.warning("Backend returned an empty completion")
        raise UpstreamError("Backend returned an empty completion")
    return text
