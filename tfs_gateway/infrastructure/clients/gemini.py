"""Gemini generateContent HTTP client shared by tax lookup and vehicle ranking"""

import httpx
from typing import Any, Dict, Optional
from tfs_gateway.config import settings
from tfs_gateway.domain.exceptions import (
    GeminiAPIError,
    InvalidResponseError,
    MissingAPIKeyError,
    ParsingFailedError,
)
from tfs_gateway.infrastructure.observability.metrics import gemini_latency_histogram


class GeminiClient:
    """Client for the Gemini text generation endpoint"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.base_url = (base_url or settings.gemini_api_base).rstrip("/")
        self.model = model or settings.gemini_model
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def require_api_key(self) -> str:
        """
        Raises:
            MissingAPIKeyError: No key configured
        """
        if not self.api_key or not self.api_key.strip():
            raise MissingAPIKeyError()
        return self.api_key.strip()

    async def generate_text(
        self,
        prompt: str,
        generation_config: Optional[Dict[str, Any]] = None,
        operation: str = "generate",
    ) -> str:
        """
        Send a single-prompt generateContent request and return the first candidate's text.

        Raises:
            MissingAPIKeyError: No key configured
            GeminiAPIError: Non-200 status
            InvalidResponseError: Transport failure or body is not JSON
            ParsingFailedError: candidates[0].content.parts[0].text is absent
        """
        api_key = self.require_api_key()

        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if generation_config:
            body["generationConfig"] = generation_config

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with gemini_latency_histogram.labels(operation=operation).time():
                    response = await client.post(
                        self.endpoint,
                        json=body,
                        headers={"X-goog-api-key": api_key},
                    )
            except httpx.TimeoutException as e:
                raise InvalidResponseError(f"Gemini API timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                raise InvalidResponseError(f"Gemini API request failed: {e}") from e

        if response.status_code != 200:
            raise GeminiAPIError(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError("Invalid response from Gemini API") from e

        return extract_text(data)


def extract_text(data: Any) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a generateContent response.

    Raises:
        ParsingFailedError: Any level of the envelope is missing or mistyped
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise ParsingFailedError("Unable to parse Gemini response") from e

    if not isinstance(text, str):
        raise ParsingFailedError("Unable to parse Gemini response")
    return text
