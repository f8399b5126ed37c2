"""
Judgment provider backed by the Gemini generateContent REST API.
"""

from typing import Any

import httpx

from trustlens.core.exceptions import ConfigFailure, ParseFailure, TransportFailure
from trustlens.core.logging import get_logger
from trustlens.providers.base import JudgmentProvider

logger = get_logger(__name__)

DEFAULT_GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiJudgmentProvider(JudgmentProvider):
    """Scores reviews with a Gemini model over plain HTTP."""

    name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-1.5-flash-latest",
        endpoint: str = DEFAULT_GEMINI_ENDPOINT,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        **kwargs,
    ):
        """
        Args:
            api_key: Gemini API key.
            model: Gemini model name.
            endpoint: Base URL of the models API.
            timeout: Request timeout in seconds.
            client: Shared httpx client (a private one is created otherwise).
        """
        super().__init__(**kwargs)
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return f"{self.endpoint}/{self.model}:generateContent"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _build_request(self, text: str) -> dict[str, Any]:
        return {
            "contents": [
                {"parts": [{"text": self.prompt.as_single_prompt(text=text)}]}
            ],
            "generationConfig": {"temperature": 0.0},
        }

    async def judge(self, text: str) -> str:
        if not self.api_key:
            raise ConfigFailure("Gemini API 키가 설정되지 않았습니다.")

        client = self._get_client()
        try:
            response = await client.post(
                self.url,
                params={"key": self.api_key},
                json=self._build_request(text),
            )
        except httpx.HTTPError as e:
            raise TransportFailure(f"Network Error: {e}") from e

        if not response.is_success:
            logger.error(f"Gemini API Error {response.status_code}: {response.text[:200]}")
            raise TransportFailure(
                f"API Error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ParseFailure("Gemini 응답 본문이 JSON이 아닙니다.") from e

        return self._reply_text(data)

    @staticmethod
    def _reply_text(data: Any) -> str:
        """candidates[0].content.parts[0].text 추출."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseFailure("Unexpected API response structure.") from e
        if not isinstance(text, str) or not text:
            raise ParseFailure("Unexpected API response structure.")
        return text

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
