"""
Judgment provider backed by OpenAI chat models through LangChain.
"""

import openai
from langchain_openai import ChatOpenAI

from trustlens.core.exceptions import ConfigFailure, TransportFailure
from trustlens.core.logging import get_logger
from trustlens.providers.base import JudgmentProvider

logger = get_logger(__name__)


class OpenAIJudgmentProvider(JudgmentProvider):
    """Scores reviews with a ChatOpenAI model."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        llm: ChatOpenAI | None = None,
        **kwargs,
    ):
        """
        Args:
            api_key: OpenAI API key. Required unless ``llm`` is given.
            model: Chat model name.
            timeout: Request timeout in seconds.
            llm: Pre-built ChatOpenAI instance (mainly for tests).
        """
        super().__init__(**kwargs)
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.llm = llm
        self._owns_llm = llm is None

    def _get_llm(self) -> ChatOpenAI:
        """Lazily build the LLM client."""
        if self.llm is None:
            if not self.api_key:
                raise ConfigFailure("OpenAI API 키가 설정되지 않았습니다.")
            self.llm = ChatOpenAI(
                model=self.model,
                temperature=0,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self.llm

    async def judge(self, text: str) -> str:
        llm = self._get_llm()
        messages = self.prompt.get_messages(text=text)

        try:
            response = await llm.ainvoke(messages)
        except openai.APIStatusError as e:
            raise TransportFailure(
                f"API Error {e.status_code}: {e.message}",
                status_code=e.status_code,
            ) from e
        except openai.APIError as e:
            raise TransportFailure(f"Network Error: {e}") from e

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part if isinstance(part, str) else str(part.get("text", ""))
                for part in content
            )
        return content

    async def aclose(self) -> None:
        # 직접 만든 클라이언트는 이벤트 루프에 묶이므로 다음 호출 때 새로 생성
        if self._owns_llm:
            self.llm = None
