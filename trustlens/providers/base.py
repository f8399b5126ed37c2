"""
Base class for review judgment providers.
"""

from abc import ABC, abstractmethod

from trustlens.prompts import REVIEW_JUDGMENT_PROMPT, PromptTemplate


class JudgmentProvider(ABC):
    """
    Abstract base class for language-model judgment providers.

    A provider sends one review's text to a model and returns the model's
    raw reply. Parsing the reply is left to the caller so the prompt and the
    reply format can change without touching aggregation.
    """

    name = "base"

    def __init__(self, prompt: PromptTemplate = REVIEW_JUDGMENT_PROMPT):
        self.prompt = prompt

    @abstractmethod
    async def judge(self, text: str) -> str:
        """
        Ask the model to judge a single review.

        Args:
            text: Review text, already truncated by the caller.

        Returns:
            The model's raw reply text.

        Raises:
            ConfigFailure: If the provider credential is not configured.
            TransportFailure: If the API is unreachable or answers non-2xx.
            ParseFailure: If the API answer has no reply text in it.
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None
