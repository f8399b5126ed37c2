# Providers module

from .base import JudgmentProvider
from .gemini_provider import GeminiJudgmentProvider
from .openai_provider import OpenAIJudgmentProvider


def create_provider(config=None) -> JudgmentProvider:
    """
    Factory function to build the configured judgment provider.

    Args:
        config: Settings object (defaults to the application settings).

    Returns:
        A JudgmentProvider instance.

    Raises:
        ValueError: If the configured provider name is unknown.
    """
    if config is None:
        from trustlens.utils.config import settings as config

    if config.provider == "openai":
        return OpenAIJudgmentProvider(
            api_key=config.openai_api_key,
            model=config.openai_model,
            timeout=config.provider_timeout,
        )
    if config.provider == "gemini":
        return GeminiJudgmentProvider(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            endpoint=config.gemini_endpoint,
            timeout=config.provider_timeout,
        )

    raise ValueError(f"Unknown provider: {config.provider}")


__all__ = [
    "JudgmentProvider",
    "OpenAIJudgmentProvider",
    "GeminiJudgmentProvider",
    "create_provider",
]
