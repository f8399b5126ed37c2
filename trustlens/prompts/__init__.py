# Prompts module

from .templates import (
    PromptTemplate,
    REVIEW_JUDGMENT_PROMPT,
)

__all__ = [
    "PromptTemplate",
    "REVIEW_JUDGMENT_PROMPT",
]
