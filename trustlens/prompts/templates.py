"""
프롬프트 템플릿 모듈.

리뷰 진위 판정을 위한 프롬프트 템플릿을 제공합니다.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PromptTemplate:
    """프롬프트 템플릿 데이터 구조."""

    name: str
    system_prompt: str
    user_prompt_template: str
    description: str = ""
    version: str = "1.0"

    def format_user_prompt(self, **kwargs) -> str:
        """사용자 프롬프트 포맷팅."""
        return self.user_prompt_template.format(**kwargs)

    def get_messages(self, **kwargs) -> list[dict[str, str]]:
        """LangChain 메시지 형식으로 반환."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.format_user_prompt(**kwargs)},
        ]

    def as_single_prompt(self, **kwargs) -> str:
        """system/user 구분이 없는 API용 단일 프롬프트."""
        return f"{self.system_prompt}\n\n{self.format_user_prompt(**kwargs)}"


REVIEW_JUDGMENT_SYSTEM_PROMPT = """You are a product review authenticity analyst.
Judge a single product review on its own. You cannot see other reviews, so do not
reason about patterns across reviews.

Return a JSON object with scores between 0.0 (not present) and 1.0 (highly present):
1. "superlativesPunctuationScore": excessive superlatives (amazing, perfect, etc.)
   and excessive punctuation (!!!, ???).
2. "genericContentScore": how generic, vague, or lacking in specific detail the review is.
3. "aiWrittenScore": likelihood the review was written by an AI (overly formal,
   lacks personal touch, unusual phrasing).
4. "behaviorPatternsScore": unusual patterns within this review's text
   (repetition not typical of human writing, contradictory statements).

Strictly return ONLY the JSON object with these four keys and their scores."""

REVIEW_JUDGMENT_USER_TEMPLATE = """Review Text:
"{text}"

JSON Output:"""


REVIEW_JUDGMENT_PROMPT = PromptTemplate(
    name="review_judgment",
    system_prompt=REVIEW_JUDGMENT_SYSTEM_PROMPT,
    user_prompt_template=REVIEW_JUDGMENT_USER_TEMPLATE,
    description="리뷰 한 건에 대한 4개 세부 점수 판정",
)
