"""
리뷰 텍스트 추출 모듈.

페이지 요소에서 사용자가 작성한 리뷰 본문만 골라냅니다.
마크업이 일정하지 않아 셀렉터를 우선순위대로 시도하며,
폴백 경로에서는 분리된 사본에서 스크립트/위젯을 제거한 뒤 텍스트를 얻습니다.
"""

from __future__ import annotations

import copy

from bs4 import Tag

from trustlens.core.logging import get_logger, preview

logger = get_logger(__name__)

# 사용자 작성 텍스트 노드만 가리키는 셀렉터
PRIMARY_TEXT_SELECTOR = '[data-hook="review-body"] span'

# 우선순위 순서
FALLBACK_TEXT_SELECTORS = (
    '[data-hook="review-body"]',
    ".review-text-content",
    ".review-text",
)

# 폴백 사본에서 제거할 요소 (실행 코드, 펼치기 위젯)
NOISE_SELECTORS = (
    "script",
    "noscript",
    'div[id^="expander"]',
)


class ReviewTextExtractor:
    """리뷰 요소에서 본문 텍스트를 추출하는 클래스."""

    def __init__(
        self,
        primary_selector: str = PRIMARY_TEXT_SELECTOR,
        fallback_selectors: tuple[str, ...] = FALLBACK_TEXT_SELECTORS,
        noise_selectors: tuple[str, ...] = NOISE_SELECTORS,
    ):
        self.primary_selector = primary_selector
        self.fallback_selectors = fallback_selectors
        self.noise_selectors = noise_selectors

    def extract(self, root: Tag) -> str | None:
        """리뷰 요소에서 텍스트 추출.

        Args:
            root: 리뷰 하나를 감싸는 요소

        Returns:
            앞뒤 공백이 제거된 본문, 추출 실패 시 None
        """
        primary = root.select_one(self.primary_selector)
        if primary is not None:
            text = primary.get_text().strip()
            if text:
                logger.debug(f"기본 셀렉터로 추출: {preview(text, 50)}")
                return text

        for selector in self.fallback_selectors:
            element = root.select_one(selector)
            if element is None:
                continue

            text = self._clean_text(element)
            if text:
                logger.debug(f"폴백 셀렉터 {selector}로 추출: {preview(text, 50)}")
                return text

        return None

    def _clean_text(self, element: Tag) -> str:
        """분리된 사본에서 노이즈 요소를 제거하고 텍스트 반환.

        원본 문서는 변경하지 않습니다.
        """
        detached = copy.copy(element)
        for selector in self.noise_selectors:
            for noise in detached.select(selector):
                noise.decompose()
        return detached.get_text().strip()


def extract_review_text(root: Tag) -> str | None:
    """기본 설정으로 리뷰 텍스트 추출 (헬퍼)."""
    return ReviewTextExtractor().extract(root)
