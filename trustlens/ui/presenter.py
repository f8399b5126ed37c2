"""
페이지 주석 모듈.

분석 결과 요약 블록과 리뷰별 점수 배지를 문서에 삽입합니다.
요약 블록은 고정 id로 식별하며, 새 블록을 넣기 전에 항상 이전 블록을 제거합니다.
"""

from __future__ import annotations

from typing import Sequence

from bs4 import BeautifulSoup, Tag

from trustlens.core.logging import get_logger
from trustlens.pipeline.models import PageDocument, ReviewResult

logger = get_logger(__name__)

UI_BLOCK_ID = "trustlens-ui-block"
BADGE_CLASS = "trustlens-review-badge"

# 요약 블록을 넣을 컨테이너 (우선순위 순서)
TARGET_CONTAINER_SELECTORS = (
    "#rightCol",
    "#centerCol",
    "#desktop_buybox",
    "#buybox",
    "#detailBulletsWrapper_feature_div",
)


def get_score_color(score: float) -> str:
    """의심 점수 구간별 색상."""
    if score >= 70:
        return "red"
    if score >= 40:
        return "orange"
    return "green"


class PagePresenter:
    """분석 결과를 문서에 표시하는 클래스."""

    def __init__(
        self,
        target_selectors: Sequence[str] = TARGET_CONTAINER_SELECTORS,
        provider_label: str = "Gemini",
    ):
        self.target_selectors = tuple(target_selectors)
        self.provider_label = provider_label

    def present(
        self,
        document: PageDocument,
        average_score: int,
        results: Sequence[ReviewResult],
    ) -> bool:
        """요약 블록과 배지 삽입.

        Args:
            document: 대상 문서
            average_score: 평균 의심 점수
            results: 리뷰별 결과

        Returns:
            요약 블록 삽입 여부
        """
        for result in results:
            if result.element is not None:
                self.add_badge(document.soup, result.element, result.suspicion_score)

        return self.inject_summary(document.soup, average_score, len(results))

    def find_target_container(self, soup: BeautifulSoup) -> Tag | None:
        for selector in self.target_selectors:
            container = soup.select_one(selector)
            if container is not None:
                logger.debug(f"요약 블록 위치: {selector}")
                return container
        return None

    def remove_summary(self, soup: BeautifulSoup) -> None:
        """기존 요약 블록 제거."""
        existing = soup.find(id=UI_BLOCK_ID)
        while existing is not None:
            existing.decompose()
            existing = soup.find(id=UI_BLOCK_ID)

    def inject_summary(self, soup: BeautifulSoup, average_score: int, analyzed_count: int) -> bool:
        container = self.find_target_container(soup)
        if container is None:
            logger.error("요약 블록을 넣을 컨테이너를 찾지 못했습니다.")
            return False

        self.remove_summary(soup)
        block = self._build_summary(soup, average_score, analyzed_count)

        # 컨테이너의 첫 자식으로 삽입
        container.insert(0, block)
        logger.info(f"요약 블록 삽입 완료: #{container.get('id') or container.name}")
        return True

    def _build_summary(self, soup: BeautifulSoup, average_score: int, analyzed_count: int) -> Tag:
        block = soup.new_tag("div", attrs={"id": UI_BLOCK_ID, "class": "trustlens-summary"})

        title = soup.new_tag("h3")
        title.string = f"TrustLens Review Analysis (Powered by {self.provider_label})"
        block.append(title)

        score_row = soup.new_tag("div", attrs={"class": "trustlens-score"})
        score_row.append("Product Suspicion Score: ")
        score_value = soup.new_tag(
            "strong",
            attrs={
                "class": "trustlens-score-value",
                "data-color": get_score_color(average_score),
                "style": f"color: {get_score_color(average_score)};",
            },
        )
        score_value.string = f"{average_score}%"
        score_row.append(score_value)
        block.append(score_row)

        info = soup.new_tag("p", attrs={"class": "trustlens-info"})
        info.string = (
            f"Analysis based on {analyzed_count} review(s) using {self.provider_label} API. "
            "Score reflects potential flags."
        )
        block.append(info)
        return block

    def add_badge(self, soup: BeautifulSoup, review_element: Tag, score: int) -> None:
        """리뷰 요소에 점수 배지 추가 (기존 배지는 교체)."""
        for existing in review_element.select(f".{BADGE_CLASS}"):
            existing.decompose()

        badge = soup.new_tag(
            "div",
            attrs={
                "class": BADGE_CLASS,
                "title": f"TrustLens Suspicion Score: {score}%",
                "data-color": get_score_color(score),
                "style": f"background-color: {get_score_color(score)};",
            },
        )
        badge.string = f"{score}%"
        review_element.append(badge)
