"""
팝업 화면 데이터 구성 모듈.

저장된 분석 결과를 화면에 표시할 형태로 변환합니다.
결과가 없으면 빈 화면 대신 안내 문구와 재시도 버튼을 보여줍니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trustlens.pipeline.models import round_half_up
from trustlens.ui.presenter import get_score_color

EMPTY_MESSAGE = "No review analysis available or analysis failed."
RETRY_LABEL = "Try Analyzing Again"
NO_ISSUES_MESSAGE = "No major issues flagged by the analysis."
PREVIEW_LENGTH = 150


@dataclass
class PopupEntry:
    """팝업의 리뷰 한 건."""

    title: str
    score: int
    color: str
    preview: str
    issue_lines: list[str] = field(default_factory=list)


@dataclass
class PopupView:
    """팝업 화면 전체."""

    entries: list[PopupEntry] = field(default_factory=list)
    average_score: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.entries


def _preview(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


def build_popup_view(data: list[dict[str, Any]] | None) -> PopupView:
    """저장된 결과로 팝업 화면 구성.

    Args:
        data: 저장소의 직렬화된 결과 목록 (없으면 None)

    Returns:
        PopupView 객체
    """
    if not data:
        return PopupView()

    entries = []
    for position, review in enumerate(data):
        # 형식이 맞지 않는 항목은 건너뜀
        if not isinstance(review, dict) or "suspicionScore" not in review:
            continue

        score = round_half_up(float(review["suspicionScore"]))
        issue_lines = [
            f"{issue['criterion']} (Weight: {float(issue['weight']):.0f}%)"
            for issue in review.get("issues") or []
        ]
        entries.append(
            PopupEntry(
                title=f"Review {position + 1}",
                score=score,
                color=get_score_color(score),
                preview=_preview(review.get("text") or "[Review text missing]"),
                issue_lines=issue_lines,
            )
        )

    if not entries:
        return PopupView()

    average = round_half_up(sum(e.score for e in entries) / len(entries))
    return PopupView(entries=entries, average_score=average)
