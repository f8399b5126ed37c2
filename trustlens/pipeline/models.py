"""
분석 파이프라인 데이터 모델.

후보 리뷰, 세부 점수, 이슈, 리뷰별 결과, 실행 단위 결과를 정의합니다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from trustlens.core.exceptions import ScoringFailure


def round_half_up(value: float) -> int:
    """0.5를 항상 올림하는 정수 반올림 (Python 기본 round는 은행가 반올림)."""
    return math.floor(value + 0.5)


@dataclass
class PageDocument:
    """분석 대상 상품 페이지."""

    url: str
    soup: BeautifulSoup
    is_top_level: bool = True

    @property
    def hostname(self) -> str:
        return urlparse(self.url).hostname or ""

    @classmethod
    def from_html(cls, html: str, url: str, is_top_level: bool = True) -> "PageDocument":
        """HTML 문자열에서 생성."""
        return cls(url=url, soup=BeautifulSoup(html, "html.parser"), is_top_level=is_top_level)

    @classmethod
    def from_file(cls, path: str | Path, url: str) -> "PageDocument":
        """저장된 HTML 파일에서 생성."""
        html = Path(path).read_text(encoding="utf-8")
        return cls.from_html(html, url)

    def to_html(self) -> str:
        """주석(배지/요약 블록)이 반영된 HTML."""
        return str(self.soup)


@dataclass(frozen=True)
class SubScores:
    """Provider가 판정한 4개 세부 점수 (0.0 ~ 1.0)."""

    superlatives_punctuation: float
    generic_content: float
    ai_written: float
    behavior_patterns: float

    # 채널/Provider 응답에서 사용하는 필드명
    WIRE_FIELDS = {
        "superlatives_punctuation": "superlativesPunctuationScore",
        "generic_content": "genericContentScore",
        "ai_written": "aiWrittenScore",
        "behavior_patterns": "behaviorPatternsScore",
    }

    def to_wire(self) -> dict[str, float]:
        """채널 응답 형식으로 변환."""
        return {wire: getattr(self, attr) for attr, wire in self.WIRE_FIELDS.items()}


@dataclass(frozen=True)
class Issue:
    """임계값을 넘은 세부 점수 하나."""

    criterion: str
    raw_score: float
    weight_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "criterion": self.criterion,
            "score": self.raw_score,
            "weight": self.weight_percent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Issue":
        return cls(
            criterion=data["criterion"],
            raw_score=float(data["score"]),
            weight_percent=float(data["weight"]),
        )


@dataclass(frozen=True)
class ReviewResult:
    """리뷰 한 건의 채점 결과.

    element는 배지 표시용 원본 요소 참조이며 직렬화되지 않습니다.
    """

    text: str
    issues: tuple[Issue, ...] = ()
    suspicion_score: int = 0
    element: Tag | None = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """저장/팝업용 딕셔너리로 변환."""
        return {
            "text": self.text,
            "issues": [issue.to_dict() for issue in self.issues],
            "suspicionScore": self.suspicion_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewResult":
        return cls(
            text=data.get("text", ""),
            issues=tuple(Issue.from_dict(i) for i in data.get("issues") or []),
            suspicion_score=int(data.get("suspicionScore", 0)),
        )


@dataclass(frozen=True)
class CandidateReview:
    """채점 대상 후보 리뷰 (페이지 요소 + 추출 텍스트)."""

    index: int
    element: Tag
    text: str


@dataclass(frozen=True)
class ScoreOutcome:
    """채점 시도 한 건의 태그된 결과 (성공 또는 실패 중 하나)."""

    index: int
    result: ReviewResult | None = None
    failure: ScoringFailure | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass
class AnalysisRun:
    """페이지 방문 1회의 분석 결과.

    다음 실행 결과로 통째로 교체되며, 실행 간 병합하지 않습니다.
    """

    url: str
    results: list[ReviewResult] = field(default_factory=list)
    candidate_count: int = 0
    failed_count: int = 0

    @property
    def analyzed_count(self) -> int:
        return len(self.results)

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def average_suspicion_score(self) -> int:
        """리뷰별 의심 점수의 정수 평균 (결과가 없으면 0)."""
        if not self.results:
            return 0
        total = sum(r.suspicion_score for r in self.results)
        return round_half_up(total / len(self.results))

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "averageSuspicionScore": self.average_suspicion_score,
            "candidateCount": self.candidate_count,
            "failedCount": self.failed_count,
            "results": [r.to_dict() for r in self.results],
        }
