"""
리뷰 의심 점수 계산 모듈.

리뷰 한 건의 세부 점수를 백그라운드 서비스에 요청하고,
고정 가중치로 0~100 의심 점수와 이슈 목록을 만듭니다.
"""

from __future__ import annotations

import asyncio

from trustlens.core.exceptions import (
    ChannelError,
    SchemaFailure,
    ScoringFailure,
    TransportFailure,
    failure_from_reply,
)
from trustlens.core.logging import get_logger, log_context, preview
from trustlens.messaging.background import ANALYZE_ACTION
from trustlens.messaging.channel import MessageChannel
from trustlens.pipeline.models import (
    Issue,
    ReviewResult,
    ScoreOutcome,
    SubScores,
    round_half_up,
)
from trustlens.pipeline.response_parser import validate_sub_scores

logger = get_logger(__name__)


# =============================================================================
# 가중치 및 이슈 임계값
# =============================================================================

# 합계 1.0
WEIGHTS = {
    "superlatives_punctuation": 0.40,
    "generic_content": 0.30,
    "ai_written": 0.15,
    "behavior_patterns": 0.15,
}

# (세부 점수, 이슈 이름, 임계값) - 이슈 순서도 이 순서를 따름
# AI 작성/텍스트 패턴 신호는 0.5부터 이슈로 표시
ISSUE_RULES = (
    ("superlatives_punctuation", "Superlatives/Punctuation", 0.6),
    ("generic_content", "Generic Content", 0.6),
    ("ai_written", "Potential AI Content", 0.5),
    ("behavior_patterns", "Textual Patterns", 0.5),
)

MAX_TEXT_LENGTH = 15000
TRUNCATION_MARKER = "..."

# 채널 대기 시간은 Provider 제한 시간보다 약간 길게
CHANNEL_TIMEOUT_MARGIN = 5.0


def truncate_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Provider 입력 제한에 맞게 텍스트 자르기."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + TRUNCATION_MARKER


def compute_suspicion_score(sub_scores: SubScores) -> int:
    """가중 합을 0~100 정수 점수로 변환.

    Provider가 범위를 벗어난 값을 돌려줘도 0~100으로 고정됩니다.
    """
    raw = sum(getattr(sub_scores, name) * weight for name, weight in WEIGHTS.items())
    # 반올림 전에 고정 (매우 큰 값은 곱셈 중 inf가 됨)
    return round_half_up(min(100.0, max(0.0, raw * 100)))


def derive_issues(sub_scores: SubScores) -> tuple[Issue, ...]:
    """임계값 이상인 세부 점수를 이슈로 변환."""
    issues = []
    for name, criterion, threshold in ISSUE_RULES:
        value = getattr(sub_scores, name)
        if value >= threshold:
            issues.append(
                Issue(
                    criterion=criterion,
                    raw_score=value,
                    weight_percent=round(WEIGHTS[name] * 100, 2),
                )
            )
    return tuple(issues)


def build_review_result(text: str, sub_scores: SubScores) -> ReviewResult:
    """세부 점수로부터 ReviewResult 생성."""
    return ReviewResult(
        text=text,
        issues=derive_issues(sub_scores),
        suspicion_score=compute_suspicion_score(sub_scores),
    )


class ReviewScorer:
    """리뷰 채점기.

    Provider는 백그라운드 서비스에만 있으므로 모든 요청은 채널을 거칩니다.
    """

    def __init__(
        self,
        channel: MessageChannel,
        max_text_length: int = MAX_TEXT_LENGTH,
        timeout: float = 30.0 + CHANNEL_TIMEOUT_MARGIN,
    ):
        """초기화.

        Args:
            channel: 백그라운드 서비스와 연결된 채널
            max_text_length: 전송 전 최대 텍스트 길이
            timeout: 요청 1건의 응답 대기 시간 (초)
        """
        self.channel = channel
        self.max_text_length = max_text_length
        self.timeout = timeout

    async def score(self, text: str, index: int = 0) -> ScoreOutcome:
        """리뷰 채점 (실패도 태그된 결과로 반환).

        Args:
            text: 리뷰 본문
            index: 페이지에서 발견된 순서

        Returns:
            ScoreOutcome 객체
        """
        with log_context(f"review {index}"):
            try:
                result = await self.score_or_raise(text)
            except ScoringFailure as e:
                logger.error(f"채점 실패 ({e.kind}): {e}")
                return ScoreOutcome(index=index, failure=e)

            logger.info(f"채점 완료 (Score: {result.suspicion_score}%)")
            return ScoreOutcome(index=index, result=result)

    async def score_or_raise(self, text: str) -> ReviewResult:
        """리뷰 채점.

        Raises:
            TransportFailure: 채널/Provider 연결 실패 또는 시간 초과
            ParseFailure: Provider 응답 해석 실패
            SchemaFailure: 필수 점수 필드 누락
            ConfigFailure: Provider 인증 정보 없음
        """
        reply = await self._request(truncate_text(text, self.max_text_length))

        if not isinstance(reply, dict) or not reply.get("success"):
            error = reply.get("error") if isinstance(reply, dict) else None
            kind = reply.get("kind") if isinstance(reply, dict) else None
            raise failure_from_reply(error or "No response", kind)

        analysis = reply.get("analysis")
        if not isinstance(analysis, dict):
            raise SchemaFailure("응답에 analysis 객체가 없습니다.")

        return build_review_result(text, validate_sub_scores(analysis))

    async def _request(self, text: str) -> dict:
        logger.debug(f"백그라운드로 채점 요청: {preview(text)}")
        try:
            return await asyncio.wait_for(
                self.channel.send({"action": ANALYZE_ACTION, "text": text}),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportFailure(f"No reply within {self.timeout}s") from e
        except ChannelError as e:
            raise TransportFailure(e.message, details=e.details) from e
