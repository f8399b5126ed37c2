"""
리뷰 분석 오케스트레이터.

페이지 하나에 대한 분석 실행 전체를 담당합니다.
1. 대상 사이트/최상위 문서인지 확인
2. 리뷰 요소 수집 및 텍스트 추출
3. 후보 리뷰 전체를 동시에 채점 (일부 실패는 나머지에 영향 없음)
4. 성공한 결과만 발견 순서대로 집계
5. 요약 표시와 저장을 각각 독립적으로 수행
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Protocol, Sequence

from bs4 import BeautifulSoup, Tag

from trustlens.core.exceptions import ChannelError, ScoringFailure
from trustlens.core.logging import get_logger, log_context, log_exception
from trustlens.messaging.background import SAVE_ACTION
from trustlens.messaging.channel import MessageChannel
from trustlens.pipeline.extractor import ReviewTextExtractor
from trustlens.pipeline.models import (
    AnalysisRun,
    CandidateReview,
    PageDocument,
    ReviewResult,
    ScoreOutcome,
)
from trustlens.pipeline.scorer import ReviewScorer

logger = get_logger(__name__)

REVIEW_SELECTORS = ('[data-hook="review"]', ".review", ".customer-review")
TARGET_HOST_FRAGMENT = "amazon."
MIN_REVIEW_LENGTH = 10
SAVE_TIMEOUT = 10.0


class Presenter(Protocol):
    def present(
        self,
        document: PageDocument,
        average_score: int,
        results: Sequence[ReviewResult],
    ) -> bool: ...


class AnalysisOrchestrator:
    """분석 실행 오케스트레이터.

    동시에 하나의 실행만 허용하며, 진행 중에 들어온 실행 요청은 무시합니다.
    """

    def __init__(
        self,
        scorer: ReviewScorer,
        extractor: ReviewTextExtractor | None = None,
        presenter: Presenter | None = None,
        channel: MessageChannel | None = None,
        review_selectors: Sequence[str] = REVIEW_SELECTORS,
        target_host_fragment: str = TARGET_HOST_FRAGMENT,
        min_review_length: int = MIN_REVIEW_LENGTH,
    ):
        """초기화.

        Args:
            scorer: 리뷰 채점기
            extractor: 리뷰 텍스트 추출기
            presenter: 결과 표시 담당 (None이면 표시 생략)
            channel: 저장 요청을 보낼 백그라운드 채널 (None이면 저장 생략)
            review_selectors: 리뷰 요소 셀렉터
            target_host_fragment: 분석 대상 호스트에 포함되어야 할 문자열
            min_review_length: 이 길이 이하의 리뷰는 채점하지 않음
        """
        self.scorer = scorer
        self.extractor = extractor or ReviewTextExtractor()
        self.presenter = presenter
        self.channel = channel
        self.review_selectors = tuple(review_selectors)
        self.target_host_fragment = target_host_fragment
        self.min_review_length = min_review_length
        self._in_flight = False
        self.run_count = 0
        self.last_run: AnalysisRun | None = None

    @property
    def is_running(self) -> bool:
        return self._in_flight

    def should_run(self, document: PageDocument) -> bool:
        """대상 사이트의 최상위 문서인지 확인."""
        return document.is_top_level and self.target_host_fragment in document.hostname

    async def run(self, document: PageDocument) -> AnalysisRun | None:
        """페이지 분석 실행.

        Returns:
            AnalysisRun 객체. 대상이 아니거나 이미 실행 중이면 None
        """
        if not self.should_run(document):
            logger.debug(f"분석 대상 페이지가 아님: {document.url}")
            return None

        if self._in_flight:
            logger.warning("이미 분석이 진행 중이므로 요청을 무시합니다.")
            return None

        self._in_flight = True
        self.run_count += 1
        try:
            with log_context(f"run {self.run_count}"):
                run = await self._run(document)
        finally:
            self._in_flight = False

        self.last_run = run
        return run

    async def _run(self, document: PageDocument) -> AnalysisRun:
        elements = self.collect_review_elements(document.soup)
        if not elements:
            logger.info("리뷰 요소를 찾지 못했습니다.")
            return AnalysisRun(url=document.url)

        candidates = self.collect_candidates(elements)
        logger.info(
            f"리뷰 요소 {len(elements)}개 중 {len(candidates)}개 채점 시작"
        )

        outcomes = await self.score_all(candidates)
        elements_by_index = {c.index: c.element for c in candidates}
        results = [
            replace(o.result, element=elements_by_index[o.index])
            for o in outcomes
            if o.ok
        ]

        run = AnalysisRun(
            url=document.url,
            results=results,
            candidate_count=len(candidates),
            failed_count=len(candidates) - len(results),
        )

        if run.is_empty:
            logger.info("채점에 성공한 리뷰가 없습니다 (nothing analyzable).")
            return run

        logger.info(
            f"리뷰 {run.analyzed_count}건 분석 완료 "
            f"(실패 {run.failed_count}건, 평균 {run.average_suspicion_score}%)"
        )
        await self.publish(document, run)
        return run

    def collect_review_elements(self, soup: BeautifulSoup) -> list[Tag]:
        """리뷰 요소 수집 (문서 순서, 요소당 한 번)."""
        return soup.select(", ".join(self.review_selectors))

    def collect_candidates(self, elements: Sequence[Tag]) -> list[CandidateReview]:
        """텍스트 추출 후 채점 가능한 후보만 남김."""
        candidates = []
        for index, element in enumerate(elements):
            text = self.extractor.extract(element)
            if text is None:
                logger.debug(f"리뷰 #{index}: 텍스트 추출 실패")
                continue
            if len(text) <= self.min_review_length:
                logger.debug(f"리뷰 #{index}: 너무 짧아 건너뜀")
                continue
            candidates.append(CandidateReview(index=index, element=element, text=text))
        return candidates

    async def score_all(self, candidates: Sequence[CandidateReview]) -> list[ScoreOutcome]:
        """후보 전체를 동시에 채점하고 모두 끝날 때까지 대기.

        완료 순서와 무관하게 발견 순서(index)로 정렬된 결과를 반환합니다.
        """
        tasks = [
            asyncio.create_task(self.scorer.score(c.text, index=c.index))
            for c in candidates
        ]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes = []
        for candidate, item in zip(candidates, settled):
            if isinstance(item, ScoreOutcome):
                outcomes.append(item)
                continue

            logger.error(f"리뷰 #{candidate.index} 채점 중 예외: {item!r}")
            failure = item if isinstance(item, ScoringFailure) else ScoringFailure(str(item))
            outcomes.append(ScoreOutcome(index=candidate.index, failure=failure))

        return sorted(outcomes, key=lambda o: o.index)

    async def publish(self, document: PageDocument, run: AnalysisRun) -> None:
        """요약 표시와 저장 (서로 독립적으로 실패 가능)."""
        if self.presenter is not None:
            try:
                self.presenter.present(document, run.average_suspicion_score, run.results)
            except Exception as e:
                log_exception(logger, e, "결과 표시 실패")

        if self.channel is not None:
            await self.persist(run.results)

    async def persist(self, results: Sequence[ReviewResult]) -> bool:
        """백그라운드 서비스에 결과 저장 요청."""
        message = {"action": SAVE_ACTION, "data": [r.to_dict() for r in results]}
        try:
            reply = await asyncio.wait_for(self.channel.send(message), SAVE_TIMEOUT)
        except (ChannelError, asyncio.TimeoutError) as e:
            logger.error(f"saveAnalysis 요청 실패: {e!r}")
            return False

        if not reply.get("success"):
            logger.error(f"분석 결과 저장 실패: {reply.get('error')}")
            return False
        return True
