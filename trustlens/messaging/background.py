"""
백그라운드 서비스.

Provider 인증 정보와 저장소를 보유하고, 채널로 들어온 요청만 처리합니다.
페이지 쪽 코드는 인증 정보에 직접 접근하지 않습니다.
"""

from __future__ import annotations

import asyncio
from typing import Any

from trustlens.core.exceptions import ScoringFailure, StorageError, TransportFailure
from trustlens.core.logging import get_logger, preview
from trustlens.pipeline.response_parser import parse_sub_scores
from trustlens.providers.base import JudgmentProvider
from trustlens.storage import AnalysisStore

logger = get_logger(__name__)

ANALYZE_ACTION = "analyzeWithGemini"
SAVE_ACTION = "saveAnalysis"
GET_ACTION = "getAnalysis"
RERUN_ACTION = "rerunAnalysis"


def failure_reply(error: ScoringFailure) -> dict[str, Any]:
    """채점 실패를 채널 응답 형식으로 변환."""
    return {"success": False, "error": error.message, "kind": error.kind}


class BackgroundService:
    """채점/저장 요청을 처리하는 백그라운드 서비스."""

    def __init__(
        self,
        provider: JudgmentProvider,
        store: AnalysisStore,
        timeout: float = 30.0,
    ):
        """초기화.

        Args:
            provider: 판정 Provider
            store: 분석 결과 저장소
            timeout: Provider 호출 1회의 제한 시간 (초)
        """
        self.provider = provider
        self.store = store
        self.timeout = timeout

    async def handle(self, message: dict[str, Any]) -> dict[str, Any]:
        """채널 메시지 처리."""
        action = message.get("action")

        if action == ANALYZE_ACTION:
            return await self.analyze(message.get("text"))
        if action == SAVE_ACTION:
            return await self.save(message.get("data"))
        if action == GET_ACTION:
            return await self.load()

        return {"success": False, "error": f"Unknown action: {action}"}

    async def analyze(self, text: str | None) -> dict[str, Any]:
        """리뷰 한 건을 Provider로 판정하고 세부 점수 반환."""
        if not text:
            return {"success": False, "error": "No text provided for analysis."}

        logger.debug(f"Provider 판정 요청: {preview(text)}")
        try:
            raw_text = await asyncio.wait_for(self.provider.judge(text), self.timeout)
            sub_scores = parse_sub_scores(raw_text)
        except asyncio.TimeoutError:
            logger.error(f"Provider 응답 시간 초과 ({self.timeout}s)")
            return failure_reply(TransportFailure(f"Provider timed out after {self.timeout}s"))
        except ScoringFailure as e:
            logger.error(f"Provider 판정 실패 ({e.kind}): {e}")
            return failure_reply(e)

        return {"success": True, "analysis": sub_scores.to_wire()}

    async def save(self, data: list[dict[str, Any]] | None) -> dict[str, Any]:
        """분석 결과 저장 (이전 결과 교체)."""
        if not isinstance(data, list):
            return {"success": False, "error": "No analysis data provided."}

        try:
            await asyncio.to_thread(self.store.save_analysis, data)
        except StorageError as e:
            logger.error(f"분석 결과 저장 실패: {e}")
            return {"success": False, "error": str(e)}

        return {"success": True}

    async def load(self) -> dict[str, Any]:
        """마지막 분석 결과 조회."""
        try:
            data = await asyncio.to_thread(self.store.get_analysis)
        except StorageError as e:
            return {"success": False, "error": str(e)}
        return {"success": True, "data": data}
