"""
분석 세션 모듈.

채널, 백그라운드 서비스, 채점기, 오케스트레이터를 한데 묶고
재분석(rerunAnalysis) 요청을 처리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Any

from trustlens.core.logging import get_logger
from trustlens.crawler import BaseCrawler, get_crawler
from trustlens.messaging.background import GET_ACTION, RERUN_ACTION, BackgroundService
from trustlens.messaging.channel import MessageChannel
from trustlens.pipeline.models import AnalysisRun, PageDocument
from trustlens.pipeline.orchestrator import AnalysisOrchestrator, Presenter
from trustlens.pipeline.scorer import CHANNEL_TIMEOUT_MARGIN, ReviewScorer
from trustlens.providers import JudgmentProvider, create_provider
from trustlens.storage import AnalysisStore, create_analysis_store
from trustlens.ui.presenter import PagePresenter
from trustlens.utils.config import Settings, get_settings

logger = get_logger(__name__)

PROVIDER_LABELS = {"openai": "OpenAI", "gemini": "Gemini"}


class TrustLensSession:
    """페이지 분석 세션.

    Example:
        ```python
        async with TrustLensSession() as session:
            run = await session.analyze_url("https://www.amazon.com/dp/B000000000")
            print(run.average_suspicion_score)
        ```
    """

    def __init__(
        self,
        provider: JudgmentProvider | None = None,
        store: AnalysisStore | None = None,
        presenter: Presenter | None = None,
        config: Settings | None = None,
    ):
        """초기화.

        Args:
            provider: 판정 Provider (None이면 설정에 따라 생성)
            store: 분석 결과 저장소 (None이면 설정의 db_path 사용)
            presenter: 결과 표시 담당 (None이면 PagePresenter)
            config: 설정 객체 (None이면 환경 변수에서 로드)
        """
        self.config = config or get_settings()
        self.provider = provider or create_provider(self.config)
        self.store = store or create_analysis_store(self.config.db_path)

        # 백그라운드(인증 정보 보유) 쪽과 페이지 쪽 채널
        self.background_channel = MessageChannel("background")
        self.content_channel = MessageChannel("content")

        self.background = BackgroundService(
            self.provider,
            self.store,
            timeout=self.config.provider_timeout,
        )
        self.scorer = ReviewScorer(
            self.background_channel,
            max_text_length=self.config.max_text_length,
            timeout=self.config.provider_timeout + CHANNEL_TIMEOUT_MARGIN,
        )
        self.orchestrator = AnalysisOrchestrator(
            self.scorer,
            presenter=presenter or PagePresenter(
                provider_label=PROVIDER_LABELS.get(self.provider.name, self.provider.name)
            ),
            channel=self.background_channel,
            target_host_fragment=self.config.target_host_fragment,
            min_review_length=self.config.min_review_length,
        )

        self.document: PageDocument | None = None
        self.source_url: str | None = None
        self._rerun_task: asyncio.Task | None = None

    async def start(self) -> None:
        """채널 수신 시작."""
        self.background_channel.listen(self.background.handle)
        self.content_channel.listen(self.handle_message)

    async def close(self) -> None:
        """진행 중인 재분석을 기다린 뒤 자원 정리."""
        await self.wait_for_rerun()
        await self.content_channel.close()
        await self.background_channel.close()
        await self.provider.aclose()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def analyze(self, document: PageDocument) -> AnalysisRun | None:
        """문서 분석 (재분석 대상 문서로 기억)."""
        self.document = document
        return await self.orchestrator.run(document)

    async def load(self, url: str, crawler: BaseCrawler | None = None) -> PageDocument:
        """URL의 페이지를 불러와 재분석 대상 문서로 기억 (분석은 하지 않음).

        Raises:
            ValueError: 지원하지 않는 URL
            CrawlerError: 페이지 로딩 실패
        """
        crawler = crawler or get_crawler(
            url,
            timeout=self.config.crawler_timeout,
            max_retries=self.config.crawler_max_retries,
            settle_delay=self.config.page_settle_delay,
        )
        async with crawler:
            self.document = await crawler.fetch(url)
        self.source_url = url
        return self.document

    async def analyze_url(
        self,
        url: str,
        crawler: BaseCrawler | None = None,
    ) -> AnalysisRun | None:
        """URL의 페이지를 불러와 분석.

        Raises:
            ValueError: 지원하지 않는 URL
            CrawlerError: 페이지 로딩 실패
        """
        document = await self.load(url, crawler)
        return await self.orchestrator.run(document)

    async def handle_message(self, message: dict[str, Any]) -> dict[str, Any]:
        """페이지 쪽 채널 메시지 처리."""
        action = message.get("action")
        if action != RERUN_ACTION:
            return {"success": False, "error": f"Unknown action: {action}"}

        logger.info("재분석 요청 수신")
        if self.document is None:
            return {"status": "no document loaded"}
        if self.orchestrator.is_running or (
            self._rerun_task is not None and not self._rerun_task.done()
        ):
            return {"status": "analysis already running"}

        self._rerun_task = asyncio.create_task(self.orchestrator.run(self.document))
        return {"status": "analysis triggered"}

    async def request_rerun(self) -> dict[str, Any]:
        """재분석 트리거 전송 (팝업의 재시도 버튼)."""
        return await self.content_channel.send({"action": RERUN_ACTION})

    async def wait_for_rerun(self) -> AnalysisRun | None:
        """마지막 재분석이 끝날 때까지 대기."""
        if self._rerun_task is None:
            return None
        task, self._rerun_task = self._rerun_task, None
        return await task

    async def get_saved_analysis(self) -> list[dict[str, Any]] | None:
        """저장된 마지막 분석 결과 조회."""
        reply = await self.background_channel.send({"action": GET_ACTION})
        if not reply.get("success"):
            logger.error(f"분석 결과 조회 실패: {reply.get('error')}")
            return None
        return reply.get("data")

    async def trigger_rerun(
        self,
        url: str | None = None,
        crawler: BaseCrawler | None = None,
    ) -> AnalysisRun | None:
        """팝업의 재시도 버튼 처리.

        불러온 문서가 없거나 다른 URL이 주어지면 페이지를 먼저 불러온 뒤,
        rerunAnalysis 트리거를 보내고 재분석이 끝날 때까지 기다립니다.
        """
        if url and (self.document is None or url != self.source_url):
            await self.load(url, crawler)

        reply = await self.request_rerun()
        logger.info(f"재분석 트리거 응답: {reply.get('status') or reply.get('error')}")
        return await self.wait_for_rerun()
