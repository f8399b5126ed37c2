"""
분석 세션 및 CLI 테스트.
"""

import asyncio
import json

import pytest

from conftest import PRODUCT_URL, FakeProvider, make_review_page, scores_json
from trustlens.__main__ import main, parse_args
from trustlens.crawler import BaseCrawler
from trustlens.pipeline.models import PageDocument
from trustlens.session import TrustLensSession
from trustlens.ui.presenter import UI_BLOCK_ID
from trustlens.utils.config import Settings


class StaticCrawler(BaseCrawler):
    """브라우저 없이 고정 HTML을 돌려주는 크롤러."""

    def __init__(self, html):
        super().__init__()
        self.html = html
        self.entered = False
        self.fetches = 0

    def is_valid_url(self, url):
        return True

    async def fetch(self, url):
        self.fetches += 1
        return PageDocument.from_html(self.html, url)

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def config(tmp_path):
    return Settings(_env_file=None, db_path=tmp_path / "session.db", provider_timeout=1.0)


@pytest.fixture
def provider():
    return FakeProvider(lambda text: scores_json(0.5, 0.5, 0.5, 0.5))


class TestTrustLensSession:
    """TrustLensSession 테스트."""

    def test_analyze_and_read_back(self, config, provider, review_document):
        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                run = await session.analyze(review_document)
                saved = await session.get_saved_analysis()
                return run, saved

        run, saved = asyncio.run(_run())

        assert run.analyzed_count == 3
        assert run.average_suspicion_score == 50
        assert [item["suspicionScore"] for item in saved] == [50, 50, 50]
        assert review_document.soup.find(id=UI_BLOCK_ID) is not None
        assert provider.closed

    def test_summary_names_provider(self, config, provider, review_document):
        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                await session.analyze(review_document)

        asyncio.run(_run())

        title = review_document.soup.find(id=UI_BLOCK_ID).find("h3").get_text()
        assert title.endswith("(Powered by Gemini)")

    def test_analyze_url_with_crawler(self, config, provider, review_bodies):
        crawler = StaticCrawler(make_review_page(review_bodies))

        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                run = await session.analyze_url(PRODUCT_URL, crawler=crawler)
                return run, session.document

        run, document = asyncio.run(_run())

        assert crawler.entered
        assert run.analyzed_count == 3
        assert document.url == PRODUCT_URL

    def test_rerun_without_document(self, config, provider):
        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                return await session.request_rerun()

        assert asyncio.run(_run()) == {"status": "no document loaded"}

    def test_rerun_triggers_new_run(self, config, review_document):
        replies = {"current": scores_json(0.0, 0.0, 0.0, 0.0)}
        provider = FakeProvider(lambda text: replies["current"])

        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                first = await session.analyze(review_document)
                replies["current"] = scores_json(1, 1, 1, 1)
                reply = await session.request_rerun()
                second = await session.wait_for_rerun()
                saved = await session.get_saved_analysis()
                return first, reply, second, saved

        first, reply, second, saved = asyncio.run(_run())

        assert reply == {"status": "analysis triggered"}
        assert first.average_suspicion_score == 0
        assert second.average_suspicion_score == 100
        assert all(item["suspicionScore"] == 100 for item in saved)
        assert len(review_document.soup.select(f"#{UI_BLOCK_ID}")) == 1

    def test_rerun_while_running(self, config, review_document):
        async def _run():
            release = asyncio.Event()

            class GatedProvider(FakeProvider):
                async def judge(self, text):
                    await release.wait()
                    return await super().judge(text)

            provider = GatedProvider(lambda text: scores_json())
            async with TrustLensSession(provider=provider, config=config) as session:
                session.document = review_document
                first = await session.request_rerun()
                second = await session.request_rerun()
                release.set()
                await session.wait_for_rerun()
                return first, second

        first, second = asyncio.run(_run())

        assert first == {"status": "analysis triggered"}
        assert second == {"status": "analysis already running"}

    def test_unknown_content_action(self, config, provider):
        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                return await session.content_channel.send({"action": "openPopup"})

        reply = asyncio.run(_run())

        assert reply == {"success": False, "error": "Unknown action: openPopup"}

    def test_nothing_saved_yet(self, config, provider):
        async def _run():
            async with TrustLensSession(provider=provider, config=config) as session:
                return await session.get_saved_analysis()

        assert asyncio.run(_run()) is None

    def test_retry_loads_page_then_triggers_rerun(self, config, review_bodies):
        crawler = StaticCrawler(make_review_page(review_bodies))
        provider = FakeProvider(lambda text: scores_json(0.5, 0.5, 0.5, 0.5))
        session = TrustLensSession(provider=provider, config=config)

        async def _retry():
            async with session:
                return await session.trigger_rerun(PRODUCT_URL, crawler=crawler)

        run = asyncio.run(_retry())

        assert crawler.fetches == 1
        assert session.source_url == PRODUCT_URL
        assert run.analyzed_count == 3
        assert len(session.store.get_analysis()) == 3

    def test_retry_reuses_loaded_page_across_event_loops(self, config, review_bodies):
        """Streamlit 재실행처럼 매번 새 이벤트 루프에서 같은 세션을 사용."""
        replies = {"current": scores_json(0.0, 0.0, 0.0, 0.0)}
        provider = FakeProvider(lambda text: replies["current"])
        crawler = StaticCrawler(make_review_page(review_bodies))
        session = TrustLensSession(provider=provider, config=config)

        async def _retry():
            async with session:
                return await session.trigger_rerun(PRODUCT_URL, crawler=crawler)

        first = asyncio.run(_retry())
        replies["current"] = scores_json(1, 1, 1, 1)
        second = asyncio.run(_retry())

        assert crawler.fetches == 1
        assert first.average_suspicion_score == 0
        assert second.average_suspicion_score == 100
        assert len(session.document.soup.select(f"#{UI_BLOCK_ID}")) == 1
        assert all(item["suspicionScore"] == 100 for item in session.store.get_analysis())

    def test_retry_with_new_url_reloads(self, config, provider, review_bodies):
        crawler = StaticCrawler(make_review_page(review_bodies))
        session = TrustLensSession(provider=provider, config=config)
        other_url = "https://www.amazon.com/dp/B0TEST0002"

        async def _retry(url):
            async with session:
                return await session.trigger_rerun(url, crawler=crawler)

        asyncio.run(_retry(PRODUCT_URL))
        asyncio.run(_retry(other_url))

        assert crawler.fetches == 2
        assert session.document.url == other_url

    def test_retry_without_url_or_document(self, config, provider):
        session = TrustLensSession(provider=provider, config=config)

        async def _retry():
            async with session:
                return await session.trigger_rerun()

        assert asyncio.run(_retry()) is None


class TestCommandLine:
    """CLI 테스트."""

    def test_parse_args(self, tmp_path):
        args = parse_args([PRODUCT_URL, "--html", str(tmp_path / "p.html"), "--log-level", "DEBUG"])

        assert args.url == PRODUCT_URL
        assert args.html == tmp_path / "p.html"
        assert args.output is None
        assert args.log_level == "DEBUG"

    def test_main_with_saved_html(self, tmp_path, monkeypatch, capsys, review_bodies):
        page = tmp_path / "page.html"
        page.write_text(make_review_page(review_bodies), encoding="utf-8")
        output = tmp_path / "annotated.html"
        config = Settings(_env_file=None, db_path=tmp_path / "cli.db")
        provider = FakeProvider(lambda text: scores_json(0.8, 0.2, 0.0, 0.0))

        monkeypatch.setattr(
            "trustlens.__main__.TrustLensSession",
            lambda: TrustLensSession(provider=provider, config=config),
        )

        code = main([PRODUCT_URL, "--html", str(page), "--output", str(output)])

        assert code == 0
        printed = capsys.readouterr().out
        start = printed.index('{\n  "url"')
        report = json.loads(printed[start : printed.rindex("}") + 1])
        assert report["averageSuspicionScore"] == 38
        assert report["candidateCount"] == 3
        assert UI_BLOCK_ID in output.read_text(encoding="utf-8")

    def test_main_non_target_page(self, tmp_path, monkeypatch, capsys):
        page = tmp_path / "page.html"
        page.write_text(make_review_page(["A perfectly fine review."]), encoding="utf-8")
        config = Settings(_env_file=None, db_path=tmp_path / "cli.db")
        provider = FakeProvider(lambda text: scores_json())

        monkeypatch.setattr(
            "trustlens.__main__.TrustLensSession",
            lambda: TrustLensSession(provider=provider, config=config),
        )

        code = main(["https://www.ebay.com/itm/1", "--html", str(page)])

        assert code == 1
        assert provider.calls == []
