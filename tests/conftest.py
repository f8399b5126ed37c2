"""
Pytest configuration and fixtures.
"""

import asyncio
import json

import pytest

from trustlens.pipeline.models import PageDocument
from trustlens.providers.base import JudgmentProvider
from trustlens.storage import AnalysisStore

PRODUCT_URL = "https://www.amazon.com/dp/B0TEST0001"


def scores_json(sp=0.0, gc=0.0, ai=0.0, bp=0.0) -> str:
    """Provider 응답 형태의 JSON 문자열."""
    return json.dumps(
        {
            "superlativesPunctuationScore": sp,
            "genericContentScore": gc,
            "aiWrittenScore": ai,
            "behaviorPatternsScore": bp,
        }
    )


def make_review_page(bodies, with_container=True) -> str:
    """리뷰 본문 목록으로 상품 페이지 HTML 생성."""
    reviews = "\n".join(
        f'<div data-hook="review" id="review-{i}">'
        f'<span data-hook="review-body"><span>{body}</span></span>'
        f"</div>"
        for i, body in enumerate(bodies)
    )
    container = '<div id="rightCol"><div id="buybox">Buy now</div></div>' if with_container else ""
    return f"<html><body>{container}<div id='reviews'>{reviews}</div></body></html>"


class FakeProvider(JudgmentProvider):
    """테스트용 Provider.

    responder(text)가 응답 문자열을 돌려주거나 예외를 던집니다.
    delay(text)가 있으면 응답 전에 그만큼 대기합니다.
    """

    name = "gemini"

    def __init__(self, responder, delay=None):
        super().__init__()
        self.responder = responder
        self.delay = delay
        self.calls = []
        self.closed = False

    async def judge(self, text: str) -> str:
        self.calls.append(text)
        if self.delay is not None:
            await asyncio.sleep(self.delay(text))
        return self.responder(text)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def product_url():
    return PRODUCT_URL


@pytest.fixture
def review_bodies():
    """Sample review bodies for testing."""
    return [
        "Review number 0: the zipper broke after two weeks of daily use.",
        "Review number 1: AMAZING!!! Best product ever, perfect in every way!!!",
        "Review number 2: fits my 15 inch laptop, the strap is a bit thin.",
    ]


@pytest.fixture
def review_document(review_bodies, product_url):
    return PageDocument.from_html(make_review_page(review_bodies), product_url)


@pytest.fixture
def store(tmp_path):
    return AnalysisStore(tmp_path / "trustlens.db")
