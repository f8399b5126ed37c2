"""
리뷰 채점기 테스트.
"""

import asyncio

import pytest

from conftest import FakeProvider, scores_json
from trustlens.core.exceptions import (
    ConfigFailure,
    ParseFailure,
    SchemaFailure,
    TransportFailure,
)
from trustlens.messaging.background import BackgroundService
from trustlens.messaging.channel import MessageChannel
from trustlens.pipeline.models import SubScores
from trustlens.pipeline.scorer import (
    WEIGHTS,
    ReviewScorer,
    compute_suspicion_score,
    derive_issues,
    truncate_text,
)


class TestComputeSuspicionScore:
    """가중 합 점수 계산 테스트."""

    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    def test_all_max(self):
        assert compute_suspicion_score(SubScores(1, 1, 1, 1)) == 100

    def test_all_zero(self):
        assert compute_suspicion_score(SubScores(0, 0, 0, 0)) == 0

    def test_weighted_sum(self):
        """0.40*0.8 + 0.30*0.2 = 0.38 -> 38."""
        assert compute_suspicion_score(SubScores(0.8, 0.2, 0.0, 0.0)) == 38

    def test_out_of_range_clamped(self):
        assert compute_suspicion_score(SubScores(3.0, 2.0, 1.0, 1.0)) == 100
        assert compute_suspicion_score(SubScores(-1.0, -1.0, 0.0, 0.0)) == 0

    def test_huge_finite_values_clamped(self):
        assert compute_suspicion_score(SubScores(1e308, 1e308, 1e308, 1e308)) == 100
        assert compute_suspicion_score(SubScores(-1e308, -1e308, 0.0, 0.0)) == 0

    def test_integer_in_range(self):
        for value in (0.0, 0.13, 0.27, 0.5, 0.66, 0.91, 1.0):
            score = compute_suspicion_score(SubScores(value, 1 - value, value, value / 2))
            assert isinstance(score, int)
            assert 0 <= score <= 100


class TestDeriveIssues:
    """이슈 임계값 테스트."""

    def test_superlatives_boundary(self):
        issues = derive_issues(SubScores(0.6, 0.0, 0.0, 0.0))
        assert [i.criterion for i in issues] == ["Superlatives/Punctuation"]

        assert derive_issues(SubScores(0.59, 0.0, 0.0, 0.0)) == ()

    def test_ai_written_boundary(self):
        issues = derive_issues(SubScores(0.0, 0.0, 0.5, 0.0))
        assert [i.criterion for i in issues] == ["Potential AI Content"]

        assert derive_issues(SubScores(0.0, 0.0, 0.49, 0.0)) == ()

    def test_generic_and_patterns_thresholds(self):
        assert derive_issues(SubScores(0.0, 0.59, 0.0, 0.49)) == ()
        issues = derive_issues(SubScores(0.0, 0.6, 0.0, 0.5))
        assert [i.criterion for i in issues] == ["Generic Content", "Textual Patterns"]

    def test_issue_fields(self):
        issues = derive_issues(SubScores(0.9, 0.7, 0.8, 0.6))

        assert [i.weight_percent for i in issues] == [40, 30, 15, 15]
        assert [i.raw_score for i in issues] == [0.9, 0.7, 0.8, 0.6]


class TestTruncateText:
    """텍스트 자르기 테스트."""

    def test_short_text_unchanged(self):
        assert truncate_text("short review", 50) == "short review"

    def test_exact_limit_unchanged(self):
        assert truncate_text("a" * 20, 20) == "a" * 20

    def test_long_text_truncated_with_marker(self):
        result = truncate_text("a" * 30, 20)
        assert result == "a" * 20 + "..."


# =============================================================================
# 채널을 통한 채점
# =============================================================================


def score_with(provider, text, background_timeout=1.0, scorer_timeout=2.0, store=None):
    """백그라운드 서비스와 채점기를 연결하고 리뷰 한 건 채점."""

    async def _run():
        channel = MessageChannel("background")
        channel.listen(BackgroundService(provider, store, timeout=background_timeout).handle)
        try:
            scorer = ReviewScorer(channel, max_text_length=100, timeout=scorer_timeout)
            return await scorer.score(text, index=7)
        finally:
            await channel.close()

    return asyncio.run(_run())


class TestReviewScorer:
    """ReviewScorer 테스트."""

    def test_success(self):
        provider = FakeProvider(lambda text: scores_json(0.8, 0.2, 0.0, 0.0))
        outcome = score_with(provider, "A perfectly ordinary review text.")

        assert outcome.ok
        assert outcome.index == 7
        assert outcome.result.suspicion_score == 38
        assert outcome.result.issues == (
            derive_issues(SubScores(0.8, 0.2, 0.0, 0.0))
        )

    def test_prose_wrapped_reply(self):
        reply = "Sure! " + scores_json(0.5, 0.5, 0.5, 0.5) + " Hope this helps"
        outcome = score_with(FakeProvider(lambda text: reply), "Some review text here.")

        assert outcome.ok
        assert outcome.result.suspicion_score == 50

    def test_no_braces_is_parse_failure(self):
        outcome = score_with(FakeProvider(lambda text: "I cannot rate this."), "Some review text.")

        assert not outcome.ok
        assert isinstance(outcome.failure, ParseFailure)

    def test_missing_field_is_schema_failure(self):
        reply = '{"superlativesPunctuationScore": 0.5, "genericContentScore": 0.5, "aiWrittenScore": 0.5}'
        outcome = score_with(FakeProvider(lambda text: reply), "Some review text.")

        assert outcome.result is None
        assert isinstance(outcome.failure, SchemaFailure)

    def test_provider_error_is_transport_failure(self):
        def fail(text):
            raise TransportFailure("API Error 503: unavailable", status_code=503)

        outcome = score_with(FakeProvider(fail), "Some review text.")

        assert isinstance(outcome.failure, TransportFailure)
        assert "503" in outcome.failure.message

    def test_config_failure_crosses_channel(self):
        def fail(text):
            raise ConfigFailure()

        outcome = score_with(FakeProvider(fail), "Some review text.")

        assert isinstance(outcome.failure, ConfigFailure)

    def test_provider_timeout(self):
        provider = FakeProvider(lambda text: scores_json(), delay=lambda text: 1.0)
        outcome = score_with(provider, "Some review text.", background_timeout=0.05)

        assert isinstance(outcome.failure, TransportFailure)

    def test_text_truncated_before_sending(self):
        provider = FakeProvider(lambda text: scores_json())
        long_text = "x" * 250
        outcome = score_with(provider, long_text)

        assert provider.calls == ["x" * 100 + "..."]
        # 결과에는 원문 유지
        assert outcome.result.text == long_text

    def test_channel_without_listener(self):
        async def _run():
            scorer = ReviewScorer(MessageChannel("background"), timeout=1.0)
            return await scorer.score("Some review text.")

        outcome = asyncio.run(_run())

        assert isinstance(outcome.failure, TransportFailure)

    def test_channel_reply_timeout(self):
        async def never_reply(message):
            await asyncio.sleep(10)

        async def _run():
            channel = MessageChannel("background")
            channel.listen(never_reply)
            try:
                scorer = ReviewScorer(channel, timeout=0.05)
                return await scorer.score("Some review text.")
            finally:
                await channel.close()

        outcome = asyncio.run(_run())

        assert isinstance(outcome.failure, TransportFailure)

    def test_malformed_analysis_in_reply(self):
        async def bad_reply(message):
            return {"success": True, "analysis": {"aiWrittenScore": "high"}}

        async def _run():
            channel = MessageChannel("background")
            channel.listen(bad_reply)
            try:
                return await ReviewScorer(channel, timeout=1.0).score("Some review text.")
            finally:
                await channel.close()

        outcome = asyncio.run(_run())

        assert isinstance(outcome.failure, SchemaFailure)

    @pytest.mark.parametrize("constant", ["NaN", "Infinity"])
    def test_non_finite_score_is_tagged_failure(self, constant):
        reply = (
            '{"superlativesPunctuationScore": ' + constant + ", "
            '"genericContentScore": 0.1, "aiWrittenScore": 0.1, "behaviorPatternsScore": 0.1}'
        )
        outcome = score_with(FakeProvider(lambda text: reply), "Some review text.")

        assert not outcome.ok
        assert outcome.result is None
        assert isinstance(outcome.failure, SchemaFailure)
