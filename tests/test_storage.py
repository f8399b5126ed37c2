"""
분석 결과 저장소 테스트.
"""

import pytest

from trustlens.core.exceptions import StorageError
from trustlens.pipeline.models import Issue, ReviewResult
from trustlens.storage import AnalysisStore, create_analysis_store


def sample_results():
    return [
        ReviewResult(
            text="Love it!!! Best purchase ever!!!",
            issues=(Issue("Superlatives/Punctuation", 0.9, 40.0),),
            suspicion_score=62,
        ).to_dict(),
        ReviewResult(text="Handle feels loose after a month.", suspicion_score=12).to_dict(),
    ]


class TestAnalysisStore:
    """AnalysisStore 테스트."""

    def test_empty_store_returns_none(self, store):
        assert store.get_analysis() is None

    def test_save_and_load(self, store):
        assert store.save_analysis(sample_results()) == 2

        loaded = store.get_analysis()

        assert loaded == sample_results()

    def test_save_overwrites_previous(self, store):
        store.save_analysis(sample_results())
        store.save_analysis([ReviewResult(text="Only one now", suspicion_score=5).to_dict()])

        loaded = store.get_analysis()

        assert len(loaded) == 1
        assert loaded[0]["text"] == "Only one now"

    def test_persists_across_instances(self, tmp_path):
        AnalysisStore(tmp_path / "a.db").save_analysis(sample_results())

        assert len(create_analysis_store(tmp_path / "a.db").get_analysis()) == 2

    def test_invalid_data_rejected(self, store):
        store.save_analysis(sample_results())

        with pytest.raises(StorageError):
            store.save_analysis([{"text": "no score"}])

        # 실패한 저장은 기존 결과를 건드리지 않음
        assert len(store.get_analysis()) == 2

    def test_score_out_of_range_rejected(self, store):
        with pytest.raises(StorageError):
            store.save_analysis([{"text": "x", "issues": [], "suspicionScore": 140}])

    def test_clear(self, store):
        store.save_analysis(sample_results())
        store.clear()

        assert store.get_analysis() is None

    def test_clear_db_error_is_storage_error(self, store):
        store.save_analysis(sample_results())
        # DB 파일 자리에 디렉토리가 있으면 sqlite3가 열지 못함
        store.db_path.unlink()
        store.db_path.mkdir()

        with pytest.raises(StorageError) as exc_info:
            store.clear()

        assert exc_info.value.path == str(store.db_path)

    def test_round_trip_into_review_result(self, store):
        store.save_analysis(sample_results())

        results = [ReviewResult.from_dict(item) for item in store.get_analysis()]

        assert results[0].issues[0].criterion == "Superlatives/Punctuation"
        assert results[0].suspicion_score == 62
