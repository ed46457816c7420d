"""BatchAnalyzer tests"""

import threading
import time

import pytest

from problem_quality.errors import StorageUnavailableError
from problem_quality.pipeline.batch_analyzer import BatchAnalyzer
from problem_quality.quality.quality_analyzer import CORPUS_UNAVAILABLE, QualityAnalyzer
from problem_quality.storage.memory_store import InMemoryQualityStore


# ─── Stores ─────────────────────────────────────────────

class CorpusFailingStore(InMemoryQualityStore):
    def fetch_records(self, record_filter):
        raise StorageUnavailableError("corpus backend down")


class MetricsWriteFailingStore(InMemoryQualityStore):
    def upsert_metrics(self, metrics, deadline=None):
        raise StorageUnavailableError("write rejected")


class FlakyRecordStore(InMemoryQualityStore):
    """fetch_record blows up for one id."""

    def fetch_record(self, record_id):
        if record_id == "r2":
            raise RuntimeError("connection reset")
        return super().fetch_record(record_id)


class SlowRecordStore(InMemoryQualityStore):
    def fetch_record(self, record_id):
        if record_id == "r2":
            time.sleep(0.5)
        return super().fetch_record(record_id)


class SlowWriteStore(InMemoryQualityStore):
    """The r2 metrics write only reaches storage after a pause."""

    def upsert_metrics(self, metrics, deadline=None):
        if metrics.record_id == "r2":
            time.sleep(0.5)
        super().upsert_metrics(metrics, deadline)


def _assert_nothing_saved(store, record_id):
    assert store.get_metrics(record_id) is None
    assert store.fetch_record(record_id).quality_score is None


def _batch(store, clock, **kwargs) -> BatchAnalyzer:
    return BatchAnalyzer(store, QualityAnalyzer(store, clock=clock), **kwargs)


@pytest.fixture
def records(store):
    return [store.fetch_record(rid) for rid in ("r1", "r2", "r3", "r4")]


# ═══════════════════════════════════════════════════════════
# Sequential
# ═══════════════════════════════════════════════════════════

class TestAnalyzeBatch:

    def test_valid_and_missing(self, store, clock):
        result = _batch(store, clock).analyze_batch(["r1", "missing"])
        assert [m.record_id for m in result.results] == ["r1"]
        assert len(result.errors) == 1
        assert result.errors[0].record_id == "missing"
        assert "missing" in result.errors[0].message
        assert result.analyzed_count == 1
        assert result.error_count == 1

    def test_keeps_input_order(self, store, clock):
        result = _batch(store, clock).analyze_batch(["r3", "r1", "r4"])
        assert [m.record_id for m in result.results] == ["r3", "r1", "r4"]

    def test_empty_uses_approved_records(self, store, clock):
        result = _batch(store, clock).analyze_batch([])
        assert [m.record_id for m in result.results] == ["r1", "r2", "r3"]
        assert result.errors == []

    def test_none_uses_approved_records(self, store, clock):
        result = _batch(store, clock).analyze_batch()
        assert result.analyzed_count == 3

    def test_default_set_capped(self, store, clock):
        result = _batch(store, clock, batch_limit=2).analyze_batch([])
        assert [m.record_id for m in result.results] == ["r1", "r2"]

    def test_default_set_unavailable(self, clock, records):
        result = _batch(CorpusFailingStore(records), clock).analyze_batch([])
        assert result.results == []
        assert len(result.errors) == 1
        assert result.errors[0].record_id is None

    def test_corpus_unavailable_degrades_each_record(self, clock, records):
        result = _batch(CorpusFailingStore(records), clock).analyze_batch(["r1", "r2"])
        assert result.errors == []
        assert all(m.degradations == [CORPUS_UNAVAILABLE] for m in result.results)
        assert all(m.uniqueness_score == 100 for m in result.results)

    def test_persistence_failures_are_batch_errors(self, clock, records):
        result = _batch(MetricsWriteFailingStore(records), clock).analyze_batch(["r1", "r3"])
        assert result.results == []
        assert [e.record_id for e in result.errors] == ["r1", "r3"]
        assert "not saved" in result.errors[0].message

    def test_unexpected_error_recorded(self, clock, records):
        result = _batch(FlakyRecordStore(records), clock).analyze_batch(["r1", "r2", "r3"])
        assert [m.record_id for m in result.results] == ["r1", "r3"]
        assert result.errors[0].record_id == "r2"
        assert "connection reset" in result.errors[0].message

    def test_matches_single_analysis(self, store, clock):
        single = QualityAnalyzer(store, clock=clock).analyze("r1")
        batch = _batch(store, clock).analyze_batch(["r1"])
        assert batch.results[0].scores() == single.scores()

    def test_corpus_limit_matches_single_analysis(self, store, clock):
        analyzer = QualityAnalyzer(store, clock=clock, corpus_limit=1)
        single = analyzer.analyze("r1", persist=False)
        batch = BatchAnalyzer(store, analyzer).analyze_batch(["r1"])
        assert [d.record_id for d in batch.results[0].potential_duplicates] == ["r2"]
        assert batch.results[0].scores() == single.scores()

    def test_slow_write_times_out_unsaved(self, clock, records):
        store = SlowWriteStore(records)
        result = _batch(store, clock, record_timeout=0.2).analyze_batch(["r1", "r2"])
        assert [m.record_id for m in result.results] == ["r1"]
        assert [e.record_id for e in result.errors] == ["r2"]
        assert "timed out" in result.errors[0].message
        assert store.get_metrics("r1") is not None
        _assert_nothing_saved(store, "r2")

    def test_slow_read_times_out_unsaved(self, clock, records):
        store = SlowRecordStore(records)
        result = _batch(store, clock, record_timeout=0.2).analyze_batch(["r1", "r2"])
        assert [e.record_id for e in result.errors] == ["r2"]
        _assert_nothing_saved(store, "r2")

    def test_generous_timeout(self, store, clock):
        result = _batch(store, clock, record_timeout=30).analyze_batch(["r1", "r2"])
        assert result.errors == []
        assert result.analyzed_count == 2

    def test_cancelled_before_start(self, store, clock):
        cancel = threading.Event()
        cancel.set()
        result = _batch(store, clock).analyze_batch(["r1", "r2"], cancel_event=cancel)
        assert result.results == []
        assert result.errors == []


# ═══════════════════════════════════════════════════════════
# Thread pool
# ═══════════════════════════════════════════════════════════

class TestPooledBatch:

    def test_same_results_as_sequential(self, store, clock):
        ids = ["r1", "r2", "missing", "r3", "r4"]
        sequential = _batch(store, clock).analyze_batch(ids)
        pooled = _batch(store, clock, max_workers=4).analyze_batch(ids)

        assert [m.scores() for m in pooled.results] == [m.scores() for m in sequential.results]
        assert [m.record_id for m in pooled.results] == ["r1", "r2", "r3", "r4"]
        assert [e.record_id for e in pooled.errors] == ["missing"]

    def test_cancelled_before_start(self, store, clock):
        cancel = threading.Event()
        cancel.set()
        result = _batch(store, clock, max_workers=2).analyze_batch(["r1", "r2"], cancel_event=cancel)
        assert result.results == []
        assert result.errors == []

    def test_record_timeout(self, clock, records):
        store = SlowRecordStore(records)
        result = _batch(store, clock, max_workers=2, record_timeout=0.2).analyze_batch(["r1", "r2"])
        assert [e.record_id for e in result.errors] == ["r2"]
        assert "timed out" in result.errors[0].message
        # the abandoned worker finishes its read later but must not write
        time.sleep(0.8)
        _assert_nothing_saved(store, "r2")

    def test_slow_write_times_out_unsaved(self, clock, records):
        store = SlowWriteStore(records)
        result = _batch(store, clock, max_workers=2, record_timeout=0.2).analyze_batch(["r1", "r2"])
        assert [m.record_id for m in result.results] == ["r1"]
        assert [e.record_id for e in result.errors] == ["r2"]
        assert "timed out" in result.errors[0].message
        _assert_nothing_saved(store, "r2")
