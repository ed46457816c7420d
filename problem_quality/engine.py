"""QualityEngine - the operations exposed to the API layer"""

import threading
from datetime import datetime
from typing import Callable, List, Optional

from problem_quality.dedup.duplicate_detector import DuplicateDetector, build_corpus
from problem_quality.models.quality import BatchResult, DuplicateCluster, QualityMetrics, QualityReport
from problem_quality.models.record import RecordFilter
from problem_quality.pipeline.batch_analyzer import BatchAnalyzer
from problem_quality.quality.quality_analyzer import QualityAnalyzer, utc_now
from problem_quality.reporting.quality_report import build_report
from problem_quality.storage.base import QualityStore, call_storage
from problem_quality.utils.config_manager import ConfigManager
from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)


class QualityEngine:
    """
    Content quality scoring and duplicate detection over a QualityStore.

    Usage:
        engine = QualityEngine(store, ConfigManager())
        metrics = engine.analyze_one("record-id")
        batch = engine.analyze_batch([])
        clusters = engine.detect_duplicates()
    """

    def __init__(
        self,
        store: QualityStore,
        config: Optional[ConfigManager] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._config = config

        if config:
            self._approved_status = config.get("analysis.approved_status", "approved")
            self._batch_limit = config.get_int("analysis.batch_limit", 100)
            corpus_limit = config.get_int("analysis.comparison_corpus_limit")
            self._scan_limit = config.get_int("duplicates.scan_limit", 1000)
            max_workers = config.get_int("batch.max_workers", 1)
            record_timeout = config.get_float("batch.record_timeout_seconds")
            self._page_size = config.get_int("report.default_page_size", 20)
        else:
            self._approved_status = "approved"
            self._batch_limit = 100
            corpus_limit = None
            self._scan_limit = 1000
            max_workers = 1
            record_timeout = None
            self._page_size = 20

        self._detector = DuplicateDetector()
        self._analyzer = QualityAnalyzer(
            store,
            approved_status=self._approved_status,
            corpus_limit=corpus_limit,
            clock=clock,
            duplicate_detector=self._detector,
        )
        self._batch = BatchAnalyzer(
            store,
            self._analyzer,
            approved_status=self._approved_status,
            batch_limit=self._batch_limit,
            max_workers=max_workers or 1,
            record_timeout=record_timeout,
        )

    def analyze_one(self, record_id: str) -> QualityMetrics:
        """
        Raises:
            RecordNotFoundError, StorageUnavailableError, PersistenceFailureError
        """
        return self._analyzer.analyze(record_id)

    def analyze_batch(
        self,
        record_ids: Optional[List[str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchResult:
        """Never raises; see BatchResult.errors."""
        return self._batch.analyze_batch(record_ids, cancel_event=cancel_event)

    def detect_duplicates(self, corpus_filter: Optional[RecordFilter] = None) -> List[DuplicateCluster]:
        """
        Greedy duplicate clusters over the filtered corpus, in storage order.

        Args:
            corpus_filter: Defaults to approved records capped at the scan limit.

        Raises:
            StorageUnavailableError: the corpus could not be fetched.
        """
        if corpus_filter is None:
            corpus_filter = RecordFilter(moderation_status=self._approved_status, limit=self._scan_limit)

        records = call_storage("fetch_records", self._store.fetch_records, corpus_filter)

        if not records:
            return []
        return self._detector.cluster(build_corpus(records))

    def list_metrics(
        self,
        min_quality: float = 0,
        max_quality: float = 100,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[QualityMetrics]:
        """Stored metrics in a score range, best first, paginated from page 1."""
        limit = limit or self._page_size
        offset = (max(1, page) - 1) * limit
        return call_storage("fetch_metrics", self._store.fetch_metrics, min_quality, max_quality, offset, limit)

    def quality_report(self) -> QualityReport:
        """Summary over all stored metrics plus a fresh duplicate count."""
        rows = call_storage("fetch_metrics", self._store.fetch_metrics, 0, 100, 0, None)

        clusters = self.detect_duplicates()
        report = build_report(rows, duplicate_groups=len(clusters))
        logger.info(
            "Quality report: %d rows, avg %.2f, %d duplicate groups",
            report.metrics_count, report.average_quality_score, report.duplicate_groups,
        )
        return report
