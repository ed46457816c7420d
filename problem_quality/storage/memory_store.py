"""In-memory storage, for tests and demos"""

import copy
import threading
import time
from typing import Dict, Iterable, List, Optional

from problem_quality.errors import StorageTimeoutError, StorageUnavailableError
from problem_quality.models.quality import QualityMetrics
from problem_quality.models.record import Record, RecordFilter
from problem_quality.storage.base import QualityStore
from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)


def _check_deadline(deadline: Optional[float], action: str, record_id: str) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise StorageTimeoutError(f"{action} for {record_id} past its deadline")


class InMemoryQualityStore(QualityStore):
    """
    Dict-backed QualityStore.

    Records keep insertion order, which is the "storage order" the
    duplicate scan sees. Returned objects are copies.
    """

    def __init__(self, records: Optional[Iterable[Record]] = None) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, Record] = {}
        self._metrics: Dict[str, QualityMetrics] = {}
        for record in records or []:
            self.add_record(record)

    # ===== test/demo helpers =====

    def add_record(self, record: Record) -> None:
        with self._lock:
            self._records[record.id] = copy.deepcopy(record)

    def get_metrics(self, record_id: str) -> Optional[QualityMetrics]:
        with self._lock:
            metrics = self._metrics.get(record_id)
            return copy.deepcopy(metrics) if metrics else None

    # ===== QualityStore =====

    def fetch_record(self, record_id: str) -> Optional[Record]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record else None

    def fetch_records(self, record_filter: RecordFilter) -> List[Record]:
        with self._lock:
            matched = [copy.deepcopy(r) for r in self._records.values() if record_filter.matches(r)]
        if record_filter.limit is not None:
            matched = matched[:record_filter.limit]
        return matched

    def count_pending_flags(self, record_id: str) -> int:
        with self._lock:
            record = self._records.get(record_id)
            return record.pending_flag_count if record else 0

    def upsert_metrics(self, metrics: QualityMetrics, deadline: Optional[float] = None) -> None:
        with self._lock:
            _check_deadline(deadline, "upsert_metrics", metrics.record_id)
            self._metrics[metrics.record_id] = copy.deepcopy(metrics)

    def update_record_score(self, record_id: str, score: int, deadline: Optional[float] = None) -> None:
        with self._lock:
            _check_deadline(deadline, "update_record_score", record_id)
            record = self._records.get(record_id)
            if record is None:
                raise StorageUnavailableError(f"Cannot update score, record missing: {record_id}")
            record.quality_score = score

    def fetch_metrics(
        self,
        min_quality: float = 0,
        max_quality: float = 100,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[QualityMetrics]:
        with self._lock:
            rows = [
                copy.deepcopy(m) for m in self._metrics.values()
                if min_quality <= m.overall_quality_score <= max_quality
            ]
        rows.sort(key=lambda m: m.overall_quality_score, reverse=True)
        end = None if limit is None else offset + limit
        return rows[offset:end]
