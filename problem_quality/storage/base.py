"""Storage collaborator interface"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, TypeVar

from problem_quality.errors import QualityEngineError, StorageUnavailableError
from problem_quality.models.quality import QualityMetrics
from problem_quality.models.record import Record, RecordFilter

T = TypeVar("T")


def call_storage(action: str, fn: Callable[..., T], *args) -> T:
    """Run a collaborator call, surfacing any backend failure as StorageUnavailableError."""
    try:
        return fn(*args)
    except QualityEngineError:
        raise
    except Exception as e:
        raise StorageUnavailableError(f"{action} failed: {e}") from e


class QualityStore(ABC):
    """
    Datastore the engine reads records from and writes metrics to.

    Implementations raise StorageUnavailableError when the backend fails.
    A missing record is not a failure: fetch_record returns None.
    """

    @abstractmethod
    def fetch_record(self, record_id: str) -> Optional[Record]:
        ...

    @abstractmethod
    def fetch_records(self, record_filter: RecordFilter) -> List[Record]:
        """Matching records in storage order, at most record_filter.limit."""
        ...

    @abstractmethod
    def count_pending_flags(self, record_id: str) -> int:
        ...

    @abstractmethod
    def upsert_metrics(self, metrics: QualityMetrics, deadline: Optional[float] = None) -> None:
        """
        Insert or replace the current metrics row keyed by record_id.

        deadline is a time.monotonic() value; once it has passed, raise
        StorageTimeoutError instead of writing.
        """
        ...

    @abstractmethod
    def update_record_score(self, record_id: str, score: int, deadline: Optional[float] = None) -> None:
        """Same deadline contract as upsert_metrics."""
        ...

    @abstractmethod
    def fetch_metrics(
        self,
        min_quality: float = 0,
        max_quality: float = 100,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[QualityMetrics]:
        """Current metrics in the score range, overall quality descending."""
        ...
