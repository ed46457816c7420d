"""Error types raised by the quality engine"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from problem_quality.models.quality import QualityMetrics


class QualityEngineError(Exception):
    """Base class for all engine errors."""


class RecordNotFoundError(QualityEngineError):
    """The requested record does not exist. Nothing was computed or written."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record not found: {record_id}")
        self.record_id = record_id


class StorageUnavailableError(QualityEngineError):
    """A storage collaborator call failed."""


class PersistenceFailureError(QualityEngineError):
    """
    Scores were computed but writing them back failed.

    The computed metrics are attached so the caller still has them.
    """

    def __init__(
        self,
        record_id: str,
        metrics: "QualityMetrics",
        cause: Optional[BaseException] = None,
    ) -> None:
        message = f"Metrics for {record_id} were computed but not saved"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.record_id = record_id
        self.metrics = metrics


class StorageTimeoutError(StorageUnavailableError):
    """A storage write was refused because its deadline had passed. Nothing was written."""


class RecordTimeoutError(QualityEngineError):
    """A record ran out of its time budget before its scores were saved."""

    def __init__(self, record_id: str, timeout: Optional[float]) -> None:
        super().__init__(f"Analysis of {record_id} timed out after {timeout}s")
        self.record_id = record_id
        self.timeout = timeout
