"""Problem Quality - content quality scoring and near-duplicate detection."""

__version__ = "0.1.0"

from problem_quality.engine import QualityEngine
from problem_quality.errors import (
    PersistenceFailureError,
    QualityEngineError,
    RecordNotFoundError,
    RecordTimeoutError,
    StorageTimeoutError,
    StorageUnavailableError,
)

__all__ = [
    "QualityEngine",
    "QualityEngineError",
    "RecordNotFoundError",
    "RecordTimeoutError",
    "StorageUnavailableError",
    "StorageTimeoutError",
    "PersistenceFailureError",
]
