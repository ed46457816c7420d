"""Quality analysis result models"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass
class DuplicateMatch:
    """One record similar to another, with its rounded title similarity."""

    record_id: str = ""
    title: str = ""
    similarity_score: float = 0.0


@dataclass
class AnalysisDetails:
    """Raw statistics the scores were computed from."""

    title_length: int = 0
    description_length: int = 0
    word_count: int = 0
    sentence_count: int = 0
    vote_count: int = 0
    days_since_creation: int = 0
    has_category: bool = False
    pending_flag_count: int = 0


@dataclass
class QualityMetrics:
    """Computed quality result for one record at one point in time."""

    record_id: str = ""

    # sub-scores
    completeness_score: int = 0
    readability_score: int = 0
    engagement_score: int = 0
    uniqueness_score: int = 100
    spam_probability: float = 0.0

    # derived from the five values above, never set on its own
    overall_quality_score: int = 0

    potential_duplicates: List[DuplicateMatch] = field(default_factory=list)
    calculated_at: Optional[datetime] = None

    # explanation
    spam_flags: List[str] = field(default_factory=list)
    details: AnalysisDetails = field(default_factory=AnalysisDetails)
    degradations: List[str] = field(default_factory=list)

    @property
    def is_degraded(self) -> bool:
        return bool(self.degradations)

    def scores(self) -> Dict[str, float]:
        """Score fields only; used to compare two runs."""
        return {
            "completeness_score": self.completeness_score,
            "readability_score": self.readability_score,
            "engagement_score": self.engagement_score,
            "uniqueness_score": self.uniqueness_score,
            "spam_probability": self.spam_probability,
            "overall_quality_score": self.overall_quality_score,
        }


@dataclass
class DuplicateCluster:
    """Group of near-duplicate records found in one detection run."""

    cluster_id: int = 0
    members: List[DuplicateMatch] = field(default_factory=list)

    @property
    def anchor(self) -> Optional[DuplicateMatch]:
        # anchor has similarity 1.0 and the sort is stable, so it leads
        return self.members[0] if self.members else None

    @property
    def record_ids(self) -> List[str]:
        return [m.record_id for m in self.members]


@dataclass
class BatchError:
    """One failed record in a batch. record_id is None for batch-level failures."""

    record_id: Optional[str] = None
    message: str = ""


@dataclass
class BatchResult:
    results: List[QualityMetrics] = field(default_factory=list)
    errors: List[BatchError] = field(default_factory=list)

    @property
    def analyzed_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)


@dataclass
class QualityReport:
    """Summary of stored metrics for the moderation dashboard."""

    metrics_count: int = 0
    average_quality_score: float = 0.0
    quality_distribution: Dict[str, int] = field(default_factory=dict)
    low_quality_count: int = 0
    medium_quality_count: int = 0
    high_quality_count: int = 0
    average_spam_probability: float = 0.0
    duplicate_groups: int = 0
