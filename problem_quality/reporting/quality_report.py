"""Quality report - distribution summary of stored metrics"""

from typing import Dict, Sequence, Tuple

from problem_quality.models.quality import QualityMetrics, QualityReport
from problem_quality.scoring.metrics import round_half_up

# (label, inclusive upper bound)
DISTRIBUTION_BUCKETS: Sequence[Tuple[str, int]] = (
    ("0-20", 20),
    ("21-40", 40),
    ("41-60", 60),
    ("61-80", 80),
    ("81-100", 100),
)
LOW_QUALITY_BELOW = 40
HIGH_QUALITY_FROM = 70


def quality_distribution(rows: Sequence[QualityMetrics]) -> Dict[str, int]:
    distribution = {label: 0 for label, _ in DISTRIBUTION_BUCKETS}
    for row in rows:
        for label, upper in DISTRIBUTION_BUCKETS:
            if row.overall_quality_score <= upper:
                distribution[label] += 1
                break
        else:
            distribution[DISTRIBUTION_BUCKETS[-1][0]] += 1
    return distribution


def build_report(rows: Sequence[QualityMetrics], duplicate_groups: int = 0) -> QualityReport:
    """
    Summarize current metrics rows.

    Average spam probability only counts rows where spam was detected at all.
    """
    scores = [r.overall_quality_score for r in rows]
    spam_rows = [r.spam_probability for r in rows if r.spam_probability > 0]

    return QualityReport(
        metrics_count=len(rows),
        average_quality_score=round_half_up(sum(scores) / len(scores), 2) if scores else 0.0,
        quality_distribution=quality_distribution(rows),
        low_quality_count=sum(1 for s in scores if s < LOW_QUALITY_BELOW),
        medium_quality_count=sum(1 for s in scores if LOW_QUALITY_BELOW <= s < HIGH_QUALITY_FROM),
        high_quality_count=sum(1 for s in scores if s >= HIGH_QUALITY_FROM),
        average_spam_probability=round_half_up(sum(spam_rows) / len(spam_rows), 2) if spam_rows else 0.0,
        duplicate_groups=duplicate_groups,
    )
