"""Problem Quality - demo entry point"""

from datetime import datetime, timedelta, timezone

from problem_quality.engine import QualityEngine
from problem_quality.models.record import Record
from problem_quality.storage.memory_store import InMemoryQualityStore
from problem_quality.utils.config_manager import ConfigManager
from problem_quality.utils.logger import get_logger, setup_logging


def _sample_records() -> list:
    now = datetime.now(timezone.utc)
    return [
        Record(
            id="p1",
            title="Urban Air Quality Monitoring",
            description=(
                "Many cities lack dense networks of air quality sensors. Residents cannot see "
                "how pollution changes street by street during the day. We need a low cost "
                "monitoring kit that volunteers can mount on balconies."
            ),
            vote_count=42,
            created_at=now - timedelta(days=6),
            category_assigned=True,
        ),
        Record(
            id="p2",
            title="Urban Air Quality Monitoring Network",
            description="Same idea, a sensor network for the city.",
            vote_count=3,
            created_at=now - timedelta(days=2),
        ),
        Record(
            id="p3",
            title="FREE MONEY!!! buy now",
            description="Click here $$$ limited time winner",
            created_at=now - timedelta(days=1),
            pending_flag_count=2,
        ),
        Record(
            id="p4",
            title="Community Garden Water Sharing",
            description="Gardens next to each other waste rain water. A shared tank would help.",
            vote_count=1,
            created_at=now - timedelta(days=10),
            category_assigned=True,
        ),
    ]


def main() -> None:
    setup_logging()
    logger = get_logger(__name__)
    logger.info("Problem Quality demo start")

    store = InMemoryQualityStore(_sample_records())
    engine = QualityEngine(store, ConfigManager())

    print("=" * 60)
    print(" Batch quality analysis")
    print("=" * 60)
    batch = engine.analyze_batch([])
    for m in batch.results:
        print(f"\n{m.record_id}: overall={m.overall_quality_score}")
        print(f"  completeness={m.completeness_score} readability={m.readability_score} "
              f"engagement={m.engagement_score} uniqueness={m.uniqueness_score} "
              f"spam={m.spam_probability:.2f}")
        if m.spam_flags:
            print(f"  spam rules: {', '.join(m.spam_flags)}")
        for dup in m.potential_duplicates:
            print(f"  possible duplicate: {dup.record_id} ({dup.similarity_score})")
    for err in batch.errors:
        print(f"\nerror {err.record_id}: {err.message}")

    print(f"\n{'=' * 60}")
    print(" Duplicate clusters")
    print("=" * 60)
    for cluster in engine.detect_duplicates():
        print(f"\ncluster {cluster.cluster_id}:")
        for member in cluster.members:
            print(f"  {member.record_id} {member.similarity_score:.2f} {member.title}")

    report = engine.quality_report()
    print(f"\naverage quality: {report.average_quality_score}, distribution: {report.quality_distribution}")


if __name__ == "__main__":
    main()
