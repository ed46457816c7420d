"""Shared test fixtures"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from problem_quality.models.record import Record
from problem_quality.storage.memory_store import InMemoryQualityStore
from problem_quality.utils.config_manager import ConfigManager


# fixed clock for deterministic engagement scores
REFERENCE_TIME = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)

URBAN_DESCRIPTION = (
    "Many cities lack dense networks of air quality sensors. Residents cannot see "
    "how pollution changes street by street during the day. We need a low cost "
    "monitoring kit that volunteers can mount on balconies. The data should feed "
    "an open map that anyone can query and download for research."
)


def _make_record(
    id: str = "r1",
    title: str = "Urban Air Quality Monitoring",
    description: str = URBAN_DESCRIPTION,
    vote_count: int = 0,
    days_old: int = 0,
    **kwargs,
) -> Record:
    return Record(
        id=id,
        title=title,
        description=description,
        vote_count=vote_count,
        created_at=REFERENCE_TIME - timedelta(days=days_old),
        **kwargs,
    )


@pytest.fixture
def reference_time() -> datetime:
    return REFERENCE_TIME


@pytest.fixture
def clock():
    return lambda: REFERENCE_TIME


@pytest.fixture
def store() -> InMemoryQualityStore:
    """Small approved corpus with one near-duplicate pair."""
    return InMemoryQualityStore([
        _make_record(id="r1", category_assigned=True, vote_count=10, days_old=2),
        _make_record(id="r2", title="Urban Air Quality Monitoring Network", days_old=5),
        _make_record(id="r3", title="Community Garden Water Sharing", description="Gardens waste water. Share it."),
        _make_record(id="r4", title="Pending Submission About Parking", moderation_status="pending"),
    ])


@pytest.fixture
def config_dir() -> str:
    """Bundled config directory."""
    return str(Path(__file__).parent.parent / "config")


@pytest.fixture
def config_manager(config_dir: str) -> ConfigManager:
    return ConfigManager(config_dir=config_dir)


@pytest.fixture
def tmp_config_dir():
    """Temporary config directory for unit tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_data = {
            "analysis": {
                "approved_status": "approved",
                "batch_limit": 2,
                "comparison_corpus_limit": None,
            },
            "duplicates": {"scan_limit": 50},
            "batch": {"max_workers": 1, "record_timeout_seconds": None},
        }
        with open(os.path.join(tmpdir, "config.yaml"), "w", encoding="utf-8") as f:
            yaml.dump(config_data, f)

        yield tmpdir
