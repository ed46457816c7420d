"""Quality Aggregator - per-record analysis and write-back"""

import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from problem_quality.dedup.duplicate_detector import CorpusEntry, DuplicateDetector, build_corpus
from problem_quality.errors import (
    PersistenceFailureError,
    RecordNotFoundError,
    RecordTimeoutError,
    StorageTimeoutError,
    StorageUnavailableError,
)
from problem_quality.models.quality import AnalysisDetails, QualityMetrics
from problem_quality.models.record import Record, RecordFilter
from problem_quality.quality.deadline import RecordDeadline
from problem_quality.scoring import metrics
from problem_quality.scoring.spam_detector import SpamDetector
from problem_quality.storage.base import QualityStore, call_storage
from problem_quality.text.tokenizer import tokenize
from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

# degradation tags
CORPUS_UNAVAILABLE = "comparison_corpus_unavailable"
FLAG_COUNT_UNAVAILABLE = "flag_count_unavailable"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_since(created_at: Optional[datetime], now: datetime) -> int:
    """Whole days elapsed; future or missing timestamps count as 0."""
    if created_at is None:
        return 0
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed = (now - created_at).total_seconds() / SECONDS_PER_DAY
    return max(0, math.floor(elapsed))


class QualityAnalyzer:
    """
    Computes QualityMetrics for one record and persists them.

    Usage:
        analyzer = QualityAnalyzer(store)
        metrics = analyzer.analyze("record-id")

    A pre-built comparison corpus can be passed to analyze() so a batch
    tokenizes the approved records only once.
    """

    def __init__(
        self,
        store: QualityStore,
        approved_status: str = "approved",
        corpus_limit: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
        spam_detector: Optional[SpamDetector] = None,
        duplicate_detector: Optional[DuplicateDetector] = None,
    ) -> None:
        self._store = store
        self._approved_status = approved_status
        self._corpus_limit = corpus_limit
        self._clock = clock
        self._spam_detector = spam_detector or SpamDetector()
        self._duplicate_detector = duplicate_detector or DuplicateDetector()

    def load_corpus(self, exclude_id: Optional[str] = None) -> List[CorpusEntry]:
        """
        Approved records, tokenized. Raises StorageUnavailableError.

        Without exclude_id the corpus is meant to be shared by many records,
        so one extra record is loaded: each record drops itself and keeps
        corpus_limit others, as when it is analyzed on its own.
        """
        limit = self._corpus_limit
        if limit is not None and exclude_id is None:
            limit += 1
        record_filter = RecordFilter(
            moderation_status=self._approved_status,
            limit=limit,
            exclude_ids=[exclude_id] if exclude_id else [],
        )
        records = call_storage("fetch_records", self._store.fetch_records, record_filter)
        return build_corpus(records)

    def _comparison_entries(self, corpus: List[CorpusEntry], record_id: str) -> List[CorpusEntry]:
        entries = [e for e in corpus if e.record_id != record_id]
        if self._corpus_limit is not None:
            entries = entries[:self._corpus_limit]
        return entries

    def analyze(
        self,
        record_id: str,
        corpus: Optional[List[CorpusEntry]] = None,
        persist: bool = True,
        deadline: Optional[RecordDeadline] = None,
    ) -> QualityMetrics:
        """
        Full analysis of one record.

        Args:
            record_id: Record to analyze.
            corpus: Comparison corpus; fetched from storage when None.
            persist: Write metrics and the denormalized score back.
            deadline: Time budget; writes are not started once it is spent.

        Raises:
            RecordNotFoundError: the record does not exist, nothing written.
            StorageUnavailableError: the record itself could not be fetched.
            PersistenceFailureError: computed but not saved; carries the metrics.
            RecordTimeoutError: the deadline passed before the writes completed.
        """
        if deadline is not None:
            deadline.start()

        record = call_storage("fetch_record", self._store.fetch_record, record_id)
        if record is None:
            raise RecordNotFoundError(record_id)

        result = self.compute(record, corpus)

        if persist:
            self.persist(result, deadline)
        return result

    def compute(self, record: Record, corpus: Optional[List[CorpusEntry]] = None) -> QualityMetrics:
        """Scores for an already-fetched record, no writes."""
        degradations: List[str] = []

        try:
            flag_count = call_storage("count_pending_flags", self._store.count_pending_flags, record.id)
        except StorageUnavailableError as e:
            logger.warning("Flag count unavailable for %s, assuming 0: %s", record.id, e)
            flag_count = 0
            degradations.append(FLAG_COUNT_UNAVAILABLE)

        stats = tokenize(record.title, record.description)
        now = self._clock()
        days = days_since(record.created_at, now)

        completeness = metrics.completeness_score(stats.title_length, stats.description_length, record.category_assigned)
        readability = metrics.readability_score(stats.word_count, stats.sentence_count, stats.description_length)
        engagement = metrics.engagement_score(record.vote_count, days)
        spam_probability, spam_flags = self._spam_detector.assess(record.title, record.description, flag_count)

        if corpus is None:
            try:
                corpus = self.load_corpus(exclude_id=record.id)
            except StorageUnavailableError as e:
                logger.warning("Comparison corpus unavailable for %s, uniqueness defaults to 100: %s", record.id, e)
                degradations.append(CORPUS_UNAVAILABLE)
                corpus = []

        duplicates = self._duplicate_detector.find_similar(record.title, self._comparison_entries(corpus, record.id))
        max_similarity = max((d.similarity_score for d in duplicates), default=None)
        uniqueness = metrics.uniqueness_score(max_similarity)

        overall = metrics.overall_quality_score(completeness, readability, engagement, uniqueness, spam_probability)

        logger.debug(
            "Scored %s: completeness=%d readability=%d engagement=%d uniqueness=%d spam=%.2f -> %d",
            record.id, completeness, readability, engagement, uniqueness, spam_probability, overall,
        )

        return QualityMetrics(
            record_id=record.id,
            completeness_score=completeness,
            readability_score=readability,
            engagement_score=engagement,
            uniqueness_score=uniqueness,
            spam_probability=spam_probability,
            overall_quality_score=overall,
            potential_duplicates=duplicates,
            calculated_at=now,
            spam_flags=spam_flags,
            details=AnalysisDetails(
                title_length=stats.title_length,
                description_length=stats.description_length,
                word_count=stats.word_count,
                sentence_count=stats.sentence_count,
                vote_count=record.vote_count,
                days_since_creation=days,
                has_category=record.category_assigned,
                pending_flag_count=flag_count,
            ),
            degradations=degradations,
        )

    def persist(self, result: QualityMetrics, deadline: Optional[RecordDeadline] = None) -> None:
        """Upsert the metrics row, then the record's score. Both or an error."""
        write_by = None
        if deadline is not None:
            deadline.begin_write()
            write_by = deadline.expires_at

        try:
            self._store.upsert_metrics(result, write_by)
            self._store.update_record_score(result.record_id, result.overall_quality_score, write_by)
        except StorageTimeoutError as e:
            logger.error("Write deadline passed for %s: %s", result.record_id, e)
            if deadline is not None:
                raise RecordTimeoutError(result.record_id, deadline.timeout) from e
            raise PersistenceFailureError(result.record_id, result, e) from e
        except Exception as e:
            logger.error("Failed to persist metrics for %s: %s", result.record_id, e)
            raise PersistenceFailureError(result.record_id, result, e) from e
