"""Batch Orchestrator - bulk analysis that never aborts on one record"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List, Optional, Union

from problem_quality.dedup.duplicate_detector import CorpusEntry
from problem_quality.errors import RecordTimeoutError, StorageUnavailableError
from problem_quality.models.quality import BatchError, BatchResult, QualityMetrics
from problem_quality.models.record import RecordFilter
from problem_quality.quality.deadline import RecordDeadline
from problem_quality.quality.quality_analyzer import QualityAnalyzer
from problem_quality.storage.base import QualityStore, call_storage
from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BATCH_LIMIT = 100

_SKIPPED = object()


class BatchAnalyzer:
    """
    Runs QualityAnalyzer over many records, collecting results and errors.

    - empty id list: analyzes the first `batch_limit` approved records
    - the comparison corpus is loaded and tokenized once per run
    - max_workers > 1 analyzes records on a thread pool; results keep input order
    - cancel_event stops new per-record work, in-flight records finish
    - record_timeout bounds each record in both modes; a record out of time
      is a per-record error, and writes are not started (or are refused by
      the store) once its time is up

    Usage:
        batch = BatchAnalyzer(store, analyzer)
        result = batch.analyze_batch(["id-1", "id-2"])
    """

    def __init__(
        self,
        store: QualityStore,
        analyzer: QualityAnalyzer,
        approved_status: str = "approved",
        batch_limit: int = DEFAULT_BATCH_LIMIT,
        max_workers: int = 1,
        record_timeout: Optional[float] = None,
    ) -> None:
        self._store = store
        self._analyzer = analyzer
        self._approved_status = approved_status
        self._batch_limit = batch_limit
        self._max_workers = max(1, max_workers)
        self._record_timeout = record_timeout

    def analyze_batch(
        self,
        record_ids: Optional[List[str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchResult:
        """
        Analyze every id; failures are recorded per id and never raised.

        Returns:
            BatchResult with results in input order and one error per failed id.
        """
        result = BatchResult()

        ids = list(record_ids or [])
        if not ids:
            try:
                ids = self._default_ids()
            except StorageUnavailableError as e:
                logger.error("Could not load default batch: %s", e)
                result.errors.append(BatchError(record_id=None, message=str(e)))
                return result

        logger.info("Batch analysis start: %d records, workers=%d", len(ids), self._max_workers)
        corpus = self._shared_corpus()

        if self._max_workers == 1:
            self._run_sequential(ids, corpus, cancel_event, result)
        else:
            self._run_pooled(ids, corpus, cancel_event, result)

        logger.info("Batch analysis done: %d analyzed, %d errors", result.analyzed_count, result.error_count)
        return result

    def _default_ids(self) -> List[str]:
        record_filter = RecordFilter(moderation_status=self._approved_status, limit=self._batch_limit)
        records = call_storage("fetch_records", self._store.fetch_records, record_filter)
        return [r.id for r in records]

    def _shared_corpus(self) -> Optional[List[CorpusEntry]]:
        """None makes each record fetch (and possibly degrade) on its own."""
        try:
            return self._analyzer.load_corpus()
        except StorageUnavailableError as e:
            logger.warning("Shared comparison corpus unavailable, falling back per record: %s", e)
            return None

    def _deadline(self, record_id: str) -> Optional[RecordDeadline]:
        if self._record_timeout is None:
            return None
        return RecordDeadline(record_id, self._record_timeout)

    def _analyze_one(
        self,
        record_id: str,
        corpus: Optional[List[CorpusEntry]],
        cancel_event: Optional[threading.Event],
        deadline: Optional[RecordDeadline],
    ) -> Union[QualityMetrics, object]:
        if cancel_event is not None and cancel_event.is_set():
            return _SKIPPED
        if deadline is not None:
            deadline.start()
            deadline.check()
        return self._analyzer.analyze(record_id, corpus=corpus, deadline=deadline)

    def _run_sequential(
        self,
        ids: List[str],
        corpus: Optional[List[CorpusEntry]],
        cancel_event: Optional[threading.Event],
        result: BatchResult,
    ) -> None:
        for index, record_id in enumerate(ids):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Batch cancelled, %d records not started", len(ids) - index)
                break
            try:
                result.results.append(
                    self._analyzer.analyze(record_id, corpus=corpus, deadline=self._deadline(record_id))
                )
            except Exception as e:
                self._record_error(result, record_id, e)

    def _run_pooled(
        self,
        ids: List[str],
        corpus: Optional[List[CorpusEntry]],
        cancel_event: Optional[threading.Event],
        result: BatchResult,
    ) -> None:
        executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="quality-batch")
        try:
            deadlines = [self._deadline(record_id) for record_id in ids]
            futures: List[Future] = [
                executor.submit(self._analyze_one, record_id, corpus, cancel_event, deadline)
                for record_id, deadline in zip(ids, deadlines)
            ]
            # collected in the calling thread only, so no lock on result
            for record_id, future, deadline in zip(ids, futures, deadlines):
                try:
                    outcome = self._await(record_id, future, deadline)
                except Exception as e:
                    self._record_error(result, record_id, e)
                    continue
                if outcome is not _SKIPPED:
                    result.results.append(outcome)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _await(
        self,
        record_id: str,
        future: Future,
        deadline: Optional[RecordDeadline],
    ) -> Union[QualityMetrics, object]:
        """
        Wait at most record_timeout for one record.

        A record still reading or scoring is abandoned and never writes.
        A record already writing is waited out: its writes stop at the
        record's own deadline, so the reported outcome matches storage.
        """
        if deadline is None:
            return future.result()
        try:
            return future.result(timeout=self._record_timeout)
        except FutureTimeoutError:
            if future.done():
                raise
            if deadline.abandon():
                future.cancel()
                raise RecordTimeoutError(record_id, self._record_timeout)
        return future.result()

    @staticmethod
    def _record_error(result: BatchResult, record_id: str, error: Exception) -> None:
        message = str(error) or type(error).__name__
        logger.error("Batch record failed: %s - %s", record_id, message)
        result.errors.append(BatchError(record_id=record_id, message=message))
