"""Per-record time budget shared by a batch worker and the thread collecting its result"""

import threading
import time
from typing import Optional

from problem_quality.errors import RecordTimeoutError

_PENDING = "pending"
_WRITING = "writing"
_ABANDONED = "abandoned"


class RecordDeadline:
    """
    Time budget for one record.

    The clock starts when analysis of the record starts. Write-back may only
    begin while budget remains and nobody has given up on the record; the
    remaining writes are then bounded by the store honoring expires_at.

    Usage:
        deadline = RecordDeadline("record-id", timeout=30)
        deadline.start()
        analyzer.analyze("record-id", deadline=deadline)
    """

    def __init__(self, record_id: str, timeout: Optional[float]) -> None:
        self.record_id = record_id
        self.timeout = timeout
        self._lock = threading.Lock()
        self._state = _PENDING
        self._expires_at: Optional[float] = None

    @property
    def expires_at(self) -> Optional[float]:
        """time.monotonic() value after which stores must refuse writes."""
        return self._expires_at

    def start(self) -> None:
        if self.timeout is not None and self._expires_at is None:
            self._expires_at = time.monotonic() + self.timeout

    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self) -> None:
        """Raise RecordTimeoutError if the budget is gone or the record was abandoned."""
        with self._lock:
            if self._state == _ABANDONED or self.expired():
                raise RecordTimeoutError(self.record_id, self.timeout)

    def begin_write(self) -> None:
        """Claim the record for write-back; after this, abandon() no longer succeeds."""
        with self._lock:
            if self._state == _ABANDONED or self.expired():
                raise RecordTimeoutError(self.record_id, self.timeout)
            self._state = _WRITING

    def abandon(self) -> bool:
        """
        Give up on the record.

        Returns:
            True when no write had begun, so nothing will be saved.
            False when write-back is already under way.
        """
        with self._lock:
            if self._state == _WRITING:
                return False
            self._state = _ABANDONED
            return True
