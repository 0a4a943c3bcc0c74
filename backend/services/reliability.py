"""Reliability Tracker: per-source historical reliability from hiring outcomes.

Raw accuracy (correct / total) is shrunk toward a neutral prior so that a
source needs a track record before it moves rankings:

    reliability = (correct + k * prior_mean) / (total + k)

The store is the only mutable shared state in the scoring core. Updates are
atomic read-modify-write per source under a keyed lock; different sources
never contend with each other.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Protocol

from config import ScoringConfig
from models.records import OutcomeEvent, OutcomeResult, RecommendationStrength, ReliabilityRecord
from services.errors import NotFoundError

logger = logging.getLogger(__name__)

POSITIVE_RESULTS = frozenset({
    OutcomeResult.PASS,
    OutcomeResult.OFFER,
    OutcomeResult.SELECTED,
    OutcomeResult.HIRED,
})


class ReliabilityStore(Protocol):
    """Persistence seam for ReliabilityRecords, owned by the caller."""

    @property
    def version(self) -> int: ...

    def get(self, source_id: str) -> ReliabilityRecord | None: ...

    def put(self, record: ReliabilityRecord) -> None: ...

    def all(self) -> list[ReliabilityRecord]: ...


class InMemoryReliabilityStore:
    """Dict-backed store. version increments on every write."""

    def __init__(self, records: Iterable[ReliabilityRecord] = ()) -> None:
        self._records: dict[str, ReliabilityRecord] = {r.source_id: r for r in records}
        self._version = 0
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        return self._version

    def get(self, source_id: str) -> ReliabilityRecord | None:
        return self._records.get(source_id)

    def put(self, record: ReliabilityRecord) -> None:
        with self._lock:
            self._records[record.source_id] = record
            self._version += 1

    def all(self) -> list[ReliabilityRecord]:
        return sorted(self._records.values(), key=lambda r: r.source_id)


def shrunk_reliability(correct_uses: int, total_uses: int, k: float, prior_mean: float) -> float:
    """Bayesian shrinkage of correct/total toward prior_mean with strength k."""
    return (correct_uses + k * prior_mean) / (total_uses + k)


def is_correct_outcome(event: OutcomeEvent) -> bool:
    """Whether the recommendation behind an outcome turned out right.

    A strong/neutral recommendation is right when the candidate progressed;
    a weak one is right when the candidate did not.
    """
    positive = event.result in POSITIVE_RESULTS
    if event.recommendation_strength == RecommendationStrength.WEAK:
        return not positive
    return positive


def describe_outcome(event: OutcomeEvent | None) -> str:
    """Short "Stage: Result" summary for source detail views."""
    if event is None:
        return "No outcomes recorded yet"
    return f"{event.stage.value.capitalize()}: {event.result.value.capitalize()}"


def score_cache_key(candidate_id: str, mandate_id: str, store_version: int) -> tuple[str, str, int]:
    """Cache key for composite results; only the reliability store varies between calls."""
    return (candidate_id, mandate_id, store_version)


class ReliabilityTracker:
    def __init__(
        self,
        store: ReliabilityStore | None = None,
        config: ScoringConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store if store is not None else InMemoryReliabilityStore()
        self.config = config or ScoringConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._last_events: dict[str, OutcomeEvent] = {}

    @property
    def store_version(self) -> int:
        return self.store.version

    def _lock_for(self, source_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(source_id)
            if lock is None:
                lock = self._locks[source_id] = threading.Lock()
            return lock

    def record_outcome(self, event: OutcomeEvent) -> ReliabilityRecord:
        """Apply one outcome to its source's record and return the updated record."""
        correct = is_correct_outcome(event)
        with self._lock_for(event.source_id):
            current = self.store.get(event.source_id) or ReliabilityRecord(source_id=event.source_id)
            correct_uses = current.correct_uses + (1 if correct else 0)
            total_uses = current.total_uses + 1
            updated = ReliabilityRecord(
                source_id=event.source_id,
                correct_uses=correct_uses,
                total_uses=total_uses,
                reliability=shrunk_reliability(
                    correct_uses, total_uses, self.config.shrinkage_k, self.config.prior_mean
                ),
                last_calculated_at=self._clock(),
            )
            self.store.put(updated)
            self._last_events[event.source_id] = event

        logger.info(
            "Recorded outcome %s for source %s (%s): %d/%d correct, reliability=%.3f",
            event.id, event.source_id, "correct" if correct else "incorrect",
            updated.correct_uses, updated.total_uses, updated.reliability,
        )
        return updated

    def record_outcomes(self, events: Iterable[OutcomeEvent]) -> list[ReliabilityRecord]:
        return [self.record_outcome(event) for event in events]

    def reliability_for(self, source_id: str) -> float:
        """Shrunk reliability for a source; the prior mean if it has no record."""
        record = self.store.get(source_id)
        if record is None:
            return self.config.prior_mean
        if record.total_uses == 0:
            return self.config.prior_mean
        return record.reliability

    def last_outcome(self, source_id: str) -> OutcomeEvent | None:
        return self._last_events.get(source_id)

    def get_record(self, source_id: str) -> ReliabilityRecord:
        record = self.store.get(source_id)
        if record is None:
            raise NotFoundError("source", source_id)
        return record

    def list_records(self) -> list[ReliabilityRecord]:
        return self.store.all()
