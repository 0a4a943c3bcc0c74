"""Record lookup seam: candidates, mandates and their sources come from the caller."""

import logging
from collections.abc import Iterable
from typing import Protocol

from models.records import Candidate, Mandate, Source
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


class RecordRepository(Protocol):
    def get_candidate(self, candidate_id: str) -> Candidate: ...

    def get_mandate(self, mandate_id: str) -> Mandate: ...

    def list_sources(self, candidate_id: str) -> list[Source]: ...


class InMemoryRecordRepository:
    """Dict-backed RecordRepository, mainly for tests and the HTTP layer."""

    def __init__(
        self,
        candidates: Iterable[Candidate] = (),
        mandates: Iterable[Mandate] = (),
        sources: dict[str, list[Source]] | None = None,
    ) -> None:
        self.candidates = {c.id: c for c in candidates}
        self.mandates = {m.id: m for m in mandates}
        self.sources = dict(sources or {})

    def get_candidate(self, candidate_id: str) -> Candidate:
        try:
            return self.candidates[candidate_id]
        except KeyError:
            raise NotFoundError("candidate", candidate_id) from None

    def get_mandate(self, mandate_id: str) -> Mandate:
        try:
            return self.mandates[mandate_id]
        except KeyError:
            raise NotFoundError("mandate", mandate_id) from None

    def list_sources(self, candidate_id: str) -> list[Source]:
        if candidate_id not in self.candidates:
            raise NotFoundError("candidate", candidate_id)
        return list(self.sources.get(candidate_id, []))
