"""Source Profile Builder: expertise, similarity and reliability per source.

- expertise: share of the source's domain tags that evidence mandate-relevant
  skill the candidate actually has (candidate tags ∩ mandate requirements)
- similarity: share of the source's affinity tags that match the candidate's
  background (employers, institutions, networks); never looks at domain tags
- reliability: read from the ReliabilityTracker, not recomputed here

A source that carries no signal of a kind (tags = None) scores neutral on it.
"""

import logging
from collections.abc import Iterable

from config import ScoringConfig
from models.records import Candidate, Mandate, Source
from models.schemas.source_profile import SourceProfile
from services.reliability import ReliabilityTracker
from services.tags import normalize_tags

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def relevant_tags(candidate: Candidate, mandate: Mandate) -> set[str]:
    """Tags the candidate holds that the mandate requires."""
    return normalize_tags(candidate.expertise_tags()) & normalize_tags(mandate.requirement_tags())


def _overlap_share(asserted: set[str], reference: set[str]) -> float:
    if not asserted:
        return 0.0
    return len(asserted & reference) / len(asserted)


class SourceProfileBuilder:
    def __init__(
        self,
        config: ScoringConfig | None = None,
        tracker: ReliabilityTracker | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.tracker = tracker

    def build(self, source: Source, candidate: Candidate, mandate: Mandate) -> SourceProfile:
        return SourceProfile(
            source_id=source.id,
            source_type=source.source_type,
            label=source.label or source.id,
            expertise_score=self.expertise_score(source, candidate, mandate),
            similarity_score=self.similarity_score(source, candidate),
            reliability_score=self.reliability_score(source.id),
        )

    def build_all(
        self,
        sources: Iterable[Source],
        candidate: Candidate,
        mandate: Mandate,
    ) -> list[SourceProfile]:
        return [self.build(source, candidate, mandate) for source in sources]

    def expertise_score(self, source: Source, candidate: Candidate, mandate: Mandate) -> float:
        if source.domain_tags is None:
            return self.config.neutral_score
        score = _overlap_share(normalize_tags(source.domain_tags), relevant_tags(candidate, mandate))
        if source.weight is not None and source.weight > 0:
            score *= source.weight
        return _clamp(score)

    def similarity_score(self, source: Source, candidate: Candidate) -> float:
        if source.affinity_tags is None:
            return self.config.neutral_score
        return _clamp(
            _overlap_share(normalize_tags(source.affinity_tags), normalize_tags(candidate.affinity_tags()))
        )

    def reliability_score(self, source_id: str) -> float:
        if self.tracker is None:
            return self.config.prior_mean
        return _clamp(self.tracker.reliability_for(source_id))


def build_source_profile(
    source: Source,
    candidate: Candidate,
    mandate: Mandate,
    tracker: ReliabilityTracker | None = None,
    config: ScoringConfig | None = None,
) -> SourceProfile:
    """Profile one source about one candidate under one mandate."""
    return SourceProfileBuilder(config, tracker).build(source, candidate, mandate)
