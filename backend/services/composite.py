"""Composite Aggregator: one ranked score per candidate per mandate.

    composite = w_base * base_match + w_exp * avg_expertise
              + w_sim * capped_similarity + w_rel * avg_reliability

with capped_similarity = min(avg_similarity, avg_expertise + cap_margin), so
affinity can nudge a close call but never outrun the expertise gap.
"""

import logging
from collections.abc import Sequence

import numpy as np

from config import ScoringConfig
from models.schemas.composite import CompositeScoreSummary
from models.schemas.match_score import MatchScore
from models.schemas.source_profile import SourceProfile

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def cap_similarity(avg_similarity: float, avg_expertise: float, margin: float) -> float:
    return min(avg_similarity, avg_expertise + margin)


class CompositeAggregator:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def aggregate(
        self,
        match_score: MatchScore,
        source_profiles: Sequence[SourceProfile],
        candidate_name: str = "",
    ) -> CompositeScoreSummary:
        neutral = self.config.neutral_score
        if source_profiles:
            avg_expertise = float(np.mean([p.expertise_score for p in source_profiles]))
            avg_similarity = float(np.mean([p.similarity_score for p in source_profiles]))
            avg_reliability = float(np.mean([p.reliability_score for p in source_profiles]))
        else:
            # Missing information is not evidence of weakness
            avg_expertise = avg_similarity = avg_reliability = neutral

        capped = _clamp(cap_similarity(avg_similarity, avg_expertise, self.config.similarity_cap_margin))
        if capped < avg_similarity:
            logger.info(
                "Similarity capped for %s/%s: %.3f -> %.3f (expertise %.3f)",
                match_score.candidate_id, match_score.mandate_id,
                avg_similarity, capped, avg_expertise,
            )

        w = self.config.composite_weights
        composite = (
            w.base_match * match_score.final_score
            + w.expertise * avg_expertise
            + w.similarity * capped
            + w.reliability * avg_reliability
        )

        return CompositeScoreSummary(
            candidate_id=match_score.candidate_id,
            candidate_name=candidate_name,
            mandate_id=match_score.mandate_id,
            base_match_score=_clamp(match_score.final_score),
            avg_expertise_score=_clamp(avg_expertise),
            avg_similarity_score=_clamp(avg_similarity),
            capped_similarity_score=capped,
            avg_reliability_score=_clamp(avg_reliability),
            composite_score=_clamp(composite),
            source_count=len(source_profiles),
        )


def compute_composite(
    match_score: MatchScore,
    source_profiles: Sequence[SourceProfile],
    config: ScoringConfig | None = None,
    candidate_name: str = "",
) -> CompositeScoreSummary:
    """Combine a fit score and source profiles into a CompositeScoreSummary."""
    return CompositeAggregator(config).aggregate(match_score, source_profiles, candidate_name)
