"""Dual Ranking Builder: the same pool sorted two ways.

- expertise-led: by composite score. This is the recommended ranking.
- similarity-led: by average similarity alone. Diagnostic counterfactual
  only, never a decision recommendation.

Both sorts are stable, so equal scores keep the pool's input order and ranks
are 1..n with no gaps.
"""

import logging
from collections.abc import Callable, Sequence

from config import CandidateRiskThresholds, ScoringConfig
from models.schemas.composite import CompositeScoreSummary
from models.schemas.ranking import BiasRiskLevel, RankingBasis, RankingEntry, RankingResult

logger = logging.getLogger(__name__)


def classify_candidate_risk(
    similarity: float,
    expertise: float,
    thresholds: CandidateRiskThresholds | None = None,
) -> BiasRiskLevel:
    """low if similarity - expertise <= low, medium if <= medium, else high."""
    thresholds = thresholds or CandidateRiskThresholds()
    # Rounded so that e.g. 0.2 - 0.15 lands on the boundary, not just above it
    diff = round(similarity - expertise, 9)
    if diff <= thresholds.low:
        return BiasRiskLevel.LOW
    if diff <= thresholds.medium:
        return BiasRiskLevel.MEDIUM
    return BiasRiskLevel.HIGH


class RankingBuilder:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def expertise_ranking(self, pool: Sequence[CompositeScoreSummary]) -> RankingResult:
        return self._rank(pool, lambda s: s.composite_score, RankingBasis.EXPERTISE_LED)

    def similarity_ranking(self, pool: Sequence[CompositeScoreSummary]) -> RankingResult:
        return self._rank(pool, lambda s: s.avg_similarity_score, RankingBasis.SIMILARITY_LED)

    def _rank(
        self,
        pool: Sequence[CompositeScoreSummary],
        key: Callable[[CompositeScoreSummary], float],
        basis: RankingBasis,
    ) -> RankingResult:
        mandate_id = pool[0].mandate_id if pool else ""
        if any(s.mandate_id != mandate_id for s in pool):
            logger.warning("Ranking pool mixes mandates; labelling result as %s", mandate_id)

        ordered = sorted(pool, key=key, reverse=True)
        entries = [
            RankingEntry(
                candidate_id=s.candidate_id,
                candidate_name=s.candidate_name,
                rank=position,
                score=key(s),
                composite_score=s.composite_score,
                expertise_score=s.avg_expertise_score,
                similarity_score=s.avg_similarity_score,
                bias_risk_level=classify_candidate_risk(
                    s.avg_similarity_score, s.avg_expertise_score, self.config.candidate_risk
                ),
            )
            for position, s in enumerate(ordered, start=1)
        ]
        return RankingResult(
            mandate_id=mandate_id,
            basis=basis,
            diagnostic_only=basis == RankingBasis.SIMILARITY_LED,
            entries=entries,
        )


def build_expertise_ranking(
    pool: Sequence[CompositeScoreSummary],
    config: ScoringConfig | None = None,
) -> RankingResult:
    return RankingBuilder(config).expertise_ranking(pool)


def build_similarity_ranking(
    pool: Sequence[CompositeScoreSummary],
    config: ScoringConfig | None = None,
) -> RankingResult:
    return RankingBuilder(config).similarity_ranking(pool)
