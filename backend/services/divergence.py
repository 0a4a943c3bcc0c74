"""Divergence & Bias-Risk Analyzer: how far two rankings of one pool disagree."""

import logging

import numpy as np

from config import DivergenceThresholds, ScoringConfig
from models.schemas.ranking import (
    BiasRankingComparison,
    BiasRiskLevel,
    CandidateRankDelta,
    RankingResult,
)

logger = logging.getLogger(__name__)


def classify_divergence(
    divergence_score: float,
    thresholds: DivergenceThresholds | None = None,
) -> BiasRiskLevel:
    """low below medium, medium below high, high from there up."""
    thresholds = thresholds or DivergenceThresholds()
    if divergence_score < thresholds.medium:
        return BiasRiskLevel.LOW
    if divergence_score < thresholds.high:
        return BiasRiskLevel.MEDIUM
    return BiasRiskLevel.HIGH


class DivergenceAnalyzer:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def compare(self, primary: RankingResult, counterfactual: RankingResult) -> BiasRankingComparison:
        other_ranks = counterfactual.rank_of()
        primary_ids = set()
        deltas: list[CandidateRankDelta] = []

        for entry in primary.entries:
            primary_ids.add(entry.candidate_id)
            other = other_ranks.get(entry.candidate_id)
            if other is None:
                logger.warning(
                    "Candidate %s missing from %s ranking; skipped",
                    entry.candidate_id, counterfactual.basis.value,
                )
                continue
            deltas.append(CandidateRankDelta(
                candidate_id=entry.candidate_id,
                candidate_name=entry.candidate_name,
                primary_rank=entry.rank,
                counterfactual_rank=other,
                rank_delta=abs(entry.rank - other),
                movement=entry.rank - other,
            ))

        for entry in counterfactual.entries:
            if entry.candidate_id not in primary_ids:
                logger.warning(
                    "Candidate %s missing from %s ranking; skipped",
                    entry.candidate_id, primary.basis.value,
                )

        if deltas:
            divergence = float(np.mean([d.rank_delta for d in deltas]))
            max_diff = max(d.rank_delta for d in deltas)
        else:
            divergence, max_diff = 0.0, 0

        level = classify_divergence(divergence, self.config.divergence_risk)
        logger.info(
            "Divergence for mandate %s: %.2f (max %d, %s risk) over %d candidates",
            primary.mandate_id or counterfactual.mandate_id, divergence, max_diff, level.value, len(deltas),
        )
        return BiasRankingComparison(
            mandate_id=primary.mandate_id or counterfactual.mandate_id,
            divergence_score=divergence,
            max_diff=max_diff,
            bias_risk_level=level,
            per_candidate=deltas,
        )


def compare_rankings(
    primary: RankingResult,
    counterfactual: RankingResult,
    config: ScoringConfig | None = None,
) -> BiasRankingComparison:
    """Mean and max rank displacement between two rankings plus a risk level."""
    return DivergenceAnalyzer(config).compare(primary, counterfactual)
