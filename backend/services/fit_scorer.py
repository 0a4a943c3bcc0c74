"""Fit Scorer: weighted 5-dimension match between a candidate and a mandate.

Each dimension resolves to a tier:
    exact   (1.0) - a candidate tag equals a required tag
    partial (0.5) - a candidate tag is related to a required tag
    none    (0.0) - no overlap, or either side has no tags

Seniority compares positions on the configured band ladder instead of tags.
final_score = sum(weight_i * tier_i) / 100, weights in percent.

Pure and total: any well-formed Candidate/Mandate pair produces a score.
"""

import logging
from collections.abc import Iterable

from config import ScoringConfig
from models.records import Candidate, Mandate
from models.schemas.match_score import DimensionScores, MatchScore
from services.tags import build_adjacency, is_related, normalize_tag, normalize_tags

logger = logging.getLogger(__name__)

EXACT = 1.0
PARTIAL = 0.5
NONE = 0.0

DIMENSIONS = ("sector", "function", "asset_class", "geography", "seniority")


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class FitScorer:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self._ladder = [normalize_tag(level) for level in self.config.seniority_levels]
        self._adjacency = build_adjacency(self.config.related_tags)

    def score(self, candidate: Candidate, mandate: Mandate) -> MatchScore:
        dims = DimensionScores(
            sector=self.tag_tier(candidate.sectors, mandate.sectors),
            function=self.tag_tier(candidate.functions, mandate.functions),
            asset_class=self.tag_tier(candidate.asset_classes, mandate.asset_classes),
            geography=self.tag_tier(candidate.geographies, mandate.geographies),
            seniority=self.seniority_tier(
                candidate.seniority, mandate.seniority_min, mandate.seniority_max
            ),
        )

        weights = self.config.fit_weights.as_percentages()
        total = 0.0
        for dim in DIMENSIONS:
            contribution = weights[dim] * getattr(dims, dim)
            total += contribution
            logger.debug(
                "fit %s/%s %s: tier=%.1f weight=%.0f%% contribution=%.2f pts",
                candidate.id, mandate.id, dim, getattr(dims, dim), weights[dim], contribution,
            )

        final_score = _clamp(total / 100.0)
        logger.debug("fit %s/%s final=%.3f", candidate.id, mandate.id, final_score)
        return MatchScore(
            candidate_id=candidate.id,
            mandate_id=mandate.id,
            final_score=final_score,
            dimension_scores=dims,
        )

    def tag_tier(self, candidate_tags: Iterable[str], required_tags: Iterable[str]) -> float:
        """Classify candidate tags against required tags as exact/partial/none."""
        have = normalize_tags(candidate_tags)
        need = normalize_tags(required_tags)
        if not have or not need:
            return NONE
        if have & need:
            return EXACT
        for c in sorted(have):
            for r in sorted(need):
                if is_related(c, r, self._adjacency):
                    return PARTIAL
        return NONE

    def seniority_tier(
        self,
        candidate_level: str | None,
        min_level: str | None,
        max_level: str | None,
    ) -> float:
        """Band comparison: inside [min, max] -> 1.0, one band outside -> 0.5.

        Both bounds are required; a missing band on either side scores 0
        like an empty tag dimension.
        """
        if not candidate_level or not min_level or not max_level:
            return NONE

        cand = self._band_index(candidate_level)
        lo = self._band_index(min_level)
        hi = self._band_index(max_level)
        if cand is None or lo is None or hi is None:
            logger.warning(
                "Unknown seniority band (candidate=%r, min=%r, max=%r); scoring 0",
                candidate_level, min_level, max_level,
            )
            return NONE

        if lo > hi:
            lo, hi = hi, lo
        if lo <= cand <= hi:
            return EXACT
        if cand == lo - 1 or cand == hi + 1:
            return PARTIAL
        return NONE

    def top_matches(
        self,
        mandate: Mandate,
        candidates: Iterable[Candidate],
        limit: int = 10,
    ) -> list[MatchScore]:
        """Best fit scores for a mandate, highest first, ties in input order."""
        scores = [self.score(candidate, mandate) for candidate in candidates]
        scores.sort(key=lambda s: s.final_score, reverse=True)
        return scores[: max(0, limit)]

    def _band_index(self, level: str) -> int | None:
        try:
            return self._ladder.index(normalize_tag(level))
        except ValueError:
            return None


def compute_fit_score(
    candidate: Candidate,
    mandate: Mandate,
    config: ScoringConfig | None = None,
) -> MatchScore:
    """Score one candidate against one mandate."""
    return FitScorer(config).score(candidate, mandate)
