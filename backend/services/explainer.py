"""Counterfactual & Attribution Explainer.

Projects already-computed scores into something a recruiter can read:
a side-by-side of expertise-led vs similarity-led top-N with a narrative,
and a per-source tag saying which kind of signal dominates it. Nothing
here re-derives a score.
"""

import logging
from collections.abc import Sequence

from config import ScoringConfig
from models.schemas.composite import CandidateEvaluation, CompositeScoreSummary
from models.schemas.explanation import (
    AttributionTag,
    CounterfactualExplanation,
    RankMovement,
    ReasoningBasis,
)
from models.schemas.source_profile import SourceProfile
from services.divergence import DivergenceAnalyzer
from services.ranking import RankingBuilder

logger = logging.getLogger(__name__)

ROBUST_MAX_JUMP = 2


def classify_basis(expertise: float, similarity: float, mixed_margin: float = 0.1) -> ReasoningBasis:
    diff = round(similarity - expertise, 9)
    if abs(diff) <= mixed_margin:
        return ReasoningBasis.MIXED
    if diff > 0:
        return ReasoningBasis.SIMILARITY_LED
    return ReasoningBasis.EXPERTISE_LED


def _positions(n: int) -> str:
    return f"{n} position" if n == 1 else f"{n} positions"


def _join_names(parts: list[str]) -> str:
    if len(parts) <= 1:
        return "".join(parts)
    return ", ".join(parts[:-1]) + " and " + parts[-1]


def _build_narrative(
    expertise_top: list,
    similarity_top: list,
    movements: list[RankMovement],
    top_n: int,
    divergence: float,
) -> str:
    if not expertise_top:
        return "No candidates to compare."

    lead = expertise_top[0]
    challenger = similarity_top[0]
    parts = []
    if lead.candidate_id != challenger.candidate_id:
        parts.append(
            f"Expertise-led ranking keeps {lead.candidate_name or lead.candidate_id} at the top. "
            f"A similarity-led ranking would promote {challenger.candidate_name or challenger.candidate_id} "
            f"on shared background and affinity signals."
        )
    else:
        parts.append(
            f"{lead.candidate_name or lead.candidate_id} stays at the top under both rankings."
        )

    shown = {e.candidate_id for e in expertise_top} | {e.candidate_id for e in similarity_top}
    risers = sorted(
        (m for m in movements if m.movement > 0 and m.candidate_id in shown),
        key=lambda m: m.movement, reverse=True,
    )
    fallers = sorted(
        (m for m in movements if m.movement < 0 and m.candidate_id in shown),
        key=lambda m: m.movement,
    )
    if risers:
        parts.append("Would rise: " + _join_names(
            [f"{m.candidate_name or m.candidate_id} ({_positions(m.movement)})" for m in risers]
        ) + ".")
    if fallers:
        parts.append("Would fall: " + _join_names(
            [f"{m.candidate_name or m.candidate_id} ({_positions(-m.movement)})" for m in fallers]
        ) + ".")

    max_jump = max((abs(m.movement) for m in movements), default=0)
    if max_jump <= ROBUST_MAX_JUMP:
        parts.append(
            f"No candidate in the top {top_n} moves more than {ROBUST_MAX_JUMP} positions. "
            f"Divergence score is {divergence:.2f}, so the expertise-led ranking is robust here."
        )
    else:
        biggest = max(risers + fallers, key=lambda m: abs(m.movement))
        parts.append(
            f"{biggest.candidate_name or biggest.candidate_id} moves {_positions(abs(biggest.movement))}, "
            f"which suggests affinity signals may be distorting perceived fit."
        )
    return " ".join(parts)


class Explainer:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self._rankings = RankingBuilder(self.config)
        self._divergence = DivergenceAnalyzer(self.config)

    def counterfactual(
        self,
        mandate_id: str,
        pool: Sequence[CompositeScoreSummary],
        top_n: int = 5,
    ) -> CounterfactualExplanation:
        scoped = [s for s in pool if s.mandate_id == mandate_id]
        if len(scoped) != len(pool):
            logger.warning(
                "Dropped %d pool entries not scored for mandate %s",
                len(pool) - len(scoped), mandate_id,
            )

        expertise = self._rankings.expertise_ranking(scoped)
        similarity = self._rankings.similarity_ranking(scoped)
        comparison = self._divergence.compare(expertise, similarity)
        top_n = max(0, top_n)

        movements = [
            RankMovement(
                candidate_id=d.candidate_id,
                candidate_name=d.candidate_name,
                expertise_rank=d.primary_rank,
                similarity_rank=d.counterfactual_rank,
                movement=d.movement,
            )
            for d in comparison.per_candidate
        ]
        top_ids = {e.candidate_id for e in expertise.entries[:top_n]} | {
            e.candidate_id for e in similarity.entries[:top_n]
        }
        top_movements = [m for m in movements if m.candidate_id in top_ids]

        explanation = _build_narrative(
            expertise.entries[:top_n],
            similarity.entries[:top_n],
            top_movements,
            top_n,
            comparison.divergence_score,
        )
        return CounterfactualExplanation(
            mandate_id=mandate_id,
            top_n=top_n,
            expertise_top=expertise.entries[:top_n],
            similarity_top=similarity.entries[:top_n],
            movements=movements,
            divergence_score=comparison.divergence_score,
            explanation=explanation,
        )

    def attribution(
        self,
        evaluation: CandidateEvaluation | Sequence[SourceProfile],
    ) -> list[AttributionTag]:
        profiles = evaluation.source_profiles if isinstance(evaluation, CandidateEvaluation) else evaluation
        return [
            AttributionTag(
                source_id=p.source_id,
                source_type=p.source_type,
                label=p.label,
                reasoning_basis=classify_basis(
                    p.expertise_score, p.similarity_score, self.config.attribution_mixed_margin
                ),
                expertise_score=p.expertise_score,
                similarity_score=p.similarity_score,
                reliability_score=p.reliability_score,
            )
            for p in profiles
        ]


def build_counterfactual_explanation(
    mandate_id: str,
    pool: Sequence[CompositeScoreSummary],
    top_n: int = 5,
    config: ScoringConfig | None = None,
) -> CounterfactualExplanation:
    return Explainer(config).counterfactual(mandate_id, pool, top_n)


def build_source_attribution_tags(
    evaluation: CandidateEvaluation | Sequence[SourceProfile],
    config: ScoringConfig | None = None,
) -> list[AttributionTag]:
    """Tag each source expertise-led, mixed or similarity-led."""
    return Explainer(config).attribution(evaluation)
