"""Mandate evaluation: wires the scoring stages together for one mandate.

Flow:
    mandate + candidates + sources per candidate
      ├─ FitScorer.score(candidate, mandate)              → MatchScore
      ├─ SourceProfileBuilder.build_all(sources, ...)     → [SourceProfile]
      │       ↓                                                 ↓
      ├─ CompositeAggregator.aggregate(match, profiles)   → CompositeScoreSummary
      │                          ↓
      ├─ RankingBuilder (expertise-led + similarity-led)  → RankingResult x2
      ├─ DivergenceAnalyzer.compare(...)                  → BiasRankingComparison
      └─ Explainer (counterfactual + attribution)         → MandateEvaluation
"""

import logging
import uuid
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from config import ScoringConfig
from models.records import Candidate, Mandate, Source
from models.schemas.bias_watch import RankingDecision
from models.schemas.composite import CandidateEvaluation
from models.schemas.evaluation import MandateEvaluation
from services.composite import CompositeAggregator
from services.divergence import DivergenceAnalyzer
from services.explainer import Explainer
from services.fit_scorer import FitScorer
from services.ranking import RankingBuilder
from services.records import RecordRepository
from services.reliability import ReliabilityTracker
from services.source_profiler import SourceProfileBuilder

logger = logging.getLogger(__name__)


def evaluate_candidate(
    candidate: Candidate,
    mandate: Mandate,
    sources: Sequence[Source],
    tracker: ReliabilityTracker | None = None,
    config: ScoringConfig | None = None,
) -> CandidateEvaluation:
    """Fit score, source profiles and composite for one candidate."""
    config = config or ScoringConfig()
    match_score = FitScorer(config).score(candidate, mandate)
    profiles = SourceProfileBuilder(config, tracker).build_all(sources, candidate, mandate)
    summary = CompositeAggregator(config).aggregate(match_score, profiles, candidate.name)
    return CandidateEvaluation(match_score=match_score, source_profiles=profiles, summary=summary)


def evaluate_mandate(
    mandate: Mandate,
    candidates: Sequence[Candidate],
    sources_by_candidate: Mapping[str, Sequence[Source]],
    *,
    tracker: ReliabilityTracker | None = None,
    config: ScoringConfig | None = None,
    top_n: int = 5,
    max_workers: int = 1,
) -> MandateEvaluation:
    """Score a candidate pool for a mandate and build both rankings with their audit."""
    config = config or ScoringConfig()
    store_version = tracker.store_version if tracker is not None else 0

    # --- Stage 1: Per-candidate scoring (independent, order preserved) ---
    def _score(candidate: Candidate) -> CandidateEvaluation:
        return evaluate_candidate(
            candidate, mandate, sources_by_candidate.get(candidate.id, []), tracker, config
        )

    if max_workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            evaluations = list(pool.map(_score, candidates))
    else:
        evaluations = [_score(candidate) for candidate in candidates]

    summaries = [e.summary for e in evaluations]
    logger.info("Scored %d candidates for mandate %s", len(summaries), mandate.id)

    # --- Stage 2: Rankings + divergence ---
    rankings = RankingBuilder(config)
    expertise_ranking = rankings.expertise_ranking(summaries)
    similarity_ranking = rankings.similarity_ranking(summaries)
    comparison = DivergenceAnalyzer(config).compare(expertise_ranking, similarity_ranking)

    # --- Stage 3: Explanation ---
    explainer = Explainer(config)
    counterfactual = explainer.counterfactual(mandate.id, summaries, top_n)
    attribution = {e.summary.candidate_id: explainer.attribution(e) for e in evaluations}

    return MandateEvaluation(
        mandate_id=mandate.id,
        candidates=evaluations,
        expertise_ranking=expertise_ranking,
        similarity_ranking=similarity_ranking,
        comparison=comparison,
        counterfactual=counterfactual,
        attribution=attribution,
        reliability_store_version=store_version,
    )


def evaluate_mandate_by_id(
    repository: RecordRepository,
    mandate_id: str,
    candidate_ids: Sequence[str],
    **kwargs,
) -> MandateEvaluation:
    """Resolve records through the repository, then evaluate. Unknown ids raise NotFoundError."""
    mandate = repository.get_mandate(mandate_id)
    candidates = [repository.get_candidate(cid) for cid in candidate_ids]
    sources = {c.id: repository.list_sources(c.id) for c in candidates}
    return evaluate_mandate(mandate, candidates, sources, **kwargs)


def to_ranking_decision(
    evaluation: MandateEvaluation,
    period_id: str | None = None,
    decision_id: str | None = None,
    recorded_at: datetime | None = None,
) -> RankingDecision:
    """Condense an evaluation into the record the weekly bias watch consumes."""
    return RankingDecision(
        id=decision_id or uuid.uuid4().hex,
        mandate_id=evaluation.mandate_id,
        period_id=period_id,
        divergence_score=evaluation.comparison.divergence_score,
        max_diff=evaluation.comparison.max_diff,
        bias_risk_level=evaluation.comparison.bias_risk_level,
        source_profiles=[p for c in evaluation.candidates for p in c.source_profiles],
        recorded_at=recorded_at or datetime.now(timezone.utc),
    )
