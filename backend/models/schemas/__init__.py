"""Pydantic contracts passed between the scoring stages."""

from models.schemas.match_score import DimensionScores, MatchScore
from models.schemas.source_profile import SourceProfile
from models.schemas.composite import CandidateEvaluation, CompositeScoreSummary
from models.schemas.ranking import BiasRankingComparison, BiasRiskLevel, RankingEntry, RankingResult
from models.schemas.explanation import AttributionTag, CounterfactualExplanation, ReasoningBasis
from models.schemas.bias_watch import BiasWatchSummary, RankingDecision
from models.schemas.evaluation import MandateEvaluation

__all__ = [
    "DimensionScores",
    "MatchScore",
    "SourceProfile",
    "CandidateEvaluation",
    "CompositeScoreSummary",
    "BiasRankingComparison",
    "BiasRiskLevel",
    "RankingEntry",
    "RankingResult",
    "AttributionTag",
    "CounterfactualExplanation",
    "ReasoningBasis",
    "BiasWatchSummary",
    "RankingDecision",
    "MandateEvaluation",
]
