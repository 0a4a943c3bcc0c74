"""Dual Ranking Builder and Divergence Analyzer outputs."""

from enum import Enum

from pydantic import BaseModel


class BiasRiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RankingBasis(str, Enum):
    EXPERTISE_LED = "expertise-led"
    SIMILARITY_LED = "similarity-led"


class RankingEntry(BaseModel):
    candidate_id: str
    candidate_name: str = ""
    rank: int  # 1-based, dense, ties keep input order
    score: float  # the value this ranking sorts by
    composite_score: float = 0.0
    expertise_score: float = 0.0
    similarity_score: float = 0.0
    bias_risk_level: BiasRiskLevel = BiasRiskLevel.LOW


class RankingResult(BaseModel):
    mandate_id: str = ""
    basis: RankingBasis
    diagnostic_only: bool = False  # True for the similarity-led counterfactual
    entries: list[RankingEntry] = []

    def rank_of(self) -> dict[str, int]:
        return {entry.candidate_id: entry.rank for entry in self.entries}


class CandidateRankDelta(BaseModel):
    candidate_id: str
    candidate_name: str = ""
    primary_rank: int  # rank in the first ranking compared
    counterfactual_rank: int  # rank in the second ranking compared
    rank_delta: int  # |primary - counterfactual|
    movement: int  # primary - counterfactual; positive = rises in the counterfactual


class BiasRankingComparison(BaseModel):
    mandate_id: str = ""
    divergence_score: float = 0.0
    max_diff: int = 0
    bias_risk_level: BiasRiskLevel = BiasRiskLevel.LOW
    per_candidate: list[CandidateRankDelta] = []
