"""Counterfactual & Attribution Explainer outputs."""

from enum import Enum

from pydantic import BaseModel

from models.records import SourceType
from models.schemas.ranking import RankingEntry


class ReasoningBasis(str, Enum):
    EXPERTISE_LED = "expertise-led"
    MIXED = "mixed"
    SIMILARITY_LED = "similarity-led"


class RankMovement(BaseModel):
    """Where a candidate would move if the similarity-led ranking were used."""
    candidate_id: str
    candidate_name: str = ""
    expertise_rank: int
    similarity_rank: int
    movement: int  # positive = rises under similarity-led ranking


class CounterfactualExplanation(BaseModel):
    mandate_id: str
    top_n: int
    expertise_top: list[RankingEntry] = []
    similarity_top: list[RankingEntry] = []
    movements: list[RankMovement] = []
    divergence_score: float = 0.0
    explanation: str = ""


class AttributionTag(BaseModel):
    source_id: str
    source_type: SourceType = SourceType.MANUAL
    label: str = ""
    reasoning_basis: ReasoningBasis
    expertise_score: float = 0.0
    similarity_score: float = 0.0
    reliability_score: float = 0.0
