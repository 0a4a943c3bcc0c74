"""Composite Aggregator output: the unit both rankings are built from."""

from pydantic import BaseModel, Field

from models.schemas.match_score import MatchScore
from models.schemas.source_profile import SourceProfile


class CompositeScoreSummary(BaseModel):
    candidate_id: str
    candidate_name: str = ""
    mandate_id: str
    base_match_score: float = Field(0.0, ge=0, le=1)
    avg_expertise_score: float = Field(0.5, ge=0, le=1)
    avg_similarity_score: float = Field(0.5, ge=0, le=1)
    capped_similarity_score: float = Field(0.5, ge=0, le=1)  # value used in the composite
    avg_reliability_score: float = Field(0.5, ge=0, le=1)
    composite_score: float = Field(0.0, ge=0, le=1)
    source_count: int = 0

    @property
    def similarity_capped(self) -> bool:
        return self.capped_similarity_score < self.avg_similarity_score


class CandidateEvaluation(BaseModel):
    """Everything computed for one candidate under one mandate."""
    match_score: MatchScore
    source_profiles: list[SourceProfile] = []
    summary: CompositeScoreSummary
