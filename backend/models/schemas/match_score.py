"""Fit Scorer output: per-dimension tiers and the weighted final score."""

from pydantic import BaseModel, Field


class DimensionScores(BaseModel):
    """Tier per dimension: 1.0 exact, 0.5 partial, 0.0 none."""
    sector: float = 0.0
    function: float = 0.0
    asset_class: float = 0.0
    geography: float = 0.0
    seniority: float = 0.0


class MatchScore(BaseModel):
    candidate_id: str
    mandate_id: str
    final_score: float = Field(0.0, ge=0, le=1)
    dimension_scores: DimensionScores = DimensionScores()
