"""Weekly Bias-Watch inputs and summary."""

from datetime import datetime

from pydantic import BaseModel

from models.records import SourceType
from models.schemas.ranking import BiasRiskLevel
from models.schemas.source_profile import SourceProfile


class RankingDecision(BaseModel):
    """One recorded ranking run for a mandate, as fed to the weekly roll-up."""
    id: str = ""
    mandate_id: str
    period_id: str | None = None
    divergence_score: float = 0.0
    max_diff: int = 0
    bias_risk_level: BiasRiskLevel = BiasRiskLevel.LOW
    source_profiles: list[SourceProfile] = []
    recorded_at: datetime | None = None


class MandateBiasBreakdown(BaseModel):
    mandate_id: str
    name: str = ""
    high_bias_events: int = 0
    decision_count: int = 0
    avg_divergence: float = 0.0


class SourceTypeBiasBreakdown(BaseModel):
    source_type: SourceType
    source_count: int = 0
    similarity_heavy_count: int = 0
    comment: str = ""


class BiasWatchSummary(BaseModel):
    period_id: str
    decision_count: int = 0
    high_bias_event_count: int = 0
    affected_mandate_count: int = 0
    avg_divergence_score: float = 0.0
    most_affected_mandates: list[MandateBiasBreakdown] = []
    source_type_stats: list[SourceTypeBiasBreakdown] = []
    top_similarity_driver: SourceType | None = None
