from pydantic import BaseModel, Field

from models.records import Candidate, Mandate, OutcomeEvent, Source
from models.schemas.bias_watch import RankingDecision


class FitScoreRequest(BaseModel):
    candidate: Candidate
    mandate: Mandate


class EvaluateMandateRequest(BaseModel):
    mandate: Mandate
    candidates: list[Candidate] = Field(..., max_length=500, description="Candidate pool for the mandate")
    sources: dict[str, list[Source]] = Field({}, description="Sources keyed by candidate id")
    top_n: int | None = Field(None, ge=0, le=50, description="Counterfactual top-N; server default when omitted")
    period_id: str | None = Field(None, description="When set, the run is logged for that week's bias watch")


class OutcomeRequest(BaseModel):
    outcomes: list[OutcomeEvent] = Field(..., min_length=1, max_length=1000)


class BiasWatchRequest(BaseModel):
    period_id: str
    # Omitted: use the decisions logged by /mandates/evaluate
    decisions: list[RankingDecision] | None = None
    mandate_names: dict[str, str] = {}
