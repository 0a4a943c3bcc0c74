"""End-to-end evaluation of one mandate's candidate pool."""

from pydantic import BaseModel

from models.schemas.composite import CandidateEvaluation, CompositeScoreSummary
from models.schemas.explanation import AttributionTag, CounterfactualExplanation
from models.schemas.ranking import BiasRankingComparison, RankingResult


class MandateEvaluation(BaseModel):
    mandate_id: str
    candidates: list[CandidateEvaluation] = []
    expertise_ranking: RankingResult
    similarity_ranking: RankingResult
    comparison: BiasRankingComparison
    counterfactual: CounterfactualExplanation
    attribution: dict[str, list[AttributionTag]] = {}  # candidate_id -> tags
    reliability_store_version: int = 0

    @property
    def pool(self) -> list[CompositeScoreSummary]:
        return [c.summary for c in self.candidates]
