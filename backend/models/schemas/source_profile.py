"""Source Profile Builder output: three independent 0-1 signals per source."""

from pydantic import BaseModel, Field

from models.records import SourceType


class SourceProfile(BaseModel):
    """Derived per (source, candidate, mandate); never persisted.

    The three scores are independent and are not normalised against each other.
    """
    source_id: str
    source_type: SourceType = SourceType.MANUAL
    label: str = ""
    expertise_score: float = Field(0.5, ge=0, le=1)
    similarity_score: float = Field(0.5, ge=0, le=1)
    reliability_score: float = Field(0.5, ge=0, le=1)

    @property
    def similarity_margin(self) -> float:
        """How far similarity runs ahead of expertise (negative when behind)."""
        return self.similarity_score - self.expertise_score
