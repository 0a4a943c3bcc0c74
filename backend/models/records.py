"""Input records supplied by the record-management layer.

Records are frozen for the duration of a scoring call. Malformed tag data is
coerced rather than rejected: a bare string becomes a one-element list,
non-string entries and blanks are dropped, and None becomes an empty list.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _coerce_tag_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _coerce_optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class SourceType(str, Enum):
    CV = "cv"
    MANDATE_NOTE = "mandate_note"
    VOICE_NOTE = "voice_note"
    MARKET_DATA = "market_data"
    REFERRAL = "referral"
    MANUAL = "manual"


class RecommendationStrength(str, Enum):
    STRONG = "strong"
    NEUTRAL = "neutral"
    WEAK = "weak"


class OutcomeStage(str, Enum):
    ROUND_1 = "round 1"
    ROUND_2 = "round 2"
    FINAL = "final"
    OFFER = "offer"
    SELECTED = "selected"
    REJECTED = "rejected"


class OutcomeResult(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    OFFER = "offer"
    SELECTED = "selected"
    HIRED = "hired"
    REJECTED = "rejected"


class Candidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    sectors: list[str] = []
    functions: list[str] = []
    asset_classes: list[str] = []
    geographies: list[str] = []
    seniority: str | None = None  # band name from the seniority ladder
    # Affinity background: only ever read by the similarity signal
    employers: list[str] = []
    institutions: list[str] = []
    networks: list[str] = []

    @field_validator(
        "sectors", "functions", "asset_classes", "geographies",
        "employers", "institutions", "networks",
        mode="before",
    )
    @classmethod
    def coerce_tags(cls, value: object) -> list[str]:
        return _coerce_tag_list(value)

    @field_validator("seniority", mode="before")
    @classmethod
    def coerce_seniority(cls, value: object) -> str | None:
        return _coerce_optional_str(value)

    def expertise_tags(self) -> list[str]:
        return [*self.sectors, *self.functions, *self.asset_classes, *self.geographies]

    def affinity_tags(self) -> list[str]:
        return [*self.employers, *self.institutions, *self.networks]


class Mandate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    sectors: list[str] = []
    functions: list[str] = []
    asset_classes: list[str] = []
    geographies: list[str] = []
    seniority_min: str | None = None
    seniority_max: str | None = None

    @field_validator("sectors", "functions", "asset_classes", "geographies", mode="before")
    @classmethod
    def coerce_tags(cls, value: object) -> list[str]:
        return _coerce_tag_list(value)

    @field_validator("seniority_min", "seniority_max", mode="before")
    @classmethod
    def coerce_seniority(cls, value: object) -> str | None:
        return _coerce_optional_str(value)

    def requirement_tags(self) -> list[str]:
        return [*self.sectors, *self.functions, *self.asset_classes, *self.geographies]


class Source(BaseModel):
    """An origin of information about a candidate.

    domain_tags / affinity_tags of None mean the source carries no such
    signal (scored neutral); an empty list means it asserts nothing (scored 0).
    """
    model_config = ConfigDict(frozen=True)

    id: str
    source_type: SourceType = SourceType.MANUAL
    label: str = ""
    domain_tags: list[str] | None = None
    affinity_tags: list[str] | None = None
    weight: float | None = Field(None, ge=0)  # manual multiplier on expertise

    @field_validator("domain_tags", "affinity_tags", mode="before")
    @classmethod
    def coerce_optional_tags(cls, value: object) -> list[str] | None:
        if value is None:
            return None
        return _coerce_tag_list(value)


class OutcomeEvent(BaseModel):
    """A hiring outcome attributed to a recommendation that cited one source."""
    model_config = ConfigDict(frozen=True)

    id: str
    candidate_id: str
    mandate_id: str
    source_id: str
    stage: OutcomeStage
    result: OutcomeResult
    recommendation_strength: RecommendationStrength = RecommendationStrength.STRONG
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    notes: str | None = None


class ReliabilityRecord(BaseModel):
    source_id: str
    correct_uses: int = Field(0, ge=0)
    total_uses: int = Field(0, ge=0)
    reliability: float = Field(0.5, ge=0, le=1)
    last_calculated_at: datetime | None = None

    @model_validator(mode="after")
    def check_counts(self) -> "ReliabilityRecord":
        if self.correct_uses > self.total_uses:
            raise ValueError("correct_uses cannot exceed total_uses")
        return self

    @property
    def raw_accuracy(self) -> float | None:
        if self.total_uses == 0:
            return None
        return self.correct_uses / self.total_uses
