import json
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from services.errors import ConfigurationError

_WEIGHT_TOLERANCE = 1e-6

DEFAULT_SENIORITY_LEVELS = ("Analyst", "Associate", "VP", "Director", "MD")


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class FitWeights(BaseModel):
    """Fit Scorer dimension weights, in percent. Must total 100."""
    model_config = ConfigDict(frozen=True)

    sector: float = Field(40.0, ge=0)
    function: float = Field(25.0, ge=0)
    asset_class: float = Field(15.0, ge=0)
    geography: float = Field(10.0, ge=0)
    seniority: float = Field(10.0, ge=0)

    @model_validator(mode="after")
    def check_total(self) -> "FitWeights":
        total = sum(self.as_percentages().values())
        if abs(total - 100.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"fit dimension weights must sum to 100, got {total:g}")
        return self

    def as_percentages(self) -> dict[str, float]:
        return {
            "sector": self.sector,
            "function": self.function,
            "asset_class": self.asset_class,
            "geography": self.geography,
            "seniority": self.seniority,
        }

    def as_fractions(self) -> dict[str, float]:
        return {name: weight / 100.0 for name, weight in self.as_percentages().items()}


class CompositeWeights(BaseModel):
    """Composite Aggregator weights. Must total 1.0."""
    model_config = ConfigDict(frozen=True)

    base_match: float = Field(0.4, ge=0, le=1)
    expertise: float = Field(0.4, ge=0, le=1)
    similarity: float = Field(0.1, ge=0, le=1)
    reliability: float = Field(0.1, ge=0, le=1)

    @model_validator(mode="after")
    def check_total(self) -> "CompositeWeights":
        total = self.base_match + self.expertise + self.similarity + self.reliability
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"composite weights must sum to 1.0, got {total:g}")
        return self


class CandidateRiskThresholds(BaseModel):
    """Per-candidate bias risk from (similarity - expertise)."""
    model_config = ConfigDict(frozen=True)

    low: float = 0.05  # diff <= low -> low
    medium: float = 0.15  # diff <= medium -> medium, else high

    @model_validator(mode="after")
    def check_order(self) -> "CandidateRiskThresholds":
        if self.low > self.medium:
            raise ValueError("candidate risk threshold 'low' must not exceed 'medium'")
        return self


class DivergenceThresholds(BaseModel):
    """Mandate-level bias risk from the divergence score (inclusive lower bounds)."""
    model_config = ConfigDict(frozen=True)

    medium: float = Field(1.5, ge=0)
    high: float = Field(3.0, ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "DivergenceThresholds":
        if self.medium > self.high:
            raise ValueError("divergence threshold 'medium' must not exceed 'high'")
        return self


class ScoringConfig(BaseModel):
    """All weights and thresholds of the scoring core.

    Validated once when constructed; scoring components receive an instance
    at construction time and never read module-level state.
    """
    model_config = ConfigDict(frozen=True)

    fit_weights: FitWeights = FitWeights()
    seniority_levels: tuple[str, ...] = DEFAULT_SENIORITY_LEVELS
    related_tags: dict[str, list[str]] = {}  # adjacency used for "partial" fit tiers

    composite_weights: CompositeWeights = CompositeWeights()
    similarity_cap_margin: float = Field(0.15, ge=0, le=1)
    neutral_score: float = Field(0.5, ge=0, le=1)

    shrinkage_k: float = Field(5.0, gt=0)
    prior_mean: float = Field(0.5, ge=0, le=1)

    candidate_risk: CandidateRiskThresholds = CandidateRiskThresholds()
    divergence_risk: DivergenceThresholds = DivergenceThresholds()

    attribution_mixed_margin: float = Field(0.1, ge=0, le=1)
    similarity_heavy_margin: float = Field(0.15, ge=0, le=1)
    most_affected_limit: int = Field(5, ge=1)

    @field_validator("seniority_levels")
    @classmethod
    def check_levels(cls, levels: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(level.strip() for level in levels if level and level.strip())
        if not cleaned:
            raise ValueError("seniority_levels must contain at least one band")
        lowered = [level.lower() for level in cleaned]
        if len(set(lowered)) != len(lowered):
            raise ValueError("seniority_levels must not repeat a band")
        return cleaned


def load_scoring_config(path: str | Path) -> ScoringConfig:
    """Load and validate a ScoringConfig from a JSON or YAML file.

    Raises ConfigurationError if the file is unreadable or fails validation.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read scoring config: {e}", source=str(path)) from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw) or {}
        else:
            data = json.loads(raw) if raw.strip() else {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Malformed scoring config: {e}", source=str(path)) from e

    try:
        return ScoringConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid scoring config",
            source=str(path),
            errors=[err["msg"] for err in e.errors()],
        ) from e


class Settings(BaseSettings):
    max_workers: int = 1  # >1 fans candidate scoring out across threads
    default_top_n: int = 5
    rate_limit: str = "60/minute"
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    decision_log_size: int = Field(1000, ge=1)  # decisions kept for /bias-watch

    # Optional JSON/YAML file overriding the built-in scoring weights
    scoring_config_path: str = ""
    scoring: ScoringConfig = ScoringConfig()

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_nested_delimiter": "__", "extra": "ignore"}

    def get_scoring_config(self) -> ScoringConfig:
        if self.scoring_config_path:
            return load_scoring_config(self.scoring_config_path)
        return self.scoring


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
