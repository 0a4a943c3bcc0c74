"""Tests for scoring configuration validation and loading."""

import json

import pytest
from pydantic import ValidationError

from config import (
    CompositeWeights,
    FitWeights,
    ScoringConfig,
    Settings,
    load_scoring_config,
)
from services.errors import ConfigurationError


class TestScoringConfigDefaults:
    def test_fit_weights_sum_to_100(self):
        assert sum(FitWeights().as_percentages().values()) == pytest.approx(100.0)
        assert sum(FitWeights().as_fractions().values()) == pytest.approx(1.0)

    def test_composite_weights_sum_to_one(self):
        w = CompositeWeights()
        assert w.base_match + w.expertise + w.similarity + w.reliability == pytest.approx(1.0)

    def test_defaults(self):
        config = ScoringConfig()
        assert config.seniority_levels == ("Analyst", "Associate", "VP", "Director", "MD")
        assert config.similarity_cap_margin == 0.15
        assert config.shrinkage_k == 5
        assert config.divergence_risk.medium == 1.5
        assert config.divergence_risk.high == 3.0

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ScoringConfig().shrinkage_k = 10


class TestScoringConfigValidation:
    def test_fit_weights_must_total_100(self):
        with pytest.raises(ValidationError, match="sum to 100"):
            ScoringConfig.model_validate({"fit_weights": {"sector": 50}})

    def test_composite_weights_must_total_one(self):
        with pytest.raises(ValidationError, match="sum to 1.0"):
            ScoringConfig.model_validate({"composite_weights": {"similarity": 0.2}})

    def test_candidate_thresholds_ordered(self):
        with pytest.raises(ValidationError):
            ScoringConfig.model_validate({"candidate_risk": {"low": 0.2, "medium": 0.1}})

    def test_divergence_thresholds_ordered(self):
        with pytest.raises(ValidationError):
            ScoringConfig.model_validate({"divergence_risk": {"medium": 4.0, "high": 3.0}})

    def test_shrinkage_strength_positive(self):
        with pytest.raises(ValidationError):
            ScoringConfig(shrinkage_k=0)

    def test_seniority_levels_unique(self):
        with pytest.raises(ValidationError):
            ScoringConfig(seniority_levels=("VP", "vp"))

    def test_seniority_levels_stripped(self):
        config = ScoringConfig(seniority_levels=(" Junior ", "Senior", ""))
        assert config.seniority_levels == ("Junior", "Senior")


class TestLoadScoringConfig:
    def test_yaml(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text(
            "shrinkage_k: 10\n"
            "related_tags:\n"
            "  Private Equity: [Infrastructure Equity]\n"
            "fit_weights:\n"
            "  sector: 30\n"
            "  function: 35\n"
        )
        config = load_scoring_config(path)
        assert config.shrinkage_k == 10
        assert config.fit_weights.function == 35
        assert config.related_tags == {"Private Equity": ["Infrastructure Equity"]}

    def test_json(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({"prior_mean": 0.6}))
        assert load_scoring_config(path).prior_mean == 0.6

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "scoring.yml"
        path.write_text("")
        assert load_scoring_config(path) == ScoringConfig()

    def test_invalid_weights_raise_configuration_error(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("fit_weights:\n  sector: 90\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_scoring_config(path)
        assert exc_info.value.error_code == "CONFIGURATION_ERROR"
        assert exc_info.value.details["errors"]

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Malformed"):
            load_scoring_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_scoring_config(tmp_path / "nope.yaml")


class TestSettings:
    def test_scoring_config_from_path(self, tmp_path):
        path = tmp_path / "scoring.yaml"
        path.write_text("prior_mean: 0.3\n")
        settings = Settings(scoring_config_path=str(path))
        assert settings.get_scoring_config().prior_mean == 0.3

    def test_inline_scoring_default(self):
        assert Settings().get_scoring_config() == ScoringConfig()

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_WORKERS", "4")
        monkeypatch.setenv("RATE_LIMIT", "5/second")
        settings = Settings()
        assert settings.max_workers == 4
        assert settings.rate_limit == "5/second"

    def test_decision_log_size_from_env(self, monkeypatch):
        monkeypatch.setenv("DECISION_LOG_SIZE", "250")
        assert Settings().decision_log_size == 250
        assert Settings(decision_log_size=1).decision_log_size == 1
        with pytest.raises(ValidationError):
            Settings(decision_log_size=0)
