"""Tests for the Divergence & Bias-Risk Analyzer."""

import logging

import pytest

from config import DivergenceThresholds, ScoringConfig
from models.schemas.ranking import BiasRiskLevel, RankingBasis, RankingEntry, RankingResult
from services.divergence import classify_divergence, compare_rankings


def _make_ranking(candidate_ids, basis=RankingBasis.EXPERTISE_LED, mandate_id="m1"):
    return RankingResult(
        mandate_id=mandate_id,
        basis=basis,
        diagnostic_only=basis == RankingBasis.SIMILARITY_LED,
        entries=[
            RankingEntry(candidate_id=cid, candidate_name=cid.upper(), rank=i, score=1.0 / i)
            for i, cid in enumerate(candidate_ids, start=1)
        ],
    )


class TestClassifyDivergence:
    @pytest.mark.parametrize("score,expected", [
        (0.0, BiasRiskLevel.LOW),
        (1.499999, BiasRiskLevel.LOW),
        (1.5, BiasRiskLevel.MEDIUM),
        (2.999999, BiasRiskLevel.MEDIUM),
        (3.0, BiasRiskLevel.HIGH),
        (7.25, BiasRiskLevel.HIGH),
    ])
    def test_boundaries(self, score, expected):
        assert classify_divergence(score) == expected

    def test_custom_thresholds(self):
        thresholds = DivergenceThresholds(medium=0.5, high=1.0)
        assert classify_divergence(0.75, thresholds) == BiasRiskLevel.MEDIUM


class TestCompareRankings:
    def setup_method(self):
        self.expertise = _make_ranking(["a", "b", "c", "d"])
        self.similarity = _make_ranking(["d", "c", "b", "a"], RankingBasis.SIMILARITY_LED)

    def test_mean_and_max_delta(self):
        comparison = compare_rankings(self.expertise, self.similarity)

        # deltas 3, 1, 1, 3
        assert comparison.divergence_score == pytest.approx(2.0)
        assert comparison.max_diff == 3
        assert comparison.bias_risk_level == BiasRiskLevel.MEDIUM
        assert comparison.mandate_id == "m1"

    def test_per_candidate_movement(self):
        comparison = compare_rankings(self.expertise, self.similarity)
        by_id = {d.candidate_id: d for d in comparison.per_candidate}

        assert by_id["d"].primary_rank == 4
        assert by_id["d"].counterfactual_rank == 1
        assert by_id["d"].rank_delta == 3
        assert by_id["d"].movement == 3
        assert by_id["a"].movement == -3
        assert by_id["a"].candidate_name == "A"

    def test_symmetric(self):
        forward = compare_rankings(self.expertise, self.similarity)
        backward = compare_rankings(self.similarity, self.expertise)
        assert forward.divergence_score == pytest.approx(backward.divergence_score)
        assert forward.max_diff == backward.max_diff
        assert forward.bias_risk_level == backward.bias_risk_level

    def test_identical_rankings(self):
        comparison = compare_rankings(self.expertise, _make_ranking(["a", "b", "c", "d"]))
        assert comparison.divergence_score == 0.0
        assert comparison.max_diff == 0
        assert comparison.bias_risk_level == BiasRiskLevel.LOW

    def test_empty_rankings(self):
        comparison = compare_rankings(_make_ranking([]), _make_ranking([]))
        assert comparison.divergence_score == 0.0
        assert comparison.per_candidate == []
        assert comparison.bias_risk_level == BiasRiskLevel.LOW

    def test_candidate_in_one_ranking_is_skipped(self, caplog):
        other = _make_ranking(["b", "a", "z"], RankingBasis.SIMILARITY_LED)
        with caplog.at_level(logging.WARNING, logger="services.divergence"):
            comparison = compare_rankings(_make_ranking(["a", "b", "c"]), other)

        assert {d.candidate_id for d in comparison.per_candidate} == {"a", "b"}
        assert comparison.divergence_score == pytest.approx(1.0)
        assert "c" in caplog.text
        assert "z" in caplog.text

    def test_high_risk(self):
        ids = [f"c{i}" for i in range(8)]
        comparison = compare_rankings(
            _make_ranking(ids), _make_ranking(list(reversed(ids)), RankingBasis.SIMILARITY_LED),
        )
        # deltas 7, 5, 3, 1, 1, 3, 5, 7
        assert comparison.divergence_score == pytest.approx(4.0)
        assert comparison.bias_risk_level == BiasRiskLevel.HIGH

    def test_custom_config(self):
        config = ScoringConfig(divergence_risk=DivergenceThresholds(medium=3.0, high=5.0))
        comparison = compare_rankings(self.expertise, self.similarity, config)
        assert comparison.bias_risk_level == BiasRiskLevel.LOW
