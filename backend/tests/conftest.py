"""Shared test configuration, fixtures and pytest markers."""

import pytest

from config import ScoringConfig
from models.records import Candidate, Mandate, Source, SourceType
from services.reliability import ReliabilityTracker


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "concurrency: exercises the thread-pool / keyed-lock paths"
    )


@pytest.fixture
def scoring_config():
    return ScoringConfig()


@pytest.fixture
def tracker(scoring_config):
    return ReliabilityTracker(config=scoring_config)


@pytest.fixture
def infra_mandate():
    return Mandate(
        id="m-infra",
        name="Infrastructure ECM VP",
        sectors=["Infrastructure"],
        functions=["ECM"],
        asset_classes=["Equity"],
        geographies=["UK"],
        seniority_min="Associate",
        seniority_max="Director",
    )


@pytest.fixture
def infra_candidate():
    return Candidate(
        id="c-ada",
        name="Ada",
        sectors=["Infrastructure"],
        functions=["ECM"],
        asset_classes=["Equity"],
        geographies=["UK"],
        seniority="VP",
        employers=["Goldman Sachs"],
        institutions=["LSE"],
    )


@pytest.fixture
def voice_note():
    return Source(
        id="s-voice",
        source_type=SourceType.VOICE_NOTE,
        label="Partner call",
        domain_tags=["Infrastructure", "ECM"],
        affinity_tags=["Goldman Sachs", "Oxford"],
    )
