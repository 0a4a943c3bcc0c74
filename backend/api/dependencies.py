"""Shared dependencies for API routes."""

from functools import lru_cache

from config import ScoringConfig, settings
from services.bias_watch import InMemoryDecisionLog
from services.reliability import ReliabilityTracker


@lru_cache
def get_scoring_config() -> ScoringConfig:
    return settings.get_scoring_config()


@lru_cache
def get_tracker() -> ReliabilityTracker:
    return ReliabilityTracker(config=get_scoring_config())


@lru_cache
def get_decision_log() -> InMemoryDecisionLog:
    return InMemoryDecisionLog(max_decisions=settings.decision_log_size)
