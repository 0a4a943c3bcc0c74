"""Weekly Bias-Watch Aggregator: period roll-up of recorded ranking decisions.

Answers three questions for a reporting period:
- how often did the two rankings diverge enough to count as high risk
- which mandates were hit hardest
- which source types lean on affinity over expertise most often
"""

import json
import logging
import threading
from collections import Counter, defaultdict, deque
from collections.abc import Callable, Iterable, Mapping

import numpy as np

from config import ScoringConfig
from models.records import Mandate, SourceType
from models.schemas.bias_watch import (
    BiasWatchSummary,
    MandateBiasBreakdown,
    RankingDecision,
    SourceTypeBiasBreakdown,
)
from models.schemas.ranking import BiasRiskLevel
from services.errors import NotFoundError

logger = logging.getLogger(__name__)

EXPORT_SCHEMA_VERSION = 1
EXPORT_KIND = "bias_watch_summary"

MandateLookup = Callable[[str], Mandate | str] | Mapping[str, Mandate | str]

_SOURCE_TYPE_COMMENTS = {
    SourceType.VOICE_NOTE: (
        "Voice notes often reference shared background. "
        "Consider tightening prompts to focus on demonstrable expertise."
    ),
    SourceType.MANDATE_NOTE: (
        "Mandate notes may reflect client preferences that favour familiarity. "
        "Review for explicit vs implicit requirements."
    ),
    SourceType.REFERRAL: (
        "Referrals tend to carry network affinity. "
        "Ask referrers for concrete evidence of domain experience."
    ),
    SourceType.CV: "CV-derived signals lean on shared employers or schools. Check the parsed tags.",
    SourceType.MARKET_DATA: "Market data leans on affinity markers. Review how it was tagged.",
    SourceType.MANUAL: "Manual entries lean on shared background. Review reviewer notes for affinity language.",
}

_BALANCED_COMMENTS = {
    SourceType.CV: "CV parsing appears robust. Similarity signals are appropriately weighted.",
    SourceType.MARKET_DATA: "Market data provides objective signals with low bias risk.",
    SourceType.MANUAL: "Manual entries show balanced reasoning. Continue current practices.",
}


def source_type_comment(source_type: SourceType, source_count: int, similarity_heavy_count: int) -> str:
    """Short reviewer-facing note for one source type's period stats."""
    if similarity_heavy_count == 0:
        return _BALANCED_COMMENTS.get(
            source_type, "No similarity-heavy profiles this period."
        )
    share = similarity_heavy_count / source_count if source_count else 0.0
    return f"{similarity_heavy_count} of {source_count} profiles similarity-heavy ({share:.0%}). " + (
        _SOURCE_TYPE_COMMENTS[source_type]
    )


def _resolve_mandate_name(lookup: MandateLookup | None, mandate_id: str) -> str:
    if lookup is None:
        return mandate_id
    try:
        found = lookup[mandate_id] if isinstance(lookup, Mapping) else lookup(mandate_id)
    except (NotFoundError, KeyError):
        logger.warning("Mandate %s not found in lookup; using id as name", mandate_id)
        return mandate_id
    if isinstance(found, Mandate):
        return found.name or found.id
    return str(found) if found else mandate_id


class BiasWatchAggregator:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def summarize(
        self,
        period_id: str,
        decisions: Iterable[RankingDecision],
        mandate_lookup: MandateLookup | None = None,
    ) -> BiasWatchSummary:
        in_period = [d for d in decisions if d.period_id is None or d.period_id == period_id]
        high = [d for d in in_period if d.bias_risk_level == BiasRiskLevel.HIGH]
        avg_divergence = float(np.mean([d.divergence_score for d in in_period])) if in_period else 0.0

        by_mandate: dict[str, list[RankingDecision]] = defaultdict(list)
        for decision in in_period:
            by_mandate[decision.mandate_id].append(decision)

        affected = []
        for mandate_id, mandate_decisions in by_mandate.items():
            high_events = [d for d in mandate_decisions if d.bias_risk_level == BiasRiskLevel.HIGH]
            if not high_events:
                continue
            # Tie-break is how badly the mandate diverged when it was flagged
            affected.append(MandateBiasBreakdown(
                mandate_id=mandate_id,
                name=_resolve_mandate_name(mandate_lookup, mandate_id),
                high_bias_events=len(high_events),
                decision_count=len(mandate_decisions),
                avg_divergence=float(np.mean([d.divergence_score for d in high_events])),
            ))
        affected.sort(key=lambda m: (m.high_bias_events, m.avg_divergence), reverse=True)

        source_stats = self._source_type_stats(in_period)
        top_driver = None
        if source_stats and source_stats[0].similarity_heavy_count > 0:
            top_driver = source_stats[0].source_type

        logger.info(
            "Bias watch %s: %d decisions, %d high-risk, %d mandates affected, avg divergence %.2f",
            period_id, len(in_period), len(high), len(affected), avg_divergence,
        )
        return BiasWatchSummary(
            period_id=period_id,
            decision_count=len(in_period),
            high_bias_event_count=len(high),
            affected_mandate_count=len(affected),
            avg_divergence_score=avg_divergence,
            most_affected_mandates=affected[: self.config.most_affected_limit],
            source_type_stats=source_stats,
            top_similarity_driver=top_driver,
        )

    def _source_type_stats(self, decisions: list[RankingDecision]) -> list[SourceTypeBiasBreakdown]:
        counts: dict[SourceType, int] = defaultdict(int)
        heavy: dict[SourceType, int] = defaultdict(int)
        margin = self.config.similarity_heavy_margin
        for decision in decisions:
            for profile in decision.source_profiles:
                counts[profile.source_type] += 1
                if round(profile.similarity_margin, 9) > margin:
                    heavy[profile.source_type] += 1

        stats = [
            SourceTypeBiasBreakdown(
                source_type=source_type,
                source_count=counts[source_type],
                similarity_heavy_count=heavy[source_type],
                comment=source_type_comment(source_type, counts[source_type], heavy[source_type]),
            )
            for source_type in SourceType
            if counts[source_type]
        ]
        # Stable sort keeps enum order among equals
        stats.sort(key=lambda s: s.similarity_heavy_count, reverse=True)
        return stats


def build_bias_watch_summary(
    period_id: str,
    decisions: Iterable[RankingDecision],
    mandate_lookup: MandateLookup | None = None,
    config: ScoringConfig | None = None,
) -> BiasWatchSummary:
    return BiasWatchAggregator(config).summarize(period_id, decisions, mandate_lookup)


def export_bias_summary_as_json(summary: BiasWatchSummary) -> str:
    """Serialize a summary into the versioned export document."""
    document = {
        "schema_version": EXPORT_SCHEMA_VERSION,
        "kind": EXPORT_KIND,
        "summary": summary.model_dump(mode="json"),
    }
    return json.dumps(document, sort_keys=True, indent=2)


def load_bias_summary_from_json(document: str | bytes) -> BiasWatchSummary:
    """Parse an export document back into a BiasWatchSummary."""
    data = json.loads(document)
    if not isinstance(data, dict):
        raise ValueError("Bias watch export must be a JSON object")
    version = data.get("schema_version")
    if version != EXPORT_SCHEMA_VERSION:
        raise ValueError(f"Unsupported bias watch export schema_version: {version!r}")
    if data.get("kind") != EXPORT_KIND:
        raise ValueError(f"Unexpected export kind: {data.get('kind')!r}")
    if not isinstance(data.get("summary"), dict):
        raise ValueError("Bias watch export has no summary object")
    return BiasWatchSummary.model_validate(data["summary"])


class InMemoryDecisionLog:
    """Most recent ranking decisions recorded by the API, plus their mandates.

    Holds at most max_decisions; the oldest decision is evicted first and a
    mandate is forgotten once no retained decision refers to it.
    """

    def __init__(self, max_decisions: int = 1000) -> None:
        if max_decisions < 1:
            raise ValueError("max_decisions must be at least 1")
        self._decisions: deque[RankingDecision] = deque(maxlen=max_decisions)
        self._mandate_refs: Counter[str] = Counter()
        self._mandates: dict[str, Mandate] = {}
        self._lock = threading.Lock()

    @property
    def max_decisions(self) -> int:
        return self._decisions.maxlen

    def record(self, decision: RankingDecision, mandate: Mandate | None = None) -> None:
        with self._lock:
            if len(self._decisions) == self._decisions.maxlen:
                self._forget(self._decisions[0])
            self._decisions.append(decision)
            self._mandate_refs[decision.mandate_id] += 1
            if mandate is not None:
                self._mandates[mandate.id] = mandate

    def _forget(self, evicted: RankingDecision) -> None:
        self._mandate_refs[evicted.mandate_id] -= 1
        if self._mandate_refs[evicted.mandate_id] <= 0:
            del self._mandate_refs[evicted.mandate_id]
            self._mandates.pop(evicted.mandate_id, None)
        logger.debug("Evicted decision %s for mandate %s", evicted.id, evicted.mandate_id)

    def decisions(self) -> list[RankingDecision]:
        with self._lock:
            return list(self._decisions)

    def get_mandate(self, mandate_id: str) -> Mandate:
        with self._lock:
            mandate = self._mandates.get(mandate_id)
        if mandate is None:
            raise NotFoundError("mandate", mandate_id)
        return mandate
