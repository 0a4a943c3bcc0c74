from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_decision_log, get_scoring_config, get_tracker
from config import ScoringConfig, settings
from models.requests import BiasWatchRequest, EvaluateMandateRequest, FitScoreRequest, OutcomeRequest
from models.responses import HealthResponse, OutcomeResponse, ReliabilityResponse
from models.schemas.bias_watch import BiasWatchSummary
from models.schemas.evaluation import MandateEvaluation
from models.schemas.match_score import MatchScore
from services import bias_watch, orchestrator
from services.fit_scorer import compute_fit_score
from services.reliability import ReliabilityTracker

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=HealthResponse)
async def health(
    config: ScoringConfig = Depends(get_scoring_config),
    tracker: ReliabilityTracker = Depends(get_tracker),
):
    return HealthResponse(
        fit_weights=config.fit_weights.as_percentages(),
        composite_weights=config.composite_weights.model_dump(),
        seniority_levels=list(config.seniority_levels),
        reliability_store_version=tracker.store_version,
    )


@router.post("/fit-score", response_model=MatchScore)
@limiter.limit(settings.rate_limit)
async def fit_score(
    request: Request,
    body: FitScoreRequest,
    config: ScoringConfig = Depends(get_scoring_config),
):
    return compute_fit_score(body.candidate, body.mandate, config)


@router.post("/mandates/evaluate", response_model=MandateEvaluation)
@limiter.limit(settings.rate_limit)
def evaluate_mandate(
    request: Request,
    body: EvaluateMandateRequest,
    config: ScoringConfig = Depends(get_scoring_config),
    tracker: ReliabilityTracker = Depends(get_tracker),
    decision_log: bias_watch.InMemoryDecisionLog = Depends(get_decision_log),
):
    evaluation = orchestrator.evaluate_mandate(
        body.mandate,
        body.candidates,
        body.sources,
        tracker=tracker,
        config=config,
        top_n=settings.default_top_n if body.top_n is None else body.top_n,
        max_workers=settings.max_workers,
    )
    if body.period_id:
        decision_log.record(orchestrator.to_ranking_decision(evaluation, body.period_id), body.mandate)
    return evaluation


@router.post("/outcomes", response_model=OutcomeResponse)
@limiter.limit(settings.rate_limit)
async def record_outcomes(
    request: Request,
    body: OutcomeRequest,
    tracker: ReliabilityTracker = Depends(get_tracker),
):
    records = tracker.record_outcomes(body.outcomes)
    return OutcomeResponse(
        recorded=len(records),
        records=records,
        reliability_store_version=tracker.store_version,
    )


@router.get("/sources/{source_id}/reliability", response_model=ReliabilityResponse)
async def source_reliability(source_id: str, tracker: ReliabilityTracker = Depends(get_tracker)):
    # NotFoundError is mapped to 404 in main
    record = tracker.get_record(source_id)
    return ReliabilityResponse.from_record(record, tracker.last_outcome(source_id))


def _summarize(
    body: BiasWatchRequest,
    config: ScoringConfig,
    decision_log: bias_watch.InMemoryDecisionLog,
) -> BiasWatchSummary:
    if body.decisions is None:
        decisions = decision_log.decisions()
        lookup = body.mandate_names or decision_log.get_mandate
    else:
        decisions = body.decisions
        lookup = body.mandate_names
    return bias_watch.build_bias_watch_summary(body.period_id, decisions, lookup, config)


@router.post("/bias-watch", response_model=BiasWatchSummary)
@limiter.limit(settings.rate_limit)
async def bias_watch_summary(
    request: Request,
    body: BiasWatchRequest,
    config: ScoringConfig = Depends(get_scoring_config),
    decision_log: bias_watch.InMemoryDecisionLog = Depends(get_decision_log),
):
    return _summarize(body, config, decision_log)


@router.post("/bias-watch/export")
@limiter.limit(settings.rate_limit)
async def bias_watch_export(
    request: Request,
    body: BiasWatchRequest,
    config: ScoringConfig = Depends(get_scoring_config),
    decision_log: bias_watch.InMemoryDecisionLog = Depends(get_decision_log),
):
    document = bias_watch.export_bias_summary_as_json(_summarize(body, config, decision_log))
    return Response(content=document, media_type="application/json")
