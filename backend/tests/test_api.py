from fastapi.testclient import TestClient

from api.dependencies import get_scoring_config
from main import app
from services.errors import ConfigurationError

client = TestClient(app)

MANDATE = {
    "id": "m-api",
    "name": "Infrastructure ECM",
    "sectors": ["Infrastructure"],
    "functions": ["ECM"],
    "seniority_min": "VP",
    "seniority_max": "Director",
}

CANDIDATES = [
    {"id": "c-expert", "name": "Expert", "sectors": ["Infrastructure"], "functions": ["ECM"],
     "seniority": "VP"},
    {"id": "c-insider", "name": "Insider", "sectors": ["Healthcare"], "seniority": "Analyst",
     "employers": ["Goldman Sachs"]},
]

SOURCES = {
    "c-expert": [{"id": "api-cv", "source_type": "cv", "domain_tags": ["Infrastructure", "ECM"],
                  "affinity_tags": []}],
    "c-insider": [{"id": "api-voice", "source_type": "voice_note", "domain_tags": [],
                   "affinity_tags": ["Goldman Sachs"]}],
}


def _outcome(i, source_id, result):
    return {
        "id": f"{source_id}-{i}",
        "candidate_id": "c-expert",
        "mandate_id": "m-api",
        "source_id": source_id,
        "stage": "final",
        "result": result,
    }


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert sum(data["fit_weights"].values()) == 100
    assert data["seniority_levels"][0] == "Analyst"


def test_fit_score():
    response = client.post("/fit-score", json={
        "candidate": {"id": "c1", "sectors": ["Infrastructure"], "functions": ["ECM Origination"]},
        "mandate": {"id": "m1", "sectors": ["Infrastructure"], "functions": ["ECM"]},
    })
    assert response.status_code == 200
    data = response.json()
    assert abs(data["final_score"] - 0.525) < 1e-9
    assert data["dimension_scores"]["function"] == 0.5


def test_fit_score_rejects_missing_mandate():
    response = client.post("/fit-score", json={"candidate": {"id": "c1"}})
    assert response.status_code == 422


def test_evaluate_mandate():
    response = client.post("/mandates/evaluate", json={
        "mandate": MANDATE,
        "candidates": CANDIDATES,
        "sources": SOURCES,
        "top_n": 1,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["mandate_id"] == "m-api"
    assert data["expertise_ranking"]["entries"][0]["candidate_id"] == "c-expert"
    assert data["similarity_ranking"]["entries"][0]["candidate_id"] == "c-insider"
    assert data["similarity_ranking"]["diagnostic_only"] is True
    assert data["comparison"]["divergence_score"] == 1.0
    assert len(data["counterfactual"]["expertise_top"]) == 1
    assert data["attribution"]["c-insider"][0]["reasoning_basis"] == "similarity-led"


def test_outcomes_and_reliability_lookup():
    outcomes = [_outcome(i, "api-src-1", r) for i, r in enumerate(["pass", "offer", "selected", "fail", "rejected"])]
    response = client.post("/outcomes", json={"outcomes": outcomes})
    assert response.status_code == 200
    assert response.json()["recorded"] == 5

    response = client.get("/sources/api-src-1/reliability")
    assert response.status_code == 200
    data = response.json()
    assert abs(data["record"]["reliability"] - 0.55) < 1e-9
    assert data["record"]["total_uses"] == 5
    assert abs(data["raw_accuracy"] - 0.6) < 1e-9
    assert data["last_outcome"] == "Final: Rejected"


def test_unknown_source_reliability_is_404():
    response = client.get("/sources/does-not-exist/reliability")
    assert response.status_code == 404
    data = response.json()
    assert data["error_code"] == "NOT_FOUND"
    assert data["details"]["id"] == "does-not-exist"


def test_outcomes_reject_bad_result():
    response = client.post("/outcomes", json={"outcomes": [_outcome(0, "api-src-2", "maybe")]})
    assert response.status_code == 422


def test_bias_watch_with_decisions():
    response = client.post("/bias-watch", json={
        "period_id": "2026-W11",
        "decisions": [
            {"mandate_id": "m-a", "period_id": "2026-W11", "divergence_score": 3.5,
             "bias_risk_level": "high"},
            {"mandate_id": "m-b", "period_id": "2026-W11", "divergence_score": 0.5,
             "bias_risk_level": "low"},
        ],
        "mandate_names": {"m-a": "Alpha mandate"},
    })
    assert response.status_code == 200
    data = response.json()
    assert data["high_bias_event_count"] == 1
    assert data["avg_divergence_score"] == 2.0
    assert data["most_affected_mandates"][0]["name"] == "Alpha mandate"


def test_bias_watch_from_logged_evaluations():
    response = client.post("/mandates/evaluate", json={
        "mandate": MANDATE,
        "candidates": CANDIDATES,
        "sources": SOURCES,
        "period_id": "2026-W12",
    })
    assert response.status_code == 200

    response = client.post("/bias-watch", json={"period_id": "2026-W12"})
    assert response.status_code == 200
    data = response.json()
    assert data["decision_count"] == 1
    assert {s["source_type"] for s in data["source_type_stats"]} == {"cv", "voice_note"}
    assert data["top_similarity_driver"] == "voice_note"


def test_bias_watch_export():
    response = client.post("/bias-watch/export", json={"period_id": "2026-W13", "decisions": []})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    document = response.json()
    assert document["schema_version"] == 1
    assert document["kind"] == "bias_watch_summary"
    assert document["summary"]["period_id"] == "2026-W13"


def test_configuration_error_is_500():
    def broken_config():
        raise ConfigurationError("Invalid scoring config", source="test.yaml")

    app.dependency_overrides[get_scoring_config] = broken_config
    try:
        response = client.post("/fit-score", json={
            "candidate": {"id": "c1"}, "mandate": {"id": "m1"},
        })
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert response.json()["error_code"] == "CONFIGURATION_ERROR"
