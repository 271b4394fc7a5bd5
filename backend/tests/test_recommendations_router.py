# backend/tests/test_recommendations_router.py

from unittest.mock import patch

from fastapi.testclient import TestClient

from opatlas.main import create_app


def create_test_client() -> TestClient:
    app = create_app()
    return TestClient(app)


def _create(client: TestClient, **overrides) -> dict:
    payload = {"workspace_id": "ws-1", "title": "Playbook", "content_md": "- a"}
    payload.update(overrides)
    return client.post("/playbooks", json=payload).json()


def test_recommendations_rank_context_match_first():
    client = create_test_client()
    _create(client, title="Renewal", triggers=["renewal due"])
    churn = _create(client, title="Churn save", triggers=["churn risk"])

    resp = client.get(
        "/recommendations",
        params={"workspace_id": "ws-1", "context": "Churn Risk detected"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body[0]["id"] == churn["id"]
    assert body[0]["recommendation_score"] == 75
    assert 'Matches "Churn Risk detected"' in body[0]["recommendation_reasons"]
    # 新規作成(15) + トリガー(10)
    assert body[1]["recommendation_score"] == 25


def test_recommendations_use_recent_runs():
    client = create_test_client()
    used = _create(client, title="Used")
    _create(client, title="Unused")
    client.post(
        "/runs",
        json={"workspace_id": "ws-1", "playbook_id": used["id"], "playbook_title": "Used"},
    )

    body = client.get("/recommendations", params={"workspace_id": "ws-1"}).json()

    assert [r["title"] for r in body] == ["Used", "Unused"]
    assert "Used 1 time recently" in body[0]["recommendation_reasons"]


def test_recommendations_for_empty_workspace():
    client = create_test_client()

    resp = client.get("/recommendations", params={"workspace_id": "ws-empty"})

    assert resp.status_code == 200
    assert resp.json() == []


def test_recommendations_error():
    client = create_test_client()

    with patch(
        "opatlas.recommendations.service.score",
        side_effect=Exception("unexpected error"),
    ):
        resp = client.get("/recommendations", params={"workspace_id": "ws-1"})

    assert resp.status_code >= 500
