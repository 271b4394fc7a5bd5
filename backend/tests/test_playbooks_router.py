# backend/tests/test_playbooks_router.py

from unittest.mock import patch

from fastapi.testclient import TestClient

from opatlas.main import create_app

VIEWER = {"X-User-Id": "u-9", "X-User-Name": "Val", "X-Workspace-Role": "viewer"}


def create_test_client() -> TestClient:
    app = create_app()
    return TestClient(app)


def _create(client: TestClient, **overrides) -> dict:
    payload = {
        "workspace_id": "ws-1",
        "title": "Churn save",
        "content_md": "# Setup\n- [ ] Step one\n- [ ] Step two\n## Details\n1. Step three",
        "tags": ["cs"],
        "triggers": ["churn risk"],
    }
    payload.update(overrides)
    resp = client.post("/playbooks", json=payload)
    assert resp.status_code == 201
    return resp.json()


def test_health():
    client = create_test_client()

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_create_and_get_playbook():
    client = create_test_client()

    created = _create(client)
    resp = client.get(f"/playbooks/{created['id']}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Churn save"
    assert body["usage_count"] == 0
    # ヘッダ無しの場合はデモユーザーが作成者になる
    assert body["author"] == {"id": "1", "name": "Demo User", "email": "demo@opatlas.com"}


def test_create_playbook_missing_fields_is_400():
    client = create_test_client()

    resp = client.post("/playbooks", json={"workspace_id": "ws-1", "title": "No content"})

    assert resp.status_code == 400
    assert "content_md" in resp.json()["detail"]


def test_get_unknown_playbook_is_404():
    client = create_test_client()

    resp = client.get("/playbooks/999")

    assert resp.status_code == 404


def test_apps_do_not_share_state():
    first = create_test_client()
    _create(first)

    second = create_test_client()
    resp = second.get("/playbooks", params={"workspace_id": "ws-1"})

    assert resp.json() == []


def test_list_tags_and_search():
    client = create_test_client()
    _create(client, tags=["cs", "renewal"])
    _create(client, title="Incident", tags=["cs"], content_md="- Page on-call")

    tags = client.get("/playbooks/tags", params={"workspace_id": "ws-1"}).json()
    found = client.get("/playbooks/search", params={"workspace_id": "ws-1", "q": "ON-CALL"}).json()

    assert [(t["name"], t["playbook_count"]) for t in tags] == [("cs", 2), ("renewal", 1)]
    assert [p["title"] for p in found] == ["Incident"]


def test_playbook_checklist():
    client = create_test_client()
    created = _create(client)

    resp = client.get(f"/playbooks/{created['id']}/checklist")

    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == ["h-0", "step-1", "step-2", "h-3", "step-4"]


def test_patch_playbook():
    client = create_test_client()
    created = _create(client)

    resp = client.patch(f"/playbooks/{created['id']}", json={"description": "Save accounts"})
    bad = client.patch(f"/playbooks/{created['id']}", json={"title": ""})
    missing = client.patch("/playbooks/999", json={"title": "x"})

    assert resp.status_code == 200
    assert resp.json()["description"] == "Save accounts"
    assert resp.json()["title"] == "Churn save"
    assert bad.status_code == 400
    assert missing.status_code == 404


def test_delete_playbook():
    client = create_test_client()
    created = _create(client)

    resp = client.delete(f"/playbooks/{created['id']}")
    again = client.delete(f"/playbooks/{created['id']}")

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert again.status_code == 404


def test_viewer_cannot_modify_playbooks():
    client = create_test_client()
    created = _create(client)

    create_resp = client.post(
        "/playbooks",
        json={"workspace_id": "ws-1", "title": "x", "content_md": "- a"},
        headers=VIEWER,
    )
    delete_resp = client.delete(f"/playbooks/{created['id']}", headers=VIEWER)
    read_resp = client.get(f"/playbooks/{created['id']}", headers=VIEWER)

    assert create_resp.status_code == 403
    assert delete_resp.status_code == 403
    assert read_resp.status_code == 200


def test_unknown_role_is_400():
    client = create_test_client()

    resp = client.get("/playbooks", params={"workspace_id": "ws-1"}, headers={"X-Workspace-Role": "admin"})

    assert resp.status_code == 400


def test_create_playbook_unexpected_error_is_500():
    client = create_test_client()

    with patch(
        "opatlas.playbooks.store.PlaybookStore.create",
        side_effect=Exception("unexpected error"),
    ):
        resp = client.post(
            "/playbooks",
            json={"workspace_id": "ws-1", "title": "x", "content_md": "- a"},
        )

    assert resp.status_code >= 500
