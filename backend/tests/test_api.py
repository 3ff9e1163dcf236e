"""API integration tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from clone_check.models.dto import SubmissionRecord
from clone_check.models.tokens import Mode


@pytest.fixture
def client(code_storage) -> TestClient:
    from clone_check.api import dependencies as deps
    from clone_check.app import app

    deps._STORAGE = code_storage
    with TestClient(app) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_check_enqueues_course_tasks(client: TestClient, code_storage, sources) -> None:
    code_storage.add(Mode.COURSE, 5, {})
    code_storage.add_submission(5, SubmissionRecord(id=1, denizen_id=10), {"a.py": sources["price_a"]})
    code_storage.add_submission(5, SubmissionRecord(id=2, denizen_id=20), {"b.py": sources["price_b"]})

    resp = client.post("/check", json={"course_id": 5})
    assert resp.status_code == 200
    assert resp.json() == {"course_id": 5, "enqueued": 4}

    status = client.get("/status")
    assert status.status_code == 200
    payload = status.json()
    assert payload["queued"] == 4
    assert payload["sequences"] == 0
    assert payload["running"] is True


def test_missing_report_is_404(client: TestClient) -> None:
    assert client.get("/reports").json() == []
    resp = client.get("/reports/99")
    assert resp.status_code == 404


def test_metrics_endpoint(client: TestClient) -> None:
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "clonecheck_queue_depth" in resp.text
