import time

import pytest
from fastapi.testclient import TestClient

from database.db import get_db
from main import app
from schemas.common import ErrorResponse
from services.exceptions import EmptyCohortError, MalformedRecordError, SourceUnavailable
from services.grade_source import SqlGradeSource


SCENARIO_ONE = [("exam", 80), ("exam", 100), ("quiz", 90), ("homework", 70)]
LOW_SCORER = [("exam", 60), ("quiz", 60), ("homework", 60)]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Latency-Ms" in response.headers


def test_stats_all_students(client, add_document):
    add_document(1, "101A", SCENARIO_ONE)
    add_document(2, "101B", LOW_SCORER)

    response = client.get("/v1/grades/stats")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == [
        {"total_students": 2, "high_scorers": 1, "percentage_high_scorers": pytest.approx(50.0)}
    ]


def test_stats_for_class(client, add_document):
    add_document(1, "101A", SCENARIO_ONE)
    add_document(2, "101B", LOW_SCORER)

    body = client.get("/v1/grades/stats/101A").json()
    assert body["data"] == [
        {"total_students": 1, "high_scorers": 1, "percentage_high_scorers": pytest.approx(100.0)}
    ]


def test_stats_for_numeric_class_id(client, add_document):
    add_document(7, 339, LOW_SCORER)
    body = client.get("/v1/grades/stats/339").json()
    assert body["data"][0]["total_students"] == 1
    assert body["data"][0]["high_scorers"] == 0


def test_stats_for_empty_class_returns_empty_list(client, add_document):
    add_document(1, "101A", SCENARIO_ONE)
    response = client.get("/v1/grades/stats/nope")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


def test_stats_ignores_students_without_scores(client, add_document):
    add_document(1, "101A", [])
    assert client.get("/v1/grades/stats").json()["data"] == []


def test_learner_class_averages(client, add_document):
    add_document(5, "A", [("exam", 80)])
    add_document(5, "B", [("quiz", 90), ("homework", 50)])
    add_document(6, "A", [("exam", 100)])

    response = client.get("/v1/grades/learner/5/avg-class")
    assert response.status_code == 200
    data = response.json()["data"]
    assert [row["class_id"] for row in data] == ["A", "B"]
    assert data[0]["avg"] == pytest.approx(40.0)
    assert data[1]["avg"] == pytest.approx(37.0)


def test_learner_without_grades_returns_empty_list(client):
    response = client.get("/v1/grades/learner/404/avg-class")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


def test_learner_id_must_be_numeric(client):
    assert client.get("/v1/grades/learner/abc/avg-class").status_code == 422


def test_source_unavailable_maps_to_503(client, monkeypatch):
    def _broken(self, scope):
        raise SourceUnavailable("database down")

    monkeypatch.setattr(SqlGradeSource, "fetch", _broken)
    response = client.get("/v1/grades/stats")
    assert response.status_code == 503
    assert response.json()["error"] == {"code": "SOURCE_UNAVAILABLE", "message": "database down"}


def test_malformed_record_maps_to_422(client, monkeypatch):
    def _malformed(self, scope):
        return [{"student_id": 1, "scores": []}]

    monkeypatch.setattr(SqlGradeSource, "fetch", _malformed)
    response = client.get("/v1/grades/stats")
    assert response.status_code == 422
    assert response.json()["error"]["code"] == MalformedRecordError.code


def test_empty_cohort_error_maps_to_404(client, monkeypatch):
    def _empty(documents, class_id=None):
        time.sleep(0.02)
        raise EmptyCohortError()

    monkeypatch.setattr("routers.grades_agg.compute_cohort_stats", _empty)
    response = client.get("/v1/grades/stats")
    assert response.status_code == 404
    body = ErrorResponse.model_validate(response.json())
    assert body.success is False
    assert body.error.code == "EMPTY_COHORT"
    # 본문 latency_ms 는 미들웨어와 같은 시작 시각 기준
    assert body.latency_ms >= 20
    assert int(response.headers["X-Latency-Ms"]) >= body.latency_ms


def test_unhandled_error_maps_to_500(db_session, monkeypatch):
    def _boom(documents, class_id=None):
        raise RuntimeError("boom")

    monkeypatch.setattr("routers.grades_agg.compute_cohort_stats", _boom)
    app.dependency_overrides[get_db] = lambda: db_session
    try:
        response = TestClient(app, raise_server_exceptions=False).get("/v1/grades/stats")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == {"code": "INTERNAL_ERROR", "message": "boom"}
    assert body["latency_ms"] >= 0
