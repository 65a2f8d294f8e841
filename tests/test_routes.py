import pytest
from elasticsearch import ConnectionError as ESConnectionError
from fastapi.testclient import TestClient

from conftest import RecordingElasticsearch
from main import app
from reporting import get_report_service
from reporting.report_service import ReportService

WINDOW = {"greaterThanTime": "2023-01-01", "lessThanTime": "2023-03-31"}


@pytest.fixture
def client_for(store, executor_for):
    def build(es):
        service = ReportService(executor_for(es), store)
        app.dependency_overrides[get_report_service] = lambda: service
        return TestClient(app)
    yield build
    app.dependency_overrides.clear()


def test_health(client_for):
    response = client_for(RecordingElasticsearch()).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_keyword_report(client_for, flood_topic):
    client = client_for(RecordingElasticsearch(count=5))
    response = client.post("/api/v2/reports/keywords", json={"topicId": "7", "type": "mentions", **WINDOW})
    assert response.status_code == 200
    assert response.json() == {"count": 5}


@pytest.mark.parametrize("payload,detail", [
    ({"type": "mentions"}, "ID is required"),
    ({"topicId": "", "type": "mentions"}, "ID is required"),
    ({"topicId": "seven", "type": "mentions"}, "Invalid ID"),
    ({"topicId": 7, "type": "bogus"}, "Unknown report type: bogus"),
])
def test_bad_requests(client_for, flood_topic, payload, detail):
    client = client_for(RecordingElasticsearch())
    response = client.post("/api/v2/reports/undp", json=payload)
    assert response.status_code == 400
    assert response.json() == {"detail": detail}


def test_missing_type_is_a_validation_error(client_for):
    response = client_for(RecordingElasticsearch()).post("/api/v2/reports/keywords", json={"topicId": 7})
    assert response.status_code == 422


def test_engine_failure_hides_query(client_for, flood_topic):
    client = client_for(RecordingElasticsearch(search=ESConnectionError("cluster unreachable")))
    response = client.post("/api/v2/reports/keywords", json={"topicId": 7, "type": "polarityBreakdown", **WINDOW})
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_undp_report(client_for, flood_topic):
    client = client_for(RecordingElasticsearch(count=0))
    response = client.post("/api/v2/reports/undp", json={"topicId": 7, "type": "complaintTouchpoints", **WINDOW})
    assert response.status_code == 200
    assert response.json() == {"responseOutput": {}}


def test_posts_feed(client_for, flood_topic):
    hits = {"hits": {"total": {"value": 1}, "hits": [{"_id": "a", "_source": {"source": "Twitter", "u_followers": 3}}]}}
    client = client_for(RecordingElasticsearch(search=hits))
    response = client.post("/api/v2/reports/undp/posts", json={
        "topicId": 7, "type": "complaintTouchpoints", "category": "Other", **WINDOW,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["responseArray"][0]["followers"] == "3"


def test_posts_feed_unknown_category(client_for, flood_topic):
    client = client_for(RecordingElasticsearch())
    response = client.post("/api/v2/reports/undp/posts", json={
        "topicId": 7, "type": "complaintTouchpoints", "category": "Nowhere",
    })
    assert response.status_code == 400
    assert response.json() == {"detail": "Unknown category 'Nowhere' for complaintTouchpoints"}


@pytest.mark.parametrize("report_type", ["mentions", "typeofMentions"])
def test_count_failure_is_a_server_error(client_for, flood_topic, report_type):
    client = client_for(RecordingElasticsearch(count=ESConnectionError("cluster unreachable")))
    response = client.post("/api/v2/reports/keywords", json={"topicId": 7, "type": report_type, **WINDOW})
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


class BrokenStore:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RuntimeError("db down")
        return fail


def test_unexpected_failure_is_json_500(executor_for):
    service = ReportService(executor_for(RecordingElasticsearch()), BrokenStore())
    app.dependency_overrides[get_report_service] = lambda: service
    try:
        response = TestClient(app).post("/api/v2/reports/keywords", json={"topicId": 7, "type": "mentions", **WINDOW})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
