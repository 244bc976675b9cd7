"""Tests for service endpoints and error rendering"""
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "blogapi"


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness(client: TestClient):
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True


def test_liveness(client: TestClient):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_unknown_route(client: TestClient):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["message"] == "API route not found"


def test_malformed_json_is_bad_request(client: TestClient):
    response = client.post(
        "/api/auth/register",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-abc"})
    assert response.headers["X-Request-ID"] == "req-abc"


def test_metrics_endpoint(client: TestClient):
    """Test that Prometheus metrics are served, including the app counters"""
    client.get("/")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "blogapi_http_requests_total" in response.text
    assert "blogapi_blog_broadcasts_total" in response.text
    assert "blogapi_token_rejections_total" in response.text


def test_request_metrics_labelled_by_route(client: TestClient, auth_headers: dict):
    """Test that request counters use the route template, not the raw path"""
    client.get("/api/blogs/424242", headers=auth_headers)
    client.get("/api/nowhere/424242")

    templated = {"method": "GET", "endpoint": "/api/blogs/{blog_id}", "status": "404"}
    raw = {"method": "GET", "endpoint": "/api/blogs/424242", "status": "404"}
    unmatched = {"method": "GET", "endpoint": "unmatched", "status": "404"}

    assert REGISTRY.get_sample_value("blogapi_http_requests_total", templated) >= 1
    assert REGISTRY.get_sample_value("blogapi_http_requests_total", unmatched) >= 1
    assert REGISTRY.get_sample_value("blogapi_http_requests_total", raw) is None
