from .conftest import API


def test_root(client):
    body = client.get("/").json()

    assert body["health"] == f"{API}/health"
    assert body["docs"] == "/docs"


def test_health(client):
    response = client.get(f"{API}/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"]


def test_detailed_health(client):
    body = client.get(f"{API}/health/detailed").json()

    assert body["checks"]["database"]["status"] == "healthy"
    assert body["checks"]["integrations"]["stripe"] is False
    assert "memory_percent" in body["checks"]["resources"]


def test_request_id_is_echoed(client):
    response = client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_error_envelope(client):
    body = client.get(f"{API}/courses/31337").json()

    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"
    assert body["error"]["path"] == f"{API}/courses/31337"
