from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)

def test_health_ok():
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["request_id"] == "abc-123"
    assert r.headers["X-Request-ID"] == "abc-123"

def test_version_ok():
    r = client.get("/version")
    assert r.status_code == 200
    data = r.json()
    assert data["name"] == "arcade-scores-api"
    assert "version" in data and "git_sha" in data
