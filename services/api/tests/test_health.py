from fastapi.testclient import TestClient

from services.api.src.dorkfi.main import app

client = TestClient(app)


def test_health_returns_ok():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_names_service():
    response = client.get("/")
    assert response.json()["service"] == "dorkfi-liquidation-monitor-api"
