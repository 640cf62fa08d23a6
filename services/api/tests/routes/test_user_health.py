"""Tests for UserHealth history API endpoints."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from services.api.src.dorkfi.db.engine import init_db
from services.api.src.dorkfi.db.user_health_repository import UserHealthRepository
from services.api.src.dorkfi.domain.models import UserHealthEvent
from services.api.src.dorkfi.main import app
from services.api.src.dorkfi.routes.dependencies import get_user_health_repository

# 2024-01-01 00:00:00 UTC
BASE_TS = 1704067200


def make_event(user_id, timestamp, health_factor, collateral="100", borrow="50", round=10):
    return UserHealthEvent(
        timestamp=timestamp,
        round=round,
        user_id=user_id,
        total_collateral_value=Decimal(collateral),
        total_borrow_value=Decimal(borrow),
        reported_health_factor=Decimal(health_factor),
        tx_id=f"TX-{user_id}-{timestamp}",
    )


@pytest.fixture
def repository(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'user_health.db'}")
    init_db(engine)
    return UserHealthRepository(engine)


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_user_health_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(repository):
    repository.insert_events("voi-mainnet", [
        make_event("a", BASE_TS + 60, "1.0", round=10),
        make_event("a", BASE_TS + 3700, "2.5", round=20),
        make_event("b", BASE_TS + 120, "1.3", collateral="5000", borrow="1000", round=10),
    ])
    return repository


def test_trend(client, seeded):
    response = client.get("/api/user-health/voi-mainnet/trend")

    assert response.status_code == 200
    data = response.json()
    assert [p["event_count"] for p in data] == [2, 1]
    assert data[0]["average_health_factor"] == pytest.approx(1.15)
    assert data[1]["average_health_factor"] == pytest.approx(2.5)


def test_trend_min_round(client, seeded):
    data = client.get("/api/user-health/voi-mainnet/trend?min_round=15").json()

    assert len(data) == 1
    assert data[0]["event_count"] == 1


def test_distribution_uses_latest_event_per_user(client, seeded):
    data = client.get("/api/user-health/voi-mainnet/distribution").json()

    assert data == [
        {"label": "Risky (1.2-1.5)", "count": 1},
        {"label": "Safe (2.0-3.0)", "count": 1},
    ]


def test_positions(client, seeded):
    data = client.get("/api/user-health/voi-mainnet/positions").json()

    assert [b["label"] for b in data] == ["$0-1K", "$1K-10K"]
    assert data[1]["users"] == 1
    assert data[1]["total_collateral"] == pytest.approx(5000.0)


def test_empty_history(client):
    assert client.get("/api/user-health/voi-mainnet/trend").json() == []


def test_unknown_network_returns_404(client):
    response = client.get("/api/user-health/ethereum/trend")

    assert response.status_code == 404
