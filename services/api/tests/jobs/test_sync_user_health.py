"""Tests for the UserHealth sync job."""

import pytest

from services.api.src.dorkfi.adapters.algorand.config import get_default_config
from services.api.src.dorkfi.adapters.algorand.fetcher import FetchError, MockAlgorandFetcher
from services.api.src.dorkfi.db.engine import get_engine
from services.api.src.dorkfi.db.user_health_repository import UserHealthRepository
from services.api.src.dorkfi.jobs import sync_user_health as job

SCALE = 10**12


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'sync.db'}"


@pytest.fixture
def fetcher():
    fetcher = MockAlgorandFetcher(get_default_config().require_network("voi-mainnet"))
    fetcher.set_current_round(3_000_000)
    fetcher.set_events([
        ["TX1", 2_900_000, 1000, "userA", 1_600_000, 8 * SCALE, 4 * SCALE],
        ["TX2", 2_900_001, 1001, "userB", 80_000, 1 * SCALE, 10 * SCALE],
    ])
    return fetcher


def test_sync_stores_events_and_returns_queue(fetcher, database_url):
    result, accounts = job.sync_user_health("voi-mainnet", database_url=database_url, fetcher=fetcher)

    assert result.status == "ok"
    assert result.min_round == 1_000_000
    assert result.events_stored == 2
    assert [a.id for a in accounts] == ["userB", "userA"]

    repository = UserHealthRepository(get_engine(database_url))
    assert repository.count_events("voi-mainnet") == 2
    assert repository.get_max_round("voi-mainnet") == 2_900_001


def test_sync_is_idempotent(fetcher, database_url):
    job.sync_user_health("voi-mainnet", database_url=database_url, fetcher=fetcher)

    result, _ = job.sync_user_health("voi-mainnet", database_url=database_url, fetcher=fetcher)

    assert result.events_fetched == 2
    assert result.events_stored == 0


def test_sync_uses_round_window(fetcher, database_url):
    result, _ = job.sync_user_health(
        "voi-mainnet", round_window=500, database_url=database_url, fetcher=fetcher
    )

    assert result.min_round == 2_999_500


def test_sync_unknown_network(database_url):
    with pytest.raises(LookupError):
        job.sync_user_health("ethereum", database_url=database_url)


def test_main_returns_zero_on_success(monkeypatch, fetcher, database_url):
    monkeypatch.setattr(job, "default_fetcher_factory", lambda network: fetcher)

    assert job.main(["--network", "voi-mainnet", "--database-url", database_url]) == 0


def test_main_returns_one_on_fetch_failure(monkeypatch, fetcher, database_url):
    fetcher.set_error(FetchError("algod down"))
    monkeypatch.setattr(job, "default_fetcher_factory", lambda network: fetcher)

    assert job.main(["--network", "voi-mainnet", "--database-url", database_url]) == 1


def test_main_returns_one_on_missing_lending_pool(database_url):
    assert job.main(["--network", "voi-testnet", "--database-url", database_url]) == 1


def test_ingest_all_skips_networks_without_pool(monkeypatch, fetcher, database_url):
    monkeypatch.setattr(job, "default_fetcher_factory", lambda network: fetcher)

    results = job.ingest_all_user_health(database_url=database_url)

    # algorand-mainnet is enabled but has no lending pool
    assert results == {"voi-mainnet": 2}


def test_ingest_all_reports_failure(monkeypatch, fetcher, database_url):
    fetcher.set_error(FetchError("algod down"))
    monkeypatch.setattr(job, "default_fetcher_factory", lambda network: fetcher)

    assert job.ingest_all_user_health(database_url=database_url) == {"voi-mainnet": -1}


def test_resume_starts_from_last_stored_round(fetcher, database_url):
    job.sync_user_health("voi-mainnet", database_url=database_url, fetcher=fetcher)

    result, _ = job.sync_user_health(
        "voi-mainnet", database_url=database_url, fetcher=fetcher, resume=True
    )

    assert result.min_round == 2_900_001
    assert fetcher.call_history[-1] == (
        "fetch_user_health_events",
        {"app_id": 41760711, "min_round": 2_900_001},
    )


def test_resume_without_stored_events_uses_window(fetcher, database_url):
    result, _ = job.sync_user_health(
        "voi-mainnet", database_url=database_url, fetcher=fetcher, resume=True
    )

    assert result.min_round == 1_000_000


def test_ingest_all_resumes_from_cursor(monkeypatch, fetcher, database_url):
    monkeypatch.setattr(job, "default_fetcher_factory", lambda network: fetcher)
    job.ingest_all_user_health(database_url=database_url)

    job.ingest_all_user_health(database_url=database_url)

    assert fetcher.call_history[-1][1]["min_round"] == 2_900_001
