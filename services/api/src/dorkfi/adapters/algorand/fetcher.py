"""Algod/indexer fetcher for lending pool UserHealth events."""

import logging
from typing import Any

import httpx

from services.api.src.dorkfi.adapters.algorand.config import NetworkConfig
from services.api.src.dorkfi.adapters.algorand.events import extract_user_health_events

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


class FetchError(Exception):
    """Raised when algod or the indexer cannot be queried."""


class AlgorandFetcher:
    """Reads the current round from algod and UserHealth events from the indexer."""

    def __init__(
        self,
        network: NetworkConfig,
        timeout: float = 30.0,
        algod_token: str = "",
        indexer_token: str = "",
        transport: httpx.BaseTransport | None = None,
    ):
        self.network = network
        self.timeout = timeout
        self.algod_token = algod_token
        self.indexer_token = indexer_token
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport)

    def _get_json(
        self,
        client: httpx.Client,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = client.get(url, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(data, dict):
            raise FetchError(f"Unexpected response from {url}: {data!r}")
        return data

    def get_current_round(self) -> int:
        """Latest round known to algod."""
        url = f"{self.network.algod_url.rstrip('/')}/v2/status"
        headers = {"X-Algo-API-Token": self.algod_token} if self.algod_token else None

        with self._client() as client:
            data = self._get_json(client, url, headers=headers)

        last_round = data.get("last-round")
        if not isinstance(last_round, int):
            raise FetchError(f"Missing last-round in algod status: {data!r}")
        return last_round

    def fetch_user_health_events(self, app_id: int, min_round: int) -> list[list[Any]]:
        """
        Fetch all UserHealth events of an application from min_round onwards.

        Follows the indexer's next-token until a page comes back short.

        Returns:
            Positional event tuples, in indexer order (oldest first)
        """
        url = f"{self.network.indexer_url.rstrip('/')}/v2/transactions"
        headers = {"X-Indexer-API-Token": self.indexer_token} if self.indexer_token else None
        params: dict[str, Any] = {
            "application-id": app_id,
            "min-round": min_round,
            "limit": PAGE_SIZE,
        }

        events: list[list[Any]] = []
        pages = 0
        with self._client() as client:
            while True:
                data = self._get_json(client, url, params=params, headers=headers)
                transactions = data.get("transactions") or []
                pages += 1

                for txn in transactions:
                    events.extend(extract_user_health_events(txn))

                next_token = data.get("next-token")
                if not next_token or len(transactions) < PAGE_SIZE:
                    break
                params["next"] = next_token

        logger.info(
            f"Fetched {len(events)} UserHealth events for app {app_id} "
            f"from round {min_round} ({pages} pages)"
        )
        return events


class MockAlgorandFetcher(AlgorandFetcher):
    """Mock fetcher for testing without network calls."""

    def __init__(self, network: NetworkConfig | None = None) -> None:
        super().__init__(
            network
            or NetworkConfig(
                network_id="mocknet",
                name="Mocknet",
                wallet_network_id="mock",
                algod_url="http://mock-algod",
                indexer_url="http://mock-indexer",
                explorer_url="http://mock-explorer",
                lending_pool_ids=[1],
            )
        )
        self.current_round = 0
        self._events: list[list[Any]] = []
        self._error: Exception | None = None
        self.call_history: list[tuple[str, dict[str, Any]]] = []

    def set_current_round(self, current_round: int) -> None:
        self.current_round = current_round

    def set_events(self, events: list[list[Any]]) -> None:
        """Set raw event tuples to return."""
        self._events = events

    def set_error(self, error: Exception | None) -> None:
        """Raise this error from every call until cleared."""
        self._error = error

    def get_current_round(self) -> int:
        self.call_history.append(("get_current_round", {}))
        if self._error is not None:
            raise self._error
        return self.current_round

    def fetch_user_health_events(self, app_id: int, min_round: int) -> list[list[Any]]:
        self.call_history.append(
            ("fetch_user_health_events", {"app_id": app_id, "min_round": min_round})
        )
        if self._error is not None:
            raise self._error
        return list(self._events)
