import pytest

from services.api.src.dorkfi.adapters.algorand.config import (
    MissingLendingPoolError,
    NetworkConfig,
    NetworksConfig,
    UnknownNetworkError,
    get_default_config,
)


def test_default_config_has_voi_mainnet_lending_pool():
    config = get_default_config()

    network = config.require_network("voi-mainnet")

    assert network.primary_lending_pool == 41760711
    assert network.explorer_url == "https://voi.observer"


def test_enabled_networks_are_configured():
    config = get_default_config()

    enabled = config.get_enabled_networks()

    assert [n.network_id for n in enabled] == config.enabled_networks


def test_get_network_returns_none_for_unknown():
    assert get_default_config().get_network("ethereum") is None


def test_require_network_raises_for_unknown():
    with pytest.raises(UnknownNetworkError) as exc_info:
        get_default_config().require_network("ethereum")

    assert exc_info.value.network_id == "ethereum"


def test_network_without_pool_raises_on_primary_lending_pool():
    network = get_default_config().require_network("voi-testnet")

    with pytest.raises(MissingLendingPoolError):
        network.primary_lending_pool


def test_primary_lending_pool_is_first_id():
    network = NetworkConfig(
        network_id="custom",
        name="Custom",
        wallet_network_id="custom",
        algod_url="http://algod",
        indexer_url="http://indexer",
        explorer_url="http://explorer",
        lending_pool_ids=[7, 8],
    )

    config = NetworksConfig(networks=[network], enabled_networks=["custom"])

    assert config.require_network("custom").primary_lending_pool == 7
