from pydantic import BaseModel, Field


class UnknownNetworkError(LookupError):
    """Raised when a network id is not configured."""

    def __init__(self, network_id: str):
        self.network_id = network_id
        super().__init__(f"Unknown network: {network_id}")


class MissingLendingPoolError(LookupError):
    """Raised when a network has no lending pool application deployed."""

    def __init__(self, network_id: str):
        self.network_id = network_id
        super().__init__(f"No lending pool configured for network: {network_id}")


class NetworkConfig(BaseModel):
    network_id: str
    name: str
    wallet_network_id: str
    algod_url: str
    indexer_url: str
    explorer_url: str
    lending_pool_ids: list[int] = Field(
        default_factory=list,
        description="Lending pool application ids, primary pool first",
    )

    @property
    def primary_lending_pool(self) -> int:
        """Application id whose UserHealth events feed the liquidation queue."""
        if not self.lending_pool_ids:
            raise MissingLendingPoolError(self.network_id)
        return self.lending_pool_ids[0]


class NetworksConfig(BaseModel):
    networks: list[NetworkConfig]
    enabled_networks: list[str]

    def get_network(self, network_id: str) -> NetworkConfig | None:
        for network in self.networks:
            if network.network_id == network_id:
                return network
        return None

    def require_network(self, network_id: str) -> NetworkConfig:
        network = self.get_network(network_id)
        if network is None:
            raise UnknownNetworkError(network_id)
        return network

    def get_enabled_networks(self) -> list[NetworkConfig]:
        return [n for n in self.networks if n.network_id in self.enabled_networks]


def get_default_config() -> NetworksConfig:
    """Default configuration for the Voi and Algorand networks."""
    return NetworksConfig(
        networks=[
            NetworkConfig(
                network_id="voi-mainnet",
                name="VOI Mainnet",
                wallet_network_id="voimain",
                algod_url="https://mainnet-api.voi.nodely.dev",
                indexer_url="https://mainnet-idx.voi.nodely.dev",
                explorer_url="https://voi.observer",
                lending_pool_ids=[41760711],
            ),
            NetworkConfig(
                network_id="voi-testnet",
                name="VOI Testnet",
                wallet_network_id="voitest",
                algod_url="https://testnet-api.voi.nodely.dev",
                indexer_url="https://testnet-idx.voi.nodely.dev",
                explorer_url="https://testnet.voi.observer",
            ),
            NetworkConfig(
                network_id="algorand-mainnet",
                name="Algorand Mainnet",
                wallet_network_id="mainnet",
                algod_url="https://mainnet-api.algonode.cloud",
                indexer_url="https://mainnet-idx.algonode.cloud",
                explorer_url="https://allo.info",
            ),
            NetworkConfig(
                network_id="algorand-testnet",
                name="Algorand Testnet",
                wallet_network_id="testnet",
                algod_url="https://testnet-api.algonode.cloud",
                indexer_url="https://testnet-idx.algonode.cloud",
                explorer_url="https://testnet.allo.info",
            ),
            NetworkConfig(
                network_id="localnet",
                name="Localnet",
                wallet_network_id="local",
                algod_url="http://localhost:8080",
                indexer_url="http://localhost:8980",
                explorer_url="http://localhost:8980",
            ),
        ],
        enabled_networks=["voi-mainnet", "algorand-mainnet"],
    )
