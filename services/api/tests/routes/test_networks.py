from fastapi.testclient import TestClient

from services.api.src.dorkfi.main import app

client = TestClient(app)


def test_list_networks():
    response = client.get("/api/networks")

    assert response.status_code == 200
    networks = {n["network_id"]: n for n in response.json()}
    assert networks["voi-mainnet"]["enabled"] is True
    assert networks["voi-mainnet"]["lending_pool_ids"] == [41760711]
    assert networks["voi-testnet"]["enabled"] is False
