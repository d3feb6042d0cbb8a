import pytest

fastapi = pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from settleup.main import app
from settleup.runtime import get_settlement_service
from settleup.services.settlement_service import SettlementService

PLAYERS = [{"id": "a", "name": "Alice"}, {"id": "b", "name": "Bob"}, {"id": "c", "name": "Cat"}]


@pytest.fixture
def client(repo):
    service = SettlementService(repo)
    app.dependency_overrides[get_settlement_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _cards_payload(**overrides) -> dict:
    payload = {
        "group_id": "g1",
        "players": PLAYERS,
        "selected_games": ["cards"],
        "card_history": [
            {"card_id": "c1", "card_type": "camel", "player_id": "a", "card_value": 2},
            {"card_id": "c2", "card_type": "custom", "card_name": "Bogey", "player_id": "b", "card_value": 4},
        ],
        "card_values": {"camel": 3},
    }
    payload.update(overrides)
    return payload


def test_calculate_contract(client: TestClient) -> None:
    response = client.post("/settlements/calculate", json=_cards_payload())

    assert response.status_code == 200
    body = response.json()
    assert set(body.keys()) == {
        "payouts",
        "transactions",
        "selected_games",
        "total_transactions",
        "card_game_details",
        "saved_id",
    }
    assert body["payouts"] == {"a": -3.0, "b": -4.0, "c": 7.0}
    assert body["transactions"] == [
        {"from": "b", "to": "c", "amount": 4.0, "from_name": "Bob", "to_name": "Cat"},
        {"from": "a", "to": "c", "amount": 3.0, "from_name": "Alice", "to_name": "Cat"},
    ]
    assert body["card_game_details"]["total_pot"] == 7.0
    assert body["saved_id"] is None


def test_saved_settlement_can_be_fetched(client: TestClient) -> None:
    saved = client.post("/settlements/calculate", json=_cards_payload(save_results=True, game_state_id="gs1"))
    assert saved.status_code == 200
    assert saved.json()["saved_id"] is not None

    snapshot = client.get("/settlements/g1", params={"game_state_id": "gs1"})
    assert snapshot.status_code == 200
    body = snapshot.json()
    assert body["group_id"] == "g1"
    assert body["selected_games"] == ["cards"]
    assert body["result"]["payouts"] == {"a": -3.0, "b": -4.0, "c": 7.0}


def test_missing_snapshot_returns_404(client: TestClient) -> None:
    response = client.get("/settlements/unknown-group")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "snapshot_not_found"


def test_unknown_player_reference_error_shape(client: TestClient) -> None:
    payload = _cards_payload(
        card_history=[{"card_id": "c1", "card_type": "fish", "player_id": "zed", "card_value": 2}],
    )

    response = client.post("/settlements/calculate", json=payload)

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "invalid_reference"
    assert detail["details"] == {"missing": ["zed"]}


@pytest.mark.parametrize(
    "overrides",
    [
        {"selected_games": []},
        {"card_history": [{"card_id": "c1", "card_type": "dragon", "player_id": "a"}]},
    ],
)
def test_invalid_request_error_shape(client: TestClient, overrides) -> None:
    response = client.post("/settlements/calculate", json=_cards_payload(**overrides))

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_request"


def test_bbb_holes_with_string_keys(client: TestClient) -> None:
    payload = {
        "group_id": "g2",
        "players": PLAYERS,
        "selected_games": ["bbb-fbt"],
        "fbt_value": 5,
        "bbb_holes": {
            "1": {"first_on": "a", "closest_to": "a", "first_in": "none"},
            "12": {"first_on": "b"},
        },
    }

    response = client.post("/settlements/calculate", json=payload)

    assert response.status_code == 200
    # front: a wins; back: b wins; total: a wins
    assert response.json()["payouts"] == {"a": 7.5, "b": 0.0, "c": -7.5}


def test_single_game_net_endpoints(client: TestClient) -> None:
    cards = client.post("/settlements/net/cards", json={"debts": {"A": 11, "B": 2, "C": 4, "D": 2}})
    assert cards.json() == {"net": {"A": -9.0, "B": 5.5, "C": -2.0, "D": 5.5}}

    points = client.post("/settlements/net/points", json={"scores": {"A": 10, "B": 4}, "rate_per_point": 1})
    assert points.json() == {"net": {"A": 6.0, "B": -6.0}}

    fbt = client.post(
        "/settlements/net/fbt",
        json={"front": {"A": 2, "B": 1}, "back": {"A": 1, "B": 1}, "total": {"A": 3, "B": 2}, "pot_value": 10},
    )
    assert fbt.json() == {"net": {"A": 20.0, "B": -20.0}}


def test_settle_endpoint(client: TestClient) -> None:
    response = client.post("/settlements/settle", json={"net": {"A": 9, "B": -5, "C": -4}})

    assert response.status_code == 200
    assert response.json() == {
        "transactions": [
            {"from": "B", "to": "A", "amount": 5.0},
            {"from": "C", "to": "A", "amount": 4.0},
        ]
    }


def test_settle_endpoint_rejects_unbalanced_net(client: TestClient) -> None:
    response = client.post("/settlements/settle", json={"net": {"A": 9, "B": -5}})

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "settlement_invariant_violation"
