import pytest
from fastapi.testclient import TestClient

from landlord.service import LedgerService
from landlord.settings import LedgerSettings
from server.app import create_app


@pytest.fixture
def client():
    app = create_app(service=LedgerService(), settings=LedgerSettings(max_bombs=10, cors_origins="*"))
    return TestClient(app)


def start_match(client):
    player_ids = [client.post("/players", json={"name": name}).json()["id"] for name in ("Lin", "Mei", "Tao")]
    response = client.post("/matches", json={"player_ids": player_ids})
    assert response.status_code == 200
    return response.json()["match_id"], player_ids


def test_duplicate_player_name_is_rejected(client):
    assert client.post("/players", json={"name": "Lin"}).status_code == 200

    response = client.post("/players", json={"name": "Lin"})

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]
    assert [player["name"] for player in client.get("/players").json()] == ["Lin"]


def test_recording_a_round_returns_running_totals(client):
    match_id, _ = start_match(client)

    response = client.post(
        f"/matches/{match_id}/rounds",
        json={"bids": [1, None, 0], "doubled": [True, False, False], "bombs": 1},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["totals"] == [800, -400, -400]
    assert body["rounds"][0]["landlord"] == 1
    assert body["rounds"][0]["first_bidder"] == 0
    assert body["next_bidder"] == 1


@pytest.mark.parametrize(
    "bids, message",
    [([2, 2, None], "Multiple seats bid 2."), ([None, None, None], "Nobody bid.")],
)
def test_bid_errors_surface_verbatim(client, bids, message):
    match_id, _ = start_match(client)

    response = client.post(f"/matches/{match_id}/rounds", json={"bids": bids})

    assert response.status_code == 400
    assert response.json()["detail"] == message
    assert client.get(f"/matches/{match_id}").json()["rounds"] == []


@pytest.mark.parametrize("bombs", [-1, 11])
def test_out_of_range_bombs_are_unprocessable(client, bombs):
    match_id, _ = start_match(client)

    response = client.post(f"/matches/{match_id}/rounds", json={"bids": [1, 0, 0], "bombs": bombs})

    assert response.status_code == 422


def test_finish_edit_and_report(client):
    match_id, player_ids = start_match(client)
    client.post(f"/matches/{match_id}/rounds", json={"bids": [1, 0, 0], "spring": True})
    client.post(f"/matches/{match_id}/rounds", json={"bids": [0, 2, 0]})

    finished = client.post(f"/matches/{match_id}/finish").json()
    assert finished["discarded"] is False
    assert finished["summary"]["final_scores"] == [200, 200, -400]

    assert client.post(f"/matches/{match_id}/rounds", json={"bids": [1, 0, 0]}).status_code == 409

    edited = client.put(f"/matches/{match_id}/rounds/1", json={"bids": [0, 0, 2]})
    assert edited.status_code == 200
    assert edited.json()["totals"] == [200, -400, 200]
    assert edited.json()["finished"] is True

    report = client.get(f"/matches/{match_id}/report").json()
    assert report["spring_rounds"] == 1
    assert report["summary"]["final_scores"] == [200, -400, 200]
    assert report["players"][player_ids[2]]["total_score"] == 200

    stats = client.get(f"/players/{player_ids[0]}/statistics").json()
    assert stats["total_rounds"] == 2
    assert stats["spring_count"] == 1
    assert stats["first_bid_counts"]["1"] == 1


def test_empty_match_finish_is_discarded(client):
    match_id, _ = start_match(client)

    response = client.post(f"/matches/{match_id}/finish")

    assert response.json() == {"discarded": True, "summary": None}
    assert client.get(f"/matches/{match_id}").status_code == 404


def test_delete_round(client):
    match_id, _ = start_match(client)
    client.post(f"/matches/{match_id}/rounds", json={"bids": [1, 0, 0]})
    client.post(f"/matches/{match_id}/rounds", json={"bids": [0, 1, 0]})

    response = client.delete(f"/matches/{match_id}/rounds/0")

    assert response.status_code == 200
    assert response.json()["removed"]["deltas"] == [200, -100, -100]
    view = client.get(f"/matches/{match_id}").json()
    assert [record["round_index"] for record in view["rounds"]] == [0]
    assert view["totals"] == [-100, 200, -100]
    assert client.delete(f"/matches/{match_id}/rounds/5").status_code == 409


def test_next_bidder_override(client):
    match_id, _ = start_match(client)

    response = client.post(f"/matches/{match_id}/next-bidder", json={"seat": 2})

    assert response.json()["next_bidder"] == 2
    assert client.post(f"/matches/{match_id}/next-bidder", json={"seat": 3}).status_code == 422


def test_unknown_records_are_not_found(client):
    assert client.get("/matches/ghost").status_code == 404
    assert client.get("/players/ghost/statistics").status_code == 404
    assert client.post("/matches", json={"player_ids": ["a", "b", "c"]}).status_code == 404


def test_preview_does_not_record(client):
    response = client.post(
        "/rounds/preview",
        json={"bids": [0, 3, 1], "doubled": [False, True, True], "spring": True, "landlord_result": False},
    )

    assert response.status_code == 200
    assert response.json() == {"landlord_seat": 1, "deltas": [1200, -3600, 2400]}
