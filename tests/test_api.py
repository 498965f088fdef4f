"""
HTTP API tests
"""
import pytest
from fastapi.testclient import TestClient

from hunt.main import app


KEY = "ABCDEFGHIJ"


@pytest.fixture
def client(fresh_state):
    return TestClient(app)


@pytest.fixture
def team_id(client):
    response = client.post("/admin/teams", json={"username": "pirates", "team_name": "The Pirates"})
    assert response.status_code == 200
    return response.json()["team"]["id"]


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["pass_key_set"] is False


def test_config(client):
    assert client.get("/config").json()["settings"]["case_policy"] == "upper"


def test_autosave_single_answer(client, team_id):
    response = client.put(f"/teams/{team_id}/answers/3", json={"value": "Z"})
    assert response.status_code == 200
    body = response.json()
    assert body["answers"] == ["", "", "", "Z", "", "", "", "", "", ""]
    assert body["is_final"] is False
    assert body["status"] == "DRAFT"


def test_autosave_bad_input(client, team_id):
    assert client.put(f"/teams/{team_id}/answers/10", json={"value": "Z"}).status_code == 400
    response = client.put(f"/teams/{team_id}/answers/0", json={"value": "ZZ"})
    assert response.status_code == 400
    assert response.json()["error"] == "validation"


def test_unknown_team_is_404(client):
    response = client.put("/teams/team-ghost/answers/0", json={"value": "A"})
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_draft_then_final_then_locked(client, team_id):
    assert client.put(f"/teams/{team_id}/draft", json={"answers": list("ABC") + [""] * 7}).status_code == 200

    response = client.post(f"/teams/{team_id}/submit", json={"answers": list("ABC") + [""] * 7})
    assert response.status_code == 400
    assert response.json()["error"] == "incomplete"
    assert response.json()["empty_slots"] == [3, 4, 5, 6, 7, 8, 9]

    response = client.post(f"/teams/{team_id}/submit", json={"answers": list(KEY)})
    assert response.status_code == 200
    assert response.json()["status"] == "FINAL"

    response = client.put(f"/teams/{team_id}/answers/0", json={"value": "Q"})
    assert response.status_code == 409
    assert response.json()["error"] == "finalized"
    assert client.get(f"/teams/{team_id}/submission").json()["answers"] == list(KEY)


def test_missing_answers_field(client, team_id):
    assert client.put(f"/teams/{team_id}/draft", json={}).status_code == 400


def test_submission_absent(client, team_id):
    body = client.get(f"/teams/{team_id}/submission").json()
    assert body["status"] == "NO_SUBMISSION"
    assert body["answers"] == [""] * 10


def test_pass_key(client):
    assert client.get("/admin/pass-key").json()["pass_key"] is None
    assert client.put("/admin/pass-key", json={"pass_key": "SHORT"}).status_code == 400

    response = client.put("/admin/pass-key", json={"pass_key": KEY})
    assert response.status_code == 200
    assert response.json()["version"] == 1
    client.put("/admin/pass-key", json={"pass_key": "ZZZZZZZZZZ"})

    assert client.get("/admin/pass-key").json()["pass_key"] == "ZZZZZZZZZZ"
    assert len(client.get("/admin/pass-key/history").json()["keys"]) == 2


def test_leaderboard_flow(client):
    ids = {}
    for name in ("alpha", "beta", "gamma"):
        response = client.post("/admin/teams", json={"username": name, "team_name": name.title()})
        ids[name] = response.json()["team"]["id"]

    client.put("/admin/pass-key", json={"pass_key": KEY})
    client.post(f"/teams/{ids['alpha']}/submit", json={"answers": list("ABCDEFGHxx")})
    client.post(f"/teams/{ids['beta']}/submit", json={"answers": list("ABCDEFGHIx")})
    client.put(f"/teams/{ids['gamma']}/draft", json={"answers": list("ABCDEFGH") + ["", ""]})

    data = client.get("/api/leaderboard-data").json()
    assert [t["team_name"] for t in data["teams"]] == ["Beta", "Alpha", "Gamma"]
    assert [t["accuracy_percentage"] for t in data["teams"]] == [90.0, 80.0, 80.0]
    assert [t["rank"] for t in data["teams"]] == [1, 2, 3]
    assert data["summary"]["final_submissions"] == 2

    progress = client.get(f"/teams/{ids['alpha']}/progress").json()
    assert progress["rank"] == 2
    assert progress["team_name"] == "Alpha"

    assert client.post("/api/leaderboard/refresh").json()["total_teams"] == 3


def test_team_management(client, team_id):
    assert client.post("/admin/teams", json={"username": "pirates", "team_name": "X"}).status_code == 400
    assert client.post("/admin/teams", json={"username": "x"}).status_code == 400

    response = client.patch(f"/admin/teams/{team_id}", json={"team_name": "Renamed"})
    assert response.json()["team"]["team_name"] == "Renamed"
    assert client.patch(f"/admin/teams/{team_id}", json={}).status_code == 400

    client.put(f"/teams/{team_id}/answers/0", json={"value": "A"})
    listing = client.get("/admin/teams").json()
    assert listing["total_teams"] == 1
    assert listing["teams"][0]["status"] == "DRAFT"

    response = client.delete(f"/admin/teams/{team_id}")
    assert response.json()["removed_submissions"] == 1
    assert client.get("/api/leaderboard-data").json()["teams"] == []
    assert client.delete(f"/admin/teams/{team_id}").status_code == 404


def test_case_policy_switch(client, team_id, tmp_path, monkeypatch):
    monkeypatch.setenv("HUNT_CONFIG", str(tmp_path / "hunt.yaml"))
    client.put("/admin/pass-key", json={"pass_key": KEY})
    client.put(f"/teams/{team_id}/draft", json={"answers": list("abcdefghij")})
    assert client.get("/api/leaderboard-data").json()["teams"][0]["accuracy_percentage"] == 100.0

    response = client.put("/admin/settings/case-policy", json={"case_policy": "exact"})
    assert response.status_code == 200
    assert client.get("/api/leaderboard-data").json()["teams"][0]["accuracy_percentage"] == 0.0
    assert (tmp_path / "hunt.yaml").exists()

    assert client.put("/admin/settings/case-policy", json={"case_policy": "title"}).status_code == 400
