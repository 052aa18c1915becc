import pytest
from fastapi.testclient import TestClient

import app as app_module
from conftest import BrokenSheetStore, FakeSheetStore, lineup_payload, selection_rows
from sheets_store import SheetStoreError

EDIT_BODY = {
    "week": 3,
    "matchupId": "M1",
    "teamName": "Alpha",
    "position": "Guard 1",
    "changes": {"playerId": "P99", "playerName": "Replacement"},
}


@pytest.fixture
def empty_client():
    app_module.app.dependency_overrides[app_module.get_store] = lambda: FakeSheetStore()
    with TestClient(app_module.app) as c:
        yield c
    app_module.app.dependency_overrides.clear()


def _login(client, email, password):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.parametrize(
    "path",
    ["/teams", "/players", "/matchups", "/weekdates", "/schedule", "/standings", "/selections"],
)
def test_empty_tabs_are_empty_lists(empty_client, path):
    resp = empty_client.get(path)
    assert resp.status_code == 200
    assert resp.json() == []


def test_teams_never_include_passwords(client):
    teams = client.get("/teams").json()
    assert [t["teamId"] for t in teams] == ["T001", "T002", "T014"]
    assert all("password" not in t for t in teams)


def test_players_filters(client):
    assert len(client.get("/players").json()) == 4
    alpha = client.get("/players", params={"teamId": "T001"}).json()
    assert [p["playerId"] for p in alpha] == ["P1", "P2", "P3"]
    assert alpha[0]["salary25_26"] == 10.0

    injured = client.get("/players", params={"teamId": "T001", "status": "ir"}).json()
    assert [p["playerId"] for p in injured] == ["P2"]

    bravo = client.get("/players", params={"teamId": "T002"}).json()
    assert bravo[0]["salary25_26"] == "RFA"


def test_schedule_and_standings(client):
    assert len(client.get("/schedule", params={"week": "3"}).json()) == 3
    assert client.get("/schedule", params={"week": "x"}).status_code == 400
    standings = client.get("/standings").json()
    assert [s["teamId"] for s in standings] == ["T001", "T002"]


def test_draft_picks(client):
    assert client.get("/draft-picks").status_code == 400
    missing = client.get("/draft-picks", params={"teamId": "T777"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "Team not found"}
    picks = client.get("/draft-picks", params={"teamId": "T001"}).json()
    assert picks["picks2026"] == "1st, 2nd"


def test_draft_picks_empty_tab(empty_client):
    assert empty_client.get("/draft-picks", params={"teamId": "T001"}).json() == []


def test_current_time_missing(empty_client):
    assert empty_client.get("/current-time").status_code == 404


def test_current_time_and_week(client):
    assert client.get("/current-time").json() == {"date": "21/10/2025", "time": "09:30"}

    week = client.get("/current-week").json()
    assert week == {"today": "2025-10-21", "week": 3, "selectionWeek": 4}


def test_team_cap(client):
    body = client.get("/teams/T001/cap").json()
    first = body["seasons"][0]
    assert first["season"] == "25-26"
    assert first["capAllocation"] == pytest.approx(12.0)
    assert first["capSpace"] == pytest.approx(247.2 + 12.36 - 12.0)
    assert body["injuryCount"] == 1
    assert client.get("/teams/T777/cap").status_code == 404


def test_matchup_box_score(client):
    body = client.get("/matchups/M1").json()
    assert body["matchup"]["team1Score"] == 101.5
    alpha, bravo = body["teams"]
    assert alpha["teamId"] == "T001"
    assert len(alpha["slots"]) == 12
    assert alpha["slots"][0]["selection"]["playerId"] == "A0"
    assert bravo["slots"][-1]["selection"]["playerId"] == "B11"
    assert client.get("/matchups/M404").status_code == 404


def test_selections_listing(client):
    rows = client.get("/selections", params={"week": "3", "teamId": "T002"}).json()
    assert len(rows) == 12
    assert rows[0]["selectedGame"] == rows[0]["nbaOpposition"] == "Tue @ NYK"


def test_selection_options(client):
    body = client.get("/selections/options", params={"teamId": "T001", "week": "3"}).json()
    assert body["matchupId"] == "M1"
    assert body["opponentTeamName"] == "Bravo"
    assert body["readyToSubmit"] is False
    slots = {s["id"]: s for s in body["slots"]}
    assert len(slots) == 12
    assert [p["playerId"] for p in slots["guard1"]["players"]] == ["P1"]
    assert slots["centre"]["players"] == []
    assert [p["playerId"] for p in slots["flex1"]["players"]] == ["P3", "P1"]


def test_submit(client, seeded_store):
    resp = client.post("/selections/submit", json=lineup_payload(prefix="Z"))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    alpha = [r for r in seeded_store.tabs["Selections"] if r[0] == "3" and r[2] == "T001"]
    assert [r[6] for r in alpha] == [f"Z{i}" for i in range(12)]


def test_submit_missing_fields(client, seeded_store):
    payload = lineup_payload()
    del payload["teamName"]
    resp = client.post("/selections/submit", json=payload)
    assert resp.status_code == 400
    assert "teamName" in resp.json()["error"]
    assert seeded_store.writes == []


def test_edit_requires_session(client, seeded_store):
    resp = client.post("/selections/edit", json=EDIT_BODY)
    assert resp.status_code == 401
    assert seeded_store.writes == []


def test_edit_rejects_regular_team(client, seeded_store):
    _login(client, "alpha@example.com", "alpha-pass")
    resp = client.post("/selections/edit", json=EDIT_BODY)
    assert resp.status_code == 403
    assert seeded_store.writes == []


def test_edit_accepts_numeric_ids(client, seeded_store):
    seeded_store.tabs["Selections"] += selection_rows(5, "T001", "Alpha", matchup_id="1")
    _login(client, "commish@example.com", "boss")

    body = dict(EDIT_BODY, week=5, matchupId=1)
    resp = client.post("/selections/edit", json=body)
    assert resp.status_code == 200
    assert resp.json()["updated"]["matchupId"] == "1"
    edited = [r for r in seeded_store.tabs["Selections"] if r[0] == "5" and r[5] == "Guard 1"]
    assert edited[0][6] == "P99"


def test_submit_accepts_numeric_team_id(client, seeded_store):
    payload = lineup_payload(week=6, team_id=7)
    payload["matchupId"] = 12
    resp = client.post("/selections/submit", json=payload)
    assert resp.status_code == 200
    rows = [r for r in seeded_store.tabs["Selections"] if r[0] == "6"]
    assert len(rows) == 12
    assert rows[0][1:3] == ["12", "7"]


def test_commissioner_edit(client, seeded_store):
    _login(client, "commish@example.com", "boss")
    resp = client.post("/selections/edit", json=EDIT_BODY)
    assert resp.status_code == 200
    assert resp.json()["updated"]["changes"]["playerId"] == "P99"

    missing = client.post("/selections/edit", json=dict(EDIT_BODY, position="Bench"))
    assert missing.status_code == 404
    assert missing.json()["details"]["position"] == "Bench"

    empty = client.post("/selections/edit", json=dict(EDIT_BODY, changes={}))
    assert empty.status_code == 400


def test_login_me_logout(client):
    me = _login(client, "ALPHA@example.com", "alpha-pass")
    assert me == {"teamId": "T001", "teamName": "Alpha", "role": "team"}
    assert client.get("/auth/me").json()["teamId"] == "T001"

    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401


def test_me_refreshes_from_refresh_cookie(client):
    _login(client, "commish@example.com", "boss")
    client.cookies.delete("dl_access")
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["role"] == "commissioner"
    assert "dl_access" in resp.cookies


def test_bad_logins(client):
    resp = client.post("/auth/login", json={"email": "alpha@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}
    assert client.post("/auth/login", json={"email": "who@example.com", "password": "x"}).status_code == 401
    assert client.post("/auth/login", json={"email": "alpha@example.com"}).status_code == 400


def test_store_failure_is_generic_500():
    app_module.app.dependency_overrides[app_module.get_store] = lambda: BrokenSheetStore()
    try:
        with TestClient(app_module.app) as c:
            resp = c.get("/players")
    finally:
        app_module.app.dependency_overrides.clear()
    assert resp.status_code == 500
    assert "service-account" not in resp.text
    assert resp.json() == {"error": "Failed to reach the league spreadsheet"}


def test_image_proxy(client, monkeypatch):
    class Upstream:
        ok = True
        status_code = 200
        content = b"\x89PNG"
        headers = {"content-type": "image/png"}

    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append((url, headers))
        return Upstream()

    monkeypatch.setattr(app_module.requests, "get", fake_get)
    resp = client.get("/image", params={"url": "https://cdn.example.com/p1.png"})
    assert resp.status_code == 200
    assert resp.content == b"\x89PNG"
    assert "User-Agent" in calls[0][1]

    assert client.get("/image").status_code == 400
    assert client.get("/image", params={"url": "file:///etc/passwd"}).status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_google_health_hides_upstream_detail(monkeypatch):
    def broken_store():
        raise SheetStoreError("invalid_grant: key for svc@example.iam rejected")

    monkeypatch.setattr(app_module, "get_store", broken_store)
    with TestClient(app_module.app) as c:
        resp = c.get("/health/google")
    assert resp.status_code == 500
    assert "invalid_grant" not in resp.text
    assert resp.json()["error"] == {"message": "Could not open the league spreadsheet"}


def test_google_health_read_failure(monkeypatch):
    monkeypatch.setattr(app_module, "get_store", lambda: BrokenSheetStore())
    with TestClient(app_module.app) as c:
        resp = c.get("/health/google")
    assert resp.status_code == 500
    body = resp.json()
    assert body["googleAuth"] == "ok"
    assert body["error"] == {"message": "Could not read the league spreadsheet"}
    assert "quota" not in resp.text
