from conftest import create_user


def test_create_and_fetch_tournament(client_and_session):
    client, _ = client_and_session
    org = create_user(client, "organizer")

    resp = client.post(
        "/tournaments",
        json={
            "name": "  Spring Open ",
            "organizerId": org,
            "startDate": "2024-04-01T09:00:00Z",
            "endDate": "2024-04-03T18:00:00Z",
        },
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["name"] == "Spring Open"
    assert data["type"] == "singles"
    assert data["status"] == "upcoming"
    assert data["maxParticipants"] == 16
    assert data["startDate"].startswith("2024-04-01T09:00:00")

    assert client.get(f"/tournaments/{data['id']}").json() == data
    assert [t["id"] for t in client.get("/tournaments").json()] == [data["id"]]


def test_create_tournament_validation(client_and_session):
    client, _ = client_and_session
    org = create_user(client, "organizer")

    resp = client.post(
        "/tournaments",
        json={
            "name": "Backwards",
            "organizerId": org,
            "startDate": "2024-04-03T00:00:00Z",
            "endDate": "2024-04-01T00:00:00Z",
        },
    )
    assert resp.status_code == 422
    resp = client.post("/tournaments", json={"name": "Tiny", "organizerId": org, "maxParticipants": 1})
    assert resp.status_code == 422

    resp = client.post("/tournaments", json={"name": "Ghost", "organizerId": 999})
    assert resp.status_code == 404
    assert resp.json()["code"] == "user_not_found"


def test_tournament_matches(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    bob = create_user(client, "bob")
    tid = client.post("/tournaments", json={"name": "Cup", "organizerId": ann}).json()["id"]

    final = client.post(
        "/matches",
        json={
            "player1Id": ann,
            "player2Id": bob,
            "date": "2024-04-02T00:00:00Z",
            "sets": ["6-4", "6-4"],
            "type": "tournament",
            "tournamentId": tid,
        },
    ).json()
    semi = client.post(
        "/matches",
        json={
            "player1Id": bob,
            "player2Id": ann,
            "date": "2024-04-01T00:00:00Z",
            "sets": ["6-4", "6-4"],
            "type": "tournament",
            "tournamentId": tid,
        },
    ).json()
    client.post(
        "/matches",
        json={"player1Id": ann, "player2Id": bob, "date": "2024-04-05T00:00:00Z", "sets": ["6-0"]},
    )

    resp = client.get(f"/tournaments/{tid}/matches")
    assert resp.status_code == 200
    assert [m["id"] for m in resp.json()] == [semi["id"], final["id"]]
    assert all(m["tournamentId"] == tid for m in resp.json())


def test_missing_tournament(client_and_session):
    client, _ = client_and_session
    assert client.get("/tournaments/5").status_code == 404
    resp = client.get("/tournaments/5/matches")
    assert resp.status_code == 404
    assert resp.json()["code"] == "tournament_not_found"
