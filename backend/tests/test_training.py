from conftest import create_user


def request_session(client, student, trainer, date="2024-06-01T09:00:00Z", **extra):
    payload = {"studentId": student, "trainerId": trainer, "date": date, "duration": 60}
    payload.update(extra)
    return client.post("/training-sessions", json=payload)


def test_create_training_session_defaults_to_pending(client_and_session):
    client, _ = client_and_session
    student = create_user(client, "student")
    coach = create_user(client, "coach")

    resp = request_session(client, student, coach, notes="  backhand drills ")
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["status"] == "pending"
    assert data["duration"] == 60
    assert data["notes"] == "backhand drills"
    assert data["date"].startswith("2024-06-01T09:00:00")


def test_training_sessions_by_student_and_trainer(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    bob = create_user(client, "bob")
    coach = create_user(client, "coach")
    early = request_session(client, ann, coach, date="2024-06-01T09:00:00Z").json()
    late = request_session(client, ann, coach, date="2024-06-08T09:00:00Z").json()
    other = request_session(client, bob, coach).json()

    assert [s["id"] for s in client.get(f"/training-sessions/student/{ann}").json()] == [
        late["id"],
        early["id"],
    ]
    trainer_ids = [s["id"] for s in client.get(f"/training-sessions/trainer/{coach}").json()]
    assert sorted(trainer_ids) == sorted([early["id"], late["id"], other["id"]])
    assert client.get(f"/training-sessions/student/{coach}").json() == []


def test_create_training_session_validation(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    coach = create_user(client, "coach")

    assert request_session(client, ann, ann).status_code == 422
    assert request_session(client, ann, coach, duration=5).status_code == 422
    assert request_session(client, ann, coach, status="cancelled").status_code == 422

    resp = request_session(client, ann, 404)
    assert resp.status_code == 404
    assert resp.json()["code"] == "user_not_found"


def test_update_training_session_status(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    coach = create_user(client, "coach")
    sid = request_session(client, ann, coach).json()["id"]

    resp = client.patch(f"/training-sessions/{sid}", json={"status": "confirmed"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"

    resp = client.patch(
        f"/training-sessions/{sid}",
        json={"status": "completed", "duration": 90, "date": "2024-06-02T10:00:00Z"},
    )
    data = resp.json()
    assert (data["status"], data["duration"]) == ("completed", 90)
    assert data["date"].startswith("2024-06-02T10:00:00")


def test_update_training_session_rejects_bad_changes(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    coach = create_user(client, "coach")
    sid = request_session(client, ann, coach).json()["id"]

    assert client.patch(f"/training-sessions/{sid}", json={}).status_code == 422
    assert client.patch(f"/training-sessions/{sid}", json={"status": None}).status_code == 422
    assert client.patch(f"/training-sessions/{sid}", json={"studentId": coach}).status_code == 422

    resp = client.patch("/training-sessions/999", json={"status": "confirmed"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "training_session_not_found"
