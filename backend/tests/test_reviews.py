from conftest import create_user


def test_create_and_list_reviews(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann", "Ann")
    bob = create_user(client, "bob", "Bob")
    coach = create_user(client, "coach", "Coach")

    first = client.post(
        "/reviews",
        json={"reviewerId": ann, "reviewedId": coach, "rating": 5, "comment": " great "},
    )
    assert first.status_code == 200, first.text
    assert first.json()["reviewerName"] == "Ann"
    assert first.json()["comment"] == "great"
    second = client.post(
        "/reviews",
        json={"reviewerId": bob, "reviewedId": coach, "rating": 3, "isAnonymous": True},
    )
    assert second.status_code == 200

    reviews = client.get(f"/reviews/user/{coach}").json()
    assert [r["id"] for r in reviews] == [second.json()["id"], first.json()["id"]]
    anonymous, named = reviews
    assert anonymous["isAnonymous"] is True
    assert anonymous["reviewerId"] is None
    assert anonymous["reviewerName"] is None
    assert (named["reviewerId"], named["reviewerName"], named["rating"]) == (ann, "Ann", 5)
    assert client.get(f"/reviews/user/{ann}").json() == []


def test_review_can_reference_match_and_training(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    coach = create_user(client, "coach")
    match_id = client.post(
        "/matches",
        json={"player1Id": ann, "player2Id": coach, "date": "2024-06-01T00:00:00Z", "sets": ["6-4"]},
    ).json()["id"]
    training_id = client.post(
        "/training-sessions",
        json={"studentId": ann, "trainerId": coach, "date": "2024-06-02T00:00:00Z", "duration": 45},
    ).json()["id"]

    resp = client.post(
        "/reviews",
        json={
            "reviewerId": ann,
            "reviewedId": coach,
            "rating": 4,
            "matchId": match_id,
            "trainingId": training_id,
        },
    )
    assert resp.status_code == 200
    assert (resp.json()["matchId"], resp.json()["trainingId"]) == (match_id, training_id)


def test_create_review_validation(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    coach = create_user(client, "coach")

    def post(**fields):
        payload = {"reviewerId": ann, "reviewedId": coach, "rating": 4}
        payload.update(fields)
        return client.post("/reviews", json=payload)

    assert post(rating=0).status_code == 422
    assert post(rating=6).status_code == 422
    assert post(reviewedId=ann).status_code == 422

    resp = post(reviewedId=999)
    assert resp.status_code == 404
    assert resp.json()["code"] == "user_not_found"
    assert post(matchId=55).json()["code"] == "match_not_found"
    assert post(trainingId=66).json()["code"] == "training_session_not_found"
    assert client.get(f"/reviews/user/{coach}").json() == []
