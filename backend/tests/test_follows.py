from conftest import create_user


def test_follow_lifecycle(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    bob = create_user(client, "bob")
    cat = create_user(client, "cat")

    resp = client.post("/follows", json={"followerId": ann, "followingId": bob})
    assert resp.status_code == 200
    assert resp.json()["followerId"] == ann
    assert resp.json()["followingId"] == bob
    client.post("/follows", json={"followerId": cat, "followingId": bob})

    following = client.get(f"/follows/{ann}").json()
    assert [f["followingId"] for f in following] == [bob]
    followers = client.get(f"/follows/{bob}/followers").json()
    assert [f["followerId"] for f in followers] == [ann, cat]

    assert client.delete(f"/follows/{ann}/{bob}").status_code == 204
    assert client.get(f"/follows/{ann}").json() == []
    assert [f["followerId"] for f in client.get(f"/follows/{bob}/followers").json()] == [cat]


def test_follow_duplicate_conflicts(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    bob = create_user(client, "bob")
    assert client.post("/follows", json={"followerId": ann, "followingId": bob}).status_code == 200

    resp = client.post("/follows", json={"followerId": ann, "followingId": bob})
    assert resp.status_code == 409
    assert resp.json()["code"] == "follow_exists"

    # the reverse direction is a different relationship
    assert client.post("/follows", json={"followerId": bob, "followingId": ann}).status_code == 200


def test_follow_rejects_self_and_unknown_users(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")

    resp = client.post("/follows", json={"followerId": ann, "followingId": ann})
    assert resp.status_code == 422
    assert resp.json()["code"] == "follow_validation_error"

    resp = client.post("/follows", json={"followerId": ann, "followingId": 500})
    assert resp.status_code == 404
    assert resp.json()["code"] == "user_not_found"


def test_unfollow_missing_relationship(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    bob = create_user(client, "bob")
    resp = client.delete(f"/follows/{ann}/{bob}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "follow_not_found"
