import asyncio

import pytest

from tennis_tracker.models import Ranking
from tennis_tracker.services import rankings
from tennis_tracker.services.rankings import get_ranking, leaderboard, update_rating

from conftest import create_user


def test_leaderboard_orders_by_rating(client_and_session):
    client, _ = client_and_session
    ann = create_user(client, "ann", "Ann")
    bob = create_user(client, "bob", "Bob")
    cat = create_user(client, "cat", "Cat")
    for uid, rating in ((ann, 1250), (bob, 1400), (cat, 1100)):
        assert client.put(f"/rankings/{uid}", json={"rating": rating}).status_code == 200

    resp = client.get("/rankings")
    assert resp.status_code == 200
    assert [(e["rank"], e["userId"], e["name"], e["rating"]) for e in resp.json()] == [
        (1, bob, "Bob", 1400),
        (2, ann, "Ann", 1250),
        (3, cat, "Cat", 1100),
    ]


def test_leaderboard_ties_keep_insertion_order(client_and_session):
    client, _ = client_and_session
    ids = [create_user(client, name) for name in ("zed", "amy", "kim")]
    for uid in ids:
        client.put(f"/rankings/{uid}", json={"rating": 1300})

    entries = client.get("/rankings").json()
    assert [e["userId"] for e in entries] == ids
    # ties still get distinct ranks
    assert [e["rank"] for e in entries] == [1, 2, 3]


def test_leaderboard_lists_orphaned_entries(client_and_session):
    client, session_maker = client_and_session
    ann = create_user(client, "ann", "Ann")
    client.put(f"/rankings/{ann}", json={"rating": 1200})

    async def add_orphan():
        async with session_maker() as session:
            session.add(Ranking(user_id=404, rating=1500))
            await session.commit()

    asyncio.run(add_orphan())

    entries = client.get("/rankings").json()
    assert entries[0] == {
        "rank": 1,
        "userId": 404,
        "name": None,
        "avatarUrl": None,
        "rating": 1500,
    }
    assert entries[1]["name"] == "Ann"


def test_leaderboard_empty(client_and_session):
    client, _ = client_and_session
    assert client.get("/rankings").json() == []


def test_put_rating_updates_existing_entry(client_and_session):
    client, session_maker = client_and_session
    ann = create_user(client, "ann")
    client.put(f"/rankings/{ann}", json={"rating": 1200})
    resp = client.put(f"/rankings/{ann}", json={"rating": 1333})
    assert resp.status_code == 200
    assert resp.json()["rating"] == 1333
    assert resp.json()["userId"] == ann

    async def fetch():
        async with session_maker() as session:
            return await get_ranking(session, ann), await leaderboard(session)

    ranking, rows = asyncio.run(fetch())
    assert ranking.rating == 1333
    assert len(rows) == 1


def test_put_rating_requires_user(client_and_session):
    client, _ = client_and_session
    resp = client.put("/rankings/77", json={"rating": 1300})
    assert resp.status_code == 404
    assert resp.json()["code"] == "user_not_found"


@pytest.mark.parametrize("rating", [-1, 10001, "high"])
def test_put_rating_rejects_out_of_range(client_and_session, rating):
    client, _ = client_and_session
    ann = create_user(client, "ann")
    assert client.put(f"/rankings/{ann}", json={"rating": rating}).status_code == 422


def test_update_rating_recovers_from_concurrent_first_write(client_and_session, monkeypatch):
    client, session_maker = client_and_session
    ann = create_user(client, "ann")
    client.put(f"/rankings/{ann}", json={"rating": 1200})

    real_get_ranking = rankings.get_ranking
    calls = []

    async def stale_first_read(session, user_id):
        # the first read misses the row another request just inserted
        calls.append(user_id)
        if len(calls) == 1:
            return None
        return await real_get_ranking(session, user_id)

    monkeypatch.setattr(rankings, "get_ranking", stale_first_read)

    async def run():
        async with session_maker() as session:
            updated = await update_rating(session, ann, 1450)
        async with session_maker() as session:
            return updated, await leaderboard(session)

    updated, rows = asyncio.run(run())
    assert len(calls) == 2
    assert updated.rating == 1450
    assert [(row.user_id, row.rating) for row in rows] == [(ann, 1450)]
