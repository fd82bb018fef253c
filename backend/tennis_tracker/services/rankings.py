from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Ranking, User
from ..time_utils import utcnow

logger = logging.getLogger(__name__)


class LeaderboardRow(NamedTuple):
    rank: int
    user_id: int
    name: Optional[str]
    avatar_url: Optional[str]
    rating: int


async def get_ranking(session: AsyncSession, user_id: int) -> Ranking | None:
    return (
        await session.execute(select(Ranking).where(Ranking.user_id == user_id))
    ).scalar_one_or_none()


async def update_rating(session: AsyncSession, user_id: int, rating: int) -> Ranking:
    """Set a user's rating, creating their ranking entry on first use."""

    ranking = await get_ranking(session, user_id)
    if ranking is None:
        ranking = Ranking(user_id=user_id, rating=rating, updated_at=utcnow())
        session.add(ranking)
        try:
            await session.commit()
        except IntegrityError:
            # a concurrent first write created the entry; update that one
            await session.rollback()
            ranking = await get_ranking(session, user_id)
            if ranking is None:
                raise
            ranking.rating = rating
            ranking.updated_at = utcnow()
            await session.commit()
    else:
        ranking.rating = rating
        ranking.updated_at = utcnow()
        await session.commit()
    logger.info("Rating for user %s set to %s", user_id, rating)
    return ranking


async def leaderboard(session: AsyncSession) -> list[LeaderboardRow]:
    """Every ranking entry, best rating first, with 1-based ranks.

    Equal ratings keep insertion order. Entries whose user cannot be found
    are still listed with an empty name and avatar.
    """

    stmt = (
        select(Ranking, User)
        .join(User, User.id == Ranking.user_id, isouter=True)
        .order_by(Ranking.id)
    )
    rows = (await session.execute(stmt)).all()
    ordered = sorted(rows, key=lambda row: row.Ranking.rating, reverse=True)
    return [
        LeaderboardRow(
            rank=i + 1,
            user_id=row.Ranking.user_id,
            name=row.User.name if row.User is not None else None,
            avatar_url=row.User.avatar_url if row.User is not None else None,
            rating=row.Ranking.rating,
        )
        for i, row in enumerate(ordered)
    ]
