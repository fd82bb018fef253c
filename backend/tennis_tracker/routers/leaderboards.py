from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import ProblemDetail, UserNotFound
from ..models import User
from ..schemas import LeaderboardEntryOut, RankingOut, RatingUpdate
from ..services.rankings import leaderboard, update_rating
from ..time_utils import coerce_utc

# Resource-only prefix; no /api or /api/v0 here
router = APIRouter(
    prefix="/rankings",
    tags=["rankings"],
    responses={404: {"model": ProblemDetail}},
)


# GET /api/v0/rankings
@router.get("", response_model=list[LeaderboardEntryOut])
async def get_leaderboard(session: AsyncSession = Depends(get_session)):
    rows = await leaderboard(session)
    return [
        LeaderboardEntryOut(
            rank=row.rank,
            userId=row.user_id,
            name=row.name,
            avatarUrl=row.avatar_url,
            rating=row.rating,
        )
        for row in rows
    ]


# PUT /api/v0/rankings/{user_id}
@router.put("/{user_id}", response_model=RankingOut)
async def set_rating(
    user_id: int,
    body: RatingUpdate,
    session: AsyncSession = Depends(get_session),
):
    if await session.get(User, user_id) is None:
        raise UserNotFound(user_id)
    ranking = await update_rating(session, user_id, body.rating)
    return RankingOut(
        userId=ranking.user_id,
        rating=ranking.rating,
        updatedAt=coerce_utc(ranking.updated_at),
    )
