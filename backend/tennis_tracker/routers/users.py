import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import user_stats_cache
from ..db import get_session
from ..exceptions import ProblemDetail, UserNotFound, UsernameTaken
from ..models import User
from ..schemas import (
    OpponentOut,
    StreakOut,
    UserCreate,
    UserListOut,
    UserOut,
    UserStatsOut,
    UserUpdate,
)
from ..services.matches import get_matches_for_user
from ..services.stats import compute_user_stats, frequent_opponents
from ..time_utils import coerce_utc

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"model": ProblemDetail}, 409: {"model": ProblemDetail}},
)

_PROFILE_FIELDS = {
    "name": "name",
    "avatarUrl": "avatar_url",
    "skillLevel": "skill_level",
    "club": "club",
    "playingStyle": "playing_style",
    "racket": "racket",
}


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        username=user.username,
        avatarUrl=user.avatar_url,
        skillLevel=user.skill_level,
        club=user.club,
        playingStyle=user.playing_style,
        racket=user.racket,
        wins=user.wins or 0,
        losses=user.losses or 0,
        matchesPlayed=user.matches_played or 0,
        createdAt=coerce_utc(user.created_at),
    )


async def _require_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise UserNotFound(user_id)
    return user


@router.post("", response_model=UserOut)
async def create_user(body: UserCreate, session: AsyncSession = Depends(get_session)):
    exists = (
        await session.execute(
            select(User.id).where(func.lower(User.username) == body.username.lower())
        )
    ).scalar_one_or_none()
    if exists is not None:
        raise UsernameTaken(body.username)
    user = User(
        name=body.name,
        username=body.username,
        avatar_url=body.avatarUrl,
        skill_level=body.skillLevel,
        club=body.club,
        playing_style=body.playingStyle,
        racket=body.racket,
        wins=0,
        losses=0,
        matches_played=0,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise UsernameTaken(body.username)
    logger.info("Created user %s (%s)", user.id, user.username)
    return user_out(user)


@router.get("", response_model=UserListOut)
async def list_users(
    q: str = "",
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(User)
    count_stmt = select(func.count()).select_from(User)
    if q:
        stmt = stmt.where(User.name.ilike(f"%{q}%"))
        count_stmt = count_stmt.where(User.name.ilike(f"%{q}%"))
    total = (await session.execute(count_stmt)).scalar()
    stmt = stmt.order_by(User.id).limit(limit).offset(offset)
    rows = (await session.execute(stmt)).scalars().all()
    return UserListOut(
        users=[user_out(u) for u in rows], total=total or 0, limit=limit, offset=offset
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, session: AsyncSession = Depends(get_session)):
    return user_out(await _require_user(session, user_id))


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int, body: UserUpdate, session: AsyncSession = Depends(get_session)
):
    user = await _require_user(session, user_id)
    for field in body.model_fields_set:
        value = getattr(body, field)
        if field == "name" and value is None:
            continue
        setattr(user, _PROFILE_FIELDS[field], value)
    await session.commit()
    return user_out(user)


@router.get("/{user_id}/stats", response_model=UserStatsOut)
async def user_stats(user_id: int, session: AsyncSession = Depends(get_session)):
    await _require_user(session, user_id)

    cached = await user_stats_cache.get(user_id, "stats")
    if cached is not None:
        return cached.model_copy(deep=True)

    matches = await get_matches_for_user(session, user_id)
    stats = compute_user_stats(user_id, matches)
    result = UserStatsOut(
        userId=user_id,
        totalMatches=stats["totalMatches"],
        wins=stats["wins"],
        losses=stats["losses"],
        winRate=stats["winRate"],
        setWinRate=stats["setWinRate"],
        currentStreak=StreakOut(**stats["currentStreak"]),
        longestWinStreak=stats["longestWinStreak"],
    )
    await user_stats_cache.set(user_id, "stats", result.model_copy(deep=True))
    return result


@router.get("/{user_id}/opponents", response_model=list[OpponentOut])
async def user_frequent_opponents(
    user_id: int,
    limit: int = Query(3, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
):
    await _require_user(session, user_id)
    matches = await get_matches_for_user(session, user_id)
    # chronological order fixes which opponent counts as met first
    matches.sort(key=lambda m: (m.date, m.created_at, m.id))
    top = frequent_opponents(user_id, matches, limit)
    if not top:
        return []
    names = dict(
        (
            await session.execute(
                select(User.id, User.name).where(
                    User.id.in_([o.opponent_id for o in top])
                )
            )
        ).all()
    )
    return [
        OpponentOut(opponentId=o.opponent_id, name=names.get(o.opponent_id), count=o.count)
        for o in top
    ]
