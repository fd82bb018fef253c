import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import (
    FollowAlreadyExists,
    FollowNotFound,
    ProblemDetail,
    UserNotFound,
    http_problem,
)
from ..models import Follow, User
from ..schemas import FollowCreate, FollowOut
from ..services.validation import ValidationError, validate_follow
from ..time_utils import coerce_utc

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/follows",
    tags=["follows"],
    responses={404: {"model": ProblemDetail}, 409: {"model": ProblemDetail}},
)


def follow_out(follow: Follow) -> FollowOut:
    return FollowOut(
        id=follow.id,
        followerId=follow.follower_id,
        followingId=follow.following_id,
        createdAt=coerce_utc(follow.created_at),
    )


async def _find_follow(
    session: AsyncSession, follower_id: int, following_id: int
) -> Follow | None:
    return (
        await session.execute(
            select(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
    ).scalar_one_or_none()


@router.post("", response_model=FollowOut)
async def create_follow(body: FollowCreate, session: AsyncSession = Depends(get_session)):
    try:
        validate_follow(body.followerId, body.followingId)
    except ValidationError as exc:
        raise http_problem(
            status_code=422,
            detail=exc.detail,
            code="follow_validation_error",
        )
    for uid in (body.followerId, body.followingId):
        if await session.get(User, uid) is None:
            raise UserNotFound(uid)
    if await _find_follow(session, body.followerId, body.followingId):
        raise FollowAlreadyExists(body.followerId, body.followingId)

    follow = Follow(follower_id=body.followerId, following_id=body.followingId)
    session.add(follow)
    try:
        await session.commit()
    except IntegrityError:
        # lost a race against an identical request
        await session.rollback()
        raise FollowAlreadyExists(body.followerId, body.followingId)
    logger.info("User %s now follows %s", body.followerId, body.followingId)
    return follow_out(follow)


# Users that ``user_id`` follows
@router.get("/{user_id}", response_model=list[FollowOut])
async def list_following(user_id: int, session: AsyncSession = Depends(get_session)):
    rows = (
        await session.execute(
            select(Follow).where(Follow.follower_id == user_id).order_by(Follow.id)
        )
    ).scalars().all()
    return [follow_out(f) for f in rows]


@router.get("/{user_id}/followers", response_model=list[FollowOut])
async def list_followers(user_id: int, session: AsyncSession = Depends(get_session)):
    rows = (
        await session.execute(
            select(Follow).where(Follow.following_id == user_id).order_by(Follow.id)
        )
    ).scalars().all()
    return [follow_out(f) for f in rows]


@router.delete("/{follower_id}/{following_id}", status_code=204)
async def delete_follow(
    follower_id: int,
    following_id: int,
    session: AsyncSession = Depends(get_session),
) -> Response:
    result = await session.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    if not result.rowcount:
        raise FollowNotFound(follower_id, following_id)
    await session.commit()
    logger.info("User %s unfollowed %s", follower_id, following_id)
    return Response(status_code=204)
