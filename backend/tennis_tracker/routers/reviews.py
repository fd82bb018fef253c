import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import MatchNotFound, TrainingSessionNotFound, UserNotFound
from ..models import Match, Review, TrainingSession, User
from ..schemas import ReviewCreate, ReviewOut
from ..time_utils import coerce_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def review_out(review: Review, reviewer_name: str | None) -> ReviewOut:
    anonymous = bool(review.is_anonymous)
    return ReviewOut(
        id=review.id,
        reviewerId=None if anonymous else review.reviewer_id,
        reviewerName=None if anonymous else reviewer_name,
        reviewedId=review.reviewed_id,
        matchId=review.match_id,
        trainingId=review.training_id,
        rating=review.rating,
        comment=review.comment,
        isAnonymous=anonymous,
        createdAt=coerce_utc(review.created_at),
    )


# Reviews received by ``user_id``, newest first
@router.get("/reviews/user/{user_id}", response_model=list[ReviewOut])
async def list_user_reviews(user_id: int, session: AsyncSession = Depends(get_session)):
    rows = (
        await session.execute(
            select(Review, User.name)
            .join(User, User.id == Review.reviewer_id, isouter=True)
            .where(Review.reviewed_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
    ).all()
    return [review_out(review, name) for review, name in rows]


@router.post("/reviews", response_model=ReviewOut)
async def create_review(body: ReviewCreate, session: AsyncSession = Depends(get_session)):
    reviewer = await session.get(User, body.reviewerId)
    if reviewer is None:
        raise UserNotFound(body.reviewerId)
    if await session.get(User, body.reviewedId) is None:
        raise UserNotFound(body.reviewedId)
    if body.matchId is not None and await session.get(Match, body.matchId) is None:
        raise MatchNotFound(body.matchId)
    if body.trainingId is not None and await session.get(TrainingSession, body.trainingId) is None:
        raise TrainingSessionNotFound(body.trainingId)

    review = Review(
        reviewer_id=body.reviewerId,
        reviewed_id=body.reviewedId,
        match_id=body.matchId,
        training_id=body.trainingId,
        rating=body.rating,
        comment=body.comment,
        is_anonymous=body.isAnonymous,
    )
    session.add(review)
    await session.commit()
    logger.info("Review %s left for user %s (%s stars)", review.id, review.reviewed_id, review.rating)
    return review_out(review, reviewer.name)
