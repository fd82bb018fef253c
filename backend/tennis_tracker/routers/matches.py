# backend/tennis_tracker/routers/matches.py
import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import user_stats_cache
from ..db import get_session
from ..exceptions import MatchNotFound, ProblemDetail, http_problem
from ..models import Match, User
from ..rate_limit import limiter, match_rate_limit
from ..schemas import (
    MatchCreate,
    MatchOut,
    MatchSummaryOut,
    MatchUpdate,
    SetScoreOut,
)
from ..scoring.tennis import format_score, parse_sets
from ..services.matches import (
    ReferentialError,
    create_match,
    get_match,
    get_matches_for_user,
    list_matches,
    update_match,
)
from ..services.validation import ValidationError
from ..time_utils import coerce_utc

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/matches",
    tags=["matches"],
    responses={404: {"model": ProblemDetail}},
)


def match_out(match: Match) -> MatchOut:
    return MatchOut(
        id=match.id,
        player1Id=match.player1_id,
        player2Id=match.player2_id,
        date=coerce_utc(match.date),
        sets=[SetScoreOut(p1=s.p1, p2=s.p2) for s in parse_sets(match.sets or [])],
        winner=match.winner_id,
        type=match.type,
        tournamentId=match.tournament_id,
        notes=match.notes,
        createdAt=coerce_utc(match.created_at),
    )


async def _summaries(session: AsyncSession, matches: list[Match]) -> list[MatchSummaryOut]:
    user_ids = {m.player1_id for m in matches} | {m.player2_id for m in matches}
    names: dict[int, str] = {}
    if user_ids:
        names = dict(
            (
                await session.execute(
                    select(User.id, User.name).where(User.id.in_(user_ids))
                )
            ).all()
        )
    return [
        MatchSummaryOut(
            **match_out(m).model_dump(),
            player1Name=names.get(m.player1_id),
            player2Name=names.get(m.player2_id),
            score=format_score(parse_sets(m.sets or [])),
        )
        for m in matches
    ]


def _reference_problem(exc: ReferentialError):
    return http_problem(
        status_code=400,
        detail=exc.detail,
        code="match_unknown_reference",
    )


def _validation_problem(exc: ValidationError):
    return http_problem(
        status_code=422,
        detail=exc.detail,
        code="match_validation_error",
    )


# GET /api/v0/matches
@router.get("", response_model=list[MatchSummaryOut])
async def list_all_matches(
    response: Response,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    matches, has_more = await list_matches(session, limit=limit, offset=offset)

    response.headers["X-Limit"] = str(limit)
    response.headers["X-Offset"] = str(offset)
    response.headers["X-Has-More"] = "true" if has_more else "false"
    if has_more:
        response.headers["X-Next-Offset"] = str(offset + limit)

    return await _summaries(session, matches)


# GET /api/v0/matches/user/{user_id}
@router.get("/user/{user_id}", response_model=list[MatchSummaryOut])
async def list_user_matches(user_id: int, session: AsyncSession = Depends(get_session)):
    matches = await get_matches_for_user(session, user_id)
    matches.sort(key=lambda m: (m.date, m.created_at, m.id), reverse=True)
    return await _summaries(session, matches)


# POST /api/v0/matches
@router.post("", response_model=MatchOut)
@limiter.limit(match_rate_limit)
async def create_match_route(
    request: Request,
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
) -> MatchOut:
    try:
        match = await create_match(
            session,
            player1_id=body.player1Id,
            player2_id=body.player2Id,
            date=body.date,
            sets=body.sets,
            type=body.type,
            tournament_id=body.tournamentId,
            notes=body.notes,
        )
    except ValidationError as exc:
        logger.warning("Rejected match submission: %s", exc.detail)
        raise _validation_problem(exc)
    except ReferentialError as exc:
        logger.warning("Rejected match submission: %s", exc.detail)
        raise _reference_problem(exc)

    await user_stats_cache.invalidate_users([match.player1_id, match.player2_id])
    return match_out(match)


# GET /api/v0/matches/{match_id}
@router.get("/{match_id}", response_model=MatchOut)
async def get_match_route(match_id: int, session: AsyncSession = Depends(get_session)):
    match = await get_match(session, match_id)
    if not match:
        raise MatchNotFound(match_id)
    return match_out(match)


# PATCH /api/v0/matches/{match_id}
@router.patch("/{match_id}", response_model=MatchOut)
async def update_match_route(
    match_id: int,
    body: MatchUpdate,
    session: AsyncSession = Depends(get_session),
):
    try:
        match = await update_match(session, match_id, body.changes())
    except ValidationError as exc:
        raise _validation_problem(exc)
    except ReferentialError as exc:
        raise _reference_problem(exc)
    if match is None:
        raise MatchNotFound(match_id)

    await user_stats_cache.invalidate_users([match.player1_id, match.player2_id])
    return match_out(match)
