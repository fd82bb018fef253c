import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import TournamentNotFound, UserNotFound
from ..models import Match, Tournament, User
from ..schemas import MatchOut, TournamentCreate, TournamentOut
from ..time_utils import coerce_utc, naive_utc
from .matches import match_out

logger = logging.getLogger(__name__)

router = APIRouter()


def tournament_out(t: Tournament) -> TournamentOut:
    return TournamentOut(
        id=t.id,
        name=t.name,
        type=t.type,
        status=t.status,
        organizerId=t.organizer_id,
        maxParticipants=t.max_participants,
        startDate=coerce_utc(t.start_date),
        endDate=coerce_utc(t.end_date),
        createdAt=coerce_utc(t.created_at),
    )


@router.post("/tournaments", response_model=TournamentOut)
async def create_tournament(
    body: TournamentCreate,
    session: AsyncSession = Depends(get_session),
):
    if await session.get(User, body.organizerId) is None:
        raise UserNotFound(body.organizerId)
    t = Tournament(
        name=body.name,
        type=body.type,
        status=body.status,
        organizer_id=body.organizerId,
        max_participants=body.maxParticipants,
        start_date=naive_utc(body.startDate),
        end_date=naive_utc(body.endDate),
    )
    session.add(t)
    await session.commit()
    logger.info("Created tournament %s (%s)", t.id, t.name)
    return tournament_out(t)


@router.get("/tournaments", response_model=list[TournamentOut])
async def list_tournaments(session: AsyncSession = Depends(get_session)):
    rows = (
        await session.execute(select(Tournament).order_by(Tournament.id))
    ).scalars().all()
    return [tournament_out(t) for t in rows]


@router.get("/tournaments/{tournament_id}", response_model=TournamentOut)
async def get_tournament(tournament_id: int, session: AsyncSession = Depends(get_session)):
    t = await session.get(Tournament, tournament_id)
    if not t:
        raise TournamentNotFound(tournament_id)
    return tournament_out(t)


@router.get("/tournaments/{tournament_id}/matches", response_model=list[MatchOut])
async def list_tournament_matches(
    tournament_id: int, session: AsyncSession = Depends(get_session)
):
    if await session.get(Tournament, tournament_id) is None:
        raise TournamentNotFound(tournament_id)
    rows = (
        await session.execute(
            select(Match)
            .where(Match.tournament_id == tournament_id)
            .order_by(Match.date, Match.id)
        )
    ).scalars().all()
    return [match_out(m) for m in rows]
