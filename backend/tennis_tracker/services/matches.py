"""Match storage and the win/loss counter side effect of recording a match."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Iterable, Mapping, Optional, Sequence

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Match, Tournament, User
from ..scoring.tennis import derive_winner
from ..time_utils import naive_utc, utcnow
from .validation import (
    ValidationError,
    validate_participants,
    validate_set_scores,
    validate_winner,
)

logger = logging.getLogger(__name__)

MATCH_TYPES = ("casual", "tournament", "rated")
UPDATABLE_FIELDS = {"sets", "notes", "tournament_id", "winner_id"}


class ReferentialError(Exception):
    """Raised when a match refers to a user or tournament that does not exist."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ParticipantLocks:
    """Per-user asyncio locks, always taken in ascending id order.

    A lock lives only while somebody holds or waits for it, so no lock
    outlives the event loop it was used on.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: Counter[int] = Counter()

    @asynccontextmanager
    async def hold(self, user_ids: Iterable[int]) -> AsyncIterator[None]:
        ordered = sorted(set(user_ids))
        for uid in ordered:
            self._users[uid] += 1
            self._locks.setdefault(uid, asyncio.Lock())
        acquired: list[int] = []
        try:
            for uid in ordered:
                await self._locks[uid].acquire()
                acquired.append(uid)
            yield
        finally:
            for uid in reversed(acquired):
                self._locks[uid].release()
            for uid in ordered:
                self._users[uid] -= 1
                if self._users[uid] <= 0:
                    del self._users[uid]
                    self._locks.pop(uid, None)

    def __len__(self) -> int:
        return len(self._locks)


participant_locks = ParticipantLocks()


async def _ensure_tournament(session: AsyncSession, tournament_id: int | None) -> None:
    if tournament_id is None:
        return
    if await session.get(Tournament, tournament_id) is None:
        raise ReferentialError(f"unknown tournament: {tournament_id}")


async def _apply_result(
    session: AsyncSession,
    player1_id: int,
    player2_id: int,
    winner_id: Optional[int],
) -> None:
    # Increment in SQL so concurrent writers never overwrite each other.
    await session.execute(
        update(User)
        .where(User.id.in_([player1_id, player2_id]))
        .values(matches_played=User.matches_played + 1)
        .execution_options(synchronize_session=False)
    )
    if winner_id is None:
        return
    loser_id = player2_id if winner_id == player1_id else player1_id
    await session.execute(
        update(User)
        .where(User.id == winner_id)
        .values(wins=User.wins + 1)
        .execution_options(synchronize_session=False)
    )
    await session.execute(
        update(User)
        .where(User.id == loser_id)
        .values(losses=User.losses + 1)
        .execution_options(synchronize_session=False)
    )


async def create_match(
    session: AsyncSession,
    *,
    player1_id: int,
    player2_id: int,
    date: datetime,
    sets: Sequence[Any],
    type: str = "casual",
    tournament_id: int | None = None,
    notes: str | None = None,
) -> Match:
    """Store a match and update both participants' counters atomically.

    Input is fully validated before anything is written. The insert and the
    counter increments share one transaction, and run while both
    participants' locks are held. An undetermined outcome only bumps
    ``matches_played``.

    Raises:
        ValidationError: self-match, unknown type or unusable set list.
        ReferentialError: unknown participant or tournament.
    """

    validate_participants(player1_id, player2_id)
    if type not in MATCH_TYPES:
        raise ValidationError(
            f"Match type must be one of: {', '.join(MATCH_TYPES)}."
        )
    played = validate_set_scores(sets)
    winner_id = derive_winner(player1_id, player2_id, played)

    async with participant_locks.hold((player1_id, player2_id)):
        existing = (
            await session.execute(
                select(User.id).where(User.id.in_([player1_id, player2_id]))
            )
        ).scalars().all()
        missing = sorted({player1_id, player2_id} - set(existing))
        if missing:
            raise ReferentialError(
                "unknown users: " + ", ".join(str(uid) for uid in missing)
            )
        await _ensure_tournament(session, tournament_id)

        match = Match(
            player1_id=player1_id,
            player2_id=player2_id,
            date=naive_utc(date),
            sets=[s.as_dict() for s in played],
            winner_id=winner_id,
            type=type,
            tournament_id=tournament_id,
            notes=notes,
            created_at=utcnow(),
        )
        try:
            session.add(match)
            await session.flush()
            await _apply_result(session, player1_id, player2_id, winner_id)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    logger.info(
        "Recorded match %s: %s vs %s, winner=%s",
        match.id,
        player1_id,
        player2_id,
        winner_id if winner_id is not None else "undetermined",
    )
    return match


async def get_match(session: AsyncSession, match_id: int) -> Match | None:
    return await session.get(Match, match_id)


async def get_matches_for_user(session: AsyncSession, user_id: int) -> list[Match]:
    """All matches the user played in, in no particular order."""

    stmt = select(Match).where(
        or_(Match.player1_id == user_id, Match.player2_id == user_id)
    )
    return list((await session.execute(stmt)).scalars().all())


async def list_matches(
    session: AsyncSession, *, limit: int, offset: int
) -> tuple[list[Match], bool]:
    """Newest matches first; the flag tells whether more rows follow."""

    stmt = (
        select(Match)
        .order_by(Match.created_at.desc(), Match.id.desc())
        .offset(offset)
        .limit(limit + 1)
    )
    rows = list((await session.execute(stmt)).scalars().all())
    return rows[:limit], len(rows) > limit


async def update_match(
    session: AsyncSession, match_id: int, changes: Mapping[str, Any]
) -> Match | None:
    """Replace only the supplied fields of a stored match.

    The winner is never recomputed and participant counters are left
    untouched, even when ``sets`` or ``winner_id`` change.
    """

    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(
            "Cannot update field(s): " + ", ".join(sorted(unknown))
        )

    match = await session.get(Match, match_id)
    if match is None:
        return None

    values = dict(changes)
    if "sets" in values:
        values["sets"] = [s.as_dict() for s in validate_set_scores(values["sets"])]
    if "winner_id" in values:
        validate_winner(values["winner_id"], match.player1_id, match.player2_id)
    if "tournament_id" in values:
        await _ensure_tournament(session, values["tournament_id"])

    for field, value in values.items():
        setattr(match, field, value)
    await session.commit()
    logger.info("Updated match %s fields: %s", match_id, ", ".join(sorted(changes)))
    return match
