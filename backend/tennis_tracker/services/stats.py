"""Aggregate views over a user's match history.

Every function here is pure: it receives the caller-fetched matches for one
user and never touches the database. A match is anything exposing
``player1_id``, ``player2_id``, ``winner_id``, ``sets`` and ``date``.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import datetime
from typing import Any, Literal, NamedTuple, Optional, Sequence

from ..scoring.tennis import is_played, parse_set

WIN = "win"
LOSS = "loss"
UNDETERMINED = "undetermined"

Result = Literal["win", "loss", "undetermined"]


class Streak(NamedTuple):
    length: int
    kind: Optional[Result]


class OpponentCount(NamedTuple):
    opponent_id: int
    count: int


def _percent(part: int, total: int) -> int:
    """Return ``part / total`` as a whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return math.floor(part * 100 / total + 0.5)


def match_result(user_id: int, match: Any) -> Result:
    winner = match.winner_id
    if winner is None:
        return UNDETERMINED
    return WIN if winner == user_id else LOSS


def opponent_of(user_id: int, match: Any) -> int:
    return match.player2_id if match.player1_id == user_id else match.player1_id


def sort_chronologically(matches: Sequence[Any]) -> list[Any]:
    """Oldest first; ``created_at`` then id break ties on equal dates."""

    def key(match: Any) -> tuple[datetime, datetime, int]:
        created = getattr(match, "created_at", None) or datetime.min
        return (match.date or datetime.min, created, getattr(match, "id", 0) or 0)

    return sorted(matches, key=key)


def win_rate(user_id: int, matches: Sequence[Any]) -> int:
    wins = sum(1 for m in matches if m.winner_id == user_id)
    return _percent(wins, len(matches))


def current_streak(user_id: int, matches: Sequence[Any]) -> Streak:
    """Length and kind of the run ending at the most recent match.

    ``matches`` must already be sorted oldest first.
    """
    if not matches:
        return Streak(0, None)
    kind = match_result(user_id, matches[-1])
    length = 0
    for match in reversed(matches):
        if match_result(user_id, match) != kind:
            break
        length += 1
    return Streak(length, kind)


def longest_win_streak(user_id: int, matches: Sequence[Any]) -> int:
    longest = running = 0
    for match in matches:
        if match.winner_id == user_id:
            running += 1
            longest = max(longest, running)
        else:
            running = 0
    return longest


def frequent_opponents(
    user_id: int, matches: Sequence[Any], top_n: int
) -> list[OpponentCount]:
    """Opponents ordered by number of meetings, most frequent first.

    Equal counts keep the order in which opponents were first met.
    """
    if top_n <= 0:
        raise ValueError("top_n must be positive")
    counts: Counter[int] = Counter()
    for match in matches:
        counts[opponent_of(user_id, match)] += 1
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [OpponentCount(pid, count) for pid, count in ranked[:top_n]]


def set_totals(user_id: int, matches: Sequence[Any]) -> tuple[int, int]:
    """Return ``(sets_won, sets_played)`` across all matches, skipping ``0-0`` slots."""
    won = played = 0
    for match in matches:
        as_player1 = match.player1_id == user_id
        for raw in match.sets or []:
            score = parse_set(raw)
            if not is_played(score):
                continue
            played += 1
            mine, theirs = (score.p1, score.p2) if as_player1 else (score.p2, score.p1)
            if mine > theirs:
                won += 1
    return won, played


def set_win_rate(user_id: int, matches: Sequence[Any]) -> int:
    won, played = set_totals(user_id, matches)
    return _percent(won, played)


def compute_user_stats(user_id: int, matches: Sequence[Any]) -> dict[str, Any]:
    ordered = sort_chronologically(matches)
    wins = sum(1 for m in ordered if match_result(user_id, m) == WIN)
    losses = sum(1 for m in ordered if match_result(user_id, m) == LOSS)
    streak = current_streak(user_id, ordered)
    return {
        "totalMatches": len(ordered),
        "wins": wins,
        "losses": losses,
        "winRate": win_rate(user_id, ordered),
        "setWinRate": set_win_rate(user_id, ordered),
        "currentStreak": {"length": streak.length, "kind": streak.kind},
        "longestWinStreak": longest_win_streak(user_id, ordered),
    }
