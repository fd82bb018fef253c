"""Tennis score model.
Turns a list of completed set scores into a match outcome."""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class SetScore:
    """Games won by player 1 and player 2 in one set."""

    p1: int
    p2: int

    def as_dict(self) -> dict[str, int]:
        return {"p1": self.p1, "p2": self.p2}


class Outcome(enum.Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"
    UNDETERMINED = "undetermined"


def _games(value: Any) -> int:
    # bool is a subclass of int; reject it explicitly
    if isinstance(value, bool):
        raise ValueError("set scores must be integers (not booleans)")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValueError(f"invalid game count: {value!r}")
        return int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"invalid game count: {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise ValueError("set scores must be integers")
    if value < 0:
        raise ValueError("set scores must be >= 0")
    return value


def parse_set(raw: Any) -> SetScore:
    """Normalise one stored or submitted set into a :class:`SetScore`.

    Accepts ``{"p1": 6, "p2": 4}``, ``"6-4"`` and ``[6, 4]``.
    """

    if isinstance(raw, SetScore):
        return raw
    if isinstance(raw, Mapping):
        if "p1" not in raw or "p2" not in raw:
            raise ValueError("set must include both p1 and p2")
        return SetScore(_games(raw["p1"]), _games(raw["p2"]))
    if isinstance(raw, str):
        parts = raw.split("-")
        if len(parts) != 2:
            raise ValueError(f"invalid set score: {raw!r}")
        return SetScore(_games(parts[0]), _games(parts[1]))
    if isinstance(raw, Sequence) and not isinstance(raw, (bytes, bytearray)):
        if len(raw) != 2:
            raise ValueError("set must contain exactly two scores")
        return SetScore(_games(raw[0]), _games(raw[1]))
    raise ValueError(f"unsupported set encoding: {type(raw).__name__}")


def parse_sets(raw_sets: Iterable[Any]) -> list[SetScore]:
    return [parse_set(raw) for raw in raw_sets]


def is_played(score: SetScore) -> bool:
    return score.p1 > 0 or score.p2 > 0


def played_sets(sets: Iterable[SetScore]) -> list[SetScore]:
    """Drop ``0-0`` placeholder slots left over from partially filled forms."""

    return [s for s in sets if is_played(s)]


def derive_outcome(sets: Sequence[SetScore]) -> Outcome:
    """Return which player won the majority of sets.

    Placeholder sets are not filtered here; callers run :func:`played_sets`
    first. A level tally gives :attr:`Outcome.UNDETERMINED`.
    """

    if not any(is_played(s) for s in sets):
        raise ValueError("at least one played set is required")

    p1_sets = sum(1 for s in sets if s.p1 > s.p2)
    p2_sets = sum(1 for s in sets if s.p2 > s.p1)
    if p1_sets > p2_sets:
        return Outcome.PLAYER1
    if p2_sets > p1_sets:
        return Outcome.PLAYER2
    return Outcome.UNDETERMINED


def derive_winner(
    player1_id: int, player2_id: int, sets: Sequence[SetScore]
) -> Optional[int]:
    """Return the winning player's id, or ``None`` when undetermined."""

    outcome = derive_outcome(sets)
    if outcome is Outcome.PLAYER1:
        return player1_id
    if outcome is Outcome.PLAYER2:
        return player2_id
    return None


def format_score(sets: Iterable[SetScore]) -> str:
    return ", ".join(f"{s.p1}-{s.p2}" for s in sets)
