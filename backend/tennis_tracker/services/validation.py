from typing import Any, List, Optional, Sequence

from ..scoring.tennis import SetScore, parse_set, played_sets

MAX_SETS = 5
MAX_GAMES_PER_SET = 99


class ValidationError(Exception):
    """Raised when submitted match data is invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_set_scores(
    sets: Sequence[Any],
    *,
    max_sets: Optional[int] = MAX_SETS,
    max_games_per_set: Optional[int] = MAX_GAMES_PER_SET,
) -> List[SetScore]:
    """Normalise and validate a submitted list of sets.

    Rules:
    - Each set is ``{p1, p2}``, ``"p1-p2"`` or ``[p1, p2]``
    - Scores must be integers >= 0 (booleans are rejected)
    - ``0-0`` placeholder sets are dropped before counting
    - At least one played set is required
    - Number of played sets must be <= ``max_sets`` (if provided)
    - Scores must be <= ``max_games_per_set`` (if provided)

    Returns the played sets in submission order.
    """

    if isinstance(sets, (str, bytes)) or not isinstance(sets, Sequence):
        raise ValidationError("At least one set is required.")

    parsed: List[SetScore] = []
    for i, raw in enumerate(sets, start=1):
        try:
            parsed.append(parse_set(raw))
        except ValueError as exc:
            raise ValidationError(f"Set #{i} is invalid: {exc}.")

    played = played_sets(parsed)
    if not played:
        raise ValidationError("At least one set is required.")
    if max_sets is not None and len(played) > max_sets:
        raise ValidationError(f"Too many sets. Max allowed is {max_sets}.")

    if max_games_per_set is not None:
        for i, s in enumerate(played, start=1):
            if s.p1 > max_games_per_set or s.p2 > max_games_per_set:
                raise ValidationError(
                    f"Set #{i} scores must be <= {max_games_per_set}."
                )

    return played


def validate_participants(player1_id: int, player2_id: int) -> None:
    if player1_id == player2_id:
        raise ValidationError("A player cannot play against themselves.")


def validate_winner(
    winner_id: Optional[int], player1_id: int, player2_id: int
) -> None:
    if winner_id is not None and winner_id not in (player1_id, player2_id):
        raise ValidationError("Winner must be one of the match participants.")


def validate_follow(follower_id: int, following_id: int) -> None:
    if follower_id == following_id:
        raise ValidationError("Users cannot follow themselves.")
