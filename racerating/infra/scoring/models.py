"""
Rating data models
Participant input records, RatingChangeResult output records and the errors
raised for contract violations.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Hashable, Iterable, List, Optional


class InvalidEventError(ValueError):
    """Raised when an event's participant list violates the input contract."""


@dataclass(frozen=True)
class Participant:
    """One entrant of a completed event, with its rating state before the event."""

    participant_id: Hashable
    finish_position: int
    current_rating: float
    games_played: int = 0
    team_index: Optional[int] = None
    convergence_points: float = 0.0
    season_high: float = 0.0
    display_rating: float = 0.0


@dataclass(frozen=True)
class RatingChangeResult:
    """Rating change for a single participant after one event."""

    participant_id: Hashable
    delta: float
    old_rating: float
    new_rating: float
    new_games_played: int
    new_convergence_points: float = 0.0
    new_display_rating: float = 0.0
    new_season_high: float = 0.0

    def to_dict(self) -> dict:
        return {
            'participant_id': self.participant_id,
            'delta': self.delta,
            'old_rating': self.old_rating,
            'new_rating': self.new_rating,
            'new_games_played': self.new_games_played,
            'new_convergence_points': self.new_convergence_points,
            'new_display_rating': self.new_display_rating,
            'new_season_high': self.new_season_high,
        }


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def validate_participants(
    participants: Iterable[Participant],
    require_team_index: bool = False
) -> List[Participant]:
    """Check the input contract and return the participants as a list"""
    participants = list(participants)
    if not participants:
        raise InvalidEventError("participant list is empty")

    seen_ids = set()
    for p in participants:
        if p.participant_id in seen_ids:
            raise InvalidEventError(f"duplicate participant id: {p.participant_id!r}")
        seen_ids.add(p.participant_id)

        if not _is_integer(p.finish_position):
            raise InvalidEventError(
                f"participant {p.participant_id!r} has a non-integer finish_position: "
                f"{p.finish_position!r}"
            )
        if (
            not isinstance(p.current_rating, numbers.Real)
            or isinstance(p.current_rating, bool)
            or not math.isfinite(p.current_rating)
        ):
            raise InvalidEventError(
                f"participant {p.participant_id!r} has a non-finite rating: {p.current_rating!r}"
            )
        if not _is_integer(p.games_played):
            raise InvalidEventError(
                f"participant {p.participant_id!r} has a non-integer games_played: {p.games_played!r}"
            )
        if p.games_played < 0:
            raise InvalidEventError(
                f"participant {p.participant_id!r} has negative games_played: {p.games_played}"
            )
        if require_team_index and p.team_index is None:
            raise InvalidEventError(
                f"participant {p.participant_id!r} is missing team_index"
            )

    positions = sorted(p.finish_position for p in participants)
    expected = list(range(1, len(participants) + 1))
    if positions != expected:
        raise InvalidEventError(
            f"finish positions must be a permutation of 1..{len(participants)}, got {positions}"
        )

    return participants
