"""
Comparison strategies
Decide which opponents each participant is rated against: the whole field,
or only its neighbours by rating.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from racerating.infra.scoring.models import Participant


def sort_by_rating(participants: Sequence[Participant]) -> List[Participant]:
    """Highest rating first; equal ratings keep their input order"""
    return sorted(participants, key=lambda p: p.current_rating, reverse=True)


class ComparisonStrategy(ABC):
    """Base class for opponent selection."""

    # Whether an equal normalized position scores the expected win rate
    # instead of a half win.
    ties_score_expected = False

    @abstractmethod
    def select_opponents(
        self,
        player: Participant,
        participants: Sequence[Participant],
        sorted_by_rating: Sequence[Participant],
    ) -> List[Participant]:
        """Return the opponents `player` is compared against"""
        pass


class AllComparisonStrategy(ComparisonStrategy):
    """Compare with every other participant, optionally skipping teammates."""

    def __init__(self, exclude_same_team: bool = False):
        self.exclude_same_team = exclude_same_team

    def select_opponents(
        self,
        player: Participant,
        participants: Sequence[Participant],
        sorted_by_rating: Sequence[Participant],
    ) -> List[Participant]:
        opponents = [p for p in participants if p.participant_id != player.participant_id]
        if self.exclude_same_team and player.team_index is not None:
            opponents = [p for p in opponents if p.team_index != player.team_index]
        return opponents


class ProximityComparisonStrategy(ComparisonStrategy):
    """
    Compare with the `comparison_range` participants directly above and below
    in rating rank. Near the top or bottom of the field the window shifts to
    the other side so that up to 2 * comparison_range opponents are used.
    """

    ties_score_expected = True

    def __init__(self, comparison_range: int = 3):
        self.comparison_range = comparison_range

    def select_comparison_targets(self, my_rank: int, total_players: int) -> List[int]:
        """1-based rating ranks to compare with"""
        total_targets = self.comparison_range * 2
        above_available = my_rank - 1
        below_available = total_players - my_rank

        above = min(self.comparison_range, above_available)
        below = min(self.comparison_range, below_available)

        if above + below < total_targets:
            if above < self.comparison_range:
                below = min(total_targets - above, below_available)
            else:
                above = min(total_targets - below, above_available)

        targets = [my_rank - i for i in range(1, above + 1)]
        targets.extend(my_rank + i for i in range(1, below + 1))
        return targets

    def select_opponents(
        self,
        player: Participant,
        participants: Sequence[Participant],
        sorted_by_rating: Sequence[Participant],
    ) -> List[Participant]:
        ids = [p.participant_id for p in sorted_by_rating]
        my_rank = ids.index(player.participant_id) + 1
        return [
            sorted_by_rating[rank - 1]
            for rank in self.select_comparison_targets(my_rank, len(sorted_by_rating))
        ]
