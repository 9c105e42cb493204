"""
Delta adjustments
Zero-sum enforcement, proportional capping and placement bonuses. Each stage
takes a read-only participant_id -> delta mapping and returns a new one.
"""

from types import MappingProxyType
from typing import Dict, Hashable, Mapping, Sequence

import numpy as np

from racerating.infra.config.rating_config import RatingConfig
from racerating.infra.scoring.models import Participant
from racerating.utils.logger import get_logger

logger = get_logger(__name__)

Deltas = Mapping[Hashable, float]


def _values(deltas: Deltas) -> np.ndarray:
    return np.fromiter(deltas.values(), dtype=float, count=len(deltas))


class ZeroSumEnforcer:
    """Removes the mean delta so total rating in the pool is conserved."""

    def __init__(self, epsilon: float = 0.01):
        self.epsilon = epsilon

    def apply(self, deltas: Deltas) -> Deltas:
        if not deltas:
            return MappingProxyType(dict(deltas))

        total = float(_values(deltas).sum())
        if abs(total) <= self.epsilon:
            return MappingProxyType(dict(deltas))

        adjustment = total / len(deltas)
        logger.debug(f"zero-sum: total={total:.6f}, per-participant adjustment={adjustment:.6f}")
        return MappingProxyType({pid: delta - adjustment for pid, delta in deltas.items()})


class ChangeCapper:
    """Scales every delta by the same factor when the largest exceeds the cap."""

    def __init__(self, max_rating_change: float = 200):
        self.max_rating_change = max_rating_change

    def apply(self, deltas: Deltas) -> Deltas:
        if not deltas:
            return MappingProxyType(dict(deltas))

        max_abs = float(np.abs(_values(deltas)).max())
        if max_abs <= self.max_rating_change:
            return MappingProxyType(dict(deltas))

        scale_factor = self.max_rating_change / max_abs
        logger.debug(f"cap: max |delta|={max_abs:.3f}, scale factor={scale_factor:.6f}")
        return MappingProxyType({pid: delta * scale_factor for pid, delta in deltas.items()})


class PlacementBonusAllocator:
    """
    Adds flat bonuses for top finishers and lifts guaranteed finishers to
    their floor. Both are funded by an even deduction from every participant
    outside the bonus table.

    With no participant outside the bonus table nothing can fund the pool:
    the 'relax' policy still grants bonuses and floors, 'skip' leaves the
    deltas unchanged.
    """

    def __init__(
        self,
        position_bonus: Mapping[int, float],
        min_guarantee: Mapping[int, float],
        all_bonus_policy: str = 'relax'
    ):
        self.position_bonus = position_bonus
        self.min_guarantee = min_guarantee
        self.all_bonus_policy = all_bonus_policy

    @classmethod
    def from_config(cls, config: RatingConfig) -> 'PlacementBonusAllocator':
        return cls(config.position_bonus, config.min_guarantee, config.all_bonus_policy)

    def apply(self, deltas: Deltas, participants: Sequence[Participant]) -> Deltas:
        non_bonus = [p for p in participants if p.finish_position not in self.position_bonus]
        if not non_bonus and self.all_bonus_policy == 'skip':
            logger.warning(
                f"all {len(participants)} participants hold a placement bonus; "
                f"skipping bonus allocation"
            )
            return MappingProxyType(dict(deltas))

        adjusted: Dict[Hashable, float] = dict(deltas)

        total_bonus = 0.0
        for p in participants:
            bonus = self.position_bonus.get(p.finish_position)
            if bonus:
                adjusted[p.participant_id] += bonus
                total_bonus += bonus

        shortfalls: Dict[Hashable, float] = {}
        for p in participants:
            floor = self.min_guarantee.get(p.finish_position)
            if floor is not None and adjusted[p.participant_id] < floor:
                shortfalls[p.participant_id] = floor - adjusted[p.participant_id]

        total_adjustment = total_bonus + sum(shortfalls.values())
        if total_adjustment <= 0:
            return MappingProxyType(adjusted)

        if non_bonus:
            per_participant = total_adjustment / len(non_bonus)
            logger.debug(
                f"bonus pool {total_adjustment:.3f} funded by {len(non_bonus)} participants "
                f"({per_participant:.3f} each)"
            )
            for p in non_bonus:
                adjusted[p.participant_id] -= per_participant
        else:
            logger.warning(
                f"all {len(participants)} participants hold a placement bonus; "
                f"bonus pool {total_adjustment:.3f} is unfunded and the event is not zero-sum"
            )

        for pid, shortfall in shortfalls.items():
            adjusted[pid] += shortfall

        return MappingProxyType(adjusted)
