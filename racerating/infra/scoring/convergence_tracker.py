"""
Display rating convergence
The displayed rating starts low and approaches the internal rating as a
participant accumulates convergence points from finishing positions.
"""

import math
from typing import Mapping, Optional

from racerating.infra.config.rating_config import RatingConfig


class ConvergenceTracker:
    """Converts internal ratings into display ratings using convergence points."""

    def __init__(
        self,
        threshold: float = 15,
        points_by_position: Optional[Mapping[int, float]] = None,
        default_points: float = 0.35
    ):
        self.threshold = threshold
        self.points_by_position = points_by_position or {}
        self.default_points = default_points

    @classmethod
    def from_config(cls, config: RatingConfig) -> 'ConvergenceTracker':
        return cls(
            threshold=config.convergence_threshold,
            points_by_position=config.convergence_points,
            default_points=config.default_convergence_points,
        )

    def earn_points(self, current_points: float, position: int) -> float:
        """Points after finishing at `position`"""
        return current_points + self.points_by_position.get(position, self.default_points)

    def get_multiplier(self, points: float) -> float:
        """sin(pi / (2 * threshold) * points), reaching 1.0 at the threshold"""
        if points > self.threshold:
            return 1.0
        return math.sin(math.pi / (2 * self.threshold) * points)

    def get_display_rating(self, internal_rating: float, points: float) -> int:
        return max(0, math.ceil(internal_rating * self.get_multiplier(points)))
