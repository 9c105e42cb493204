"""
Per-format rating configuration
An immutable value selected by the caller for each event format and passed
into the engine at call time.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

COMPARISON_MODES = ('all', 'career')
ALL_BONUS_POLICIES = ('relax', 'skip')

DEFAULT_CONVERGENCE_POINTS: Dict[int, float] = {
    1: 1.0, 2: 0.96, 3: 0.92, 4: 0.88, 5: 0.84,
    6: 0.80, 7: 0.76, 8: 0.72, 9: 0.68, 10: 0.64,
    11: 0.60, 12: 0.56,
    13: 0.52, 14: 0.52, 15: 0.52, 16: 0.52,
    17: 0.48, 18: 0.48, 19: 0.48, 20: 0.48,
}


def _frozen_table(table: Optional[Mapping]) -> Mapping[int, float]:
    return MappingProxyType({int(k): float(v) for k, v in (table or {}).items()})


@dataclass(frozen=True)
class PositionBand:
    """A contiguous, inclusive range of raw positions that rate as one rank."""

    start: int
    end: int
    value: Optional[int] = None

    def __post_init__(self):
        if self.start < 1:
            raise ValueError(f"band start must be >= 1, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"band end {self.end} is before start {self.start}")
        if self.value is None:
            object.__setattr__(self, 'value', self.start)
        elif not self.start <= self.value <= self.end:
            raise ValueError(
                f"band value {self.value} lies outside {self.start}-{self.end}"
            )

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.end


@dataclass(frozen=True)
class RatingConfig:
    """
    Rating parameters for one event format.

    `all_bonus_policy` applies only when every finisher holds a placement
    bonus, so nobody can fund the pool. 'relax' grants bonuses and
    `min_guarantee` floors anyway and the event is no longer zero-sum.
    'skip' keeps the event zero-sum by leaving the capped deltas unchanged;
    neither bonuses nor floors are applied to that event.
    """

    scale: float = 1000.0
    k_factor: float = 10000.0
    k_multiplier: float = 0.01
    max_rating_change: float = 200.0
    zero_sum_epsilon: float = 0.01
    initial_rating: float = 2750.0

    position_bands: Tuple[PositionBand, ...] = ()
    position_bonus: Mapping[int, float] = field(default_factory=dict)
    min_guarantee: Mapping[int, float] = field(default_factory=dict)

    # Career-stage comparison: below initial_comparison_games everyone is
    # compared with the full field, afterwards with rating neighbours.
    comparison_mode: str = 'all'
    initial_comparison_games: int = 5
    comparison_range: int = 3

    exclude_same_team: bool = False
    skip_position_bonuses: bool = False
    all_bonus_policy: str = 'relax'

    convergence_threshold: float = 15.0
    convergence_points: Mapping[int, float] = field(
        default_factory=lambda: dict(DEFAULT_CONVERGENCE_POINTS)
    )
    default_convergence_points: float = 0.35

    def __post_init__(self):
        object.__setattr__(self, 'position_bands', tuple(
            sorted(self.position_bands, key=lambda band: band.start)
        ))
        object.__setattr__(self, 'position_bonus', _frozen_table(self.position_bonus))
        object.__setattr__(self, 'min_guarantee', _frozen_table(self.min_guarantee))
        object.__setattr__(self, 'convergence_points', _frozen_table(self.convergence_points))

        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.max_rating_change <= 0:
            raise ValueError(f"max_rating_change must be positive, got {self.max_rating_change}")
        if self.zero_sum_epsilon < 0:
            raise ValueError(f"zero_sum_epsilon must be >= 0, got {self.zero_sum_epsilon}")
        if self.comparison_mode not in COMPARISON_MODES:
            raise ValueError(
                f"comparison_mode must be one of {COMPARISON_MODES}, got {self.comparison_mode!r}"
            )
        if self.all_bonus_policy not in ALL_BONUS_POLICIES:
            raise ValueError(
                f"all_bonus_policy must be one of {ALL_BONUS_POLICIES}, got {self.all_bonus_policy!r}"
            )
        if self.comparison_range < 1:
            raise ValueError(f"comparison_range must be >= 1, got {self.comparison_range}")
        unfunded = sorted(set(self.min_guarantee) - set(self.position_bonus))
        if unfunded:
            raise ValueError(
                f"min_guarantee positions {unfunded} must also be in position_bonus"
            )
        if self.exclude_same_team and self.comparison_mode != 'all':
            raise ValueError("exclude_same_team requires comparison_mode 'all'")
        if self.convergence_threshold <= 0:
            raise ValueError(
                f"convergence_threshold must be positive, got {self.convergence_threshold}"
            )

        for previous, band in zip(self.position_bands, self.position_bands[1:]):
            if band.start <= previous.end:
                raise ValueError(
                    f"position bands {previous.start}-{previous.end} and "
                    f"{band.start}-{band.end} overlap"
                )

    @property
    def effective_k(self) -> float:
        """K_FACTOR x K_MULTIPLIER"""
        return self.k_factor * self.k_multiplier

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RatingConfig':
        """Build a config from a YAML-style dict; unknown keys raise ValueError"""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}

        convergence = data.pop('convergence', None)
        if convergence:
            if 'threshold' in convergence:
                data['convergence_threshold'] = convergence['threshold']
            if 'points_by_position' in convergence:
                data['convergence_points'] = convergence['points_by_position']
            if 'default_points' in convergence:
                data['default_convergence_points'] = convergence['default_points']

        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown rating config keys: {', '.join(unknown)}")

        bands = []
        for item in data.get('position_bands') or []:
            if isinstance(item, PositionBand):
                bands.append(item)
            elif isinstance(item, dict):
                bands.append(PositionBand(
                    start=int(item['start']),
                    end=int(item['end']),
                    value=int(item['value']) if item.get('value') is not None else None,
                ))
            else:
                start, end = item
                bands.append(PositionBand(start=int(start), end=int(end)))
        data['position_bands'] = tuple(bands)

        return cls(**data)


DEFAULT_RATING_CONFIG = RatingConfig(
    position_bands=(PositionBand(13, 16), PositionBand(17, 20)),
    position_bonus={1: 20, 2: 10, 3: 5},
    min_guarantee={1: 10, 2: 5, 3: 2},
)

TEAM_RATING_CONFIG = RatingConfig(
    position_bands=(PositionBand(13, 16), PositionBand(17, 20)),
    exclude_same_team=True,
    skip_position_bonuses=True,
)
