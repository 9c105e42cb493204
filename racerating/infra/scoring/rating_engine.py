"""
Rating engine
Runs one completed event through the rating pipeline:
normalize positions -> raw pairwise deltas -> zero-sum -> cap -> placement
bonuses, then builds one RatingChangeResult per participant.
"""

import logging
from typing import Iterable, List, Optional

from racerating.infra.config.rating_config import DEFAULT_RATING_CONFIG, RatingConfig
from racerating.infra.scoring.adjustments import (
    ChangeCapper,
    PlacementBonusAllocator,
    ZeroSumEnforcer,
)
from racerating.infra.scoring.convergence_tracker import ConvergenceTracker
from racerating.infra.scoring.models import (
    Participant,
    RatingChangeResult,
    validate_participants,
)
from racerating.infra.scoring.position_normalizer import PositionNormalizer
from racerating.infra.scoring.rating_algorithms import PairwiseRatingComparator
from racerating.utils.logger import get_logger


class RatingEngine:
    """Stateless apart from its immutable config; safe to share across events."""

    def __init__(
        self,
        config: RatingConfig = DEFAULT_RATING_CONFIG,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.normalizer = PositionNormalizer(config.position_bands)
        self.comparator = PairwiseRatingComparator.from_config(config)
        self.zero_sum = ZeroSumEnforcer(config.zero_sum_epsilon)
        self.capper = ChangeCapper(config.max_rating_change)
        self.bonus_allocator = PlacementBonusAllocator.from_config(config)
        self.convergence = ConvergenceTracker.from_config(config)

    def calculate(self, participants: Iterable[Participant]) -> List[RatingChangeResult]:
        """Rating changes for every participant, in input order"""
        participants = validate_participants(
            participants,
            require_team_index=self.config.exclude_same_team,
        )

        normalized = self.normalizer.normalize_all(participants)
        raw = self.comparator.compute_raw_deltas(participants, normalized)
        balanced = self.zero_sum.apply(raw)
        capped = self.capper.apply(balanced)

        if self.config.skip_position_bonuses:
            final = capped
        else:
            final = self.bonus_allocator.apply(capped, participants)

        self.logger.debug(
            f"rated {len(participants)} participants, "
            f"raw sum={sum(raw.values()):.6f}, final sum={sum(final.values()):.6f}"
        )

        return [self._build_result(p, final[p.participant_id]) for p in participants]

    def _build_result(self, participant: Participant, delta: float) -> RatingChangeResult:
        new_rating = participant.current_rating + delta
        points = self.convergence.earn_points(
            participant.convergence_points,
            participant.finish_position,
        )
        display = self.convergence.get_display_rating(new_rating, points)
        return RatingChangeResult(
            participant_id=participant.participant_id,
            delta=delta,
            old_rating=participant.current_rating,
            new_rating=new_rating,
            new_games_played=participant.games_played + 1,
            new_convergence_points=points,
            new_display_rating=display,
            new_season_high=max(participant.season_high, display),
        )


def calculate_rating_changes(
    participants: Iterable[Participant],
    config: RatingConfig = DEFAULT_RATING_CONFIG
) -> List[RatingChangeResult]:
    """Functional entry point: one event, one config, no shared state"""
    return RatingEngine(config).calculate(participants)
