"""
Pairwise rating comparison
Multi-player Elo: every participant is scored against its opponents from the
same event and the difference between actual and expected score becomes the
raw rating delta.
"""

import math
from types import MappingProxyType
from typing import Hashable, List, Mapping, Optional, Sequence

from racerating.infra.config.rating_config import RatingConfig
from racerating.infra.scoring.comparison_strategies import (
    AllComparisonStrategy,
    ComparisonStrategy,
    ProximityComparisonStrategy,
    sort_by_rating,
)
from racerating.infra.scoring.models import Participant


class PairwiseRatingComparator:
    """Computes raw deltas: K_FACTOR * K_MULTIPLIER * (actual - expected)"""

    def __init__(
        self,
        scale: float = 1000,
        k_factor: float = 10000,
        k_multiplier: float = 0.01,
        all_strategy: Optional[ComparisonStrategy] = None,
        proximity_strategy: Optional[ComparisonStrategy] = None,
        initial_comparison_games: int = 5
    ):
        self.scale = scale
        self.k_factor = k_factor
        self.k_multiplier = k_multiplier
        self.all_strategy = all_strategy or AllComparisonStrategy()
        self.proximity_strategy = proximity_strategy
        self.initial_comparison_games = initial_comparison_games

    @classmethod
    def from_config(cls, config: RatingConfig) -> 'PairwiseRatingComparator':
        proximity = None
        if config.comparison_mode == 'career':
            proximity = ProximityComparisonStrategy(config.comparison_range)
        return cls(
            scale=config.scale,
            k_factor=config.k_factor,
            k_multiplier=config.k_multiplier,
            all_strategy=AllComparisonStrategy(config.exclude_same_team),
            proximity_strategy=proximity,
            initial_comparison_games=config.initial_comparison_games,
        )

    def get_expected_score(self, rating_a: float, rating_b: float) -> float:
        """
        Expected score of A against B

        E_a = 1 / (1 + 10^((R_b - R_a) / scale))
        """
        return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / self.scale))

    def strategy_for(self, player: Participant) -> ComparisonStrategy:
        """Early-career participants are always compared with the full field"""
        if (
            self.proximity_strategy is None
            or player.games_played < self.initial_comparison_games
        ):
            return self.all_strategy
        return self.proximity_strategy

    def score(
        self,
        player: Participant,
        opponents: Sequence[Participant],
        normalized_positions: Mapping[Hashable, int],
        ties_score_expected: bool = False
    ) -> float:
        """Raw delta of `player` against `opponents`; zero with no opponents"""
        if not opponents:
            return 0.0

        my_position = normalized_positions[player.participant_id]
        expected_terms: List[float] = []
        actual_terms: List[float] = []

        for opponent in opponents:
            expected = self.get_expected_score(player.current_rating, opponent.current_rating)
            expected_terms.append(expected)

            opponent_position = normalized_positions[opponent.participant_id]
            if opponent_position > my_position:
                actual_terms.append(1.0)
            elif opponent_position < my_position:
                actual_terms.append(0.0)
            else:
                actual_terms.append(expected if ties_score_expected else 0.5)

        # fsum keeps the sums independent of opponent order
        expected_score = math.fsum(expected_terms) / len(opponents)
        actual_score = math.fsum(actual_terms) / len(opponents)

        return self.k_factor * self.k_multiplier * (actual_score - expected_score)

    def compute_raw_deltas(
        self,
        participants: Sequence[Participant],
        normalized_positions: Mapping[Hashable, int]
    ) -> Mapping[Hashable, float]:
        """participant_id -> raw delta, all computed from the same input snapshot"""
        sorted_by_rating = sort_by_rating(participants)
        raw = {}
        for player in participants:
            strategy = self.strategy_for(player)
            opponents = strategy.select_opponents(player, participants, sorted_by_rating)
            raw[player.participant_id] = self.score(
                player,
                opponents,
                normalized_positions,
                ties_score_expected=strategy.ties_score_expected,
            )
        return MappingProxyType(raw)
