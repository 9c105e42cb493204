"""
PairwiseRatingComparator unit tests
"""

import pytest

from racerating.infra.config.rating_config import PositionBand, RatingConfig
from racerating.infra.scoring.comparison_strategies import AllComparisonStrategy
from racerating.infra.scoring.models import Participant
from racerating.infra.scoring.position_normalizer import PositionNormalizer
from racerating.infra.scoring.rating_algorithms import PairwiseRatingComparator


def make_field(ratings, games_played=0):
    """Participants finishing in list order"""
    return [
        Participant(
            participant_id=f"p{i}",
            finish_position=i,
            current_rating=rating,
            games_played=games_played,
        )
        for i, rating in enumerate(ratings, 1)
    ]


def raw_deltas(comparator, participants, bands=()):
    normalized = PositionNormalizer(bands).normalize_all(participants)
    return comparator.compute_raw_deltas(participants, normalized)


def test_comparator_initialization():
    comparator = PairwiseRatingComparator(scale=1000, k_factor=10000, k_multiplier=0.01)

    assert comparator.scale == 1000
    assert comparator.k_factor == 10000
    assert comparator.k_multiplier == 0.01
    assert isinstance(comparator.all_strategy, AllComparisonStrategy)
    assert comparator.proximity_strategy is None


def test_expected_score():
    comparator = PairwiseRatingComparator(scale=1000)

    # equal ratings
    assert comparator.get_expected_score(2750, 2750) == pytest.approx(0.5)

    # 1000 points ahead with scale 1000 -> 1 / (1 + 10^-1)
    assert comparator.get_expected_score(3750, 2750) == pytest.approx(1 / 1.1)

    high = comparator.get_expected_score(3000, 2500)
    low = comparator.get_expected_score(2500, 3000)
    assert high > 0.5 > low
    assert high + low == pytest.approx(1.0)


def test_larger_scale_weakens_rating_gaps():
    narrow = PairwiseRatingComparator(scale=400)
    wide = PairwiseRatingComparator(scale=1000)

    assert narrow.get_expected_score(3000, 2500) > wide.get_expected_score(3000, 2500)


def test_single_participant_has_zero_delta():
    comparator = PairwiseRatingComparator()
    deltas = raw_deltas(comparator, make_field([2750]))

    assert deltas == {'p1': 0.0}


def test_two_equal_players():
    comparator = PairwiseRatingComparator()
    deltas = raw_deltas(comparator, make_field([2750, 2750]))

    # K = 10000 * 0.01 = 100, actual 1 vs expected 0.5
    assert deltas['p1'] == pytest.approx(50.0)
    assert deltas['p2'] == pytest.approx(-50.0)


def test_upset_gains_more_than_expected_win():
    comparator = PairwiseRatingComparator()

    upset = raw_deltas(comparator, make_field([2500, 3000]))
    expected_win = raw_deltas(comparator, make_field([3000, 2500]))

    assert upset['p1'] > expected_win['p1'] > 0


def test_band_ties_score_half():
    comparator = PairwiseRatingComparator()
    participants = make_field([2750, 2750, 2750])
    deltas = raw_deltas(comparator, participants, bands=[PositionBand(2, 3)])

    # p1 beats both; p2 and p3 lose to p1 and tie each other
    assert deltas['p1'] == pytest.approx(100 * (1.0 - 0.5))
    assert deltas['p2'] == pytest.approx(100 * (0.25 - 0.5))
    assert deltas['p3'] == pytest.approx(deltas['p2'])


def test_identical_normalized_positions_give_identical_raw_deltas():
    comparator = PairwiseRatingComparator()
    participants = make_field([2900, 2750, 2750, 2750, 2600])
    deltas = raw_deltas(comparator, participants, bands=[PositionBand(2, 4)])

    assert deltas['p2'] == deltas['p3'] == deltas['p4']


def test_career_mode_uses_all_comparison_for_new_participants():
    config = RatingConfig(comparison_mode='career', initial_comparison_games=5)
    comparator = PairwiseRatingComparator.from_config(config)

    newcomer = Participant('new', 1, 2750, games_played=4)
    veteran = Participant('vet', 2, 2750, games_played=5)

    assert comparator.strategy_for(newcomer) is comparator.all_strategy
    assert comparator.strategy_for(veteran) is comparator.proximity_strategy


def test_proximity_tie_scores_expected_rate():
    config = RatingConfig(
        comparison_mode='career',
        position_bands=(PositionBand(1, 2),),
    )
    comparator = PairwiseRatingComparator.from_config(config)
    participants = make_field([2850, 2750], games_played=10)
    deltas = raw_deltas(comparator, participants, bands=config.position_bands)

    # a tie counts as the expected result, so nobody moves
    assert deltas['p1'] == pytest.approx(0.0)
    assert deltas['p2'] == pytest.approx(0.0)

    # the same field under full comparison rewards the lower-rated player
    all_mode = PairwiseRatingComparator.from_config(
        RatingConfig(position_bands=(PositionBand(1, 2),))
    )
    all_deltas = raw_deltas(all_mode, participants, bands=config.position_bands)
    assert all_deltas['p2'] > 0 > all_deltas['p1']


def test_proximity_compares_with_rating_neighbours_only():
    config = RatingConfig(comparison_mode='career', comparison_range=1)
    comparator = PairwiseRatingComparator.from_config(config)

    # p1 is the highest rated; its only neighbour (p2) finished below it
    participants = make_field([3000, 2900, 2000, 1900], games_played=10)
    deltas = raw_deltas(comparator, participants)

    # two neighbours: rating rank 2 and 3 for range 1 at the top edge
    expected_vs_p2 = comparator.get_expected_score(3000, 2900)
    expected_vs_p3 = comparator.get_expected_score(3000, 2000)
    expected = (expected_vs_p2 + expected_vs_p3) / 2
    assert deltas['p1'] == pytest.approx(100 * (1.0 - expected))


def test_inputs_are_not_mutated():
    comparator = PairwiseRatingComparator()
    participants = make_field([2800, 2700, 2750])
    snapshot = list(participants)

    raw_deltas(comparator, participants)

    assert participants == snapshot
