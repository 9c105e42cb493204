"""
ZeroSumEnforcer / ChangeCapper / PlacementBonusAllocator unit tests
"""

import pytest

from racerating.infra.scoring.adjustments import (
    ChangeCapper,
    PlacementBonusAllocator,
    ZeroSumEnforcer,
)
from racerating.infra.scoring.models import Participant


def make_participants(ids):
    return [Participant(pid, i, 2750) for i, pid in enumerate(ids, 1)]


def test_zero_sum_removes_mean():
    deltas = {'a': 3.0, 'b': 1.0, 'c': -1.0}
    adjusted = ZeroSumEnforcer(epsilon=0.01).apply(deltas)

    assert dict(adjusted) == pytest.approx({'a': 2.0, 'b': 0.0, 'c': -2.0})
    assert sum(adjusted.values()) == pytest.approx(0.0, abs=1e-9)
    # input untouched
    assert deltas == {'a': 3.0, 'b': 1.0, 'c': -1.0}


def test_zero_sum_ignores_numerical_noise():
    deltas = {'a': 0.004, 'b': 0.0}
    adjusted = ZeroSumEnforcer(epsilon=0.01).apply(deltas)

    assert dict(adjusted) == deltas


def test_zero_sum_empty():
    assert dict(ZeroSumEnforcer().apply({})) == {}


def test_cap_scales_uniformly():
    deltas = {'a': 300.0, 'b': -100.0, 'c': -200.0}
    capped = ChangeCapper(max_rating_change=200).apply(deltas)

    assert capped['a'] == pytest.approx(200.0)
    assert capped['b'] == pytest.approx(-200.0 / 3)
    assert capped['c'] == pytest.approx(-400.0 / 3)
    assert sum(capped.values()) == pytest.approx(0.0, abs=1e-9)


def test_cap_passes_through_at_limit():
    deltas = {'a': 200.0, 'b': -200.0}
    assert dict(ChangeCapper(max_rating_change=200).apply(deltas)) == deltas


def test_cap_preserves_magnitude_order():
    deltas = {'a': 450.0, 'b': -320.0, 'c': 10.0, 'd': -140.0}
    capped = ChangeCapper(max_rating_change=100).apply(deltas)

    before = sorted(deltas, key=lambda k: abs(deltas[k]))
    after = sorted(capped, key=lambda k: abs(capped[k]))
    assert before == after
    assert max(abs(v) for v in capped.values()) <= 100 + 1e-6


def test_bonus_added_and_funded_by_non_bonus():
    allocator = PlacementBonusAllocator({1: 20, 2: 10, 3: 5}, {1: 10, 2: 5, 3: 2})
    participants = make_participants(['a', 'b', 'c', 'd', 'e'])
    deltas = {'a': 40.0, 'b': 20.0, 'c': 0.0, 'd': -20.0, 'e': -40.0}

    final = allocator.apply(deltas, participants)

    assert final['a'] == pytest.approx(60.0)
    assert final['b'] == pytest.approx(30.0)
    assert final['c'] == pytest.approx(5.0)
    assert final['d'] == pytest.approx(-20.0 - 17.5)
    assert final['e'] == pytest.approx(-40.0 - 17.5)
    assert sum(final.values()) == pytest.approx(0.0, abs=1e-9)


def test_guarantee_shortfall_is_funded_and_applied():
    allocator = PlacementBonusAllocator({1: 20, 2: 10}, {1: 10, 2: 15})
    participants = make_participants(['a', 'b', 'c', 'd'])
    deltas = {'a': -30.0, 'b': 0.0, 'c': 20.0, 'd': 10.0}

    final = allocator.apply(deltas, participants)

    # bonuses 30 + shortfalls (20 + 5) = 55 split over c and d
    assert final['a'] == pytest.approx(10.0)
    assert final['b'] == pytest.approx(15.0)
    assert final['c'] == pytest.approx(20.0 - 27.5)
    assert final['d'] == pytest.approx(10.0 - 27.5)
    assert sum(final.values()) == pytest.approx(0.0, abs=1e-9)


def test_guarantee_never_lowers():
    allocator = PlacementBonusAllocator({1: 20}, {1: 10})
    participants = make_participants(['a', 'b'])

    final = allocator.apply({'a': 50.0, 'b': -50.0}, participants)

    assert final['a'] == pytest.approx(70.0)
    assert final['b'] == pytest.approx(-70.0)


def test_all_bonus_event_relax_policy():
    allocator = PlacementBonusAllocator({1: 20, 2: 10, 3: 5}, {1: 10, 2: 5, 3: 2}, 'relax')
    participants = make_participants(['a', 'b', 'c'])

    final = allocator.apply({'a': 0.0, 'b': 0.0, 'c': 0.0}, participants)

    # nothing to fund from: bonuses are granted and the event is not zero-sum
    assert dict(final) == pytest.approx({'a': 20.0, 'b': 10.0, 'c': 5.0})


def test_all_bonus_event_relax_policy_still_honours_floor():
    allocator = PlacementBonusAllocator({1: 20, 2: 10, 3: 5}, {1: 10, 2: 5, 3: 2}, 'relax')
    participants = make_participants(['a', 'b', 'c'])

    final = allocator.apply({'a': 30.0, 'b': 0.0, 'c': -30.0}, participants)

    assert final['c'] == pytest.approx(2.0)


def test_all_bonus_event_skip_policy():
    allocator = PlacementBonusAllocator({1: 20, 2: 10, 3: 5}, {1: 10, 2: 5, 3: 2}, 'skip')
    participants = make_participants(['a', 'b', 'c'])
    deltas = {'a': 30.0, 'b': 0.0, 'c': -30.0}

    final = allocator.apply(deltas, participants)

    # zero-sum wins: third stays below its floor of 2
    assert dict(final) == deltas
    assert final['c'] < 2
    assert sum(final.values()) == pytest.approx(0.0)


def test_two_player_event_only_grants_present_positions():
    allocator = PlacementBonusAllocator({1: 20, 2: 10, 3: 5}, {1: 10, 2: 5, 3: 2})
    participants = make_participants(['a', 'b'])

    # both hold a bonus, so under 'relax' only granted bonuses are added
    final = allocator.apply({'a': 50.0, 'b': -50.0}, participants)

    assert final['a'] == pytest.approx(70.0)
    assert final['b'] == pytest.approx(5.0)
