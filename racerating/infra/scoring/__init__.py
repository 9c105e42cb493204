"""
Rating infrastructure
Position normalization, pairwise comparison, delta adjustments, display
rating convergence and the engine that chains them.
"""

from .models import (
    InvalidEventError,
    Participant,
    RatingChangeResult,
)
from .position_normalizer import PositionNormalizer
from .comparison_strategies import (
    ComparisonStrategy,
    AllComparisonStrategy,
    ProximityComparisonStrategy,
)
from .rating_algorithms import PairwiseRatingComparator
from .adjustments import (
    ZeroSumEnforcer,
    ChangeCapper,
    PlacementBonusAllocator,
)
from .convergence_tracker import ConvergenceTracker
from .rating_engine import RatingEngine, calculate_rating_changes

__all__ = [
    # models
    'InvalidEventError',
    'Participant',
    'RatingChangeResult',
    # pipeline stages
    'PositionNormalizer',
    'ComparisonStrategy',
    'AllComparisonStrategy',
    'ProximityComparisonStrategy',
    'PairwiseRatingComparator',
    'ZeroSumEnforcer',
    'ChangeCapper',
    'PlacementBonusAllocator',
    'ConvergenceTracker',
    # engine
    'RatingEngine',
    'calculate_rating_changes',
]
