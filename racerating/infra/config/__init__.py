from racerating.infra.config.rating_config import (
    DEFAULT_RATING_CONFIG,
    TEAM_RATING_CONFIG,
    PositionBand,
    RatingConfig,
)
from racerating.infra.config.config_manager import ConfigManager

__all__ = [
    'ConfigManager',
    'DEFAULT_RATING_CONFIG',
    'TEAM_RATING_CONFIG',
    'PositionBand',
    'RatingConfig',
]
