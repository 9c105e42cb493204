"""
Position normalization
Collapses configured bands of finishing positions into one normalized rank.
"""

from types import MappingProxyType
from typing import Hashable, Iterable, Mapping, Sequence

from racerating.infra.config.rating_config import PositionBand
from racerating.infra.scoring.models import Participant


class PositionNormalizer:
    """Maps raw finish positions to normalized ranks using position bands."""

    def __init__(self, bands: Iterable[PositionBand] = ()):
        self.bands: Sequence[PositionBand] = tuple(bands)

    def normalize(self, position: int) -> int:
        """Return the band's normalized value, or the position unchanged"""
        for band in self.bands:
            if band.contains(position):
                return band.value
        return position

    def normalize_all(self, participants: Iterable[Participant]) -> Mapping[Hashable, int]:
        """participant_id -> normalized position"""
        return MappingProxyType({
            p.participant_id: self.normalize(p.finish_position)
            for p in participants
        })
