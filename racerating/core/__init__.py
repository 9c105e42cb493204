from racerating.core.season_replay import (
    EventEntry,
    EventRecord,
    PlayerState,
    ReplayOrderError,
    SeasonReplayer,
    SeasonReplayResult,
)

__all__ = [
    'EventEntry',
    'EventRecord',
    'PlayerState',
    'ReplayOrderError',
    'SeasonReplayer',
    'SeasonReplayResult',
]
