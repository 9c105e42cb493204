"""
Season replay
Recomputes ratings across a chain of events in order, feeding each event's
output ratings into the next event's input.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

import pandas as pd

from racerating.infra.config import ConfigManager, DEFAULT_RATING_CONFIG, RatingConfig
from racerating.infra.scoring import Participant, RatingChangeResult, RatingEngine
from racerating.utils.logger import get_logger


class ReplayOrderError(ValueError):
    """Raised when events are not in strictly increasing sequence order."""


@dataclass(frozen=True)
class EventEntry:
    participant_id: Hashable
    finish_position: int
    team_index: Optional[int] = None


@dataclass(frozen=True)
class EventRecord:
    """A completed event: who took part and where they finished."""

    event_id: Hashable
    sequence: int
    entries: Tuple[EventEntry, ...]
    format_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventRecord':
        """Build from the events-file layout: {event_id, sequence, format?, participants}"""
        entries = tuple(
            EventEntry(
                participant_id=item['id'],
                finish_position=int(item['finish_position']),
                team_index=item.get('team_index'),
            )
            for item in data['participants']
        )
        return cls(
            event_id=data['event_id'],
            sequence=int(data['sequence']),
            entries=entries,
            format_id=data.get('format'),
        )


@dataclass(frozen=True)
class PlayerState:
    """A participant's rating state between events."""

    rating: float
    games_played: int = 0
    convergence_points: float = 0.0
    season_high: float = 0.0
    display_rating: float = 0.0


@dataclass
class SeasonReplayResult:
    final_state: Dict[Hashable, PlayerState]
    event_changes: List[Tuple[Hashable, List[RatingChangeResult]]] = field(default_factory=list)
    history_snapshots: List[pd.Series] = field(default_factory=list)

    def history_frame(self) -> pd.DataFrame:
        """One row per event (indexed by event id), one column per participant"""
        if not self.history_snapshots:
            return pd.DataFrame()
        return pd.DataFrame(self.history_snapshots)

    def changes_frame(self) -> pd.DataFrame:
        records = []
        for event_id, changes in self.event_changes:
            for change in changes:
                records.append({'event_id': event_id, **change.to_dict()})
        return pd.DataFrame(records)

    def standings_frame(self) -> pd.DataFrame:
        """Final ratings, highest first"""
        records = []
        ordered = sorted(
            self.final_state.items(),
            key=lambda item: item[1].rating,
            reverse=True,
        )
        for rank, (participant_id, state) in enumerate(ordered, 1):
            records.append({
                'rank': rank,
                'participant_id': participant_id,
                'rating': state.rating,
                'display_rating': state.display_rating,
                'season_high': state.season_high,
                'games_played': state.games_played,
            })
        return pd.DataFrame(records)


class SeasonReplayer:
    """Replays events strictly in sequence order; one engine per event format."""

    def __init__(
        self,
        config_resolver: Optional[Callable[[Optional[str]], RatingConfig]] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config_resolver = config_resolver or (lambda format_id: DEFAULT_RATING_CONFIG)
        self.logger = logger or get_logger(__name__)
        self._engines: Dict[Optional[str], RatingEngine] = {}

    @classmethod
    def from_config_manager(cls, config_manager: ConfigManager, **kwargs) -> 'SeasonReplayer':
        return cls(config_resolver=config_manager.get_rating_config, **kwargs)

    def _engine_for(self, format_id: Optional[str]) -> RatingEngine:
        if format_id not in self._engines:
            self._engines[format_id] = RatingEngine(self.config_resolver(format_id))
        return self._engines[format_id]

    @staticmethod
    def check_order(events: List[EventRecord]) -> None:
        for previous, current in zip(events, events[1:]):
            if current.sequence <= previous.sequence:
                raise ReplayOrderError(
                    f"event {current.event_id!r} (sequence {current.sequence}) does not "
                    f"follow event {previous.event_id!r} (sequence {previous.sequence})"
                )

    def replay(
        self,
        events: Iterable[EventRecord],
        initial_state: Optional[Dict[Hashable, PlayerState]] = None
    ) -> SeasonReplayResult:
        """Rate every event in order starting from `initial_state` (not modified)"""
        events = list(events)
        self.check_order(events)

        state: Dict[Hashable, PlayerState] = dict(initial_state or {})
        result = SeasonReplayResult(final_state=state)

        self.logger.info(f"Replaying {len(events)} events from {len(state)} known participants")

        for event in events:
            engine = self._engine_for(event.format_id)
            participants = []
            for entry in event.entries:
                player = state.get(entry.participant_id)
                if player is None:
                    player = PlayerState(rating=engine.config.initial_rating)
                participants.append(Participant(
                    participant_id=entry.participant_id,
                    finish_position=entry.finish_position,
                    current_rating=player.rating,
                    games_played=player.games_played,
                    team_index=entry.team_index,
                    convergence_points=player.convergence_points,
                    season_high=player.season_high,
                    display_rating=player.display_rating,
                ))

            changes = engine.calculate(participants)

            for change in changes:
                state[change.participant_id] = replace(
                    state.get(change.participant_id, PlayerState(rating=change.old_rating)),
                    rating=change.new_rating,
                    games_played=change.new_games_played,
                    convergence_points=change.new_convergence_points,
                    season_high=change.new_season_high,
                    display_rating=change.new_display_rating,
                )

            result.event_changes.append((event.event_id, changes))
            result.history_snapshots.append(pd.Series(
                {pid: player.rating for pid, player in state.items()},
                name=event.event_id,
            ))
            self.logger.info(
                f"Event {event.event_id} (sequence {event.sequence}): "
                f"rated {len(changes)} participants"
            )

        return result

    def replay_from(
        self,
        events: Iterable[EventRecord],
        event_id: Hashable,
        initial_state: Dict[Hashable, PlayerState]
    ) -> SeasonReplayResult:
        """
        Recompute from `event_id` forward. `initial_state` must be the state as
        of just before that event.
        """
        events = list(events)
        self.check_order(events)
        for index, event in enumerate(events):
            if event.event_id == event_id:
                self.logger.info(f"Recalculating from event {event_id} ({len(events) - index} events)")
                return self.replay(events[index:], initial_state)
        raise KeyError(f"Unknown event id: {event_id!r}")
