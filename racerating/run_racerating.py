import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from racerating.core.season_replay import EventRecord, SeasonReplayer, SeasonReplayResult
from racerating.infra.config import ConfigManager
from racerating.utils.env_loader import load_project_env
from racerating.utils.logger import configure_root_logger, get_logger

logger = get_logger(__name__)


def load_events(events_path: str) -> List[EventRecord]:
    """Read the events JSON file and return records sorted by sequence"""
    with open(events_path, 'r', encoding='utf-8') as f:
        raw_events = json.load(f)

    if not isinstance(raw_events, list):
        raise ValueError(f"Events file must contain a list: {events_path}")

    events = [EventRecord.from_dict(item) for item in raw_events]
    events.sort(key=lambda event: event.sequence)
    logger.info(f"Loaded {len(events)} events from {events_path}")
    return events


def save_results(
    result: SeasonReplayResult,
    output_dir: Path,
    run_name: str,
) -> Dict[str, Optional[str]]:
    """Write history, standings and per-event changes as CSV"""
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = time.strftime('%Y_%m_%d_%H_%M_%S', time.localtime())

    paths: Dict[str, Optional[str]] = {}
    frames = {
        'history': (result.history_frame(), f"{run_name}_rating_history_{timestamp}.csv", True),
        'standings': (result.standings_frame(), f"{run_name}_standings_{timestamp}.csv", False),
        'changes': (result.changes_frame(), f"{run_name}_event_changes_{timestamp}.csv", False),
    }
    for key, (frame, filename, keep_index) in frames.items():
        if frame.empty:
            paths[key] = None
            continue
        path = output_dir / filename
        frame.to_csv(path, index=keep_index, index_label='event_id' if keep_index else None)
        logger.info(f"Saved {key}: {path}")
        paths[key] = str(path)

    return paths


def main(argv: Optional[List[str]] = None) -> int:
    load_project_env()

    parser = argparse.ArgumentParser(description="Replay a season of race events and recompute ratings")
    parser.add_argument('--config', type=str, default=os.getenv('RACERATING_CONFIG'),
                        help='YAML config with event format profiles')
    parser.add_argument('--events', type=str, required=True, help='JSON file with completed events')
    parser.add_argument('--output-dir', type=str, default=None, help='Directory for CSV results')
    parser.add_argument('--from-event', type=str, default=None,
                        help='Event id to start from; earlier events are replayed to build the baseline')
    parser.add_argument('--log-level', type=str, default='INFO')
    args = parser.parse_args(argv)

    configure_root_logger(level=args.log_level, log_to_file=True, log_to_console=True)

    if not args.config:
        logger.error("No config file given (use --config or RACERATING_CONFIG)")
        return 1

    try:
        config_manager = ConfigManager(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load config: {e}")
        return 1

    validation_errors = config_manager.validate_config()
    if validation_errors:
        logger.error("Config validation failed:")
        for error in validation_errors:
            logger.error(f"  - {error}")
        return 1

    events = load_events(args.events)
    replayer = SeasonReplayer.from_config_manager(config_manager)

    if args.from_event is None:
        result = replayer.replay(events)
    else:
        start = next(
            (i for i, event in enumerate(events) if str(event.event_id) == args.from_event),
            None,
        )
        if start is None:
            logger.error(f"Event {args.from_event} not found in {args.events}")
            return 1
        baseline = replayer.replay(events[:start]).final_state
        result = replayer.replay_from(events, events[start].event_id, baseline)

    output_dir = Path(args.output_dir) if args.output_dir else config_manager.get_result_dir()
    save_results(result, output_dir, config_manager.get_run_name())

    logger.info(f"Replay finished: {len(result.final_state)} participants rated")
    return 0


if __name__ == "__main__":
    sys.exit(main())
