"""
Command line entry points for cuetrack

Provides:
- track_main: replay an observation CSV through a TrackManager and write
  the per-frame track table
"""

import argparse
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from loguru import logger
from tqdm import tqdm

from .core.config import CueTrackConfig, AssociationAlgorithm
from .core.exceptions import CueTrackException, handle_tracking_exception
from .core.log import configure_logging
from .io.csv_handler import CSVReader, CSVWriter, ObservationRow, TrackRow
from .tracking.manager import TrackManager


def build_track_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cuetrack-track",
        description="Replay detector observations through the 3D multi-object tracker"
    )

    # Input / output
    parser.add_argument("--observations", type=str, required=True,
                        help="Observation CSV file (frame,timestamp,x,y,z,confidence)")
    parser.add_argument("--output", type=str, required=True,
                        help="Output track CSV file")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML configuration file")

    # Tracking parameter overrides
    parser.add_argument("--max-distance", type=float, default=None,
                        help="Maximum association distance in meters")
    parser.add_argument("--loss-threshold", type=int, default=None,
                        help="Consecutive misses before a track is lost")
    parser.add_argument("--algorithm", type=str, default=None,
                        choices=[a.value for a in AssociationAlgorithm],
                        help="Association algorithm")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")

    return parser


def load_config(args: argparse.Namespace) -> CueTrackConfig:
    """Build the configuration from --config, CUETRACK_* variables and CLI overrides"""
    config = CueTrackConfig.from_yaml(args.config) if args.config else CueTrackConfig()
    config = CueTrackConfig.from_env(config)

    overrides = {}
    if args.max_distance is not None:
        overrides['max_association_distance'] = args.max_distance
    if args.loss_threshold is not None:
        overrides['loss_threshold'] = args.loss_threshold
    if args.algorithm is not None:
        overrides['association_algorithm'] = args.algorithm

    # replace() re-runs validation
    if overrides:
        config.tracking = replace(config.tracking, **overrides)
    return config


def fill_frame_gaps(
    frames: Dict[int, List[ObservationRow]]
) -> List[Tuple[int, float, List[ObservationRow]]]:
    """
    Expand a frame-grouped observation table into a contiguous frame sequence

    Frames with no detections have no CSV rows. Every missing frame number
    between the first and last frame is returned with an empty observation
    list and a timestamp interpolated linearly from its neighbouring frames,
    so tracks count misses across the gap.

    Args:
        frames: Dictionary mapping frame number to its observation rows

    Returns:
        List of (frame_num, timestamp, rows) in ascending frame order

    Example:
        >>> [(f, rows) for f, _, rows in fill_frame_gaps({0: [row_a], 3: [row_b]})]
        [(0, [row_a]), (1, []), (2, []), (3, [row_b])]
    """
    known = sorted(frames)
    sequence = []

    for prev, nxt in zip(known, known[1:] + [None]):
        rows = frames[prev]
        t_prev = rows[0].timestamp
        sequence.append((prev, t_prev, rows))
        if nxt is None:
            continue

        t_next = frames[nxt][0].timestamp
        gap = nxt - prev
        for frame_num in range(prev + 1, nxt):
            alpha = (frame_num - prev) / gap
            sequence.append((frame_num, t_prev + (t_next - t_prev) * alpha, []))

    return sequence


def track_main(argv: Optional[List[str]] = None) -> int:
    """
    Run the replay tracker

    Args:
        argv: Command line arguments (default sys.argv[1:])

    Returns:
        Process exit code: 0 on success, 1 on a cuetrack error
    """
    args = build_track_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "INFO")

    try:
        config = load_config(args)
        frames = CSVReader.read_observations(args.observations)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except CueTrackException as e:
        handle_tracking_exception(e)
        return 1

    logger.info(f"Replaying frames with detections: {len(frames)} from {args.observations}")
    logger.debug(f"Configuration:\n{config}")

    manager = TrackManager(config)
    rows = []

    for frame_num, timestamp, observation_rows in tqdm(fill_frame_gaps(frames), desc="Tracking"):
        snapshot = manager.step([r.to_observation() for r in observation_rows], timestamp)
        rows.extend(TrackRow.from_snapshot(frame_num, track) for track in snapshot)

    CSVWriter.write_tracks(args.output, rows)

    stats = manager.get_statistics()
    logger.info(
        f"Tracking complete: {stats['tracks_created']} tracks created, "
        f"{stats['tracks_lost']} lost, {len(rows)} track entries"
    )
    logger.info(f"Saved: {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(track_main())
