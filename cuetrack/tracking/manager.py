"""
Multi-object track manager

Orchestrates the per-frame tracking pipeline:
1. Predict every live track to the frame time
2. Drop invalid observations
3. Associate observations to tracks
4. Update matched tracks
5. Spawn tracks for unmatched observations (capacity limited)
6. Advance the lifecycle of unmatched tracks
7. Evict lost tracks
8. Return an immutable FrameSnapshot

Provides:
- TrackManager: owner of all tracks and the public query API
- TrackerStatistics: running counters
"""

import time
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, Optional, Tuple, Union, Any, Collection

import numpy as np
from loguru import logger

from ..core.config import CueTrackConfig, TrackingConfig, MotionModel
from ..core.exceptions import TrackNotFoundError
from .association import associate
from .track import Track
from .trajectory import TrajectoryPredictor, TrajectoryPoint
from .types import Observation, FrameSnapshot, TrackSnapshot


@dataclass
class TrackerStatistics:
    """Running counters kept by a TrackManager"""
    frames_processed: int = 0
    tracks_created: int = 0
    tracks_lost: int = 0
    tracks_removed: int = 0
    observations_processed: int = 0
    invalid_observations: int = 0
    capacity_exceeded: int = 0
    last_processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TrackManager:
    """
    Real-time multi-object tracker for 3D point observations

    Owns every Track in an id-keyed dict (ascending id order). `step` is
    the only per-frame mutating entry point; all queries are read-only.
    Not thread-safe: the caller serializes access.

    Example:
        >>> from cuetrack.tracking import TrackManager, Observation
        >>> manager = TrackManager()
        >>> frame = manager.step([Observation((1.0, 0.0, 0.0), 0.9)], timestamp=0.0)
        >>> frame.track_ids
        (1,)
        >>> frame = manager.step([Observation((1.01, 0.0, 0.0), 0.9)], timestamp=0.033)
        >>> frame[0].total_detections
        2
    """

    def __init__(self, config: Optional[Union[CueTrackConfig, TrackingConfig]] = None):
        """
        Initialize track manager

        Args:
            config: CueTrackConfig, or a bare TrackingConfig with default
                    occlusion and physics settings (default CueTrackConfig())
        """
        if config is None:
            config = CueTrackConfig()
        elif isinstance(config, TrackingConfig):
            config = CueTrackConfig(tracking=config)

        self.config = config
        self.tracking_config = config.tracking
        self.predictor = TrajectoryPredictor(config.physics)

        self._tracks: Dict[int, Track] = {}
        self._next_id = 1
        self._last_timestamp: Optional[float] = None
        self._stats = TrackerStatistics()

    # ------------------------------------------------------------------ #
    # Per-frame pipeline
    # ------------------------------------------------------------------ #

    def step(
        self,
        observations: Iterable[Observation],
        timestamp: float,
        occluded_ids: Optional[Collection[int]] = None
    ) -> FrameSnapshot:
        """
        Process one frame of observations

        Args:
            observations: Observations captured at this frame
            timestamp: Frame time in seconds (non-decreasing)
            occluded_ids: Track ids the caller knows to be hidden this frame

        Returns:
            FrameSnapshot of every live track after the frame
        """
        start = time.perf_counter()
        cfg = self.tracking_config
        occluded_ids = set(occluded_ids or ())
        timestamp = float(timestamp)

        # 1. Predict every track exactly once
        tracks = list(self._tracks.values())
        predicted = np.array([t.predict(timestamp) for t in tracks]).reshape(-1, 3)

        # 2. Drop invalid observations
        valid, invalid = [], 0
        for obs in observations:
            if obs.is_valid:
                valid.append(obs)
            else:
                invalid += 1
        if invalid:
            logger.warning(f"Dropped {invalid} invalid observation(s) at t={timestamp:.3f}")

        # 3. Associate
        observed = np.array([obs.as_array() for obs in valid]).reshape(-1, 3)
        result = associate(predicted, observed, cfg.max_association_distance, cfg.algorithm)

        # 4. Update matched tracks
        for t_idx, o_idx in result.matches:
            track = tracks[t_idx]
            track.update(valid[o_idx], timestamp, occluded=track.id in occluded_ids)

        # 5. Spawn tracks for unmatched observations
        new_ids = []
        dropped = 0
        for o_idx in result.unmatched_observations:
            if len(self._tracks) >= cfg.max_active_tracks:
                dropped += 1
                continue
            new_ids.append(self._create_track(valid[o_idx], timestamp).id)
        if dropped:
            logger.warning(
                f"Track capacity {cfg.max_active_tracks} reached, "
                f"dropped {dropped} observation(s) at t={timestamp:.3f}"
            )

        # 6. Advance lifecycle of unmatched tracks
        for t_idx in result.unmatched_tracks:
            track = tracks[t_idx]
            track.mark_missed(timestamp, occluded=track.id in occluded_ids)

        # 7. Evict lost tracks
        lost_ids = []
        for track in tracks:
            if track.should_remove():
                del self._tracks[track.id]
                lost_ids.append(track.id)
                logger.debug(f"Lost track {track.id}: {track.state.reason}")

        self._last_timestamp = timestamp
        stats = self._stats
        stats.frames_processed += 1
        stats.observations_processed += len(valid)
        stats.invalid_observations += invalid
        stats.capacity_exceeded += dropped
        stats.tracks_lost += len(lost_ids)
        stats.last_processing_time_ms = (time.perf_counter() - start) * 1000.0

        # 8. Snapshot
        return FrameSnapshot(
            timestamp=timestamp,
            tracks=tuple(t.to_snapshot(timestamp) for t in self._tracks.values()),
            new_track_ids=tuple(new_ids),
            lost_track_ids=tuple(lost_ids),
            dropped_observations=dropped,
            invalid_observations=invalid,
        )

    def _create_track(self, observation: Observation, timestamp: float) -> Track:
        track = Track(
            self._next_id,
            observation,
            timestamp,
            config=self.tracking_config,
            occlusion=self.config.occlusion,
            physics=self.config.physics,
        )
        self._tracks[track.id] = track
        self._next_id += 1
        self._stats.tracks_created += 1
        logger.debug(f"Created track {track.id} at {observation.position}")
        return track

    # ------------------------------------------------------------------ #
    # Read-only queries
    # ------------------------------------------------------------------ #

    def predict_at(self, timestamp: float) -> Dict[int, np.ndarray]:
        """
        Predicted position of every live track at a time

        Does not change any track, counter or confidence.

        Args:
            timestamp: Query time in seconds

        Returns:
            Dict of track id -> position [x, y, z]
        """
        return {tid: track.position_at(timestamp) for tid, track in self._tracks.items()}

    def predictions_at(self, timestamp: float) -> Tuple[TrackSnapshot, ...]:
        """
        Projected snapshot of every live track at a time

        Confidence is decayed for the elapsed time; nothing is stored.
        """
        return tuple(
            track.to_snapshot(timestamp, project=True) for track in self._tracks.values()
        )

    def trajectory(
        self,
        track_id: int,
        duration: float,
        resolution: int,
        model: Union[MotionModel, str] = MotionModel.CONSTANT_VELOCITY
    ) -> Tuple[TrajectoryPoint, ...]:
        """
        Sample a track's future path

        Args:
            track_id: Track to sample
            duration: Horizon in seconds, starting at the last step time
            resolution: Number of evenly spaced samples (>= 1)
            model: 'constant_velocity' or 'rolling_friction'
                   (ignored while the track is occluded)

        Returns:
            Tuple of TrajectoryPoint

        Raises:
            TrackNotFoundError: If the track is not live
            ValidationError: If duration, resolution or model is invalid
        """
        track = self.get_track(track_id)
        start = self._last_timestamp if self._last_timestamp is not None else track.last_timestamp
        # Occluded tracks follow the occlusion policy, like predict_at
        motion = track.motion_at if track.is_occluded else None
        return self.predictor.sample(
            track.estimator, start, duration, resolution, model, motion=motion
        )

    def get_track(self, track_id: int) -> Track:
        """
        Raises:
            TrackNotFoundError: If the track is not live
        """
        try:
            return self._tracks[track_id]
        except KeyError:
            raise TrackNotFoundError(track_id) from None

    def get_confidence(self, track_id: int) -> Optional[float]:
        track = self._tracks.get(track_id)
        return None if track is None else track.confidence

    def is_tracking(self, track_id: int) -> bool:
        return track_id in self._tracks

    def snapshot(self) -> Tuple[TrackSnapshot, ...]:
        """Current state of every live track, without advancing time"""
        timestamp = self._last_timestamp if self._last_timestamp is not None else 0.0
        return tuple(track.to_snapshot(timestamp) for track in self._tracks.values())

    @property
    def track_ids(self) -> Tuple[int, ...]:
        return tuple(self._tracks)

    @property
    def active_track_count(self) -> int:
        return len(self._tracks)

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._last_timestamp

    @property
    def statistics(self) -> TrackerStatistics:
        return self._stats

    def get_statistics(self) -> Dict[str, Any]:
        """
        Counters plus aggregates over the live tracks

        Returns:
            Dict with every TrackerStatistics field, active_tracks,
            average_confidence and total_detections
        """
        stats = self._stats.to_dict()
        confidences = [t.confidence for t in self._tracks.values()]
        stats['active_tracks'] = len(self._tracks)
        stats['average_confidence'] = float(np.mean(confidences)) if confidences else 0.0
        stats['total_detections'] = sum(t.total_detections for t in self._tracks.values())
        return stats

    # ------------------------------------------------------------------ #
    # Explicit mutation
    # ------------------------------------------------------------------ #

    def remove(self, track_id: int) -> bool:
        """
        Evict a track; unknown ids are ignored

        Returns:
            True if a track was removed
        """
        if self._tracks.pop(track_id, None) is None:
            return False
        self._stats.tracks_removed += 1
        logger.debug(f"Removed track {track_id}")
        return True

    def reset(self) -> None:
        """Drop all tracks, counters and the id sequence (next id is 1)"""
        self._tracks.clear()
        self._next_id = 1
        self._last_timestamp = None
        self._stats = TrackerStatistics()
        logger.info("Track manager reset")

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, track_id: int) -> bool:
        return track_id in self._tracks
