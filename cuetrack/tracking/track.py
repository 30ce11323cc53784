"""
Single tracked object with lifecycle bookkeeping

Provides:
- Track: wraps one StateEstimator with miss counting, confidence history,
  lifecycle state and the occlusion policy
"""

from collections import deque
from typing import Optional, Tuple

import numpy as np

from ..core.config import TrackingConfig, OcclusionConfig, PhysicsConfig
from ..core.constants import LOST_REASON_CONFIDENCE
from .estimator import StateEstimator, clamp_confidence
from .trajectory import rolling_friction_motion
from .types import (
    Observation, LifecycleState, TrackStatus, TrackSnapshot, as_vector
)


class Track:
    """
    One tracked object

    A Track exclusively owns its StateEstimator. Only the TrackManager
    creates and mutates tracks.

    Attributes:
        id: Identifier assigned by the owning manager
        estimator: Per-track state estimator
        created_at: Timestamp of the creating observation
        last_timestamp: Time of the last predict or update
        consecutive_misses: Frames since the last association
        total_detections: Lifetime association count
        confidence_history: Recent observation confidences (bounded)
        state: Current lifecycle state
        is_detected: Whether the latest frame associated an observation
    """

    def __init__(
        self,
        track_id: int,
        observation: Observation,
        timestamp: float,
        config: Optional[TrackingConfig] = None,
        occlusion: Optional[OcclusionConfig] = None,
        physics: Optional[PhysicsConfig] = None
    ):
        """
        Create a track from its first observation

        Args:
            track_id: Identifier assigned by the manager
            observation: Creating observation (counts as the first detection)
            timestamp: Frame time of the creating observation
            config: Tracking configuration
            occlusion: Occlusion handling policy
            physics: Physical constants for occluded extrapolation
        """
        self.config = config if config is not None else TrackingConfig()
        self.occlusion = occlusion if occlusion is not None else OcclusionConfig()
        self.physics = physics if physics is not None else PhysicsConfig()

        self.id = track_id
        self.estimator = StateEstimator(
            observation.position, timestamp, self.config.estimator_config()
        )
        self.created_at = timestamp
        self.last_timestamp = timestamp
        self.consecutive_misses = 0
        self.total_detections = 1
        self.confidence_history = deque(
            [clamp_confidence(observation.confidence)],
            maxlen=self.config.confidence_history_size,
        )
        self.state = LifecycleState.active()
        self.is_detected = True
        self.predicted_position = self.estimator.position

    def __repr__(self) -> str:
        return (
            f"Track(id={self.id}, state={self.state}, "
            f"misses={self.consecutive_misses}, conf={self.confidence:.3f})"
        )

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def confidence(self) -> float:
        return self.estimator.confidence

    @property
    def is_occluded(self) -> bool:
        return self.state.status is TrackStatus.OCCLUDED

    @property
    def average_confidence(self) -> float:
        """Mean of the recent observation confidences"""
        if not self.confidence_history:
            return 0.0
        return float(np.mean(self.confidence_history))

    @property
    def is_stable(self) -> bool:
        """Few recent misses and a high estimator confidence"""
        return (
            self.consecutive_misses < self.config.stable_max_misses
            and self.confidence > self.config.stable_min_confidence
        )

    def age(self, timestamp: float) -> float:
        """Seconds since the creating observation"""
        return max(0.0, timestamp - self.created_at)

    # ------------------------------------------------------------------ #
    # Per-frame operations
    # ------------------------------------------------------------------ #

    def predict(self, timestamp: float) -> np.ndarray:
        """
        Predict the position at a frame time (decays confidence once)

        Args:
            timestamp: Frame time in seconds

        Returns:
            Position used for association at this frame
        """
        self.estimator.predict(timestamp)
        self.predicted_position = self.position_at(timestamp)
        self.last_timestamp = max(self.last_timestamp, timestamp)
        return self.predicted_position

    def update(self, observation: Observation, timestamp: float, occluded: bool = False) -> bool:
        """
        Apply an associated observation

        A measurement rejected by the estimator counts as a miss.

        Args:
            observation: Associated observation
            timestamp: Frame time in seconds
            occluded: Occlusion hint applied if the measurement is rejected

        Returns:
            True if the observation was applied
        """
        if not self.estimator.update(observation.position, timestamp, observation.confidence):
            self.mark_missed(timestamp, occluded=occluded)
            return False

        self.consecutive_misses = 0
        self.total_detections += 1
        self.confidence_history.append(clamp_confidence(observation.confidence))
        self.state = LifecycleState.active()
        self.is_detected = True
        self.predicted_position = self.estimator.position
        self.last_timestamp = max(self.last_timestamp, timestamp)
        return True

    def mark_missed(self, timestamp: float, occluded: bool = False) -> LifecycleState:
        """
        Record a frame without association

        Args:
            timestamp: Frame time in seconds
            occluded: Caller hinted that the object is hidden

        Returns:
            New lifecycle state
        """
        self.consecutive_misses += 1
        self.is_detected = False
        self.state = LifecycleState.from_misses(
            self.consecutive_misses,
            self.config.loss_threshold,
            occluded=occluded and self.occlusion.enabled,
        )
        self.last_timestamp = max(self.last_timestamp, timestamp)
        return self.state

    def should_remove(self) -> bool:
        """
        Whether the track must be evicted

        Marks the track LOST when its confidence fell below the floor.
        """
        if self.state.is_terminal:
            return True
        if self.confidence < self.config.min_track_confidence:
            self.state = LifecycleState.lost(LOST_REASON_CONFIDENCE)
            return True
        return False

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    def position_at(self, timestamp: float) -> np.ndarray:
        """
        Position at a time without mutating the track

        Occluded tracks follow the occlusion policy: frozen at the last
        corrected position, or rolled forward under friction.
        """
        if self.is_occluded:
            if not self.occlusion.use_physics_prediction:
                return self.estimator.position
            if self.physics.enabled:
                dt = self.estimator.time_since_update(timestamp)
                position, _ = rolling_friction_motion(
                    self.estimator.position, self.estimator.velocity,
                    dt, self.physics.deceleration,
                )
                return position
        position, _, _ = self.estimator.project(timestamp)
        return position

    def motion_at(self, timestamp: float) -> Tuple[np.ndarray, np.ndarray]:
        """(position, velocity) at a time under the same policy as position_at"""
        return self.position_at(timestamp), self.velocity_at(timestamp)

    def velocity_at(self, timestamp: float) -> np.ndarray:
        if self.is_occluded:
            if not self.occlusion.use_physics_prediction:
                return np.zeros(3)
            if self.physics.enabled:
                dt = self.estimator.time_since_update(timestamp)
                _, velocity = rolling_friction_motion(
                    self.estimator.position, self.estimator.velocity,
                    dt, self.physics.deceleration,
                )
                return velocity
        return self.estimator.velocity

    def to_snapshot(self, timestamp: float, project: bool = False) -> TrackSnapshot:
        """
        Immutable view of this track

        Args:
            timestamp: Time the snapshot describes
            project: If True, report the projected position and the
                     time-decayed confidence at timestamp (read-only queries)

        Returns:
            TrackSnapshot
        """
        if project:
            _, _, confidence = self.estimator.project(timestamp)
            position = self.position_at(timestamp)
        else:
            confidence = self.confidence
            position = self.estimator.position if self.is_detected else self.position_at(timestamp)

        return TrackSnapshot(
            id=self.id,
            position=as_vector(position),
            velocity=as_vector(self.velocity_at(timestamp)),
            confidence=float(confidence),
            state=self.state,
            age=self.age(timestamp),
            total_detections=self.total_detections,
            average_confidence=self.average_confidence,
            consecutive_misses=self.consecutive_misses,
            uncertainty=as_vector(self.estimator.position_uncertainty),
            is_detected=self.is_detected,
            timestamp=float(timestamp),
            is_stable=self.is_stable,
        )
