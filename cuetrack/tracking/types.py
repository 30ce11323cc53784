"""
Value types shared by the tracking modules

Provides:
- Observation: one detector measurement (input contract)
- TrackStatus / LifecycleState: track lifecycle classification
- TrackSnapshot: immutable per-track output
- FrameSnapshot: immutable result of one TrackManager.step
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Optional, Iterator

import numpy as np

from ..core.constants import PREDICTED_MAX_MISSES, LOST_REASON_MISSES

Vector3 = Tuple[float, float, float]


def as_vector(values) -> Vector3:
    """Convert any 3-element sequence or array to a plain float tuple"""
    return tuple(float(v) for v in np.asarray(values, dtype=float).reshape(-1)[:3])


@dataclass(frozen=True)
class Observation:
    """
    One noisy 3D position measurement produced by an external detector

    Attributes:
        position: (x, y, z) in world coordinates (meters)
        confidence: Detector confidence in [0, 1]
        timestamp: Capture time in seconds; None means "the frame time"

    Example:
        >>> obs = Observation((1.0, 0.0, 0.0), confidence=0.9, timestamp=0.033)
        >>> obs.is_valid
        True
    """
    position: Vector3
    confidence: float = 1.0
    timestamp: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        """False if the position is not three finite numbers or confidence is non-finite"""
        try:
            values = [float(v) for v in self.position]
            confidence = float(self.confidence)
        except (TypeError, ValueError):
            return False
        return (
            len(values) == 3
            and all(math.isfinite(v) for v in values)
            and math.isfinite(confidence)
        )

    def as_array(self) -> np.ndarray:
        """Position as a float64 array of shape (3,)"""
        return np.asarray(self.position, dtype=np.float64)


class TrackStatus(Enum):
    """Track lifecycle states."""

    ACTIVE = "active"  # Matched this frame
    PREDICTED = "predicted"  # Briefly unobserved, prediction trusted
    JITTERING = "jittering"  # Unreliable, flag visually
    OCCLUDED = "occluded"  # Hidden but believed to exist
    LOST = "lost"  # Terminal, evicted


@dataclass(frozen=True)
class LifecycleState:
    """
    Lifecycle classification of a track, derived from its miss counter

    JITTERING carries a severity (misses / loss threshold) and LOST carries
    a reason string.
    """
    status: TrackStatus
    severity: float = 0.0
    reason: str = ""

    @classmethod
    def active(cls) -> "LifecycleState":
        return cls(TrackStatus.ACTIVE)

    @classmethod
    def predicted(cls) -> "LifecycleState":
        return cls(TrackStatus.PREDICTED)

    @classmethod
    def jittering(cls, severity: float) -> "LifecycleState":
        return cls(TrackStatus.JITTERING, severity=float(severity))

    @classmethod
    def occluded(cls) -> "LifecycleState":
        return cls(TrackStatus.OCCLUDED)

    @classmethod
    def lost(cls, reason: str = LOST_REASON_MISSES) -> "LifecycleState":
        return cls(TrackStatus.LOST, reason=reason)

    @classmethod
    def from_misses(
        cls,
        misses: int,
        loss_threshold: int,
        occluded: bool = False
    ) -> "LifecycleState":
        """
        Derive the state purely from the consecutive-miss counter

        Args:
            misses: Consecutive frames without association
            loss_threshold: Miss count at which a track is lost
            occluded: Caller signalled that the object is hidden

        Returns:
            0 -> ACTIVE, >= loss_threshold -> LOST, occluded -> OCCLUDED,
            1-2 -> PREDICTED, otherwise JITTERING(misses / loss_threshold)
        """
        if misses <= 0:
            return cls.active()
        if misses >= loss_threshold:
            return cls.lost()
        if occluded:
            return cls.occluded()
        if misses <= PREDICTED_MAX_MISSES:
            return cls.predicted()
        return cls.jittering(misses / loss_threshold)

    @property
    def is_terminal(self) -> bool:
        return self.status is TrackStatus.LOST

    @property
    def is_reliable(self) -> bool:
        """Whether the position estimate can be trusted"""
        if self.status is TrackStatus.JITTERING:
            return self.severity < 0.5
        return self.status is not TrackStatus.LOST

    @property
    def is_visible(self) -> bool:
        """Whether the object was observed this frame"""
        return self.status is TrackStatus.ACTIVE

    @property
    def description(self) -> str:
        """Human-readable description of the state"""
        if self.status is TrackStatus.JITTERING:
            return f"Jittering ({self.severity * 100:.1f}%)"
        if self.status is TrackStatus.LOST:
            return f"Lost: {self.reason}"
        return self.status.value.capitalize()

    def __str__(self) -> str:
        return self.description


@dataclass(frozen=True)
class TrackSnapshot:
    """
    Immutable view of one track at a point in time

    Attributes:
        id: Stable track identifier
        position: Estimated (x, y, z)
        velocity: Estimated (vx, vy, vz)
        confidence: Estimator confidence in [0, 1]
        state: Lifecycle state
        age: Seconds since the creating observation
        total_detections: Lifetime number of associations
        average_confidence: Mean of the recent observation confidences
        consecutive_misses: Frames since the last association
        uncertainty: Per-axis position standard deviation
        is_detected: Whether an observation was associated at this time
        timestamp: Time this snapshot describes
        is_stable: Few misses and high confidence
    """
    id: int
    position: Vector3
    velocity: Vector3
    confidence: float
    state: LifecycleState
    age: float
    total_detections: int
    average_confidence: float
    consecutive_misses: int = 0
    uncertainty: Vector3 = (0.0, 0.0, 0.0)
    is_detected: bool = False
    timestamp: float = 0.0
    is_stable: bool = False

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def needs_attention(self) -> bool:
        """Whether a consumer should flag this track (low confidence, lost, ...)"""
        status = self.state.status
        if status in (TrackStatus.LOST, TrackStatus.JITTERING):
            return True
        if status is TrackStatus.PREDICTED:
            return self.confidence < 0.3
        return self.confidence < 0.1

    @property
    def state_description(self) -> str:
        return self.state.description

    def predict_position(self, future_time: float) -> np.ndarray:
        """Linear extrapolation of this snapshot to another time"""
        dt = future_time - self.timestamp
        return np.asarray(self.position) + np.asarray(self.velocity) * dt


@dataclass(frozen=True)
class FrameSnapshot:
    """
    Result of one TrackManager.step

    Iterating yields the TrackSnapshot of every live track in ascending id
    order.
    """
    timestamp: float
    tracks: Tuple[TrackSnapshot, ...] = ()
    new_track_ids: Tuple[int, ...] = ()
    lost_track_ids: Tuple[int, ...] = ()
    dropped_observations: int = 0
    invalid_observations: int = 0

    def __iter__(self) -> Iterator[TrackSnapshot]:
        return iter(self.tracks)

    def __len__(self) -> int:
        return len(self.tracks)

    def __getitem__(self, index: int) -> TrackSnapshot:
        return self.tracks[index]

    @property
    def track_ids(self) -> Tuple[int, ...]:
        return tuple(t.id for t in self.tracks)

    def get(self, track_id: int) -> Optional[TrackSnapshot]:
        """Snapshot for a track id, or None if it is not in this frame"""
        for track in self.tracks:
            if track.id == track_id:
                return track
        return None
