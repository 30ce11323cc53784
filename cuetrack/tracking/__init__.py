"""
Tracking module - Real-time multi-object tracking of 3D points

Provides:
- Per-track simplified Kalman estimator
- Track lifecycle bookkeeping
- Gated data association (greedy and Hungarian)
- Trajectory prediction
- Track manager orchestrating the per-frame pipeline
"""

from .types import (
    Observation,
    TrackStatus,
    LifecycleState,
    TrackSnapshot,
    FrameSnapshot,
)
from .estimator import StateEstimator, clamp_confidence
from .track import Track
from .association import (
    AssociationResult,
    associate,
    distance_matrix,
    greedy_assignment,
    optimal_assignment,
)
from .trajectory import TrajectoryPredictor, TrajectoryPoint, rolling_friction_motion
from .manager import TrackManager, TrackerStatistics

__all__ = [
    # Types
    "Observation",
    "TrackStatus",
    "LifecycleState",
    "TrackSnapshot",
    "FrameSnapshot",
    # Estimation
    "StateEstimator",
    "clamp_confidence",
    "Track",
    # Association
    "AssociationResult",
    "associate",
    "distance_matrix",
    "greedy_assignment",
    "optimal_assignment",
    # Prediction
    "TrajectoryPredictor",
    "TrajectoryPoint",
    "rolling_friction_motion",
    # Manager
    "TrackManager",
    "TrackerStatistics",
]
