"""
Short-horizon trajectory prediction for tracked objects

Provides:
- Rolling-friction motion for objects sliding to a stop on a surface
- Evenly spaced forward sampling of a StateEstimator
"""

import math
from dataclasses import dataclass
from typing import Callable, Tuple, Optional, Union

import numpy as np

from ..core.config import MotionModel, PhysicsConfig
from ..core.exceptions import ValidationError
from .estimator import StateEstimator
from .types import Vector3, as_vector


@dataclass(frozen=True)
class TrajectoryPoint:
    """
    One sample of a predicted trajectory

    Attributes:
        position: Predicted (x, y, z)
        velocity: Predicted (vx, vy, vz)
        time_offset: Seconds after the start of the trajectory
        confidence: Projected estimator confidence at this offset
    """
    position: Vector3
    velocity: Vector3
    time_offset: float
    confidence: float


def rolling_friction_motion(
    position: np.ndarray,
    velocity: np.ndarray,
    dt: float,
    deceleration: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Advance a rolling object under constant friction deceleration

    The object decelerates at `deceleration` along its direction of travel
    and stays at rest once it stops; it never reverses.

    Args:
        position: Start position [x, y, z]
        velocity: Start velocity [vx, vy, vz]
        dt: Elapsed time in seconds (negative treated as 0)
        deceleration: Magnitude of the friction deceleration (m/s^2)

    Returns:
        (position, velocity) after dt

    Example:
        >>> pos, vel = rolling_friction_motion(np.zeros(3), np.array([1.0, 0, 0]), 10.0, 0.5)
        >>> pos[0]  # stops after 2 s, 1 m travelled
        1.0
    """
    position = np.asarray(position, dtype=np.float64)
    velocity = np.asarray(velocity, dtype=np.float64)
    dt = max(0.0, dt)

    speed = float(np.linalg.norm(velocity))
    if speed == 0.0:
        return position.copy(), velocity.copy()
    if deceleration <= 0.0:
        return position + velocity * dt, velocity.copy()

    direction = velocity / speed
    t = min(dt, speed / deceleration)
    distance = speed * t - 0.5 * deceleration * t * t
    remaining = max(0.0, speed - deceleration * t)

    return position + direction * distance, direction * remaining


class TrajectoryPredictor:
    """
    Samples a StateEstimator forward over a time horizon

    Never mutates the estimator: every sample is a projection.

    Example:
        >>> predictor = TrajectoryPredictor()
        >>> points = predictor.sample(track.estimator, start_time=1.0, duration=0.5, resolution=6)
        >>> len(points), points[-1].time_offset
        (6, 0.5)
    """

    def __init__(self, physics: Optional[PhysicsConfig] = None):
        """
        Args:
            physics: Physical constants for the rolling-friction model
        """
        self.physics = physics if physics is not None else PhysicsConfig()

    def sample(
        self,
        estimator: StateEstimator,
        start_time: float,
        duration: float,
        resolution: int,
        model: Union[MotionModel, str] = MotionModel.CONSTANT_VELOCITY,
        motion: Optional[Callable[[float], Tuple[np.ndarray, np.ndarray]]] = None
    ) -> Tuple[TrajectoryPoint, ...]:
        """
        Sample `resolution` evenly spaced points over [start, start + duration]

        Both ends are included. A resolution of 1 yields only the start point.
        When `motion` is given it supplies (position, velocity) for each
        absolute time and `model` only needs to be valid.

        Args:
            estimator: Estimator to project
            start_time: Absolute time of the first sample (seconds)
            duration: Horizon length in seconds (>= 0)
            resolution: Number of samples (>= 1)
            model: 'constant_velocity' or 'rolling_friction'
            motion: Optional override mapping a time to (position, velocity)

        Returns:
            Tuple of TrajectoryPoint ordered by time offset

        Raises:
            ValidationError: If resolution, duration or model is invalid
        """
        self._validate(duration, resolution)
        model = self._resolve_model(model)

        points = []
        for offset in np.linspace(0.0, float(duration), int(resolution)):
            timestamp = start_time + float(offset)
            position, velocity, confidence = estimator.project(timestamp)

            if motion is not None:
                position, velocity = motion(timestamp)
            elif model is MotionModel.ROLLING_FRICTION and self.physics.enabled:
                dt = estimator.time_since_update(timestamp)
                position, velocity = rolling_friction_motion(
                    estimator.position, estimator.velocity, dt, self.physics.deceleration
                )

            points.append(TrajectoryPoint(
                position=as_vector(position),
                velocity=as_vector(velocity),
                time_offset=float(offset),
                confidence=float(confidence),
            ))

        return tuple(points)

    @staticmethod
    def _validate(duration: float, resolution: int) -> None:
        if isinstance(resolution, bool) or not isinstance(resolution, (int, np.integer)):
            raise ValidationError(f"resolution must be an integer, got {resolution!r}")
        if resolution < 1:
            raise ValidationError(f"resolution must be >= 1, got {resolution}")
        try:
            duration = float(duration)
        except (TypeError, ValueError):
            raise ValidationError(f"duration must be a number, got {duration!r}")
        if not math.isfinite(duration) or duration < 0:
            raise ValidationError(f"duration must be finite and >= 0, got {duration}")

    @staticmethod
    def _resolve_model(model: Union[MotionModel, str]) -> MotionModel:
        try:
            return MotionModel(model)
        except ValueError:
            valid = [m.value for m in MotionModel]
            raise ValidationError(f"Unknown motion model {model!r}, expected one of {valid}")
