"""
Simplified Kalman filter for 3D point tracking

Provides:
- Constant-velocity state [x, y, z, vx, vy, vz]
- Diagonal (per-axis) variance instead of a full 6x6 covariance
- Prediction, correction and confidence bookkeeping
"""

import math
from typing import Optional, Tuple

import numpy as np
from loguru import logger

from ..core.config import EstimatorConfig
from ..core.constants import MULTI_FRAME_DECAY_RATIO


def clamp_confidence(value) -> float:
    """
    Clamp a confidence value to [0, 1]

    NaN maps to 0, +inf to 1 and -inf to 0.
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


class StateEstimator:
    """
    Per-track position/velocity estimator

    Tracks a single object with a 6D state and independent per-axis
    variances:
    - x, y, z: position (meters)
    - vx, vy, vz: velocity (meters/second)

    No velocity is measured directly; velocity is nudged by a fraction of the
    position innovation divided by the nominal frame interval.

    Example:
        >>> est = StateEstimator(np.array([0.0, 0.0, 1.0]), timestamp=0.0)
        >>> # Predict at a later time
        >>> pred = est.predict(0.033)
        >>> # Update with a new observation
        >>> est.update(np.array([0.01, 0.0, 1.0]), 0.033, confidence=0.9)
        True
    """

    def __init__(
        self,
        position,
        timestamp: Optional[float] = None,
        config: Optional[EstimatorConfig] = None,
        velocity=None,
    ):
        """
        Initialize estimator at a position

        Args:
            position: Initial position [x, y, z]
            timestamp: Time of the initial position (None if unknown)
            config: Filter constants (default EstimatorConfig())
            velocity: Optional initial velocity [vx, vy, vz]
        """
        self.config = config if config is not None else EstimatorConfig()

        self.x = np.zeros(3)
        self.v = np.zeros(3)
        self.P_pos = np.zeros(3)
        self.P_vel = np.zeros(3)
        self.confidence = 0.0
        self.last_timestamp: Optional[float] = None
        self._decay_timestamp: Optional[float] = None

        self.reset(position, timestamp)

        if velocity is not None:
            vel = np.asarray(velocity, dtype=np.float64).reshape(-1)
            if vel.shape == (3,) and np.all(np.isfinite(vel)):
                self.v = vel.copy()

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def position(self) -> np.ndarray:
        return self.x.copy()

    @property
    def velocity(self) -> np.ndarray:
        return self.v.copy()

    @property
    def position_uncertainty(self) -> np.ndarray:
        """Per-axis position standard deviation"""
        return np.sqrt(self.P_pos)

    def get_position(self) -> np.ndarray:
        return self.position

    def get_velocity(self) -> np.ndarray:
        return self.velocity

    def get_position_uncertainty(self) -> np.ndarray:
        return self.position_uncertainty

    def get_confidence(self) -> float:
        return self.confidence

    def time_since_update(self, timestamp: float) -> float:
        """Seconds from the last update to timestamp (0 if unknown or earlier)"""
        return self._elapsed(timestamp, self.last_timestamp)

    # ------------------------------------------------------------------ #
    # Filter operations
    # ------------------------------------------------------------------ #

    def predict(self, timestamp: float) -> np.ndarray:
        """
        Predict position at a timestamp

        Position and velocity are not moved, so repeated calls at the same
        timestamp return the same value. Confidence decays once per call:
        by the fixed decay factor for gaps up to ~1 nominal frame, and by
        exp(-rate * elapsed) for longer gaps.

        Args:
            timestamp: Time to predict for (seconds)

        Returns:
            Predicted position [x, y, z]
        """
        position = self._extrapolate(timestamp)
        self._decay_confidence(timestamp)
        return position

    def project(self, timestamp: float) -> Tuple[np.ndarray, np.ndarray, float]:
        """
        Side-effect free prediction used by read-only queries

        Args:
            timestamp: Time to project to (seconds)

        Returns:
            (position, velocity, confidence) at the timestamp
        """
        elapsed = self._elapsed(timestamp, self._decay_timestamp)
        confidence = self.confidence * math.exp(-self.config.confidence_decay_rate * elapsed)
        return self._extrapolate(timestamp), self.velocity, confidence

    def update(self, position, timestamp: float, confidence: float = 1.0) -> bool:
        """
        Update filter with a new position measurement

        Runs a prediction step to the timestamp (advancing position and
        inflating variance by process noise), then a per-axis correction
        with gain = P / (P + R / max(eps, confidence)).

        Args:
            position: Measured position [x, y, z]
            timestamp: Measurement time (seconds)
            confidence: Measurement confidence, clamped to [0, 1]

        Returns:
            False if the measurement was rejected (non-finite position)
        """
        try:
            z = np.asarray(position, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError):
            z = np.full(1, np.nan)
        if z.shape != (3,) or not np.all(np.isfinite(z)):
            logger.debug(f"Rejected non-finite measurement {position!r}")
            return False

        confidence = clamp_confidence(confidence)
        cfg = self.config

        # Prediction step
        dt = self._elapsed(timestamp, self.last_timestamp)
        if dt > 0:
            self.x = self.x + self.v * dt
            self.P_pos = self._clamp_variance(self.P_pos + cfg.process_noise * dt * dt * 0.5)
            self.P_vel = self._clamp_variance(self.P_vel + cfg.process_noise * dt)

        # Correction step
        innovation = z - self.x
        measurement_var = cfg.measurement_noise / max(cfg.min_measurement_confidence, confidence)
        gain = self.P_pos / (self.P_pos + measurement_var)

        self.x = self.x + gain * innovation

        if self.last_timestamp is not None:
            self.v = self.v + cfg.velocity_gain * gain * innovation / cfg.nominal_frame_interval

        self.P_pos = self._clamp_variance(self.P_pos * (1.0 - gain))

        self.confidence = min(1.0, self.confidence + confidence * cfg.responsiveness)

        if timestamp is not None and math.isfinite(timestamp):
            self.last_timestamp = self._latest(self.last_timestamp, timestamp)
            self._decay_timestamp = self._latest(self._decay_timestamp, timestamp)

        return True

    def reset(self, position, timestamp: Optional[float] = None) -> None:
        """
        Reset filter to a new position

        Zero velocity, default variance and confidence back to its floor.
        A non-finite position leaves the current position in place.

        Args:
            position: New position [x, y, z]
            timestamp: Time of the new position (None if unknown)
        """
        pos = np.asarray(position, dtype=np.float64).reshape(-1)
        if pos.shape == (3,) and np.all(np.isfinite(pos)):
            self.x = pos.copy()
        else:
            logger.debug(f"Ignored non-finite reset position {position!r}")

        self.v = np.zeros(3)
        initial = self._clamp_variance(np.full(3, self.config.initial_variance))
        self.P_pos = initial.copy()
        self.P_vel = initial.copy()
        self.confidence = self.config.initial_confidence

        if timestamp is not None and math.isfinite(timestamp):
            self.last_timestamp = timestamp
            self._decay_timestamp = timestamp
        else:
            self.last_timestamp = None
            self._decay_timestamp = None

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _extrapolate(self, timestamp: float) -> np.ndarray:
        return self.x + self.v * self._elapsed(timestamp, self.last_timestamp)

    def _decay_confidence(self, timestamp: float) -> None:
        cfg = self.config
        elapsed = self._elapsed(timestamp, self._decay_timestamp)

        if elapsed > MULTI_FRAME_DECAY_RATIO * cfg.nominal_frame_interval:
            self.confidence *= math.exp(-cfg.confidence_decay_rate * elapsed)
        else:
            self.confidence *= cfg.confidence_decay_factor

        if timestamp is not None and math.isfinite(timestamp):
            self._decay_timestamp = self._latest(self._decay_timestamp, timestamp)

    def _clamp_variance(self, variance: np.ndarray) -> np.ndarray:
        return np.clip(variance, self.config.min_variance, self.config.max_variance)

    @staticmethod
    def _elapsed(timestamp: float, reference: Optional[float]) -> float:
        """Time since reference, clamped to 0 for unknown or backwards time"""
        if reference is None or timestamp is None or not math.isfinite(timestamp):
            return 0.0
        return max(0.0, timestamp - reference)

    @staticmethod
    def _latest(current: Optional[float], timestamp: float) -> float:
        return timestamp if current is None else max(current, timestamp)
