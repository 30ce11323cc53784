"""
Core module - Configuration, constants, and exceptions for cuetrack
"""

from .config import (
    CueTrackConfig,
    EstimatorConfig,
    TrackingConfig,
    OcclusionConfig,
    PhysicsConfig,
    AssociationAlgorithm,
    MotionModel,
)
from .constants import (
    NOMINAL_FRAME_INTERVAL,
    CONFIDENCE_HISTORY_SIZE,
    DEFAULT_LOSS_THRESHOLD,
    CSV_OBSERVATION_COLUMNS,
    CSV_TRACK_COLUMNS,
)
from .exceptions import (
    CueTrackException,
    InvalidConfigurationError,
    TrackNotFoundError,
    ValidationError,
    DataLoadError,
    handle_tracking_exception,
)

__all__ = [
    "CueTrackConfig",
    "EstimatorConfig",
    "TrackingConfig",
    "OcclusionConfig",
    "PhysicsConfig",
    "AssociationAlgorithm",
    "MotionModel",
    "NOMINAL_FRAME_INTERVAL",
    "CONFIDENCE_HISTORY_SIZE",
    "DEFAULT_LOSS_THRESHOLD",
    "CSV_OBSERVATION_COLUMNS",
    "CSV_TRACK_COLUMNS",
    "CueTrackException",
    "InvalidConfigurationError",
    "TrackNotFoundError",
    "ValidationError",
    "DataLoadError",
    "handle_tracking_exception",
]
