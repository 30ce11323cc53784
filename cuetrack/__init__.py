"""
cuetrack - Real-time 3D multi-object tracking engine

A Python package for:
- Simplified Kalman state estimation of 3D points
- Gated frame-to-frame data association
- Track lifecycle management with occlusion handling
- Short-horizon trajectory prediction
- CSV replay of detector output
"""

__version__ = "0.1.0"
__author__ = "cuetrack Project Team"

# Core imports
from .core.config import (
    CueTrackConfig,
    TrackingConfig,
    EstimatorConfig,
    OcclusionConfig,
    PhysicsConfig,
    AssociationAlgorithm,
    MotionModel,
)
from .core.exceptions import (
    CueTrackException,
    InvalidConfigurationError,
    TrackNotFoundError,
    ValidationError,
    DataLoadError,
)
from .tracking import (
    Observation,
    TrackStatus,
    LifecycleState,
    TrackSnapshot,
    FrameSnapshot,
    StateEstimator,
    TrackManager,
    TrajectoryPredictor,
    TrajectoryPoint,
)


# Lazy imports for replay IO
def __getattr__(name):
    """Lazy loading for replay IO classes"""
    if name == "CSVWriter":
        from .io.csv_handler import CSVWriter
        return CSVWriter
    elif name == "CSVReader":
        from .io.csv_handler import CSVReader
        return CSVReader
    elif name == "ObservationRow":
        from .io.csv_handler import ObservationRow
        return ObservationRow
    elif name == "TrackRow":
        from .io.csv_handler import TrackRow
        return TrackRow
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Config
    "CueTrackConfig",
    "TrackingConfig",
    "EstimatorConfig",
    "OcclusionConfig",
    "PhysicsConfig",
    "AssociationAlgorithm",
    "MotionModel",
    # Exceptions
    "CueTrackException",
    "InvalidConfigurationError",
    "TrackNotFoundError",
    "ValidationError",
    "DataLoadError",
    # Tracking
    "Observation",
    "TrackStatus",
    "LifecycleState",
    "TrackSnapshot",
    "FrameSnapshot",
    "StateEstimator",
    "TrackManager",
    "TrajectoryPredictor",
    "TrajectoryPoint",
    # IO
    "CSVWriter",
    "CSVReader",
    "ObservationRow",
    "TrackRow",
]
