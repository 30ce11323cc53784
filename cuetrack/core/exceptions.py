"""
Custom exceptions for the cuetrack engine

Provides specific exception types for:
- Configuration errors
- Track lookup errors
- Query argument validation errors
- Replay data loading errors
"""

from loguru import logger


class CueTrackException(Exception):
    """
    Base exception class for all cuetrack exceptions

    All custom exceptions should inherit from this class for easy
    exception catching and handling at the application level.
    """
    pass


class InvalidConfigurationError(CueTrackException, ValueError):
    """
    Raised when a tracking configuration is invalid

    Reasons:
    - Non-positive distances, noise values or track capacity
    - Loss threshold below the minimum lifecycle ladder (3)
    - Decay factor outside the open interval (0, 1)
    - Unknown association algorithm name
    - Invalid configuration file format

    Fatal to the instance being constructed. Values are never silently
    clamped.

    Example:
        >>> from cuetrack.core.config import TrackingConfig
        >>> try:
        ...     config = TrackingConfig(max_association_distance=-1.0)
        ... except InvalidConfigurationError as e:
        ...     print(f"Configuration error: {e}")
    """
    pass


class TrackNotFoundError(CueTrackException, KeyError):
    """
    Raised when a query names a track id that is not currently tracked

    Recoverable: the caller decides whether a missing track matters.

    Example:
        >>> from cuetrack.tracking import TrackManager
        >>> manager = TrackManager()
        >>> try:
        ...     manager.trajectory(42, duration=0.5, resolution=10)
        ... except TrackNotFoundError as e:
        ...     print(f"No such track: {e}")
    """

    def __init__(self, track_id):
        self.track_id = track_id
        super().__init__(track_id)

    def __str__(self) -> str:
        return f"Track {self.track_id} not found in tracking system"


class ValidationError(CueTrackException):
    """
    Raised when query arguments fail validation

    Applicable to:
    - Trajectory resolution (must be >= 1)
    - Trajectory duration (must be finite and >= 0)
    - Unknown trajectory motion model
    """
    pass


class DataLoadError(CueTrackException):
    """
    Raised when replay data files fail to load

    Applicable to:
    - Observation CSV files
    - Track CSV files
    """
    pass


def handle_tracking_exception(e: CueTrackException, verbose: bool = True) -> str:
    """
    Handle cuetrack exceptions with formatted error message

    Args:
        e: The CueTrackException instance
        verbose: If True, log the error message

    Returns:
        Formatted error message string
    """
    error_type = type(e).__name__
    error_msg = str(e)
    formatted_msg = f"[{error_type}] {error_msg}"

    if verbose:
        logger.error(formatted_msg)

    return formatted_msg
