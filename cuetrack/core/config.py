"""
Configuration management for the cuetrack engine

Central configuration system supporting:
- Dataclass-based configs validated at construction
- YAML file loading
- Environment variable overrides
- Runtime modification through dataclasses.replace
"""

import math
import os
import yaml
from dataclasses import dataclass, field, asdict, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any

from .exceptions import InvalidConfigurationError
from . import constants as C


class AssociationAlgorithm(str, Enum):
    """Data association algorithms"""
    GREEDY_NEAREST_NEIGHBOR = "greedy_nearest_neighbor"
    OPTIMAL_ASSIGNMENT = "optimal_assignment"


class MotionModel(str, Enum):
    """Motion models used for forward prediction"""
    CONSTANT_VELOCITY = "constant_velocity"
    ROLLING_FRICTION = "rolling_friction"


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidConfigurationError(message)


def _is_positive(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class EstimatorConfig:
    """Constants for the per-track state estimator"""
    process_noise: float = C.DEFAULT_PROCESS_NOISE
    measurement_noise: float = C.DEFAULT_MEASUREMENT_NOISE
    initial_variance_scale: float = C.INITIAL_VARIANCE_SCALE
    min_variance: float = C.MIN_VARIANCE
    max_variance: float = C.MAX_VARIANCE
    initial_confidence: float = C.INITIAL_CONFIDENCE
    confidence_decay_factor: float = C.CONFIDENCE_DECAY_FACTOR
    confidence_decay_rate: float = C.CONFIDENCE_DECAY_RATE
    responsiveness: float = C.CONFIDENCE_RESPONSIVENESS
    velocity_gain: float = C.VELOCITY_GAIN
    nominal_frame_interval: float = C.NOMINAL_FRAME_INTERVAL
    min_measurement_confidence: float = C.MIN_MEASUREMENT_CONFIDENCE

    def __post_init__(self):
        """Validate configuration"""
        _require(_is_positive(self.process_noise), "process_noise must be > 0")
        _require(_is_positive(self.measurement_noise), "measurement_noise must be > 0")
        _require(_is_positive(self.initial_variance_scale), "initial_variance_scale must be > 0")
        _require(_is_positive(self.min_variance), "min_variance must be > 0")
        _require(
            _is_positive(self.max_variance) and self.max_variance >= self.min_variance,
            "max_variance must be >= min_variance",
        )
        _require(
            0 < self.confidence_decay_factor < 1,
            "confidence_decay_factor must be in the open interval (0, 1)",
        )
        _require(_is_positive(self.confidence_decay_rate), "confidence_decay_rate must be > 0")
        _require(0 <= self.initial_confidence <= 1, "initial_confidence must be between 0 and 1")
        _require(0 <= self.responsiveness <= 1, "responsiveness must be between 0 and 1")
        _require(self.velocity_gain >= 0, "velocity_gain must be >= 0")
        _require(_is_positive(self.nominal_frame_interval), "nominal_frame_interval must be > 0")
        _require(
            _is_positive(self.min_measurement_confidence),
            "min_measurement_confidence must be > 0",
        )

    @property
    def initial_variance(self) -> float:
        """Default per-axis variance after construction or reset"""
        return self.process_noise * self.initial_variance_scale


@dataclass
class TrackingConfig:
    """Configuration for the track manager"""
    max_active_tracks: int = C.DEFAULT_MAX_ACTIVE_TRACKS
    max_association_distance: float = C.DEFAULT_MAX_ASSOCIATION_DISTANCE
    loss_threshold: int = C.DEFAULT_LOSS_THRESHOLD
    process_noise: float = C.DEFAULT_PROCESS_NOISE
    measurement_noise: float = C.DEFAULT_MEASUREMENT_NOISE
    confidence_decay_factor: float = C.CONFIDENCE_DECAY_FACTOR
    association_algorithm: str = AssociationAlgorithm.GREEDY_NEAREST_NEIGHBOR.value
    confidence_decay_rate: float = C.CONFIDENCE_DECAY_RATE
    nominal_frame_interval: float = C.NOMINAL_FRAME_INTERVAL
    velocity_gain: float = C.VELOCITY_GAIN
    confidence_history_size: int = C.CONFIDENCE_HISTORY_SIZE
    min_track_confidence: float = C.MIN_TRACK_CONFIDENCE
    stable_max_misses: int = C.STABLE_MAX_MISSES
    stable_min_confidence: float = C.STABLE_MIN_CONFIDENCE

    def __post_init__(self):
        """Validate configuration"""
        if isinstance(self.association_algorithm, AssociationAlgorithm):
            self.association_algorithm = self.association_algorithm.value

        _require(
            _is_int(self.max_active_tracks) and self.max_active_tracks > 0,
            f"max_active_tracks must be a positive integer, got {self.max_active_tracks!r}",
        )
        _require(
            _is_positive(self.max_association_distance),
            f"max_association_distance must be > 0, got {self.max_association_distance!r}",
        )
        _require(
            _is_int(self.loss_threshold) and self.loss_threshold >= C.MIN_LOSS_THRESHOLD,
            f"loss_threshold must be an integer >= {C.MIN_LOSS_THRESHOLD}, "
            f"got {self.loss_threshold!r}",
        )
        _require(
            _is_int(self.confidence_history_size) and self.confidence_history_size > 0,
            "confidence_history_size must be a positive integer",
        )
        _require(
            0 <= self.min_track_confidence < 1,
            "min_track_confidence must be in [0, 1)",
        )
        _require(
            _is_int(self.stable_max_misses) and self.stable_max_misses >= 0,
            "stable_max_misses must be a non-negative integer",
        )
        _require(
            0 <= self.stable_min_confidence <= 1,
            "stable_min_confidence must be between 0 and 1",
        )
        valid_algorithms = [a.value for a in AssociationAlgorithm]
        _require(
            self.association_algorithm in valid_algorithms,
            f"association_algorithm must be one of {valid_algorithms}, "
            f"got {self.association_algorithm!r}",
        )
        # Shared filter constants are validated by the estimator config
        self.estimator_config()

    @property
    def algorithm(self) -> AssociationAlgorithm:
        """Association algorithm as an enum member"""
        return AssociationAlgorithm(self.association_algorithm)

    def estimator_config(self) -> EstimatorConfig:
        """Derive the per-track estimator constants from this config"""
        return EstimatorConfig(
            process_noise=self.process_noise,
            measurement_noise=self.measurement_noise,
            confidence_decay_factor=self.confidence_decay_factor,
            confidence_decay_rate=self.confidence_decay_rate,
            velocity_gain=self.velocity_gain,
            nominal_frame_interval=self.nominal_frame_interval,
        )


@dataclass
class OcclusionConfig:
    """Configuration for occlusion handling"""
    enabled: bool = True
    use_physics_prediction: bool = True


@dataclass
class PhysicsConfig:
    """Physical constants for rolling-object prediction"""
    enabled: bool = True
    gravity: float = C.GRAVITY
    rolling_friction: float = C.ROLLING_FRICTION

    def __post_init__(self):
        """Validate configuration"""
        _require(_is_positive(self.gravity), "gravity must be > 0")
        _require(
            isinstance(self.rolling_friction, (int, float)) and self.rolling_friction >= 0,
            "rolling_friction must be >= 0",
        )

    @property
    def deceleration(self) -> float:
        """Rolling deceleration magnitude (m/s^2)"""
        return self.rolling_friction * self.gravity


@dataclass
class CueTrackConfig:
    """Master configuration class combining all subconfigs"""
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    occlusion: OcclusionConfig = field(default_factory=OcclusionConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CueTrackConfig":
        """
        Build configuration from a nested dictionary

        Raises:
            InvalidConfigurationError: If a section has unknown keys or bad values
        """
        try:
            return cls(
                tracking=TrackingConfig(**data.get('tracking', {})),
                occlusion=OcclusionConfig(**data.get('occlusion', {})),
                physics=PhysicsConfig(**data.get('physics', {})),
            )
        except TypeError as e:
            raise InvalidConfigurationError(f"Invalid configuration keys: {e}")

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "CueTrackConfig":
        """
        Load configuration from YAML file

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            CueTrackConfig instance

        Raises:
            FileNotFoundError: If YAML file not found
            InvalidConfigurationError: If YAML format or values are invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(yaml_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidConfigurationError(f"Invalid YAML format in {yaml_path}: {e}")

        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Top level of {yaml_path} must be a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_env(cls, base_config: Optional["CueTrackConfig"] = None) -> "CueTrackConfig":
        """
        Create config from environment variables

        Supports environment variables like:
        - CUETRACK_TRACKING_MAX_DISTANCE
        - CUETRACK_TRACKING_LOSS_THRESHOLD
        - CUETRACK_TRACKING_MAX_TRACKS
        - CUETRACK_TRACKING_ALGORITHM
        - CUETRACK_OCCLUSION_ENABLED

        Args:
            base_config: Base configuration to override (default: new config)

        Returns:
            CueTrackConfig instance with environment overrides
        """
        config = cls() if base_config is None else base_config

        overrides = {}
        numeric = [
            ('CUETRACK_TRACKING_MAX_DISTANCE', 'max_association_distance', float),
            ('CUETRACK_TRACKING_LOSS_THRESHOLD', 'loss_threshold', int),
            ('CUETRACK_TRACKING_MAX_TRACKS', 'max_active_tracks', int),
        ]
        for env_name, key, convert in numeric:
            if env_name in os.environ:
                try:
                    overrides[key] = convert(os.environ[env_name])
                except ValueError:
                    raise InvalidConfigurationError(
                        f"{env_name} must be {convert.__name__}, got {os.environ[env_name]!r}"
                    )
        if 'CUETRACK_TRACKING_ALGORITHM' in os.environ:
            overrides['association_algorithm'] = os.environ['CUETRACK_TRACKING_ALGORITHM']

        # replace() re-runs validation
        if overrides:
            config.tracking = replace(config.tracking, **overrides)

        if 'CUETRACK_OCCLUSION_ENABLED' in os.environ:
            config.occlusion.enabled = (
                os.environ['CUETRACK_OCCLUSION_ENABLED'].lower() in ('1', 'true', 'yes')
            )

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return asdict(self)

    def to_yaml(self, yaml_path: str) -> None:
        """
        Save configuration to YAML file

        Args:
            yaml_path: Path to save YAML configuration
        """
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def __str__(self) -> str:
        """String representation of config"""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
