"""
Tests for configuration, constants and exceptions
"""

import pytest


def test_tracking_config_defaults():
    """Test default tracking configuration"""
    from cuetrack.core.config import TrackingConfig, AssociationAlgorithm

    config = TrackingConfig()
    assert config.max_active_tracks == 16
    assert config.max_association_distance == 0.5
    assert config.loss_threshold == 5
    assert config.algorithm is AssociationAlgorithm.GREEDY_NEAREST_NEIGHBOR

    estimator = config.estimator_config()
    assert estimator.process_noise == config.process_noise
    assert estimator.initial_variance == pytest.approx(0.5)
    print("✓ TrackingConfig defaults")


def test_tracking_config_accepts_enum():
    from cuetrack.core.config import TrackingConfig, AssociationAlgorithm

    config = TrackingConfig(association_algorithm=AssociationAlgorithm.OPTIMAL_ASSIGNMENT)
    assert config.association_algorithm == "optimal_assignment"
    assert config.algorithm is AssociationAlgorithm.OPTIMAL_ASSIGNMENT


@pytest.mark.parametrize("kwargs", [
    {"max_active_tracks": 0},
    {"max_active_tracks": 2.5},
    {"max_association_distance": -1.0},
    {"max_association_distance": 0.0},
    {"loss_threshold": 2},
    {"process_noise": 0.0},
    {"measurement_noise": -0.3},
    {"confidence_decay_factor": 1.0},
    {"confidence_decay_factor": 0.0},
    {"association_algorithm": "bogus"},
])
def test_tracking_config_rejects_invalid(kwargs):
    """Invalid values raise instead of being clamped"""
    from cuetrack.core.config import TrackingConfig
    from cuetrack.core.exceptions import InvalidConfigurationError

    with pytest.raises(InvalidConfigurationError):
        TrackingConfig(**kwargs)


def test_invalid_configuration_is_value_error():
    from cuetrack.core.config import TrackingConfig

    with pytest.raises(ValueError, match="max_association_distance"):
        TrackingConfig(max_association_distance=-1.0)


def test_physics_config():
    from cuetrack.core.config import PhysicsConfig
    from cuetrack.core.exceptions import InvalidConfigurationError

    physics = PhysicsConfig(gravity=10.0, rolling_friction=0.05)
    assert physics.deceleration == pytest.approx(0.5)

    with pytest.raises(InvalidConfigurationError):
        PhysicsConfig(rolling_friction=-0.1)
    print("✓ PhysicsConfig validation")


def test_config_yaml_round_trip(tmp_path):
    """Test YAML save and load"""
    from cuetrack.core.config import CueTrackConfig, TrackingConfig, OcclusionConfig

    config = CueTrackConfig(
        tracking=TrackingConfig(max_association_distance=0.25, loss_threshold=7),
        occlusion=OcclusionConfig(use_physics_prediction=False),
    )
    yaml_path = tmp_path / "nested" / "config.yaml"
    config.to_yaml(yaml_path)

    loaded = CueTrackConfig.from_yaml(yaml_path)
    assert loaded == config
    assert loaded.tracking.loss_threshold == 7
    assert loaded.occlusion.use_physics_prediction is False
    assert "max_association_distance" in str(loaded)
    print("✓ YAML round trip")


def test_config_yaml_errors(tmp_path):
    from cuetrack.core.config import CueTrackConfig
    from cuetrack.core.exceptions import InvalidConfigurationError

    with pytest.raises(FileNotFoundError):
        CueTrackConfig.from_yaml(tmp_path / "missing.yaml")

    unknown = tmp_path / "unknown.yaml"
    unknown.write_text("tracking:\n  max_age: 30\n")
    with pytest.raises(InvalidConfigurationError):
        CueTrackConfig.from_yaml(unknown)

    bad_value = tmp_path / "bad_value.yaml"
    bad_value.write_text("tracking:\n  loss_threshold: 1\n")
    with pytest.raises(InvalidConfigurationError):
        CueTrackConfig.from_yaml(bad_value)

    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- 1\n- 2\n")
    with pytest.raises(InvalidConfigurationError):
        CueTrackConfig.from_yaml(not_mapping)

    broken = tmp_path / "broken.yaml"
    broken.write_text("tracking: [unclosed\n")
    with pytest.raises(InvalidConfigurationError):
        CueTrackConfig.from_yaml(broken)


def test_config_from_env(monkeypatch):
    from cuetrack.core.config import CueTrackConfig
    from cuetrack.core.exceptions import InvalidConfigurationError

    monkeypatch.setenv("CUETRACK_TRACKING_MAX_DISTANCE", "0.8")
    monkeypatch.setenv("CUETRACK_TRACKING_ALGORITHM", "optimal_assignment")
    monkeypatch.setenv("CUETRACK_OCCLUSION_ENABLED", "false")

    config = CueTrackConfig.from_env()
    assert config.tracking.max_association_distance == 0.8
    assert config.tracking.association_algorithm == "optimal_assignment"
    assert config.occlusion.enabled is False

    monkeypatch.setenv("CUETRACK_TRACKING_LOSS_THRESHOLD", "1")
    with pytest.raises(InvalidConfigurationError):
        CueTrackConfig.from_env()
    print("✓ Environment overrides")


@pytest.mark.parametrize("name,value", [
    ("CUETRACK_TRACKING_MAX_DISTANCE", "far"),
    ("CUETRACK_TRACKING_LOSS_THRESHOLD", "5.5"),
    ("CUETRACK_TRACKING_MAX_TRACKS", ""),
])
def test_config_from_env_malformed(monkeypatch, name, value):
    from cuetrack.core.config import CueTrackConfig
    from cuetrack.core.exceptions import InvalidConfigurationError

    monkeypatch.setenv(name, value)
    with pytest.raises(InvalidConfigurationError, match=name):
        CueTrackConfig.from_env()


def test_exceptions():
    """Test exception hierarchy and formatting"""
    from cuetrack.core.exceptions import (
        CueTrackException,
        TrackNotFoundError,
        ValidationError,
        DataLoadError,
        handle_tracking_exception,
    )

    error = TrackNotFoundError(7)
    assert isinstance(error, CueTrackException)
    assert isinstance(error, KeyError)
    assert error.track_id == 7
    assert str(error) == "Track 7 not found in tracking system"
    assert handle_tracking_exception(error, verbose=False) == (
        "[TrackNotFoundError] Track 7 not found in tracking system"
    )

    assert issubclass(ValidationError, CueTrackException)
    assert issubclass(DataLoadError, CueTrackException)
    print("✓ Exception hierarchy")


def test_default_yaml_matches_defaults():
    """The shipped configs/default.yaml mirrors the dataclass defaults"""
    from pathlib import Path
    from cuetrack.core.config import CueTrackConfig

    yaml_path = Path(__file__).resolve().parents[2] / "configs" / "default.yaml"
    if not yaml_path.exists():
        pytest.skip("configs/default.yaml not available in this install")

    assert CueTrackConfig.from_yaml(yaml_path) == CueTrackConfig()
