"""
Tests for trajectory prediction
"""

import numpy as np
import pytest

from cuetrack.core.config import PhysicsConfig, MotionModel
from cuetrack.core.exceptions import ValidationError
from cuetrack.tracking.estimator import StateEstimator
from cuetrack.tracking.trajectory import TrajectoryPredictor, rolling_friction_motion


def moving_estimator():
    return StateEstimator([0.0, 0.0, 0.0], timestamp=0.0, velocity=[1.0, 0.0, 0.0])


def test_rolling_friction_motion():
    pos, vel = rolling_friction_motion(np.zeros(3), np.array([1.0, 0.0, 0.0]), 1.0, 0.5)
    assert pos[0] == pytest.approx(0.75)
    assert vel[0] == pytest.approx(0.5)

    # Stops after 2 s and never reverses
    pos, vel = rolling_friction_motion(np.zeros(3), np.array([1.0, 0.0, 0.0]), 10.0, 0.5)
    assert pos[0] == pytest.approx(1.0)
    np.testing.assert_allclose(vel, [0.0, 0.0, 0.0])
    print("✓ Rolling friction motion")


def test_rolling_friction_edge_cases():
    start = np.array([1.0, 2.0, 3.0])

    pos, vel = rolling_friction_motion(start, np.zeros(3), 5.0, 0.5)
    np.testing.assert_allclose(pos, start)

    pos, vel = rolling_friction_motion(start, np.array([0.0, 1.0, 0.0]), 2.0, 0.0)
    np.testing.assert_allclose(pos, [1.0, 4.0, 3.0])
    np.testing.assert_allclose(vel, [0.0, 1.0, 0.0])


def test_sample_constant_velocity():
    points = TrajectoryPredictor().sample(moving_estimator(), start_time=0.0, duration=1.0, resolution=3)

    assert len(points) == 3
    assert [p.time_offset for p in points] == pytest.approx([0.0, 0.5, 1.0])
    assert [p.position[0] for p in points] == pytest.approx([0.0, 0.5, 1.0])
    assert all(p.velocity == (1.0, 0.0, 0.0) for p in points)

    confidences = [p.confidence for p in points]
    assert confidences == sorted(confidences, reverse=True)
    print("✓ Constant velocity trajectory")


def test_sample_single_point():
    points = TrajectoryPredictor().sample(moving_estimator(), start_time=0.5, duration=2.0, resolution=1)

    assert len(points) == 1
    assert points[0].time_offset == 0.0
    assert points[0].position[0] == pytest.approx(0.5)


def test_sample_zero_duration():
    points = TrajectoryPredictor().sample(moving_estimator(), start_time=0.0, duration=0.0, resolution=4)
    assert len(points) == 4
    assert all(p.time_offset == 0.0 for p in points)


def test_sample_rolling_friction():
    predictor = TrajectoryPredictor(PhysicsConfig(gravity=10.0, rolling_friction=0.05))
    points = predictor.sample(
        moving_estimator(), start_time=0.0, duration=4.0, resolution=3,
        model=MotionModel.ROLLING_FRICTION,
    )

    assert [p.position[0] for p in points] == pytest.approx([0.0, 1.0, 1.0])
    assert points[-1].velocity == pytest.approx((0.0, 0.0, 0.0))


def test_sample_does_not_mutate_estimator():
    est = moving_estimator()
    TrajectoryPredictor().sample(est, start_time=0.0, duration=5.0, resolution=50)

    assert est.confidence == pytest.approx(0.1)
    np.testing.assert_allclose(est.position, [0.0, 0.0, 0.0])


@pytest.mark.parametrize("duration, resolution", [
    (1.0, 0),
    (1.0, -3),
    (1.0, 2.5),
    (-1.0, 5),
    (float('nan'), 5),
    (float('inf'), 5),
])
def test_sample_rejects_invalid_arguments(duration, resolution):
    with pytest.raises(ValidationError):
        TrajectoryPredictor().sample(moving_estimator(), 0.0, duration, resolution)


def test_sample_rejects_unknown_model():
    with pytest.raises(ValidationError, match="motion model"):
        TrajectoryPredictor().sample(moving_estimator(), 0.0, 1.0, 5, model="ballistic")
