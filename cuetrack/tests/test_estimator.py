"""
Tests for the per-track state estimator
"""

import math

import numpy as np
import pytest

from cuetrack.core.config import EstimatorConfig
from cuetrack.tracking.estimator import StateEstimator, clamp_confidence


def test_predict_constant_velocity():
    """x=0, vx=1 at t=0 predicts x=1 at t=1"""
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0, velocity=[1.0, 0.0, 0.0])

    pred = est.predict(1.0)
    assert pred[0] == pytest.approx(1.0)
    assert pred[1] == pytest.approx(0.0)
    print("✓ Constant velocity prediction")


def test_predict_does_not_move_state():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0, velocity=[1.0, 2.0, 0.0])

    first = est.predict(0.5)
    second = est.predict(0.5)
    np.testing.assert_allclose(first, second)
    np.testing.assert_allclose(est.position, [0.0, 0.0, 0.0])


def test_predict_backwards_time_clamps_to_zero():
    est = StateEstimator([1.0, 1.0, 1.0], timestamp=2.0, velocity=[1.0, 0.0, 0.0])
    np.testing.assert_allclose(est.predict(1.0), [1.0, 1.0, 1.0])


def test_confidence_decay_per_frame():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)
    assert est.confidence == pytest.approx(0.1)

    est.predict(0.033)
    assert est.confidence == pytest.approx(0.099)
    est.predict(0.066)
    assert est.confidence == pytest.approx(0.1 * 0.99 ** 2)


def test_confidence_decay_time_scaled_for_long_gaps():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)

    est.predict(1.0)
    assert est.confidence == pytest.approx(0.1 * math.exp(-0.5))


def test_update_correction():
    """Test gain, velocity nudge, variance and confidence after one update"""
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)

    assert est.update([1.0, 0.0, 0.0], 0.0, confidence=1.0)

    gain = 0.5 / (0.5 + 0.3)
    assert est.position[0] == pytest.approx(gain)
    assert est.velocity[0] == pytest.approx(0.1 * gain / 0.033)
    assert est.P_pos[0] == pytest.approx(0.5 * (1 - gain))
    assert est.confidence == pytest.approx(0.2)
    print("✓ Update correction")


def test_update_low_confidence_moves_less():
    confident = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)
    doubtful = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)

    confident.update([1.0, 0.0, 0.0], 0.0, confidence=1.0)
    doubtful.update([1.0, 0.0, 0.0], 0.0, confidence=0.1)
    assert doubtful.position[0] < confident.position[0]


def test_update_without_timestamp_skips_velocity():
    est = StateEstimator([0.0, 0.0, 0.0])

    est.update([1.0, 0.0, 0.0], None, confidence=1.0)
    np.testing.assert_allclose(est.velocity, [0.0, 0.0, 0.0])
    assert est.position[0] > 0


def test_update_rejects_non_finite():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)
    before = (est.position, est.velocity, est.confidence)

    assert not est.update([float('nan'), 0.0, 0.0], 0.033)
    assert not est.update([float('inf'), 0.0, 0.0], 0.033)
    assert not est.update(None, 0.033)
    assert not est.update([1.0, 2.0], 0.033)

    np.testing.assert_allclose(est.position, before[0])
    np.testing.assert_allclose(est.velocity, before[1])
    assert est.confidence == before[2]


def test_variance_and_confidence_bounds():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)

    for i in range(200):
        est.update([0.0, 0.0, 0.0], i * 0.033, confidence=1.0)

    assert np.all(est.P_pos >= 0.001)
    assert np.all(est.P_vel <= 10.0)
    assert est.confidence == pytest.approx(1.0)

    # Long gap inflates but never exceeds the ceiling
    est.update([0.0, 0.0, 0.0], 1e6, confidence=1.0)
    assert np.all(est.P_vel <= 10.0)
    assert np.all(est.P_pos <= 10.0)


def test_project_is_pure():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0, velocity=[0.5, 0.0, 0.0])

    position, velocity, confidence = est.project(2.0)
    assert position[0] == pytest.approx(1.0)
    assert confidence == pytest.approx(0.1 * math.exp(-1.0))
    assert est.confidence == pytest.approx(0.1)
    np.testing.assert_allclose(est.position, [0.0, 0.0, 0.0])


def test_reset():
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0)
    for i in range(5):
        est.update([i * 0.01, 0.0, 0.0], i * 0.033)

    est.reset([3.0, 3.0, 3.0], timestamp=1.0)
    np.testing.assert_allclose(est.position, [3.0, 3.0, 3.0])
    np.testing.assert_allclose(est.velocity, [0.0, 0.0, 0.0])
    np.testing.assert_allclose(est.P_pos, [0.5, 0.5, 0.5])
    assert est.confidence == pytest.approx(0.1)
    assert est.last_timestamp == 1.0


def test_custom_config():
    config = EstimatorConfig(process_noise=0.1, initial_confidence=0.5)
    est = StateEstimator([0.0, 0.0, 0.0], timestamp=0.0, config=config)

    np.testing.assert_allclose(est.P_pos, [1.0, 1.0, 1.0])
    assert est.get_confidence() == 0.5
    np.testing.assert_allclose(est.get_position_uncertainty(), [1.0, 1.0, 1.0])


@pytest.mark.parametrize("value, expected", [
    (0.5, 0.5),
    (2.0, 1.0),
    (-1.0, 0.0),
    (float('nan'), 0.0),
    (float('inf'), 1.0),
    (float('-inf'), 0.0),
    ("bad", 0.0),
])
def test_clamp_confidence(value, expected):
    assert clamp_confidence(value) == expected
