"""
Integration tests for the cuetrack package

Tests:
- Package level imports
- Multi-object scenes end to end (crossing, occlusion, capacity)
- Statistics bookkeeping across a sequence
"""

import numpy as np

FRAME = 0.033


def test_package_imports():
    """Test top-level exports and lazy IO imports"""
    import cuetrack

    assert cuetrack.__version__
    assert cuetrack.TrackManager is not None
    assert cuetrack.CSVReader.__name__ == "CSVReader"
    assert cuetrack.TrackRow.__name__ == "TrackRow"
    print("✓ Package imports")


def test_two_objects_keep_identity():
    """Two slowly moving objects keep their ids over a sequence"""
    from cuetrack import TrackManager, Observation

    manager = TrackManager()
    for i in range(60):
        t = FRAME * i
        frame = manager.step([
            Observation((0.002 * i, 0.0, 1.0), 0.9),
            Observation((1.0, 0.002 * i, 1.0), 0.9),
        ], t)

    assert frame.track_ids == (1, 2)
    assert frame.get(1).position[0] > 0.0
    assert frame.get(2).position[1] > 0.0
    assert all(s.is_stable for s in frame)
    print("✓ Identity persistence")


def test_short_dropout_then_reacquire():
    """A track survives fewer than loss_threshold missed frames"""
    from cuetrack import TrackManager, Observation, TrackStatus

    manager = TrackManager()
    manager.step([Observation((0.5, 0.5, 1.0), 0.9)], 0.0)
    for i in range(1, 4):
        manager.step([], FRAME * i)

    frame = manager.step([Observation((0.5, 0.5, 1.0), 0.9)], FRAME * 4)
    assert frame.track_ids == (1,)
    assert frame[0].state.status is TrackStatus.ACTIVE
    assert frame[0].total_detections == 2
    print("✓ Dropout recovery")


def test_statistics_over_sequence():
    """Test statistics counters across creation, loss and capacity overflow"""
    from cuetrack import TrackManager, TrackingConfig, Observation

    manager = TrackManager(TrackingConfig(max_active_tracks=2, loss_threshold=3))

    manager.step([Observation((float(i), 0.0, 0.0)) for i in range(3)], 0.0)
    for i in range(1, 4):
        manager.step([], FRAME * i)

    stats = manager.get_statistics()
    assert stats['frames_processed'] == 4
    assert stats['tracks_created'] == 2
    assert stats['tracks_lost'] == 2
    assert stats['capacity_exceeded'] == 1
    assert stats['observations_processed'] == 3
    assert stats['active_tracks'] == 0
    print("✓ Statistics")


def test_trajectory_follows_velocity():
    """Predicted trajectory extends along the estimated velocity"""
    from cuetrack import TrackManager, Observation

    manager = TrackManager()
    for i in range(20):
        manager.step([Observation((0.003 * i, 0.0, 1.0), 0.9)], FRAME * i)

    points = manager.trajectory(1, duration=0.5, resolution=6)
    xs = np.array([p.position[0] for p in points])
    assert np.all(np.diff(xs) > 0)

    rolling = manager.trajectory(1, duration=0.5, resolution=6, model="rolling_friction")
    assert rolling[-1].position[0] <= points[-1].position[0]
    print("✓ Trajectory prediction")


def run_all_tests():
    print("=" * 70)
    print("cuetrack Integration Tests")
    print("=" * 70)

    tests = [
        ("Package Imports", test_package_imports),
        ("Identity Persistence", test_two_objects_keep_identity),
        ("Dropout Recovery", test_short_dropout_then_reacquire),
        ("Statistics", test_statistics_over_sequence),
        ("Trajectory", test_trajectory_follows_velocity),
    ]

    passed = 0
    failed = 0

    for test_name, test_func in tests:
        try:
            print(f"\n{test_name}:")
            test_func()
            passed += 1
        except Exception as e:
            print(f"✗ {test_name} failed: {e}")
            failed += 1

    print("\n" + "=" * 70)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 70)

    return failed == 0


if __name__ == '__main__':
    import sys
    success = run_all_tests()
    sys.exit(0 if success else 1)
