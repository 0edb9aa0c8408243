import numpy as np
import pytest

from speedgun.tracking.history import TrackHistory
from speedgun.tracking.speed import estimate_speed, speed_between
from speedgun.utils.types import PositionSample


def test_history_keeps_most_recent_five():
    history = TrackHistory()
    for i in range(7):
        history.append(np.array([i, 0, 0]), float(i))
        assert len(history) == min(i + 1, 5)
    assert [s.timestamp for s in history] == [2.0, 3.0, 4.0, 5.0, 6.0]
    assert history.samples[0].position == (2.0, 0.0, 0.0)


def test_history_latest_pair_and_clear():
    history = TrackHistory()
    assert history.latest_pair() is None
    history.append(np.zeros(3), 0.0)
    assert history.latest_pair() is None
    history.append(np.ones(3), 1.0)
    prev, curr = history.latest_pair()
    assert (prev.timestamp, curr.timestamp) == (0.0, 1.0)
    history.clear()
    assert len(history) == 0


def test_history_rejects_older_timestamp():
    history = TrackHistory()
    history.append(np.zeros(3), 2.0)
    history.append(np.zeros(3), 2.0)
    with pytest.raises(ValueError):
        history.append(np.zeros(3), 1.0)


def test_history_size_validation():
    with pytest.raises(ValueError):
        TrackHistory(max_size=1)


def test_speed_from_two_samples():
    history = TrackHistory()
    history.append(np.array([0, 0, 0]), 0.0)
    history.append(np.array([0, 0, 3]), 1.0)
    assert estimate_speed(history) == pytest.approx(3.0)


def test_speed_uses_latest_two_only():
    history = TrackHistory()
    history.append(np.array([100, 0, 0]), 0.0)
    history.append(np.array([0, 0, 0]), 1.0)
    history.append(np.array([3, 4, 0]), 3.0)
    assert estimate_speed(history) == pytest.approx(2.5)


def test_speed_with_fewer_than_two_samples_is_zero():
    history = TrackHistory()
    assert estimate_speed(history) == 0.0
    history.append(np.array([1, 1, 1]), 0.5)
    assert estimate_speed(history) == 0.0


def test_speed_same_timestamp_is_no_estimate():
    a = PositionSample((0.0, 0.0, 0.0), 1.0)
    b = PositionSample((1.0, 0.0, 0.0), 1.0)
    assert speed_between(a, b) is None
