from __future__ import annotations

from typing import Optional

import numpy as np

from speedgun.tracking.history import TrackHistory
from speedgun.utils.types import PositionSample


def speed_between(prev: PositionSample, curr: PositionSample) -> Optional[float]:
    """
    Straight-line speed in m/s between two samples.
    Returns None when both samples share a timestamp.
    """
    dt = curr.timestamp - prev.timestamp
    if dt == 0:
        return None
    distance = float(np.linalg.norm(curr.as_array() - prev.as_array()))
    return distance / dt


def estimate_speed(history: TrackHistory) -> Optional[float]:
    pair = history.latest_pair()
    if pair is None:
        return 0.0
    return speed_between(*pair)
