from typing import List

import numpy as np

from speedgun.sensing.raycast import RaycastHit
from speedgun.utils.types import FrameView, TrackingState, ViewSize


class FixedRays:
    """Ray provider that reports the same hit for every query."""

    def __init__(self, *positions):
        self.hits = [RaycastHit(position=np.array(p, dtype=np.float64), distance=float(i + 1)) for i, p in enumerate(positions)]
        self.queries: List[tuple] = []

    def raycast(self, point, target, alignment):
        self.queries.append((point, target, alignment))
        return list(self.hits)


def make_view(rays=None, timestamp=0.0, frame_seq=0, depth=None, size=(1000.0, 1000.0), state=TrackingState.NORMAL):
    return FrameView(
        view_size=ViewSize(*size),
        rays=rays if rays is not None else FixedRays(),
        timestamp=timestamp,
        frame_seq=frame_seq,
        depth=depth,
        tracking_state=state,
    )
