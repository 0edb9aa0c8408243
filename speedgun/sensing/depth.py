from __future__ import annotations

import math
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import numpy as np

from speedgun.utils.types import Point, ViewSize


class DepthBuffer:
    """
    Per-frame depth map in meters, float32, shape (height, width), row-major.
    Readers go through read(), which holds the buffer lock for the duration.
    """

    def __init__(self, data: np.ndarray):
        data = np.ascontiguousarray(data, dtype=np.float32)
        if data.ndim != 2:
            raise ValueError(f"depth map must be 2-D, got shape {data.shape}")
        self._data = data
        self._lock = threading.Lock()

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @contextmanager
    def read(self) -> Iterator[np.ndarray]:
        self._lock.acquire()
        try:
            yield self._data.reshape(-1)
        finally:
            self._lock.release()

    @property
    def locked(self) -> bool:
        return self._lock.locked()


class DepthSampler:
    def sample(self, point: Point, buffer: Optional[DepthBuffer], view_size: ViewSize) -> Optional[float]:
        """
        Depth at a view pixel, or None when the buffer is missing, the pixel
        maps outside it, or the stored value is not finite.
        """
        if buffer is None:
            return None
        if view_size.width <= 0 or view_size.height <= 0:
            return None

        depth_w, depth_h = buffer.width, buffer.height
        col = math.floor(point[0] * depth_w / view_size.width)
        row = math.floor(point[1] * depth_h / view_size.height)
        if not (0 <= col < depth_w and 0 <= row < depth_h):
            return None

        with buffer.read() as flat:
            value = float(flat[row * depth_w + col])
        if not math.isfinite(value):
            return None
        return value
