from __future__ import annotations

from typing import Optional

import numpy as np

from speedgun.sensing.depth import DepthSampler
from speedgun.sensing.raycast import RayResolver
from speedgun.utils.types import DISTANCE_UNAVAILABLE, FrameView, Point


class WorldLocator:
    """
    Resolves a view pixel to a world point.

    With a depth map the raycast hit is shifted along z by the sampled depth,
    (x, y, z - depth). Without one the raycast hit is used as is.
    """

    def __init__(self, sampler: DepthSampler | None = None, resolver: RayResolver | None = None):
        self.sampler = sampler if sampler is not None else DepthSampler()
        self.resolver = resolver if resolver is not None else RayResolver()

    def locate(self, point: Point, view: FrameView) -> Optional[np.ndarray]:
        if view.depth is not None:
            depth = self.sampler.sample(point, view.depth, view.view_size)
            base = self.resolver.resolve(point, view.rays)
            if depth is None or base is None:
                return None
            return np.array([base[0], base[1], base[2] - depth], dtype=np.float64)

        return self.resolver.resolve(point, view.rays)

    def distance(self, point: Point, view: FrameView) -> float:
        """Meters to the target, DISTANCE_UNAVAILABLE when nothing resolves."""
        if view.depth is not None:
            depth = self.sampler.sample(point, view.depth, view.view_size)
            return DISTANCE_UNAVAILABLE if depth is None else depth

        hit = self.resolver.resolve(point, view.rays)
        if hit is None:
            return DISTANCE_UNAVAILABLE
        # distance from the world origin
        return float(np.linalg.norm(hit))
