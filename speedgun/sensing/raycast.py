from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

import numpy as np

from speedgun.geometry.camera import PinholeCamera
from speedgun.utils.logger import get_logger
from speedgun.utils.types import Point

_PARALLEL_EPS = 1e-9


class RaycastTarget(str, Enum):
    ESTIMATED_PLANE = "estimated_plane"


class PlaneAlignment(str, Enum):
    ANY = "any"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass
class RaycastHit:
    position: np.ndarray
    distance: float  # along the ray


class RaycastProvider(Protocol):
    def raycast(self, point: Point, target: RaycastTarget, alignment: PlaneAlignment) -> List[RaycastHit]:
        """Hits ranked nearest first."""
        ...


@dataclass
class Plane:
    """n . p + offset = 0"""

    normal: np.ndarray
    offset: float
    alignment: PlaneAlignment = PlaneAlignment.HORIZONTAL

    def __post_init__(self):
        n = np.asarray(self.normal, dtype=np.float64).reshape(3)
        norm = np.linalg.norm(n)
        if norm == 0:
            raise ValueError("plane normal must be non-zero")
        self.normal = n / norm
        self.offset = float(self.offset) / norm
        self.alignment = PlaneAlignment(self.alignment)

    @classmethod
    def from_point_normal(cls, point: Sequence[float], normal: Sequence[float], alignment: str | PlaneAlignment = PlaneAlignment.HORIZONTAL) -> "Plane":
        n = np.asarray(normal, dtype=np.float64).reshape(3)
        n = n / np.linalg.norm(n)
        return cls(normal=n, offset=-float(n @ np.asarray(point, dtype=np.float64)), alignment=alignment)

    def intersect(self, origin: np.ndarray, direction: np.ndarray) -> Optional[float]:
        denom = float(self.normal @ direction)
        if abs(denom) < _PARALLEL_EPS:
            return None
        t = -(float(self.normal @ origin) + self.offset) / denom
        return t if t > 0 else None


class PlaneEnvironment:
    """Estimated-plane environment model queried through a pinhole camera."""

    def __init__(self, camera: PinholeCamera, planes: Sequence[Plane] = ()):
        self.camera = camera
        self.planes = list(planes)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], camera: PinholeCamera) -> "PlaneEnvironment":
        planes = [
            Plane.from_point_normal(p["point"], p["normal"], p.get("alignment", "horizontal"))
            for p in (cfg.get("environment", {}) or {}).get("planes", []) or []
        ]
        return cls(camera, planes)

    def raycast(self, point: Point, target: RaycastTarget = RaycastTarget.ESTIMATED_PLANE, alignment: PlaneAlignment = PlaneAlignment.ANY) -> List[RaycastHit]:
        origin, direction = self.camera.pixel_to_ray(point)
        hits: List[RaycastHit] = []
        for plane in self.planes:
            if alignment != PlaneAlignment.ANY and plane.alignment != alignment:
                continue
            t = plane.intersect(origin, direction)
            if t is None:
                continue
            hits.append(RaycastHit(position=origin + t * direction, distance=t))
        hits.sort(key=lambda h: h.distance)
        return hits


class RayResolver:
    def __init__(self):
        self.logger = get_logger(__name__)

    def resolve(self, point: Point, rays: RaycastProvider) -> Optional[np.ndarray]:
        """One estimated-plane query, any alignment; nearest hit or None."""
        hits = rays.raycast(point, RaycastTarget.ESTIMATED_PLANE, PlaneAlignment.ANY)
        if not hits:
            self.logger.debug("No raycast hit at (%.1f, %.1f)", point[0], point[1])
            return None
        return np.asarray(hits[0].position, dtype=np.float64).reshape(3)
