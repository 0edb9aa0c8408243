from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import numpy as np

from speedgun.utils.config import get, get_vec3
from speedgun.utils.types import Point, ViewSize


def pixel_to_camera(x: float, y: float, depth: float, fx: float, fy: float, cx: float, cy: float) -> Tuple[float, float, float]:
    X = (x - cx) * depth / fx
    Y = (y - cy) * depth / fy
    Z = depth
    return X, Y, Z


def rotation_from_euler_deg(rx: float, ry: float, rz: float) -> np.ndarray:
    """R = Rz @ Ry @ Rx, angles in degrees."""
    ax, ay, az = (math.radians(a) for a in (rx, ry, rz))
    cx_, sx = math.cos(ax), math.sin(ax)
    cy_, sy = math.cos(ay), math.sin(ay)
    cz, sz = math.cos(az), math.sin(az)
    Rx = np.array([[1, 0, 0], [0, cx_, -sx], [0, sx, cx_]], dtype=np.float64)
    Ry = np.array([[cy_, 0, sy], [0, 1, 0], [-sy, 0, cy_]], dtype=np.float64)
    Rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]], dtype=np.float64)
    return Rz @ Ry @ Rx


@dataclass
class PinholeCamera:
    """
    Camera in view-pixel units. Camera axes: x right, y down, z forward.
    `rotation` and `position` map camera coordinates into the world frame.
    """

    fx: float
    fy: float
    cx: float
    cy: float
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        if self.fx <= 0 or self.fy <= 0:
            raise ValueError(f"focal lengths must be positive, got fx={self.fx} fy={self.fy}")
        self.rotation = np.asarray(self.rotation, dtype=np.float64).reshape(3, 3)
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)

    @classmethod
    def from_fov(cls, view_size: ViewSize, hfov_deg: float, **pose) -> "PinholeCamera":
        if not 0.0 < hfov_deg < 180.0:
            raise ValueError(f"hfov_deg must be in (0, 180), got {hfov_deg}")
        f = (view_size.width / 2.0) / math.tan(math.radians(hfov_deg) / 2.0)
        return cls(fx=f, fy=f, cx=view_size.width / 2.0, cy=view_size.height / 2.0, **pose)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], view_size: ViewSize) -> "PinholeCamera":
        pose = {
            "rotation": rotation_from_euler_deg(*get_vec3(cfg, "camera.rotation_deg", (0.0, 0.0, 0.0))),
            "position": np.array(get_vec3(cfg, "camera.position", (0.0, 0.0, 0.0))),
        }
        fx = get(cfg, "camera.fx")
        if fx is None:
            return cls.from_fov(view_size, float(get(cfg, "camera.hfov_deg", 60.0)), **pose)
        fy = get(cfg, "camera.fy")
        cx = get(cfg, "camera.cx")
        cy = get(cfg, "camera.cy")
        return cls(
            fx=float(fx),
            fy=float(fy if fy is not None else fx),
            cx=float(cx if cx is not None else view_size.width / 2.0),
            cy=float(cy if cy is not None else view_size.height / 2.0),
            **pose,
        )

    def pixel_to_ray(self, point: Point) -> Tuple[np.ndarray, np.ndarray]:
        """World-space (origin, unit direction) of the ray through a view pixel."""
        d_cam = np.array(pixel_to_camera(point[0], point[1], 1.0, self.fx, self.fy, self.cx, self.cy))
        d_world = self.rotation @ d_cam
        return self.position.copy(), d_world / np.linalg.norm(d_world)
