from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import numpy as np

if TYPE_CHECKING:
    from speedgun.sensing.depth import DepthBuffer
    from speedgun.sensing.raycast import RaycastProvider

DISTANCE_UNAVAILABLE = -1.0

Point = Tuple[float, float]
Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class ViewSize:
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Pixel rectangle, origin top-left."""

    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def center(self) -> Point:
        return self.mid_x, self.mid_y

    def to_xyxy(self) -> Tuple[int, int, int, int]:
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.x + self.width)),
            int(round(self.y + self.height)),
        )


@dataclass
class Detection:
    # normalized (x, y, w, h), origin bottom-left
    region: Tuple[float, float, float, float]
    label: str = "Unknown"
    confidence: float = 0.0


@dataclass(frozen=True)
class PositionSample:
    position: Vec3
    timestamp: float

    @classmethod
    def from_array(cls, position: np.ndarray, timestamp: float) -> "PositionSample":
        x, y, z = (float(v) for v in np.asarray(position, dtype=np.float64).reshape(3))
        return cls(position=(x, y, z), timestamp=float(timestamp))

    def as_array(self) -> np.ndarray:
        return np.asarray(self.position, dtype=np.float64)


@dataclass
class TrackedObjectRecord:
    bbox: Rect
    distance_m: float
    label: str
    confidence: float
    world_position: Optional[np.ndarray]
    timestamp: float

    @property
    def has_distance(self) -> bool:
        return self.distance_m != DISTANCE_UNAVAILABLE

    def to_dict(self) -> Dict[str, object]:
        return {
            "bbox": [self.bbox.x, self.bbox.y, self.bbox.width, self.bbox.height],
            "distance_m": float(self.distance_m),
            "label": self.label,
            "confidence": float(self.confidence),
            "world_position": None if self.world_position is None else [float(v) for v in self.world_position],
            "timestamp": float(self.timestamp),
        }


class TrackingState(str, Enum):
    NORMAL = "NORMAL"
    LIMITED = "LIMITED"
    NOT_AVAILABLE = "NOT_AVAILABLE"


@dataclass
class FramePacket:
    frame: object
    timestamp: float
    frame_id: int = 0
    depth: Optional["DepthBuffer"] = None


@dataclass
class FrameView:
    """Everything the estimator reads from one camera frame."""

    view_size: ViewSize
    rays: "RaycastProvider"
    timestamp: float
    frame_seq: int = 0
    depth: Optional["DepthBuffer"] = None
    tracking_state: TrackingState = TrackingState.NORMAL


@dataclass
class FrameResult:
    frame_seq: int
    timestamp: float
    records: List[TrackedObjectRecord] = field(default_factory=list)
    speed_mps: Optional[float] = None
    paused: bool = False
    stages_ms: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "frame_seq": self.frame_seq,
            "timestamp": self.timestamp,
            "paused": self.paused,
            "speed_mps": self.speed_mps,
            "records": [r.to_dict() for r in self.records],
            "stages_ms": dict(self.stages_ms),
        }
