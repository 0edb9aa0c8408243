from __future__ import annotations

from typing import List, Sequence

from speedgun.geometry.projector import project_region
from speedgun.tracking.history import TrackHistory
from speedgun.utils.logger import get_logger
from speedgun.utils.types import Detection, FrameView, TrackedObjectRecord
from speedgun.world.locator import WorldLocator

DEFAULT_TARGET_CLASS = "sports ball"


class DetectionFilter:
    """
    Keeps detections of the target class and turns each into a
    TrackedObjectRecord, feeding resolved positions into the history.
    """

    def __init__(
        self,
        history: TrackHistory,
        locator: WorldLocator | None = None,
        target_class: str = DEFAULT_TARGET_CLASS,
        min_confidence: float = 0.0,
    ):
        self.history = history
        self.locator = locator if locator is not None else WorldLocator()
        self.target_class = target_class
        self.min_confidence = float(min_confidence)
        self.logger = get_logger(__name__)

    def apply(self, detections: Sequence[Detection], view: FrameView) -> List[TrackedObjectRecord]:
        records: List[TrackedObjectRecord] = []
        for det in detections:
            if det.label != self.target_class:
                continue
            if det.confidence < self.min_confidence:
                continue

            bbox = project_region(det.region, view.view_size)
            center = bbox.center
            distance = self.locator.distance(center, view)
            position = self.locator.locate(center, view)
            records.append(
                TrackedObjectRecord(
                    bbox=bbox,
                    distance_m=distance,
                    label=det.label,
                    confidence=float(det.confidence),
                    world_position=position,
                    timestamp=view.timestamp,
                )
            )
            if position is None:
                self.logger.debug("No world position for %s at (%.1f, %.1f)", det.label, center[0], center[1])
            else:
                self.history.append(position, view.timestamp)
        return records
