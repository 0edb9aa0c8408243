from __future__ import annotations

from typing import Any, List

import numpy as np
import torch
from ultralytics import YOLO

from speedgun.utils.types import Detection


def box_to_region(x1n: float, y1n: float, x2n: float, y2n: float) -> tuple[float, float, float, float]:
    """Normalized xyxy (origin top-left) -> normalized (x, y, w, h) with origin bottom-left."""
    w = x2n - x1n
    h = y2n - y1n
    return float(x1n), float(1.0 - y2n), float(w), float(h)


def results_to_detections(results: Any, names: dict) -> List[Detection]:
    detections: List[Detection] = []
    if results.boxes is None:
        return detections

    for box in results.boxes:
        cls_id = int(box.cls.item())
        x1n, y1n, x2n, y2n = box.xyxyn[0].tolist()
        detections.append(
            Detection(
                region=box_to_region(x1n, y1n, x2n, y2n),
                label=str(names.get(cls_id, "Unknown")),
                confidence=float(box.conf.item()),
            )
        )
    return detections


class YOLODetector:
    """
    YOLOv8 wrapper with MPS/CUDA acceleration where available.
    Emits every class; the tracking session picks its target.
    """

    def __init__(self, model_name: str = "yolov8n.pt", device: str | None = None, conf_thres: float = 0.25):
        if device is None:
            if torch.cuda.is_available():
                device = "cuda"
            elif torch.backends.mps.is_available():
                device = "mps"
            else:
                device = "cpu"
        self.device = device
        self.conf_thres = conf_thres
        self.model = YOLO(model_name)
        self.model.to(self.device)

    def infer(self, frame: np.ndarray) -> List[Detection]:
        results = self.model(
            frame,
            device=self.device,
            conf=self.conf_thres,
            verbose=False,
        )[0]
        return results_to_detections(results, results.names)
