from __future__ import annotations

from typing import Any, Dict, List, Optional

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

from speedgun.utils.types import FrameResult, TrackedObjectRecord

RED = (0, 0, 255)
WHITE = (255, 255, 255)


def format_record(record: TrackedObjectRecord) -> str:
    return f"{record.label} - {record.distance_m:.2f} m - {record.confidence * 100:.2f}%"


def format_speed(speed_mps: Optional[float]) -> str:
    if speed_mps is None:
        return "Speed: -- m/s"
    return f"Speed: {speed_mps:.2f} m/s"


def _label_box(frame: Any, text: str, origin: tuple[int, int], scale: float = 0.6) -> None:
    (tw, th), baseline = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, 2)
    x, y = origin
    overlay = frame.copy()
    cv2.rectangle(overlay, (x - 5, y - th - 5), (x + tw + 5, y + baseline + 5), (0, 0, 0), -1)
    frame[:] = cv2.addWeighted(overlay, 0.7, frame, 0.3, 0)
    cv2.putText(frame, text, (x, y), cv2.FONT_HERSHEY_SIMPLEX, scale, WHITE, 2)


def draw_records(frame: Any, records: List[TrackedObjectRecord]) -> Any:
    if cv2 is None:
        return frame
    render = frame.copy()
    for rec in records:
        x1, y1, x2, y2 = rec.bbox.to_xyxy()
        cv2.rectangle(render, (x1, y1), (x2, y2), RED, 2)
    return render


def draw_speed(frame: Any, result: FrameResult) -> Any:
    """Top banner for the first record, speed below it."""
    if cv2 is None or not result.records:
        return frame
    _label_box(frame, format_record(result.records[0]), (15, 30))
    if result.records[0].world_position is not None:
        _label_box(frame, format_speed(result.speed_mps), (15, 65))
    return frame


def draw_calibration_banner(frame: Any) -> Any:
    if cv2 is None:
        return frame
    _label_box(frame, "Move your device around to calibrate AR.", (15, 30), scale=0.7)
    return frame


def draw_hud(frame: Any, fps: float, stages_ms: Dict[str, float]):
    """Minimal HUD overlay with FPS and stage timings, bottom-left."""
    if cv2 is None:
        return frame

    render = frame.copy()
    y = render.shape[0] - 20 - 22 * min(len(stages_ms), 4)
    cv2.putText(render, f"speedgun | FPS: {fps:5.1f}", (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, WHITE, 2)
    y += 22

    for name, ms in list(stages_ms.items())[:4]:
        cv2.putText(render, f"{name}: {ms:5.1f} ms", (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (220, 220, 220), 1)
        y += 22

    return render


def render_frame(frame: Any, result: FrameResult, fps: float = 0.0) -> Any:
    if cv2 is None:
        return frame
    if result.paused:
        render = draw_calibration_banner(frame.copy())
    else:
        render = draw_records(frame, result.records)
        render = draw_speed(render, result)
    return draw_hud(render, fps, result.stages_ms)
