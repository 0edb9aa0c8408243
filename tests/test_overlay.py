import numpy as np

from speedgun.utils.timing import FPSMeter, StageTimer
from speedgun.utils.types import FrameResult, Rect, TrackedObjectRecord
from speedgun.visualization.overlay import draw_hud, format_record, format_speed, render_frame


def _record(position=(0.0, 0.0, 2.0)):
    return TrackedObjectRecord(
        bbox=Rect(100, 120, 40, 40),
        distance_m=2.0,
        label="sports ball",
        confidence=0.95,
        world_position=None if position is None else np.array(position),
        timestamp=0.0,
    )


def test_format_record_and_speed():
    assert format_record(_record()) == "sports ball - 2.00 m - 95.00%"
    assert format_speed(3.0) == "Speed: 3.00 m/s"
    assert format_speed(None) == "Speed: -- m/s"


def test_render_frame_keeps_input_untouched():
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    result = FrameResult(frame_seq=1, timestamp=0.0, records=[_record()], speed_mps=1.25, stages_ms={"locate": 0.2})
    out = render_frame(frame, result, fps=30.0)
    assert out.shape == frame.shape
    assert out.any()
    assert not frame.any()


def test_render_paused_frame():
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    out = render_frame(frame, FrameResult(frame_seq=1, timestamp=0.0, paused=True))
    assert out.any()


def test_fps_meter_with_fixed_clock():
    ticks = iter([0.0, 0.1, 0.2])
    meter = FPSMeter(smoothing=0.5, clock=lambda: next(ticks))
    assert meter.tick() == 0.0
    assert abs(meter.tick() - 10.0) < 1e-6
    assert abs(meter.tick() - 10.0) < 1e-6


def test_stage_timer_accumulates():
    timer = StageTimer()
    with timer.stage("locate"):
        pass
    with timer.stage("locate"):
        pass
    assert set(timer.stages_ms) == {"locate"}
    assert timer.stages_ms["locate"] >= 0.0


def test_draw_hud_shows_fps_and_stages():
    frame = np.zeros((120, 160, 3), dtype=np.uint8)
    out = draw_hud(frame, 25.0, {"locate": 0.3, "speed": 0.01})
    assert out.any()
    assert not frame.any()
