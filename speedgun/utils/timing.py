from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator


@dataclass
class StageTimer:
    """Lightweight per-stage timing for a single frame."""

    stages_ms: Dict[str, float] = field(default_factory=dict)

    @contextmanager
    def stage(self, stage_name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = (time.perf_counter() - start) * 1000.0
            self.stages_ms[stage_name] = self.stages_ms.get(stage_name, 0.0) + elapsed


@dataclass
class FPSMeter:
    """Exponential moving average FPS estimator."""

    smoothing: float = 0.9
    fps: float = 0.0
    clock: Callable[[], float] = time.perf_counter
    _last_ts: float | None = None

    def tick(self) -> float:
        now = self.clock()
        if self._last_ts is None:
            self._last_ts = now
            return self.fps
        dt = max(now - self._last_ts, 1e-9)
        inst_fps = 1.0 / dt
        self.fps = inst_fps if self.fps <= 0 else (self.smoothing * self.fps + (1 - self.smoothing) * inst_fps)
        self._last_ts = now
        return self.fps
