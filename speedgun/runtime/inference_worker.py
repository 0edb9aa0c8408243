from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

from speedgun.utils.logger import get_logger
from speedgun.utils.types import Detection, FramePacket, FrameView


class Detector(Protocol):
    def infer(self, frame: object) -> List[Detection]:
        ...


@dataclass
class InferenceResult:
    view: FrameView
    detections: List[Detection] = field(default_factory=list)
    failed: bool = False

    @property
    def frame_seq(self) -> int:
        return self.view.frame_seq


class InferenceWorker:
    """
    Runs the detector off the tracking thread. Results are picked up with
    collect() on the thread that owns the TrackingSession.
    """

    def __init__(self, detector: Detector, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.detector = detector
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="inference")
        self.logger = get_logger(__name__)
        self._pending: List[tuple[FrameView, Future]] = []

    def submit(self, packet: FramePacket, view: FrameView) -> Future:
        future = self.executor.submit(self.detector.infer, packet.frame)
        self._pending.append((view, future))
        return future

    @property
    def pending(self) -> int:
        return len(self._pending)

    def collect(self, block: bool = False) -> List[InferenceResult]:
        """Finished results ordered by frame sequence."""
        if not self._pending:
            return []
        if block:
            wait([f for _, f in self._pending])

        done: List[tuple[FrameView, Future]] = []
        still: List[tuple[FrameView, Future]] = []
        for view, f in self._pending:
            (done if f.done() else still).append((view, f))
        self._pending = still

        results = [self._to_result(view, f) for view, f in done]
        results.sort(key=lambda r: r.frame_seq)
        return results

    def wait_any(self, timeout: float | None = None) -> None:
        if self._pending:
            wait([f for _, f in self._pending], timeout=timeout, return_when=FIRST_COMPLETED)

    def _to_result(self, view: FrameView, future: Future) -> InferenceResult:
        try:
            detections: Sequence[Detection] = future.result()
        except Exception:
            self.logger.warning("Inference failed for frame %d", view.frame_seq, exc_info=True)
            return InferenceResult(view=view, detections=[], failed=True)
        return InferenceResult(view=view, detections=list(detections))

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)

    def __enter__(self) -> "InferenceWorker":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)
