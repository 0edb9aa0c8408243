from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from speedgun.perception.detection_filter import DEFAULT_TARGET_CLASS, DetectionFilter
from speedgun.runtime.inference_worker import InferenceResult, InferenceWorker
from speedgun.tracking.history import DEFAULT_HISTORY_SIZE, TrackHistory
from speedgun.tracking.speed import estimate_speed
from speedgun.utils.config import get
from speedgun.utils.logger import get_logger
from speedgun.utils.timing import StageTimer
from speedgun.utils.types import Detection, FrameResult, FrameView, TrackingState
from speedgun.world.locator import WorldLocator


class TrackingSession:
    """
    Owns the track history for one tracked object class.

    All methods must be called from the same thread. Frames are committed in
    sequence order: a frame whose sequence number is not newer than the last
    committed one is dropped.
    """

    def __init__(
        self,
        history: TrackHistory | None = None,
        locator: WorldLocator | None = None,
        target_class: str = DEFAULT_TARGET_CLASS,
        min_confidence: float = 0.0,
        reset_after_missed_frames: int = 0,
    ):
        self.history = history if history is not None else TrackHistory()
        self.filter = DetectionFilter(
            self.history,
            locator=locator,
            target_class=target_class,
            min_confidence=min_confidence,
        )
        self.reset_after_missed_frames = int(reset_after_missed_frames)
        self.logger = get_logger(__name__)

        self.tracking_state = TrackingState.NOT_AVAILABLE
        self.interrupted = False
        self.last_committed_seq: Optional[int] = None
        self.speed_mps: Optional[float] = 0.0
        self._missed_frames = 0

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], locator: WorldLocator | None = None) -> "TrackingSession":
        return cls(
            history=TrackHistory(max_size=int(get(cfg, "tracking.history_size", DEFAULT_HISTORY_SIZE))),
            locator=locator,
            target_class=str(get(cfg, "tracking.target_class", DEFAULT_TARGET_CLASS)),
            min_confidence=float(get(cfg, "tracking.min_confidence", 0.0)),
            reset_after_missed_frames=int(get(cfg, "tracking.reset_after_missed_frames", 0)),
        )

    @property
    def target_class(self) -> str:
        return self.filter.target_class

    @property
    def paused(self) -> bool:
        return self.interrupted or self.tracking_state != TrackingState.NORMAL

    def interrupt(self) -> None:
        if not self.interrupted:
            self.logger.info("Session interrupted; pausing")
        self.interrupted = True

    def resume(self) -> None:
        if self.interrupted:
            self.logger.info("Session interruption ended")
        self.interrupted = False

    def reset(self) -> None:
        self.history.clear()
        self.speed_mps = 0.0
        self._missed_frames = 0
        self.logger.info("Track history reset")

    def is_stale(self, frame_seq: int) -> bool:
        return self.last_committed_seq is not None and frame_seq <= self.last_committed_seq

    def process_frame(self, detections: Sequence[Detection], view: FrameView) -> Optional[FrameResult]:
        """
        Apply one frame's detections. Returns None when the frame is stale or
        its timestamp is older than the newest history sample; neither commits.
        """
        if self.is_stale(view.frame_seq):
            self.logger.debug(
                "Dropping stale frame %d (last committed %d)", view.frame_seq, self.last_committed_seq
            )
            return None
        if self.history.samples and view.timestamp < self.history.samples[-1].timestamp:
            self.logger.warning(
                "Dropping frame %d: timestamp %.6f is older than the track history", view.frame_seq, view.timestamp
            )
            return None
        self.last_committed_seq = view.frame_seq
        self._update_tracking_state(view.tracking_state)

        if self.paused:
            return FrameResult(frame_seq=view.frame_seq, timestamp=view.timestamp, speed_mps=self.speed_mps, paused=True)

        timer = StageTimer()
        appended_before = self.history.total_appended
        with timer.stage("locate"):
            records = self.filter.apply(detections, view)
        appended = self.history.total_appended > appended_before

        if appended:
            self._missed_frames = 0
            with timer.stage("speed"):
                self.speed_mps = estimate_speed(self.history)
            if self.speed_mps is None:
                self.logger.debug("No speed estimate at frame %d (zero elapsed time)", view.frame_seq)
            else:
                self.logger.debug("Object speed: %.2f m/s", self.speed_mps)
        else:
            self._missed_frames += 1
            if self.reset_after_missed_frames and self._missed_frames >= self.reset_after_missed_frames:
                if len(self.history):
                    self.reset()

        return FrameResult(
            frame_seq=view.frame_seq,
            timestamp=view.timestamp,
            records=records,
            speed_mps=self.speed_mps,
            stages_ms=timer.stages_ms,
        )

    def apply(self, result: InferenceResult) -> Optional[FrameResult]:
        return self.process_frame(result.detections, result.view)

    def poll(self, worker: InferenceWorker) -> List[FrameResult]:
        """Apply whatever inference has finished, without blocking."""
        return self._apply_all(worker.collect(block=False))

    def drain(self, worker: InferenceWorker) -> List[FrameResult]:
        """Wait for all in-flight inference and apply it."""
        return self._apply_all(worker.collect(block=True))

    def _apply_all(self, results: Sequence[InferenceResult]) -> List[FrameResult]:
        out: List[FrameResult] = []
        for res in results:
            frame_result = self.apply(res)
            if frame_result is not None:
                out.append(frame_result)
        return out

    def _update_tracking_state(self, state: TrackingState) -> None:
        if state == self.tracking_state:
            return
        if state == TrackingState.NORMAL:
            self.logger.info("Tracking %s -> NORMAL; resuming", self.tracking_state.value)
        else:
            self.logger.info("Tracking %s -> %s; move the device to calibrate", self.tracking_state.value, state.value)
        self.tracking_state = state
