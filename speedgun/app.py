from __future__ import annotations

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

try:
    import cv2
except ImportError:  # pragma: no cover
    cv2 = None

from rich.console import Console
from tqdm import tqdm

from speedgun.geometry.camera import PinholeCamera
from speedgun.inputs.depth_replay import DepthReplay
from speedgun.inputs.video_input import VideoInput
from speedgun.perception.yolo import YOLODetector
from speedgun.runtime.inference_worker import InferenceWorker
from speedgun.runtime.session import TrackingSession
from speedgun.runtime.track_logger import TrackLogger
from speedgun.sensing.raycast import PlaneEnvironment
from speedgun.utils.config import get, load_yaml
from speedgun.utils.logger import setup_logger
from speedgun.utils.timing import FPSMeter
from speedgun.utils.types import FrameResult, FrameView, TrackingState, ViewSize
from speedgun.visualization.overlay import render_frame


def make_run_dir(base_dir: str | Path) -> Path:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(base_dir) / f"run_{ts}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def main():
    parser = argparse.ArgumentParser(description="speedgun - ball distance and speed from video")
    parser.add_argument("--config", default="configs/system.yaml", help="Path to YAML config")
    parser.add_argument("--input", required=True, help="Path to input video")
    parser.add_argument("--depth-dir", default=None, help="Directory of per-frame depth maps (frame_XXXXX.npy)")
    args = parser.parse_args()

    cfg: Dict[str, Any] = load_yaml(args.config)

    output_base = get(cfg, "runtime.output_dir", "results")
    run_dir = make_run_dir(output_base)
    logger = setup_logger(log_dir=run_dir, level=get(cfg, "runtime.log_level", "INFO"))

    console = Console()
    console.print(f"[bold]speedgun[/bold] run dir: {run_dir}")

    depth_dir = args.depth_dir or get(cfg, "depth.dir")
    depth = DepthReplay(depth_dir) if depth_dir else None
    vin = VideoInput(args.input, depth=depth)
    if vin.meta is None:
        raise RuntimeError(f"No video metadata for {args.input}")
    logger.info("Input video: %s", args.input)
    if depth is not None:
        logger.info("Depth maps: %s", depth.directory)

    view_size = ViewSize(float(vin.meta.width), float(vin.meta.height))
    camera = PinholeCamera.from_config(cfg, view_size)
    environment = PlaneEnvironment.from_config(cfg, camera)
    if not environment.planes:
        logger.warning("No environment planes configured; positions need depth + raycast hits and will be unavailable")

    session = TrackingSession.from_config(cfg)
    logger.info("Tracking target class: %s", session.target_class)
    detector = YOLODetector(
        model_name=get(cfg, "detector.model", "yolov8n.pt"),
        device=get(cfg, "detector.device"),
        conf_thres=float(get(cfg, "detector.conf_thres", 0.25)),
    )
    n_workers = int(get(cfg, "detector.workers", 1))
    max_in_flight = max(2, 2 * n_workers)

    track_logger = TrackLogger(run_dir)
    fps_meter = FPSMeter(smoothing=float(get(cfg, "performance.fps_smoothing", 0.9)))

    save_video = bool(get(cfg, "runtime.save_video", True))
    save_metrics = bool(get(cfg, "runtime.save_metrics", True))
    out_video_path = run_dir / "output.mp4"
    writer = None
    if save_video:
        if cv2 is None:
            raise ImportError("opencv-python is required to save video output")
        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        writer = cv2.VideoWriter(str(out_video_path), fourcc, vin.fps, (vin.meta.width, vin.meta.height))
        if not writer.isOpened():
            vin.stop()
            raise RuntimeError("Could not open VideoWriter (mp4v). Try a different codec/container.")

    metrics: Dict[str, Any] = {
        "project": cfg.get("project", {}),
        "input": {"path": args.input, "meta": vin.meta.__dict__},
        "target_class": session.target_class,
        "frames": [],
    }
    frames_by_seq: Dict[int, Any] = {}

    def handle(result: FrameResult) -> None:
        for seq in [s for s in frames_by_seq if s < result.frame_seq]:
            frames_by_seq.pop(seq)
        image = frames_by_seq.pop(result.frame_seq, None)
        fps = fps_meter.tick()
        track_logger.log(result)
        if writer is not None and image is not None:
            writer.write(render_frame(image, result, fps))
        if save_metrics:
            entry = result.to_dict()
            entry["fps"] = fps
            metrics["frames"].append(entry)

    total = vin.meta.frame_count if vin.meta.frame_count > 0 else None
    try:
        with InferenceWorker(detector, max_workers=n_workers) as worker:
            for frame_id, packet in tqdm(vin.frames(), total=total, desc="Processing"):
                view = FrameView(
                    view_size=view_size,
                    rays=environment,
                    timestamp=packet.timestamp,
                    frame_seq=frame_id,
                    depth=packet.depth,
                    tracking_state=TrackingState.NORMAL,
                )
                frames_by_seq[frame_id] = packet.frame
                worker.submit(packet, view)
                while worker.pending >= max_in_flight:
                    worker.wait_any()
                    for result in session.poll(worker):
                        handle(result)
                for result in session.poll(worker):
                    handle(result)
            for result in session.drain(worker):
                handle(result)
    finally:
        vin.stop()
        if writer is not None:
            writer.release()
    if writer is not None:
        logger.info("Saved video: %s", out_video_path)

    if save_metrics:
        speeds = [f["speed_mps"] for f in metrics["frames"] if f["records"] and f["speed_mps"] is not None]
        metrics["summary"] = {
            "frames": len(metrics["frames"]),
            "frames_with_target": sum(1 for f in metrics["frames"] if f["records"]),
            "max_speed_mps": max(speeds) if speeds else None,
        }
        metrics_path = run_dir / "metrics.json"
        metrics_path.write_text(json.dumps(metrics, indent=2), encoding="utf-8")
        logger.info("Saved metrics: %s", metrics_path)

    console.print(f"[bold green]Done.[/bold green] {len(metrics['frames'])} frames processed")
    logger.info("Done.")


if __name__ == "__main__":
    main()
