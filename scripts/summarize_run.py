#!/usr/bin/env python3
import json
import sys
from pathlib import Path
from statistics import mean, median


def pct(n, d):
    return (100.0 * n / d) if d else 0.0


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/summarize_run.py results/run_YYYYMMDD_HHMMSS")
        sys.exit(1)

    run_dir = Path(sys.argv[1])
    metrics_path = run_dir / "metrics.json"
    if not metrics_path.exists():
        raise FileNotFoundError(f"Missing: {metrics_path}")

    m = json.loads(metrics_path.read_text())
    frames = m.get("frames", [])
    n = len(frames)
    if n == 0:
        print("No frames found in metrics.json")
        return

    fps_vals = [f.get("fps") for f in frames if f.get("fps")]
    with_target = [f for f in frames if f.get("records")]
    located = [f for f in with_target if any(r.get("world_position") is not None for r in f["records"])]
    with_distance = [f for f in with_target if any(r.get("distance_m", -1.0) != -1.0 for r in f["records"])]
    paused = sum(1 for f in frames if f.get("paused"))
    speeds = [f["speed_mps"] for f in located if f.get("speed_mps") is not None]

    print("\n================ SPEEDGUN RUN SUMMARY ================")
    print(f"Run dir: {run_dir}")
    print(f"Target: {m.get('target_class', '?')}")
    print(f"Frames: {n}  (paused {paused})")
    if fps_vals:
        print(f"FPS  avg={mean(fps_vals):.2f}  med={median(fps_vals):.2f}")

    print("\nTarget availability:")
    print(f"  detected:       {len(with_target):5d} ({pct(len(with_target), n):.1f}%)")
    print(f"  distance known: {len(with_distance):5d} ({pct(len(with_distance), n):.1f}%)")
    print(f"  world position: {len(located):5d} ({pct(len(located), n):.1f}%)")

    if speeds:
        print(f"\nSpeed (m/s): avg={mean(speeds):.2f}  med={median(speeds):.2f}  max={max(speeds):.2f}")
    else:
        print("\nSpeed: (no estimates)")
    print("======================================================\n")


if __name__ == "__main__":
    main()
