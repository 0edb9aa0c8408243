import json
from pathlib import Path

from speedgun.utils.types import FrameResult


class TrackLogger:
    def __init__(self, run_dir: Path):
        self.log_path = Path(run_dir) / "track_events.jsonl"
        self.last_paused = None
        self.log_path.touch(exist_ok=True)

    def log(self, result: FrameResult) -> bool:
        """Append an event for located targets and for pause/resume changes."""
        located = [r for r in result.records if r.world_position is not None]
        paused_changed = result.paused != self.last_paused
        self.last_paused = result.paused
        if not located and not paused_changed:
            return False
        event = {
            "frame": result.frame_seq,
            "time_s": round(result.timestamp, 3),
            "paused": result.paused,
            "speed_mps": result.speed_mps,
            "positions": [[round(float(v), 4) for v in r.world_position] for r in located],
        }
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event) + "\n")
        return True
