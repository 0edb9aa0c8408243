from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

from speedgun.sensing.depth import DepthBuffer
from speedgun.utils.logger import get_logger


class DepthReplay:
    """Recorded depth maps, one `frame_XXXXX.npy` per video frame (1-based)."""

    def __init__(self, directory: str | Path, pattern: str = "frame_{:05d}.npy"):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Depth directory not found: {self.directory}")
        self.pattern = pattern
        self.logger = get_logger(__name__)

    def path_for(self, frame_id: int) -> Path:
        return self.directory / self.pattern.format(frame_id)

    def load(self, frame_id: int) -> Optional[DepthBuffer]:
        path = self.path_for(frame_id)
        if not path.exists():
            return None
        data = np.load(path)
        try:
            return DepthBuffer(data)
        except ValueError:
            self.logger.warning("Skipping depth map %s with shape %s", path, data.shape)
            return None
