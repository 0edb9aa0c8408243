from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

import numpy as np

from speedgun.utils.types import PositionSample

DEFAULT_HISTORY_SIZE = 5


class TrackHistory:
    """Most recent world positions of the tracked object, oldest first."""

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE):
        if max_size < 2:
            raise ValueError(f"history size must be >= 2 to estimate speed, got {max_size}")
        self.max_size = int(max_size)
        self._samples: List[PositionSample] = []
        self.total_appended = 0

    def append(self, position: np.ndarray, timestamp: float) -> PositionSample:
        if self._samples and timestamp < self._samples[-1].timestamp:
            raise ValueError(
                f"timestamp {timestamp:.6f} is older than the latest sample ({self._samples[-1].timestamp:.6f})"
            )
        sample = PositionSample.from_array(position, timestamp)
        self._samples.append(sample)
        self.total_appended += 1
        if len(self._samples) > self.max_size:
            self._samples = self._samples[-self.max_size :]
        return sample

    def latest_pair(self) -> Optional[Tuple[PositionSample, PositionSample]]:
        if len(self._samples) < 2:
            return None
        return self._samples[-2], self._samples[-1]

    def clear(self) -> None:
        self._samples.clear()

    @property
    def samples(self) -> Tuple[PositionSample, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PositionSample]:
        return iter(tuple(self._samples))
