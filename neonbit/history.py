# neonbit/history.py
"""
Rolling history of recent register values, kept for the activity strip.
"""
from collections import deque
from typing import Deque, List

from . import constants as const
from .modes import Mode


class HistoryBuffer:
    """
    Fixed-capacity, newest-first buffer of normalized samples.

    Counter values (0-9) are scaled by 12.7 so that every mode plots on the
    same 0-127 axis.
    """

    def __init__(self, capacity: int = const.HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        # appendleft + maxlen drops the oldest sample from the right end
        self._samples: Deque[float] = deque(maxlen=capacity)

    @staticmethod
    def normalize(raw_value: int, mode: Mode) -> float:
        if Mode.parse(mode) is Mode.COUNTER:
            return raw_value * const.COUNTER_HISTORY_SCALE
        return float(raw_value)

    def record(self, raw_value: int, mode: Mode) -> float:
        """Prepends the normalized sample and returns it."""
        sample = self.normalize(raw_value, mode)
        self._samples.appendleft(sample)
        return sample

    def snapshot(self) -> List[float]:
        """Copy of the buffer, newest first."""
        return list(self._samples)

    def clear(self):
        self._samples.clear()

    def __len__(self):
        return len(self._samples)
