"""
Streak debouncer: consecutive-frame hysteresis keyed by gesture label.

A gesture is "committed" once it has been seen on more than the required
number of consecutive frames. The comparison is strict, so a transition
gated on ``committed(10)`` fires on the 11th frame.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.types import GestureLabel

logger = logging.getLogger(__name__)


@dataclass
class StreakState:
    """Currently tracked label and how many consecutive frames it has held."""
    label: Optional[GestureLabel] = None
    count: int = 0


class StreakDebouncer:
    """Hysteresis counter over a single StreakState."""

    def __init__(self, state: Optional[StreakState] = None):
        self.state = state if state is not None else StreakState()

    @property
    def label(self) -> Optional[GestureLabel]:
        return self.state.label

    @property
    def count(self) -> int:
        return self.state.count

    def observe(self, label: GestureLabel) -> int:
        """Count one more frame of ``label``; a different label restarts at 1."""
        if label != self.state.label:
            self.state.label = label
            self.state.count = 1
        else:
            self.state.count += 1
        return self.state.count

    def release(self, label: Optional[GestureLabel] = None) -> None:
        """Zero the count for a frame irrelevant to the active transition rule.

        The tracked label is kept. When ``label`` is given, the count is only
        zeroed if it differs from the tracked label, so a gesture that is
        merely held does not lose its streak.
        """
        if label is not None and label == self.state.label:
            return
        if self.state.count:
            logger.debug(f"Streak released: {self.state.label} (was {self.state.count})")
        self.state.count = 0

    def committed(self, required_count: int) -> bool:
        """True once the streak is strictly longer than ``required_count``."""
        return self.state.count > required_count

    def reset_count(self) -> None:
        """Zero the count after a successful transition; the label is kept."""
        self.state.count = 0

    def reset(self) -> None:
        """Clear all state."""
        self.state.label = None
        self.state.count = 0
