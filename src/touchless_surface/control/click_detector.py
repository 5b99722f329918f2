"""
Pinch click detector with a wall-clock cooldown.

A click fires on a pinch that is not part of a closed fist, and then
re-arms only after the cooldown has elapsed. The click itself is a
one-shot timestamp; consumers treat it as an edge.
"""

import logging
from typing import Optional

from ..core.state import EngineState
from ..core.types import GestureLabel
from ..recognition.gesture_classifier import PinchState

logger = logging.getLogger(__name__)


class PinchClickDetector:
    """Edge-triggered click emitter backed by ``EngineState.click_cooldown``."""

    def __init__(self, state: EngineState, cooldown: float = 1.0):
        self.state = state
        self.cooldown = cooldown

    @property
    def remaining(self) -> float:
        """Seconds until a click may fire again (0 when armed)."""
        return max(0.0, self.state.click_cooldown)

    def tick(self, delta: float) -> None:
        """Consume elapsed time. May drive the cooldown below zero."""
        self.state.click_cooldown -= delta

    def update(self, pinch: Optional[PinchState], label: GestureLabel,
               delta: float, now: float) -> Optional[float]:
        """
        Advance the cooldown and decide whether this frame clicks.

        Args:
            pinch: Pinch state of the primary hand, None without a hand
            label: Thresholded gesture label for this frame
            delta: Seconds since the previous processed frame
            now: Wall-clock timestamp carried by the click event

        Returns:
            ``now`` if a click fired, else None
        """
        self.tick(delta)

        if pinch is None or not pinch.is_pinching:
            return None
        # A fist can satisfy the pinch distance test by accident
        if label == GestureLabel.CLOSED_FIST:
            return None
        if self.state.click_cooldown > 0:
            return None

        self.state.click_cooldown = self.cooldown
        logger.debug(f"Click fired at {now:.3f} (pinch={pinch.distance:.3f})")
        return now
