"""
Motion Delta Tracking
======================

Frame-to-frame palm displacement (rotation/pan input) and two-hand spread
(zoom input). Both trackers forget their baseline as soon as the hand(s)
disappear, so re-acquisition never produces a spurious jump.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..core.types import MotionDelta
from ..detection.landmarks import HandLandmarks

logger = logging.getLogger(__name__)


@dataclass
class MotionBaseline:
    """Previous-frame positions; None whenever the hand(s) were not seen."""
    palm_centroid: Optional[Tuple[float, float]] = None
    hand_spread: Optional[float] = None

    def clear(self) -> None:
        self.palm_centroid = None
        self.hand_spread = None


class MotionDeltaTracker:
    """
    Mirrored palm displacement between consecutive frames.

    The camera view is horizontally flipped relative to the scene, so x is
    measured as ``1 - x``.

    Example:
        >>> tracker = MotionDeltaTracker(MotionBaseline())
        >>> tracker.update(hand)       # first sighting -> zero delta
        MotionDelta(dx=0.0, dy=0.0, is_moving=False)
        >>> tracker.update(None)       # hand lost -> baseline cleared
    """

    def __init__(self, baseline: Optional[MotionBaseline] = None,
                 moving_threshold: float = 0.005):
        self.baseline = baseline if baseline is not None else MotionBaseline()
        self.moving_threshold = moving_threshold

    def update(self, hand: Optional[HandLandmarks]) -> Optional[MotionDelta]:
        """
        Advance the baseline with the current hand.

        Returns:
            MotionDelta, or None when no hand is present
        """
        if hand is None:
            self.baseline.clear()
            return None

        cx, cy = hand.palm_centroid
        prev = self.baseline.palm_centroid

        dx = dy = 0.0
        if prev is not None:
            dx = (1.0 - cx) - (1.0 - prev[0])
            dy = cy - prev[1]

        self.baseline.palm_centroid = (cx, cy)

        is_moving = abs(dx) > self.moving_threshold or abs(dy) > self.moving_threshold
        return MotionDelta(dx=dx, dy=dy, is_moving=is_moving)


class ZoomTracker:
    """Change in distance between the two palm centroids, per frame.

    Positive deltas mean the hands are moving apart. Shares the
    MotionBaseline with the palm tracker.
    """

    def __init__(self, baseline: Optional[MotionBaseline] = None):
        self.baseline = baseline if baseline is not None else MotionBaseline()

    def update(self, hands: List[HandLandmarks]) -> Optional[float]:
        if len(hands) < 2:
            self.baseline.hand_spread = None
            return None

        a = np.array(hands[0].palm_centroid)
        b = np.array(hands[1].palm_centroid)
        spread = float(np.linalg.norm(a - b))

        prev = self.baseline.hand_spread
        self.baseline.hand_spread = spread
        return 0.0 if prev is None else spread - prev
