"""
Gesture Classifier
===================

Confidence thresholding of the recognizer's top gesture plus the auxiliary
geometric signals derived from raw landmarks (pinch distance, finger
extension). Stateless per frame.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.types import GestureLabel
from ..detection.landmarks import HandLandmarks, LandmarkIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GestureObservation:
    """Thresholded gesture label for one frame."""
    label: GestureLabel
    confidence: float

    @staticmethod
    def none() -> "GestureObservation":
        return GestureObservation(label=GestureLabel.NONE, confidence=0.0)


@dataclass(frozen=True)
class PinchState:
    """Thumb-tip to index-tip distance and whether it counts as a pinch."""
    distance: float
    is_pinching: bool


@dataclass
class RecognitionConfig:
    """Gesture classifier configuration."""
    # Minimum recognizer score to accept its label
    confidence_threshold: float = 0.5
    # Thumb-index distance below which the hand is pinching
    pinch_threshold: float = 0.08
    # Tip-to-wrist / MCP-to-wrist ratio above which a finger is extended
    extension_ratio: float = 1.3

    @classmethod
    def from_dict(cls, config: dict) -> "RecognitionConfig":
        """Create config from dictionary."""
        return cls(
            confidence_threshold=config.get("confidence_threshold", 0.5),
            pinch_threshold=config.get("pinch_threshold", 0.08),
            extension_ratio=config.get("extension_ratio", 1.3),
        )


class GestureClassifier:
    """
    Per-frame gesture classification.

    The label itself comes from the inference engine; this class only
    decides whether to trust it and computes hand-shape signals from the
    landmarks.

    Example:
        >>> classifier = GestureClassifier()
        >>> obs = classifier.classify("Open_Palm", 0.92)
        >>> pinch = classifier.pinch(hand)
        >>> if pinch.is_pinching and obs.label != GestureLabel.CLOSED_FIST:
        ...     print("click candidate")
    """

    FINGERS = {
        "index": (LandmarkIndex.INDEX_TIP, LandmarkIndex.INDEX_MCP),
        "middle": (LandmarkIndex.MIDDLE_TIP, LandmarkIndex.MIDDLE_MCP),
        "ring": (LandmarkIndex.RING_TIP, LandmarkIndex.RING_MCP),
        "pinky": (LandmarkIndex.PINKY_TIP, LandmarkIndex.PINKY_MCP),
    }

    def __init__(self, config: Optional[RecognitionConfig] = None):
        self.config = config or RecognitionConfig()

    def classify(self, raw_label: Optional[str], score: float) -> GestureObservation:
        """
        Threshold the recognizer's top-1 category.

        Args:
            raw_label: Category name reported by the recognizer
            score: Its confidence

        Returns:
            Observation with label NONE when the score is below threshold
        """
        if score < self.config.confidence_threshold:
            return GestureObservation(label=GestureLabel.NONE, confidence=score)
        return GestureObservation(label=GestureLabel.from_string(raw_label), confidence=score)

    def pinch(self, hand: HandLandmarks) -> PinchState:
        """Compute pinch distance between index tip and thumb tip."""
        distance = hand.distance_2d(LandmarkIndex.INDEX_TIP, LandmarkIndex.THUMB_TIP)
        return PinchState(distance=distance, is_pinching=distance < self.config.pinch_threshold)

    def is_extended(self, hand: HandLandmarks, tip: LandmarkIndex, mcp: LandmarkIndex) -> bool:
        """A finger is extended when its tip is well beyond its MCP from the wrist."""
        tip_dist = hand.distance_2d(tip, LandmarkIndex.WRIST)
        mcp_dist = hand.distance_2d(mcp, LandmarkIndex.WRIST)
        return tip_dist > mcp_dist * self.config.extension_ratio

    def finger_states(self, hand: HandLandmarks) -> Dict[str, bool]:
        """Extension state of the four non-thumb fingers."""
        fingers = {
            finger: self.is_extended(hand, tip, mcp)
            for finger, (tip, mcp) in self.FINGERS.items()
        }
        logger.debug(f"Finger states: {fingers}")
        return fingers
