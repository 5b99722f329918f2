"""
Landmark Frame Adapter
=======================

Normalizes one inference-engine result into the engine's internal frame
representation. Stateless.

Any object exposing ``hand_landmarks``, ``handedness`` and ``gestures`` in
the shape of MediaPipe's ``GestureRecognizerResult`` is accepted. Malformed
data never raises: it yields an empty frame, which the engine treats as
"no hand detected".
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .landmarks import NUM_LANDMARKS, HandLandmarks, Landmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandFrame:
    """Hands detected in one frame plus the primary hand's top gesture."""
    hands: List[HandLandmarks] = field(default_factory=list)
    raw_label: Optional[str] = None
    raw_score: float = 0.0

    @property
    def primary(self) -> Optional[HandLandmarks]:
        return self.hands[0] if self.hands else None

    @property
    def hand_count(self) -> int:
        return len(self.hands)

    @staticmethod
    def empty() -> "HandFrame":
        return HandFrame()


def _to_hand(points: Any, handedness: str, confidence: float) -> HandLandmarks:
    if points is None or len(points) < NUM_LANDMARKS:
        raise ValueError(f"expected {NUM_LANDMARKS} landmarks, got "
                         f"{0 if points is None else len(points)}")
    landmarks = []
    for lm in list(points)[:NUM_LANDMARKS]:
        x, y, z = float(lm.x), float(lm.y), float(getattr(lm, "z", 0.0) or 0.0)
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
            raise ValueError(f"non-finite landmark ({x}, {y}, {z})")
        landmarks.append(Landmark(x, y, z))
    return HandLandmarks(landmarks=tuple(landmarks), handedness=handedness, confidence=confidence)


def _score(category: Any, default: float = 0.0) -> float:
    score = getattr(category, "score", default)
    score = default if score is None else float(score)
    return score if math.isfinite(score) else 0.0


def _top_category(categories: Any) -> Optional[Any]:
    if not categories:
        return None
    return categories[0]


def adapt_result(result: Any) -> HandFrame:
    """
    Convert a recognizer result into a HandFrame.

    Args:
        result: GestureRecognizerResult-like object, or None

    Returns:
        HandFrame; empty when there is no hand or the data is malformed
    """
    if result is None:
        return HandFrame.empty()

    try:
        raw_hands = getattr(result, "hand_landmarks", None) or []
        handedness = getattr(result, "handedness", None) or []
        gestures = getattr(result, "gestures", None) or []

        hands = []
        for i, points in enumerate(raw_hands):
            side = _top_category(handedness[i]) if i < len(handedness) else None
            try:
                hands.append(_to_hand(
                    points,
                    handedness=getattr(side, "category_name", None) or "Right",
                    confidence=_score(side, default=1.0) if side is not None else 1.0,
                ))
            except (AttributeError, TypeError, ValueError) as e:
                # A bad primary hand voids the frame; extra hands are just dropped
                if i == 0:
                    raise
                logger.debug(f"Dropping malformed hand {i}: {e}")

        if not hands:
            return HandFrame.empty()

        # Primary hand is the first; only its top-ranked gesture is used
        top = _top_category(gestures[0]) if gestures else None
        raw_label = getattr(top, "category_name", None) if top is not None else None
        raw_score = _score(top) if top is not None else 0.0

        return HandFrame(hands=hands, raw_label=raw_label, raw_score=raw_score)

    except (AttributeError, TypeError, ValueError, IndexError) as e:
        logger.debug(f"Malformed recognizer result treated as no hand: {e}")
        return HandFrame.empty()
