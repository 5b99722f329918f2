"""
Shared domain types for the Touchless Surface engine.

Centralizes enums and data containers used across modules to eliminate
circular imports and ensure type consistency.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# =============================================================================
# Gesture Labels
# =============================================================================

class GestureLabel(Enum):
    """Canonical gesture labels understood by the interaction engine."""
    NONE = "none"
    OPEN_PALM = "open_palm"
    CLOSED_FIST = "closed_fist"
    OTHER = "other"

    @classmethod
    def from_string(cls, name: Optional[str]) -> "GestureLabel":
        """Map a raw recognizer category name onto the closed label set.

        Empty names and the recognizer's own "None" category map to NONE;
        any category the engine has no rule for maps to OTHER.
        """
        if not name or name.strip().lower() == "none":
            return cls.NONE
        return _RAW_LABELS.get(name.strip().lower(), cls.OTHER)


_RAW_LABELS = {
    "open_palm": GestureLabel.OPEN_PALM,
    "closed_fist": GestureLabel.CLOSED_FIST,
}


class InteractionMode(Enum):
    """Discrete application mode."""
    CHAOS = "chaos"
    FORMED = "formed"


class FeedbackColor(Enum):
    """Diagnostic colour naming the rule that fired on a frame (RGBA)."""
    IDLE = (0, 255, 255, 0.2)
    DISSOLVE_APPROACH = (255, 100, 100, 0.8)
    REFORM_APPROACH = (100, 255, 100, 0.8)
    ROTATE_ACTIVE = (0, 200, 255, 0.9)
    CLICK_FIRED = (255, 255, 0, 1.0)

    @property
    def rgba(self) -> Tuple[int, int, int, float]:
        return self.value

    @property
    def bgr(self) -> Tuple[int, int, int]:
        """Colour in OpenCV channel order, alpha dropped."""
        r, g, b, _ = self.value
        return (b, g, r)


# =============================================================================
# Data Containers
# =============================================================================

@dataclass(frozen=True)
class MotionDelta:
    """Mirrored palm displacement between two consecutive frames."""
    dx: float = 0.0
    dy: float = 0.0
    is_moving: bool = False


@dataclass(frozen=True)
class ControlSignal:
    """Per-frame output consumed by the render/UI layer.

    ``click_event`` is a one-shot timestamp; consumers treat it as an edge.
    """
    pointer: Optional[Tuple[float, float]]
    rotation_boost: float
    click_event: Optional[float]
    mode: InteractionMode
    feedback_color: FeedbackColor = FeedbackColor.IDLE
    motion: Optional[MotionDelta] = None
    zoom_delta: Optional[float] = None
    hand_count: int = 0
    mode_changed: bool = False
    timestamp: float = 0.0

    @property
    def has_hand(self) -> bool:
        return self.hand_count > 0

    @property
    def clicked(self) -> bool:
        return self.click_event is not None
