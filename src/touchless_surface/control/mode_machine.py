"""
Mode State Machine
===================

Two-state machine (CHAOS, FORMED) gated by committed gestures.

Transitions:
    FORMED -> CHAOS   Open palm held for more than ``dissolve_frames`` frames
    CHAOS  -> FORMED  Closed fist held for more than ``reform_frames`` frames

Dissolving needs a longer hold than re-forming. While in CHAOS an open
palm instead drives a continuous, clamped rotation boost from the
horizontal palm delta.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.state import EngineState
from ..core.types import FeedbackColor, GestureLabel, InteractionMode, MotionDelta
from ..recognition.streak_debouncer import StreakDebouncer

logger = logging.getLogger(__name__)


@dataclass
class InteractionConfig:
    """Thresholds and gains of the interaction rules."""
    dissolve_frames: int = 10
    reform_frames: int = 5
    rotation_gain: float = 15.0
    rotation_limit: float = 5.0
    rotation_deadzone: float = 0.002
    motion_threshold: float = 0.005
    click_cooldown: float = 1.0

    @classmethod
    def from_dict(cls, config: dict) -> "InteractionConfig":
        """Create config from dictionary."""
        return cls(
            dissolve_frames=config.get("dissolve_frames", 10),
            reform_frames=config.get("reform_frames", 5),
            rotation_gain=config.get("rotation_gain", 15.0),
            rotation_limit=config.get("rotation_limit", 5.0),
            rotation_deadzone=config.get("rotation_deadzone", 0.002),
            motion_threshold=config.get("motion_threshold", 0.005),
            click_cooldown=config.get("click_cooldown", 1.0),
        )


@dataclass(frozen=True)
class ModeDecision:
    """What the state machine did on one frame."""
    transitioned: bool = False
    feedback: Optional[FeedbackColor] = None


class ModeStateMachine:
    """
    Authoritative interaction mode plus the rotation-boost accumulator.

    Example:
        >>> state = EngineState()
        >>> machine = ModeStateMachine(state)
        >>> for _ in range(6):
        ...     machine.evaluate(GestureLabel.CLOSED_FIST)
        >>> state.mode
        <InteractionMode.FORMED: 'formed'>
    """

    def __init__(self, state: EngineState, config: Optional[InteractionConfig] = None):
        self.state = state
        self.config = config or InteractionConfig()
        self.streak = StreakDebouncer(state.streak)

    @property
    def mode(self) -> InteractionMode:
        return self.state.mode

    @property
    def rotation_boost(self) -> float:
        return self.state.rotation_boost

    def evaluate(self, label: GestureLabel, motion: Optional[MotionDelta] = None,
                 suppressed: bool = False) -> ModeDecision:
        """
        Apply one frame's thresholded label.

        Args:
            label: Gesture label for this frame (NONE below threshold)
            motion: Palm delta for this frame, if a hand is present
            suppressed: Host overlay is open; nothing is evaluated

        Returns:
            ModeDecision describing any transition and the rule colour
        """
        if suppressed:
            return ModeDecision()

        mode = self.state.mode

        if label == GestureLabel.OPEN_PALM:
            if mode == InteractionMode.FORMED:
                self.streak.observe(label)
                if self.streak.committed(self.config.dissolve_frames):
                    self._transition(InteractionMode.CHAOS)
                    return ModeDecision(True, FeedbackColor.DISSOLVE_APPROACH)
                return ModeDecision(False, FeedbackColor.DISSOLVE_APPROACH)

            # CHAOS: open palm only steers rotation
            self.streak.release()
            dx = motion.dx if motion is not None else 0.0
            if abs(dx) > self.config.rotation_deadzone:
                self._rotate(dx)
                return ModeDecision(False, FeedbackColor.ROTATE_ACTIVE)
            return ModeDecision()

        if label == GestureLabel.CLOSED_FIST and mode == InteractionMode.CHAOS:
            self.streak.observe(label)
            if self.streak.committed(self.config.reform_frames):
                self._transition(InteractionMode.FORMED)
                return ModeDecision(True, FeedbackColor.REFORM_APPROACH)
            return ModeDecision(False, FeedbackColor.REFORM_APPROACH)

        self.streak.release(label)
        return ModeDecision()

    def _rotate(self, dx: float) -> None:
        limit = self.config.rotation_limit
        boost = self.state.rotation_boost - dx * self.config.rotation_gain
        self.state.rotation_boost = max(min(boost, limit), -limit)

    def _transition(self, new_mode: InteractionMode) -> None:
        old = self.state.mode
        self.state.mode = new_mode
        self.streak.reset_count()
        logger.info(f"Mode changed: {old.name} -> {new_mode.name}")
