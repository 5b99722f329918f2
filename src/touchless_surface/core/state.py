"""
Explicit engine state.

Everything that persists between frames lives here, owned by the caller
and passed into the engine, so a fresh ``EngineState()`` gives a fresh
engine.
"""

from dataclasses import dataclass, field
from typing import Optional

from .types import InteractionMode
from ..recognition.motion_tracker import MotionBaseline
from ..recognition.streak_debouncer import StreakState


@dataclass
class EngineState:
    """Mutable cross-frame state of one interaction engine."""
    mode: InteractionMode = InteractionMode.CHAOS
    rotation_boost: float = 0.0
    streak: StreakState = field(default_factory=StreakState)
    baseline: MotionBaseline = field(default_factory=MotionBaseline)
    click_cooldown: float = 0.0
    last_frame_time: Optional[float] = None
    frames_processed: int = 0
