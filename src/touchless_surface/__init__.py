"""
Touchless Surface
==================

Turns a stream of hand-landmark observations into a debounced interaction
mode, continuous control signals and pinch clicks.

Modules:
    - core: engine state, per-frame engine, scheduler, events
    - detection: landmark types, result adapter, MediaPipe recognizer
    - recognition: gesture thresholding, motion deltas, streak debouncing
    - control: mode state machine, pinch click detection
    - capture: OpenCV camera
    - utils: configuration, logging, performance, visualization
"""

from .core.engine import InteractionEngine
from .core.state import EngineState
from .core.types import ControlSignal, FeedbackColor, GestureLabel, InteractionMode
from .detection.landmark_adapter import HandFrame, adapt_result

__version__ = "1.0.0"

__all__ = [
    "InteractionEngine",
    "EngineState",
    "ControlSignal",
    "FeedbackColor",
    "GestureLabel",
    "InteractionMode",
    "HandFrame",
    "adapt_result",
]
