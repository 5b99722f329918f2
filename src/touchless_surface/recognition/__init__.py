"""Per-frame gesture classification, motion tracking and streak debouncing."""
from .gesture_classifier import GestureClassifier, GestureObservation, PinchState, RecognitionConfig
from .motion_tracker import MotionBaseline, MotionDeltaTracker, ZoomTracker
from .streak_debouncer import StreakDebouncer, StreakState

__all__ = [
    "GestureClassifier",
    "GestureObservation",
    "PinchState",
    "RecognitionConfig",
    "MotionBaseline",
    "MotionDeltaTracker",
    "ZoomTracker",
    "StreakDebouncer",
    "StreakState",
]
