"""Shared types, engine state, the per-frame engine and its scheduler.

``core.engine`` and ``core.scheduler`` are imported explicitly by callers;
this package only re-exports the leaf modules.
"""
from .exceptions import AcquisitionError, ConfigError, TouchlessError
from .types import ControlSignal, FeedbackColor, GestureLabel, InteractionMode, MotionDelta

__all__ = [
    "AcquisitionError",
    "ConfigError",
    "TouchlessError",
    "ControlSignal",
    "FeedbackColor",
    "GestureLabel",
    "InteractionMode",
    "MotionDelta",
]
