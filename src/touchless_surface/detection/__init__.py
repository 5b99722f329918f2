"""Hand landmark types, result adapter and the MediaPipe recognizer wrapper.

The recognizer lives in ``detection.recognizer`` and is imported on demand
so the engine can run without loading MediaPipe.
"""
from .landmarks import HandLandmarks, Landmark, LandmarkIndex
from .landmark_adapter import HandFrame, adapt_result

__all__ = ["HandLandmarks", "Landmark", "LandmarkIndex", "HandFrame", "adapt_result"]
