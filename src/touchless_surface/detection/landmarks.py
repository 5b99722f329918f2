"""
Hand Landmark Types
====================

Immutable containers for the 21-point hand skeleton produced by the
inference engine, with the geometric helpers the interaction engine needs.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Tuple

import numpy as np

NUM_LANDMARKS = 21


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float = 0.0  # Depth relative to wrist

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


@dataclass(frozen=True)
class HandLandmarks:
    """One detected hand: exactly 21 landmarks plus handedness."""
    landmarks: Tuple[Landmark, ...]
    handedness: str = "Right"
    confidence: float = 1.0

    def __post_init__(self):
        if len(self.landmarks) != NUM_LANDMARKS:
            raise ValueError(
                f"Expected {NUM_LANDMARKS} landmarks, got {len(self.landmarks)}"
            )

    @classmethod
    def from_points(cls, points: List[Tuple[float, ...]], handedness: str = "Right",
                    confidence: float = 1.0) -> "HandLandmarks":
        """Build from a sequence of (x, y[, z]) tuples."""
        return cls(
            landmarks=tuple(Landmark(*map(float, p)) for p in points),
            handedness=handedness,
            confidence=confidence,
        )

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]

    @property
    def palm_centroid(self) -> Tuple[float, float]:
        """Mean of wrist, index MCP and pinky MCP: a stable hand position proxy."""
        wrist = self.get(LandmarkIndex.WRIST)
        index_mcp = self.get(LandmarkIndex.INDEX_MCP)
        pinky_mcp = self.get(LandmarkIndex.PINKY_MCP)
        return (
            (wrist.x + index_mcp.x + pinky_mcp.x) / 3,
            (wrist.y + index_mcp.y + pinky_mcp.y) / 3,
        )

    def distance_2d(self, idx1: LandmarkIndex, idx2: LandmarkIndex) -> float:
        """Euclidean distance between two landmarks in the image plane."""
        lm1 = self.get(idx1)
        lm2 = self.get(idx2)
        return math.hypot(lm1.x - lm2.x, lm1.y - lm2.y)

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array of shape (21, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks])
