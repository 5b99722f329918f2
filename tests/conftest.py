"""
Shared fixtures: synthetic hands and frames.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from touchless_surface.detection.landmark_adapter import HandFrame
from touchless_surface.detection.landmarks import HandLandmarks


def create_mock_hand(cx: float = 0.5, cy: float = 0.6, pinch: bool = False,
                     fingers_up: bool = True, handedness: str = "Right") -> HandLandmarks:
    """
    Create a synthetic 21-point hand.

    The palm centroid (mean of wrist, index MCP and pinky MCP) sits at
    (cx, cy). With ``pinch`` the thumb tip touches the index tip.
    """
    # Curled tips end between knuckle and wrist
    reach = 0.20 if fingers_up else -0.02
    points = [None] * 21

    # Wrist and knuckles: chosen so the centroid is exactly (cx, cy)
    points[0] = (cx, cy + 0.06)
    points[5] = (cx - 0.05, cy - 0.03)
    points[9] = (cx, cy - 0.035)
    points[13] = (cx + 0.03, cy - 0.035)
    points[17] = (cx + 0.05, cy - 0.03)

    for mcp, x_off in ((5, -0.05), (9, 0.0), (13, 0.03), (17, 0.05)):
        base_y = points[mcp][1]
        for step in range(1, 4):
            points[mcp + step] = (cx + x_off, base_y - reach * step / 3)

    index_tip = points[8]
    if pinch:
        thumb_tip = (index_tip[0] + 0.01, index_tip[1] + 0.01)
    else:
        thumb_tip = (cx - 0.18, cy - 0.05)

    points[1] = (cx - 0.07, cy + 0.03)
    points[2] = (cx - 0.10, cy)
    points[3] = ((points[2][0] + thumb_tip[0]) / 2, (points[2][1] + thumb_tip[1]) / 2)
    points[4] = thumb_tip

    return HandLandmarks.from_points(points, handedness=handedness, confidence=0.95)


@pytest.fixture
def make_hand():
    """Factory for synthetic hands."""
    return create_mock_hand


@pytest.fixture
def make_frame():
    """Factory for HandFrames: one hand by default, recognizer label and score given."""
    def _make(label: str = "Open_Palm", score: float = 0.9, hands=None, **hand_kwargs) -> HandFrame:
        if hands is None:
            hands = [create_mock_hand(**hand_kwargs)]
        return HandFrame(hands=list(hands), raw_label=label, raw_score=score)
    return _make
