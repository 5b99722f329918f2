"""
Visualization Module
=====================

Diagnostic overlay: hand skeleton tinted with the frame's feedback colour,
pointer, mode and rotation boost. Purely for display; nothing here feeds
back into the engine.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from ..core.types import ControlSignal, InteractionMode
from ..detection.landmarks import HandLandmarks


@dataclass
class VisualizerConfig:
    """Visualization settings."""
    enabled: bool = True
    window_name: str = "Touchless Surface"
    show_landmarks: bool = True
    show_pointer: bool = True
    show_status: bool = True
    show_fps: bool = True
    # The camera image is mirrored for display so it matches the pointer
    mirror_display: bool = True

    # Colors (BGR format)
    landmark_color: Tuple[int, int, int] = (255, 255, 255)
    pointer_color: Tuple[int, int, int] = (0, 215, 255)
    text_color: Tuple[int, int, int] = (0, 255, 255)
    warning_color: Tuple[int, int, int] = (0, 0, 255)

    font_scale: float = 0.5
    font_thickness: int = 1

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        colors = config.get("colors", {})
        return cls(
            enabled=config.get("enabled", True),
            window_name=config.get("window_name", "Touchless Surface"),
            show_landmarks=config.get("show_landmarks", True),
            show_pointer=config.get("show_pointer", True),
            show_status=config.get("show_status", True),
            show_fps=config.get("show_fps", True),
            mirror_display=config.get("mirror_display", True),
            landmark_color=tuple(colors.get("landmarks", [255, 255, 255])),
            pointer_color=tuple(colors.get("pointer", [0, 215, 255])),
            text_color=tuple(colors.get("text", [0, 255, 255])),
            warning_color=tuple(colors.get("warning", [0, 0, 255])),
            font_scale=config.get("font_scale", 0.5),
            font_thickness=config.get("font_thickness", 1),
        )


class Visualizer:
    """
    Draws the engine's per-frame output over the camera image.

    Example:
        >>> viz = Visualizer()
        >>> display = viz.render(frame.image, hand_frame.hands, signal, fps=29.7)
        >>> cv2.imshow(viz.config.window_name, display)
    """

    HAND_CONNECTIONS = [
        (0, 1), (1, 2), (2, 3), (3, 4),         # Thumb
        (0, 5), (5, 6), (6, 7), (7, 8),         # Index
        (5, 9), (9, 10), (10, 11), (11, 12),    # Middle
        (9, 13), (13, 14), (14, 15), (15, 16),  # Ring
        (13, 17), (17, 18), (18, 19), (19, 20), # Pinky
        (0, 17),                                # Palm base
    ]

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def render(self, image: np.ndarray, hands, signal: ControlSignal,
               fps: float = 0.0, photo_modal_open: bool = False) -> np.ndarray:
        """Return a display copy of ``image`` with all overlays drawn."""
        display = image.copy()

        if self.config.show_landmarks:
            for i, hand in enumerate(hands):
                # Primary hand carries the rule colour
                color = signal.feedback_color.bgr if i == 0 else self.config.landmark_color
                self.draw_hand(display, hand, color)

        if self.config.mirror_display:
            display = cv2.flip(display, 1)

        if self.config.show_pointer and signal.pointer is not None:
            self.draw_pointer(display, signal.pointer, clicked=signal.clicked)

        if self.config.show_status:
            self.draw_status(display, signal, fps, photo_modal_open)

        return display

    def draw_hand(self, image: np.ndarray, hand: HandLandmarks,
                  color: Tuple[int, int, int]) -> np.ndarray:
        """Draw one hand skeleton in camera (unmirrored) coordinates."""
        height, width = image.shape[:2]
        points = [lm.to_pixel(width, height) for lm in hand.landmarks]

        for start_idx, end_idx in self.HAND_CONNECTIONS:
            cv2.line(image, points[start_idx], points[end_idx], color, 2)

        for point in points:
            cv2.circle(image, point, 2, self.config.landmark_color, -1)

        return image

    def draw_pointer(self, image: np.ndarray, pointer: Tuple[float, float],
                     clicked: bool = False) -> np.ndarray:
        """Draw the pointer; it is already in mirrored (display) coordinates."""
        height, width = image.shape[:2]
        center = (int(pointer[0] * width), int(pointer[1] * height))
        radius = 14 if clicked else 8
        cv2.circle(image, center, radius, self.config.pointer_color, 2)
        return image

    def draw_status(self, image: np.ndarray, signal: ControlSignal,
                    fps: float = 0.0, photo_modal_open: bool = False) -> np.ndarray:
        x, y = 10, 20
        line_height = 20

        mode_color = (self.config.text_color if signal.mode == InteractionMode.CHAOS
                      else signal.feedback_color.bgr)
        lines = [
            (f"{signal.mode.name} MODE", mode_color),
            (f"Boost: {signal.rotation_boost:+.2f}", self.config.text_color),
        ]
        if self.config.show_fps:
            fps_color = self.config.text_color if fps >= 25 else self.config.warning_color
            lines.append((f"FPS: {fps:.1f}", fps_color))
        if photo_modal_open:
            lines.append(("PHOTO OPEN (mode locked)", self.config.warning_color))

        for text, color in lines:
            cv2.putText(image, text, (x, y), self._font, self.config.font_scale,
                        color, self.config.font_thickness)
            y += line_height

        return image
