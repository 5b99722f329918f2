"""
Camera Capture Module
======================

Low-latency OpenCV capture with optional threaded reads. Every frame
carries a presentation timestamp so the scheduler can skip frames it has
already processed.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from ..core.exceptions import AcquisitionError

logger = logging.getLogger(__name__)


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    buffer_size: int = 1  # Minimal buffering for low latency
    threaded: bool = True
    # The engine mirrors x itself; flipping here would mirror twice
    flip_horizontal: bool = False
    warmup_frames: int = 5

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 640),
            height=config.get("height", 480),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            threaded=config.get("threaded", True),
            flip_horizontal=config.get("flip_horizontal", False),
            warmup_frames=config.get("warmup_frames", 5),
        )


@dataclass
class Frame:
    """Container for captured frame with metadata."""
    image: np.ndarray
    timestamp: float
    frame_number: int
    presentation_time: float = 0.0

    @property
    def rgb(self) -> np.ndarray:
        """Convert BGR to RGB."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)


class Camera:
    """
    Camera capture with optional threading.

    In threaded mode ``read()`` returns the latest captured frame, which may
    be the same object on consecutive calls; the scheduler recognises it by
    its unchanged presentation time.

    Example:
        >>> with Camera(CameraConfig()) as camera:
        ...     frame = camera.read()
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_number = 0
        self._running = False

        # Threading components
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._latest_frame: Optional[Frame] = None

    def start(self) -> None:
        """
        Open the device and begin capture.

        Raises:
            AcquisitionError: no backend could open the device and read a frame
        """
        logger.info("Starting camera (device={}, {}x{}@{}fps)".format(
            self.config.device_id, self.config.width, self.config.height, self.config.fps))

        # V4L2 first (better for USB cameras on Linux), then whatever OpenCV picks
        for backend in (cv2.CAP_V4L2, cv2.CAP_ANY):
            self._cap = cv2.VideoCapture(self.config.device_id, backend)

            if not self._cap.isOpened():
                logger.warning("Backend {} failed, trying next...".format(backend))
                self._cap.release()
                self._cap = None
                continue

            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
            self._cap.set(cv2.CAP_PROP_FPS, self.config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

            ok, test_frame = self._cap.read()
            if ok and test_frame is not None:
                break

            logger.warning("Can't read frames, trying next backend...")
            self._cap.release()
            self._cap = None

        if self._cap is None:
            raise AcquisitionError("Failed to open camera device {}".format(self.config.device_id))

        logger.info("Camera initialized: {}x{}@{}fps".format(
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            self._cap.get(cv2.CAP_PROP_FPS)))

        for _ in range(self.config.warmup_frames):
            self._cap.read()

        self._running = True
        self._frame_number = 0

        if self.config.threaded:
            self._thread = threading.Thread(target=self._capture_loop, daemon=True)
            self._thread.start()
            logger.info("Started threaded capture")

    def stop(self) -> None:
        """Stop capture and release the device. Safe to call twice."""
        self._running = False

        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera stopped")

    def read(self) -> Optional[Frame]:
        """
        Read the latest frame.

        Returns:
            Frame or None if nothing is available
        """
        if not self._running:
            return None

        if self.config.threaded:
            with self._lock:
                return self._latest_frame
        return self._capture_frame()

    def _capture_frame(self) -> Optional[Frame]:
        if self._cap is None:
            return None

        ok, image = self._cap.read()

        if not ok or image is None:
            logger.warning("Failed to capture frame")
            return None

        if self.config.flip_horizontal:
            image = cv2.flip(image, 1)

        self._frame_number += 1

        # Live devices often report no stream position; fall back to capture time
        position_ms = self._cap.get(cv2.CAP_PROP_POS_MSEC)
        presentation_time = position_ms / 1000.0 if position_ms and position_ms > 0 else time.monotonic()

        return Frame(
            image=image,
            timestamp=time.time(),
            frame_number=self._frame_number,
            presentation_time=presentation_time,
        )

    def _capture_loop(self) -> None:
        """Background thread for continuous frame capture."""
        while self._running:
            frame = self._capture_frame()
            if frame:
                with self._lock:
                    self._latest_frame = frame

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.config.width, self.config.height)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
