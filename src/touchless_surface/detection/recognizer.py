"""
Gesture Recognizer Module - MediaPipe Tasks API
================================================

Wraps the MediaPipe GestureRecognizer (Tasks API), which reports hand
landmarks together with ranked gesture categories per hand. The raw result
is handed to the landmark adapter; this module never interprets it.
"""

import logging
import urllib.request
from pathlib import Path
from typing import Any, Optional

import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..core.exceptions import AcquisitionError
from .recognizer_config import RecognizerConfig

logger = logging.getLogger(__name__)

# Model download URL
GESTURE_RECOGNIZER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/gesture_recognizer/gesture_recognizer/float16/1/gesture_recognizer.task"
DEFAULT_MODEL_PATH = Path(__file__).resolve().parents[3] / "models" / "gesture_recognizer.task"


def download_model(url: str, save_path: Path) -> bool:
    """Download the gesture recognizer model if not present."""
    if save_path.exists():
        logger.info(f"Model already exists at {save_path}")
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading gesture recognizer model to {save_path}...")
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete!")
        return True
    except OSError as e:
        logger.error(f"Failed to download model: {e}")
        return False


class GestureRecognizer:
    """
    Synchronous wrapper around MediaPipe's GestureRecognizer in VIDEO mode.

    Each call to ``recognize`` blocks until inference completes; its latency
    throttles the polling loop directly.

    Example:
        >>> recognizer = GestureRecognizer(RecognizerConfig())
        >>> recognizer.start()
        >>> result = recognizer.recognize(rgb_image, timestamp_ms)
        >>> recognizer.stop()
    """

    def __init__(self, config: Optional[RecognizerConfig] = None):
        self.config = config or RecognizerConfig()
        self._recognizer: Optional[vision.GestureRecognizer] = None
        self._last_timestamp_ms = -1

    def start(self) -> None:
        """Load the model and create the recognizer.

        Raises:
            AcquisitionError: model missing and not downloadable, or the
                recognizer could not be created.
        """
        model_path = Path(self.config.model_path or DEFAULT_MODEL_PATH)

        if not model_path.exists():
            if not (self.config.download_model
                    and download_model(GESTURE_RECOGNIZER_MODEL_URL, model_path)):
                raise AcquisitionError(f"Gesture recognizer model unavailable: {model_path}")

        options = vision.GestureRecognizerOptions(
            base_options=python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.config.num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

        try:
            self._recognizer = vision.GestureRecognizer.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise AcquisitionError(f"Failed to initialize GestureRecognizer: {e}") from e

        self._last_timestamp_ms = -1
        logger.info(f"GestureRecognizer initialized with model: {model_path}")
        logger.info(f"Max hands: {self.config.num_hands}")

    def stop(self) -> None:
        """Release resources."""
        if self._recognizer:
            self._recognizer.close()
            self._recognizer = None
            logger.info("GestureRecognizer stopped")

    @property
    def is_running(self) -> bool:
        return self._recognizer is not None

    def recognize(self, image: np.ndarray, timestamp_ms: int) -> Any:
        """
        Run gesture recognition on one RGB frame.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Monotonic frame timestamp in milliseconds

        Returns:
            The raw ``GestureRecognizerResult``
        """
        if self._recognizer is None:
            raise RuntimeError("GestureRecognizer not initialized. Call start() first.")

        # VIDEO mode rejects non-increasing timestamps
        if timestamp_ms <= self._last_timestamp_ms:
            timestamp_ms = self._last_timestamp_ms + 1
        self._last_timestamp_ms = timestamp_ms

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)
        return self._recognizer.recognize_for_video(mp_image, timestamp_ms)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
