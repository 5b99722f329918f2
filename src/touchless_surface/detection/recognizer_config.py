"""Settings for the MediaPipe gesture recognizer (kept free of MediaPipe imports)."""

from dataclasses import dataclass


@dataclass
class RecognizerConfig:
    """Configuration for the gesture recognizer."""
    model_path: str = ""
    num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    download_model: bool = True

    @classmethod
    def from_dict(cls, d: dict) -> "RecognizerConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            num_hands=d.get("num_hands", 2),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            download_model=d.get("download_model", True),
        )
