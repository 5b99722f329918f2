"""
Configuration loading.

Reads a YAML file, merges it over the built-in defaults and builds the
typed per-component configs. Wrong-typed values are reported as warnings
and the component defaults apply wherever a key is absent.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import yaml

from ..capture.camera import CameraConfig
from ..control.mode_machine import InteractionConfig
from ..core.exceptions import ConfigError
from ..core.scheduler import SchedulerConfig
from ..detection.recognizer_config import RecognizerConfig
from ..recognition.gesture_classifier import RecognitionConfig
from .visualization import VisualizerConfig

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
DEFAULT_CONFIG_PATH = os.path.join(_BASE_DIR, "config", "config.yaml")

# Schema: sections and the expected types of their critical fields
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
    },
    "recognizer": {
        "model_path": str,
        "num_hands": int,
        "min_detection_confidence": float,
    },
    "recognition": {
        "confidence_threshold": float,
        "pinch_threshold": float,
        "extension_ratio": float,
    },
    "interaction": {
        "dissolve_frames": int,
        "reform_frames": int,
        "rotation_gain": float,
        "rotation_limit": float,
        "click_cooldown": float,
    },
    "logging": {
        "level": str,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: dict, name: str) -> dict:
    section = data.get(name)
    return section if isinstance(section, dict) else {}


def validate(data: dict) -> list:
    """Check critical fields against the schema; returns the warnings logged."""
    warnings = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if section is None:
            continue
        if not isinstance(section, dict):
            warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            # YAML booleans are ints to Python; never accept them as numbers
            if isinstance(value, bool):
                pass
            elif expected_type is float and isinstance(value, (int, float)):
                continue
            elif isinstance(value, expected_type):
                continue
            warnings.append(
                f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                f"got {type(value).__name__} ({value!r})"
            )

    for w in warnings:
        logger.warning("Config validation: %s", w)
    if not warnings:
        logger.debug("Config validation passed")
    return warnings


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3

    @classmethod
    def from_dict(cls, config: dict) -> "LoggingConfig":
        return cls(
            level=config.get("level", "INFO"),
            file=config.get("file"),
            max_size_mb=config.get("max_size_mb", 10),
            backup_count=config.get("backup_count", 3),
        )


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    recognizer: RecognizerConfig = field(default_factory=RecognizerConfig)
    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    visualization: VisualizerConfig = field(default_factory=VisualizerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    performance_target_fps: float = 25.0
    performance_target_latency: float = 40.0

    @classmethod
    def from_dict(cls, config_dict: dict) -> "AppConfig":
        """Create AppConfig from configuration dictionary."""
        validate(config_dict)
        performance = _section(config_dict, "performance")
        return cls(
            camera=CameraConfig.from_dict(_section(config_dict, "camera")),
            recognizer=RecognizerConfig.from_dict(_section(config_dict, "recognizer")),
            recognition=RecognitionConfig.from_dict(_section(config_dict, "recognition")),
            interaction=InteractionConfig.from_dict(_section(config_dict, "interaction")),
            scheduler=SchedulerConfig.from_dict(_section(config_dict, "scheduler")),
            visualization=VisualizerConfig.from_dict(_section(config_dict, "visualization")),
            logging=LoggingConfig.from_dict(_section(config_dict, "logging")),
            performance_target_fps=performance.get("target_fps", 25.0),
            performance_target_latency=performance.get("target_latency_ms", 40.0),
        )


def load_yaml(config_path: str) -> dict:
    """Load a YAML mapping from disk."""
    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping, got {type(data).__name__}")
    return data


def load_config(config_path: Optional[str] = None, overrides: Optional[dict] = None) -> AppConfig:
    """
    Load configuration.

    Args:
        config_path: Explicit YAML path. When given it must exist. When
            omitted, ``config/config.yaml`` is used if present, otherwise
            built-in defaults.
        overrides: Nested dict merged over the file contents

    Raises:
        ConfigError: explicit path missing, unreadable YAML, or not a mapping
    """
    data = {}
    if config_path is not None:
        if not os.path.exists(config_path):
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            data = load_yaml(config_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        logger.info("Loaded config from %s", config_path)
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        data = load_yaml(DEFAULT_CONFIG_PATH)
        logger.info("Loaded config from %s", DEFAULT_CONFIG_PATH)
    else:
        logger.warning("Config file not found: %s, using defaults", DEFAULT_CONFIG_PATH)

    if overrides:
        data = _deep_merge(data, overrides)

    return AppConfig.from_dict(data)
