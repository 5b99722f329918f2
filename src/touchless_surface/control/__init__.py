"""Mode state machine and pinch click detection."""
from .click_detector import PinchClickDetector
from .mode_machine import InteractionConfig, ModeDecision, ModeStateMachine

__all__ = ["PinchClickDetector", "InteractionConfig", "ModeDecision", "ModeStateMachine"]
