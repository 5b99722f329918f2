"""
Interaction engine: one HandFrame in, one ControlSignal out.

Per-frame flow:
    HandFrame -> GestureClassifier -> {MotionDeltaTracker, ZoomTracker,
    ModeStateMachine, PinchClickDetector} -> ControlSignal

Losing the hand degrades to a neutral signal (no pointer, no click,
rotation boost frozen, mode unchanged). Nothing here raises on bad input.
"""

import logging
import threading
from typing import Optional

from .events import EventBus, Events
from .state import EngineState
from .types import ControlSignal, FeedbackColor, GestureLabel
from ..control.click_detector import PinchClickDetector
from ..control.mode_machine import InteractionConfig, ModeStateMachine
from ..detection.landmark_adapter import HandFrame
from ..detection.landmarks import LandmarkIndex
from ..recognition.gesture_classifier import GestureClassifier, RecognitionConfig
from ..recognition.motion_tracker import MotionDeltaTracker, ZoomTracker

logger = logging.getLogger(__name__)


class InteractionEngine:
    """
    Landmark-to-control engine.

    At most one frame may be in flight; ``process_frame`` raises
    RuntimeError if called reentrantly from a second driver.

    Example:
        >>> engine = InteractionEngine()
        >>> signal = engine.process_frame(adapt_result(result), now=time.time())
        >>> if signal.clicked:
        ...     open_photo_under(signal.pointer)
    """

    def __init__(
        self,
        state: Optional[EngineState] = None,
        interaction: Optional[InteractionConfig] = None,
        recognition: Optional[RecognitionConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.state = state if state is not None else EngineState()
        self.config = interaction or InteractionConfig()
        self._bus = event_bus

        self.classifier = GestureClassifier(recognition)
        self.motion = MotionDeltaTracker(self.state.baseline, self.config.motion_threshold)
        self.zoom = ZoomTracker(self.state.baseline)
        self.modes = ModeStateMachine(self.state, self.config)
        self.clicks = PinchClickDetector(self.state, self.config.click_cooldown)

        self._busy = threading.Lock()
        self._had_hand = False

    def process_frame(self, frame: Optional[HandFrame], now: float,
                      photo_modal_open: bool = False) -> ControlSignal:
        """
        Process one frame in arrival order.

        Args:
            frame: Adapted recognizer output; None means no hand
            now: Wall-clock time of this frame in seconds
            photo_modal_open: Host overlay is open; mode rules are skipped
                but pointer, motion and clicks still run

        Returns:
            The ControlSignal for this frame
        """
        if not self._busy.acquire(blocking=False):
            raise RuntimeError("process_frame is not reentrant")
        try:
            signal = self._process(frame or HandFrame.empty(), now, photo_modal_open)
            had_hand, self._had_hand = self._had_hand, signal.has_hand
        finally:
            self._busy.release()

        self._publish(signal, had_hand)
        return signal

    def _elapsed(self, now: float) -> float:
        last = self.state.last_frame_time
        self.state.last_frame_time = now
        if last is None:
            return 0.0
        return max(0.0, now - last)

    def _process(self, frame: HandFrame, now: float, photo_modal_open: bool) -> ControlSignal:
        state = self.state
        delta = self._elapsed(now)
        state.frames_processed += 1

        hand = frame.primary
        if hand is None:
            self.motion.update(None)
            self.zoom.update([])
            self.clicks.tick(delta)
            return ControlSignal(
                pointer=None,
                rotation_boost=state.rotation_boost,
                click_event=None,
                mode=state.mode,
                feedback_color=FeedbackColor.IDLE,
                timestamp=now,
            )

        observation = self.classifier.classify(frame.raw_label, frame.raw_score)
        label = observation.label
        pinch = self.classifier.pinch(hand)

        motion = self.motion.update(hand)
        zoom_delta = self.zoom.update(frame.hands)

        decision = self.modes.evaluate(label, motion, suppressed=photo_modal_open)
        click = self.clicks.update(pinch, label, delta, now)

        pointer = None
        if label != GestureLabel.CLOSED_FIST:
            tip = hand.get(LandmarkIndex.INDEX_TIP)
            pointer = (1.0 - tip.x, tip.y)

        if click is not None:
            feedback = FeedbackColor.CLICK_FIRED
        else:
            feedback = decision.feedback or FeedbackColor.IDLE

        logger.debug(
            f"frame={state.frames_processed} label={label.name} conf={observation.confidence:.2f} "
            f"streak={state.streak.count} mode={state.mode.name} boost={state.rotation_boost:.2f}"
        )

        return ControlSignal(
            pointer=pointer,
            rotation_boost=state.rotation_boost,
            click_event=click,
            mode=state.mode,
            feedback_color=feedback,
            motion=motion,
            zoom_delta=zoom_delta,
            hand_count=frame.hand_count,
            mode_changed=decision.transitioned,
            timestamp=now,
        )

    def _publish(self, signal: ControlSignal, had_hand: bool) -> None:
        if self._bus is None:
            return
        if had_hand and not signal.has_hand:
            self._bus.emit(Events.HAND_LOST, timestamp=signal.timestamp)
        if signal.mode_changed:
            self._bus.emit(Events.MODE_CHANGED, mode=signal.mode, timestamp=signal.timestamp)
        if signal.clicked:
            self._bus.emit(Events.CLICK, timestamp=signal.click_event, pointer=signal.pointer)
        self._bus.emit(Events.CONTROL_SIGNAL, signal=signal)

    def reset(self) -> None:
        """Return to a fresh state in place (mode CHAOS, no boost, no baselines)."""
        fresh = EngineState()
        self.state.mode = fresh.mode
        self.state.rotation_boost = fresh.rotation_boost
        self.state.streak.label = None
        self.state.streak.count = 0
        self.state.baseline.clear()
        self.state.click_cooldown = fresh.click_cooldown
        self.state.last_frame_time = None
        self.state.frames_processed = 0
        self._had_hand = False
