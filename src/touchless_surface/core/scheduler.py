"""
Frame Scheduler
================

Single-threaded cooperative polling loop:

    source.read() -> recognizer.recognize() -> adapt_result()
    -> engine.process_frame() -> on_signal / EventBus

A frame whose presentation timestamp equals the last processed one is
skipped. Recognition is a blocking call with no timeout; its latency sets
the loop rate. ``stop()`` is checked once per iteration and the source is
released on the way out of ``run()``, whatever the exit path.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .engine import InteractionEngine
from .events import EventBus, Events
from .types import ControlSignal
from ..detection.landmark_adapter import HandFrame, adapt_result
from ..utils.performance import PerformanceMonitor

logger = logging.getLogger(__name__)


@dataclass
class SchedulerConfig:
    """Polling loop settings."""
    # Wait between polls when the source has no new frame
    idle_wait_s: float = 0.002
    # Log a performance summary every N processed frames (0 disables)
    report_interval: int = 0

    @classmethod
    def from_dict(cls, config: dict) -> "SchedulerConfig":
        """Create config from dictionary."""
        return cls(
            idle_wait_s=config.get("idle_wait_s", 0.002),
            report_interval=config.get("report_interval", 0),
        )


class FrameScheduler:
    """
    Drives the interaction engine once per new video frame.

    Args:
        source: Object with ``read() -> Frame | None`` and ``stop()``
        recognizer: Object with ``recognize(rgb, timestamp_ms)``
        engine: The InteractionEngine to feed
        photo_modal_open: Host callback read once per frame
        on_signal: Called synchronously with (frame, hand_frame, signal)

    Example:
        >>> scheduler = FrameScheduler(camera, recognizer, engine, on_signal=render)
        >>> signal.signal(signal.SIGINT, lambda *_: scheduler.stop())
        >>> scheduler.run()
    """

    def __init__(
        self,
        source: Any,
        recognizer: Any,
        engine: InteractionEngine,
        config: Optional[SchedulerConfig] = None,
        photo_modal_open: Optional[Callable[[], bool]] = None,
        on_signal: Optional[Callable[[Any, HandFrame, ControlSignal], None]] = None,
        performance: Optional[PerformanceMonitor] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._source = source
        self._recognizer = recognizer
        self._engine = engine
        self.config = config or SchedulerConfig()
        self._photo_modal_open = photo_modal_open or (lambda: False)
        self._on_signal = on_signal
        self.performance = performance or PerformanceMonitor()
        self._bus = event_bus
        self._clock = clock

        self._stop_event = threading.Event()
        self._running = False
        self._last_presentation_time: Optional[float] = None
        self._processed = 0
        self._skipped = 0
        self._failures = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def processed_frames(self) -> int:
        return self._processed

    @property
    def skipped_frames(self) -> int:
        return self._skipped

    @property
    def recognition_failures(self) -> int:
        return self._failures

    def stop(self) -> None:
        """Request cancellation; the loop exits before the next frame."""
        self._stop_event.set()

    def step(self) -> Optional[ControlSignal]:
        """
        Poll the source once and process the frame if it is new.

        Returns:
            ControlSignal, or None when there was no new frame
        """
        with self.performance.measure("capture"):
            frame = self._source.read()

        if frame is None:
            return None

        if frame.presentation_time == self._last_presentation_time:
            self._skipped += 1
            self.performance.frame_skipped()
            if self._bus is not None:
                self._bus.emit(Events.FRAME_SKIPPED, presentation_time=frame.presentation_time)
            return None
        self._last_presentation_time = frame.presentation_time

        self.performance.frame_start()

        with self.performance.measure("recognition"):
            hand_frame = self._recognize(frame)

        with self.performance.measure("engine"):
            signal = self._engine.process_frame(
                hand_frame,
                now=self._clock(),
                photo_modal_open=bool(self._photo_modal_open()),
            )

        self.performance.frame_complete()
        self._processed += 1

        if self._on_signal is not None:
            self._on_signal(frame, hand_frame, signal)

        interval = self.config.report_interval
        if interval and self._processed % interval == 0:
            logger.info(f"{self._processed} frames, {self.performance.fps:.1f} FPS, "
                        f"{self.performance.total_latency_ms:.1f}ms latency, "
                        f"{self._skipped} skipped")
        return signal

    def _recognize(self, frame: Any) -> HandFrame:
        try:
            result = self._recognizer.recognize(frame.rgb, int(frame.timestamp * 1000))
        except Exception as e:
            self._failures += 1
            if self._failures == 1:
                logger.warning(f"Recognition failed, treating frame as empty: {e}")
            else:
                logger.debug(f"Recognition failed ({self._failures} total): {e}")
            if self._bus is not None:
                self._bus.emit(Events.RECOGNITION_FAILED, error=e)
            return HandFrame.empty()
        return adapt_result(result)

    def run(self, max_frames: Optional[int] = None) -> int:
        """
        Run until ``stop()`` is called or ``max_frames`` frames are processed.

        Returns:
            Number of frames processed
        """
        self._running = True
        self.performance.start()
        if self._bus is not None:
            self._bus.emit(Events.ENGINE_STARTED)
        logger.info("Frame loop started")

        try:
            while not self._stop_event.is_set():
                if max_frames is not None and self._processed >= max_frames:
                    break
                if self.step() is None:
                    self._stop_event.wait(self.config.idle_wait_s)
        finally:
            self._running = False
            self._source.stop()
            self.performance.stop()
            if self._bus is not None:
                self._bus.emit(Events.ENGINE_STOPPED)
            logger.info(f"Frame loop stopped after {self._processed} frames "
                        f"({self._skipped} skipped)")

        return self._processed
