"""
Performance Monitoring Module
==============================

Rolling FPS, per-stage latency and skipped/over-budget frame counts for
the frame loop.
"""

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Timer:
    """
    High-precision timer for measuring code execution time.

    Can be used as a context manager.

    Example:
        >>> with Timer("recognition") as t:
        ...     recognizer.recognize(rgb, ts)
        >>> print(f"Took {t.elapsed_ms:.2f}ms")
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._elapsed: float = 0.0

    def start(self) -> "Timer":
        """Start the timer."""
        self._start_time = time.perf_counter()
        self._end_time = None
        return self

    def stop(self) -> float:
        """Stop the timer and return elapsed time in seconds."""
        self._end_time = time.perf_counter()
        if self._start_time is not None:
            self._elapsed = self._end_time - self._start_time
        return self._elapsed

    @property
    def elapsed(self) -> float:
        """Get elapsed time in seconds."""
        if self._start_time is None:
            return 0.0
        if self._end_time is None:
            return time.perf_counter() - self._start_time
        return self._elapsed

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


@dataclass
class PerformanceMetrics:
    """Container for performance metrics snapshot."""
    fps: float = 0.0
    frame_time_ms: float = 0.0
    latency_ms: float = 0.0
    capture_time_ms: float = 0.0
    recognition_time_ms: float = 0.0
    engine_time_ms: float = 0.0
    total_frames: int = 0
    over_budget_frames: int = 0
    skipped_frames: int = 0


class PerformanceMonitor:
    """
    Real-time performance monitoring for the frame loop.

    Tracks:
    - FPS (rolling average over processed frames)
    - Per-stage latency (capture, recognition, engine)
    - Frames over the single-frame budget
    - Frames skipped because the source had nothing new

    Example:
        >>> monitor = PerformanceMonitor()
        >>> monitor.start()
        >>> monitor.frame_start()
        >>> with monitor.measure("recognition"):
        ...     result = recognizer.recognize(rgb, ts)
        >>> monitor.frame_complete()
    """

    def __init__(self, window_size: int = 30, target_fps: float = 25.0,
                 target_latency_ms: float = 40.0):
        self.window_size = window_size
        self._frame_times: deque = deque(maxlen=window_size)
        self._stage_times: Dict[str, deque] = {}
        self._frame_start: Optional[float] = None
        self._total_frames: int = 0
        self._over_budget_frames: int = 0
        self._skipped_frames: int = 0
        self._lock = threading.Lock()

        self.target_fps = target_fps
        self.target_latency_ms = target_latency_ms

    def start(self) -> None:
        """Start performance monitoring."""
        with self._lock:
            self._total_frames = 0
            self._over_budget_frames = 0
            self._skipped_frames = 0
            self._frame_times.clear()
            self._stage_times.clear()
        logger.debug("Performance monitor started")

    def stop(self) -> None:
        """Stop performance monitoring."""
        logger.info(f"Performance monitor stopped. "
                    f"Total frames: {self._total_frames}, "
                    f"Over budget: {self._over_budget_frames}, "
                    f"Skipped: {self._skipped_frames}")

    def frame_start(self) -> None:
        """Mark the start of frame processing."""
        self._frame_start = time.perf_counter()

    def frame_complete(self) -> None:
        """Mark frame processing complete and update metrics."""
        if self._frame_start is None:
            return

        frame_time = time.perf_counter() - self._frame_start

        with self._lock:
            self._frame_times.append(frame_time)
            self._total_frames += 1
            if frame_time > (1.0 / self.target_fps):
                self._over_budget_frames += 1

        self._frame_start = None

    def frame_skipped(self) -> None:
        """Count a poll that found no new frame to process."""
        with self._lock:
            self._skipped_frames += 1

    @contextmanager
    def measure(self, stage: str):
        """
        Context manager to measure a processing stage.

        Args:
            stage: Name of the stage (e.g., "capture", "recognition")
        """
        timer = Timer(stage).start()
        try:
            yield
        finally:
            elapsed = timer.stop()
            with self._lock:
                if stage not in self._stage_times:
                    self._stage_times[stage] = deque(maxlen=self.window_size)
                self._stage_times[stage].append(elapsed)

    @property
    def fps(self) -> float:
        with self._lock:
            if not self._frame_times:
                return 0.0
            avg_frame_time = sum(self._frame_times) / len(self._frame_times)
            return 1.0 / avg_frame_time if avg_frame_time > 0 else 0.0

    @property
    def frame_time_ms(self) -> float:
        with self._lock:
            if not self._frame_times:
                return 0.0
            return (sum(self._frame_times) / len(self._frame_times)) * 1000

    def stage_time_ms(self, stage: str) -> float:
        """Get average time for a specific stage in milliseconds."""
        with self._lock:
            if stage not in self._stage_times or not self._stage_times[stage]:
                return 0.0
            times = self._stage_times[stage]
            return (sum(times) / len(times)) * 1000

    @property
    def total_latency_ms(self) -> float:
        return self.frame_time_ms

    @property
    def is_meeting_targets(self) -> bool:
        return (self.fps >= self.target_fps and
                self.total_latency_ms <= self.target_latency_ms)

    def get_metrics(self) -> PerformanceMetrics:
        """Get current performance metrics snapshot."""
        return PerformanceMetrics(
            fps=self.fps,
            frame_time_ms=self.frame_time_ms,
            latency_ms=self.total_latency_ms,
            capture_time_ms=self.stage_time_ms("capture"),
            recognition_time_ms=self.stage_time_ms("recognition"),
            engine_time_ms=self.stage_time_ms("engine"),
            total_frames=self._total_frames,
            over_budget_frames=self._over_budget_frames,
            skipped_frames=self._skipped_frames,
        )

    def get_report(self) -> str:
        """Get formatted performance report string."""
        metrics = self.get_metrics()

        status = "OK" if self.is_meeting_targets else "BELOW TARGET"

        return (
            f"Performance Report [{status}]\n"
            f"{'=' * 40}\n"
            f"FPS: {metrics.fps:.1f} (target: >={self.target_fps})\n"
            f"Total Latency: {metrics.latency_ms:.1f}ms (target: <={self.target_latency_ms}ms)\n"
            f"\nPer-Stage Breakdown:\n"
            f"  Capture: {metrics.capture_time_ms:.2f}ms\n"
            f"  Recognition: {metrics.recognition_time_ms:.2f}ms\n"
            f"  Engine: {metrics.engine_time_ms:.2f}ms\n"
            f"\nFrame Stats:\n"
            f"  Processed: {metrics.total_frames}\n"
            f"  Over budget: {metrics.over_budget_frames} "
            f"({100 * metrics.over_budget_frames / max(1, metrics.total_frames):.1f}%)\n"
            f"  Skipped (no new frame): {metrics.skipped_frames}\n"
        )
