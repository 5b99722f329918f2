"""
Touchless Surface - Main Application
======================================

Entry point: wires the camera, the MediaPipe gesture recognizer and the
interaction engine into the frame scheduler.
"""

import argparse
import logging
import signal
import sys

import cv2

from .capture.camera import Camera
from .core.engine import InteractionEngine
from .core.events import EventBus, Events
from .core.exceptions import AcquisitionError, ConfigError
from .core.scheduler import FrameScheduler
from .core.types import ControlSignal
from .detection.landmark_adapter import HandFrame
from .utils.config import AppConfig, load_config
from .utils.logger import InteractionLogger, setup_logging
from .utils.performance import PerformanceMonitor
from .utils.visualization import Visualizer

logger = logging.getLogger(__name__)

BENCHMARK_FRAMES = 300


class TouchlessSurfaceApp:
    """
    Main application class.

    Modes:
    - demo: diagnostic window with overlay and keyboard controls
    - headless: no window, signals are only logged
    - benchmark: fixed number of frames, then a performance report
    """

    def __init__(self, config: AppConfig, mode: str = "demo"):
        # MediaPipe is loaded only when an application is built
        from .detection.recognizer import GestureRecognizer

        self.config = config
        self.mode = mode
        self.photo_modal_open = False

        self.bus = EventBus()
        self.camera = Camera(config.camera)
        self.recognizer = GestureRecognizer(config.recognizer)
        self.engine = InteractionEngine(
            interaction=config.interaction,
            recognition=config.recognition,
            event_bus=self.bus,
        )
        self.performance = PerformanceMonitor(
            target_fps=config.performance_target_fps,
            target_latency_ms=config.performance_target_latency,
        )
        self.visualizer = Visualizer(config.visualization)
        self.interaction_log = InteractionLogger().attach(self.bus)

        self.scheduler = FrameScheduler(
            source=self.camera,
            recognizer=self.recognizer,
            engine=self.engine,
            config=config.scheduler,
            photo_modal_open=lambda: self.photo_modal_open,
            on_signal=self._on_signal,
            performance=self.performance,
            event_bus=self.bus,
        )

        if mode == "headless":
            self.bus.subscribe(Events.CONTROL_SIGNAL, self._log_signal)

    def start(self) -> None:
        """Acquire the camera and the recognizer.

        Raises:
            AcquisitionError: either collaborator is unavailable. Anything
                already acquired is released before re-raising.
        """
        logger.info("Starting Touchless Surface...")
        try:
            self.recognizer.start()
            self.camera.start()
        except AcquisitionError:
            self.stop()
            raise

    def stop(self) -> None:
        """Release everything. Safe to call more than once."""
        self.scheduler.stop()
        self.camera.stop()
        self.recognizer.stop()
        if self.mode == "demo" and self.config.visualization.enabled:
            cv2.destroyAllWindows()

    def run(self) -> int:
        """Acquire resources, run the frame loop, and always tear down."""
        self.start()

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        max_frames = BENCHMARK_FRAMES if self.mode == "benchmark" else None
        try:
            processed = self.scheduler.run(max_frames=max_frames)
        finally:
            self.stop()

        print(self.performance.get_report())
        logger.info(f"Clicks: {self.interaction_log.total_clicks}, "
                    f"mode changes: {self.interaction_log.total_mode_changes}")
        return processed

    def _on_signal(self, frame, hand_frame: HandFrame, control: ControlSignal) -> None:
        if self.mode != "demo" or not self.config.visualization.enabled:
            return

        display = self.visualizer.render(
            frame.image, hand_frame.hands, control,
            fps=self.performance.fps,
            photo_modal_open=self.photo_modal_open,
        )
        cv2.imshow(self.config.visualization.window_name, display)

        key = cv2.waitKey(1) & 0xFF
        if key == ord("q") or key == 27:
            self.scheduler.stop()
        elif key == ord("p"):
            self.photo_modal_open = not self.photo_modal_open
            logger.info(f"Photo modal {'opened' if self.photo_modal_open else 'closed'}")
        elif key == ord("r"):
            print(self.performance.get_report())

    def _log_signal(self, signal: ControlSignal) -> None:
        pointer = "-" if signal.pointer is None else f"({signal.pointer[0]:.3f}, {signal.pointer[1]:.3f})"
        logger.debug(f"mode={signal.mode.name} pointer={pointer} "
                     f"boost={signal.rotation_boost:+.2f} zoom={signal.zoom_delta}")

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self.scheduler.stop()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Touchless Surface - hand gesture interaction engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  demo      - Diagnostic window with overlay (default)
  headless  - No window; signals logged at DEBUG
  benchmark - Process a fixed number of frames and report

Keyboard Controls (demo):
  q/ESC     - Quit
  p         - Toggle simulated photo modal (locks mode changes)
  r         - Print performance report
        """
    )
    parser.add_argument(
        "--mode", "-m",
        choices=["demo", "headless", "benchmark"],
        default="demo",
        help="Operating mode"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file (default: config/config.yaml)"
    )
    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device ID"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    overrides = {}
    if args.camera is not None:
        overrides["camera"] = {"device_id": args.camera}
    if args.debug:
        overrides["logging"] = {"level": "DEBUG"}

    try:
        config = load_config(args.config, overrides=overrides)
    except ConfigError as e:
        setup_logging()
        logger.error(str(e))
        return 2

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        max_size_mb=config.logging.max_size_mb,
        backup_count=config.logging.backup_count,
    )

    try:
        app = TouchlessSurfaceApp(config, mode=args.mode)
        app.run()
    except AcquisitionError as e:
        logger.error(f"Cannot start: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
