"""
Tests for Performance Module
=============================
"""

import pytest
import time

from touchless_surface.utils.performance import PerformanceMonitor, Timer


class TestTimer:
    """Test suite for Timer class."""

    def test_basic_timing(self):
        timer = Timer("test")
        timer.start()
        time.sleep(0.1)
        elapsed = timer.stop()

        assert elapsed >= 0.09
        assert elapsed < 0.5

    def test_context_manager(self):
        with Timer("test") as t:
            time.sleep(0.05)

        assert t.elapsed >= 0.04
        assert t.elapsed_ms >= 40

    def test_elapsed_without_stop(self):
        timer = Timer("test")
        timer.start()
        time.sleep(0.05)

        assert timer.elapsed >= 0.04


class TestPerformanceMonitor:
    """Test suite for PerformanceMonitor class."""

    @pytest.fixture
    def monitor(self):
        mon = PerformanceMonitor(window_size=5)
        mon.start()
        return mon

    def test_fps_calculation(self, monitor):
        for _ in range(10):
            monitor.frame_start()
            time.sleep(0.02)
            monitor.frame_complete()

        assert 10 < monitor.fps < 55

    def test_stage_timing(self, monitor):
        for _ in range(5):
            monitor.frame_start()

            with monitor.measure("capture"):
                time.sleep(0.002)

            with monitor.measure("recognition"):
                time.sleep(0.010)

            monitor.frame_complete()

        assert monitor.stage_time_ms("capture") >= 1.5
        assert monitor.stage_time_ms("recognition") > monitor.stage_time_ms("capture")
        assert monitor.stage_time_ms("engine") == 0.0

    def test_stage_recorded_when_stage_raises(self, monitor):
        with pytest.raises(RuntimeError):
            with monitor.measure("recognition"):
                time.sleep(0.002)
                raise RuntimeError("inference failed")

        assert monitor.stage_time_ms("recognition") >= 1.5

    def test_skipped_frames(self, monitor):
        monitor.frame_skipped()
        monitor.frame_skipped()

        metrics = monitor.get_metrics()

        assert metrics.skipped_frames == 2
        assert metrics.total_frames == 0

    def test_over_budget(self):
        monitor = PerformanceMonitor(target_fps=100.0)
        monitor.start()

        monitor.frame_start()
        time.sleep(0.02)  # 20ms > 10ms budget
        monitor.frame_complete()

        assert monitor.get_metrics().over_budget_frames == 1
        assert not monitor.is_meeting_targets

    def test_complete_without_start_ignored(self, monitor):
        monitor.frame_complete()

        assert monitor.get_metrics().total_frames == 0

    def test_start_resets(self, monitor):
        monitor.frame_start()
        monitor.frame_complete()
        monitor.frame_skipped()

        monitor.start()
        metrics = monitor.get_metrics()

        assert metrics.total_frames == 0
        assert metrics.skipped_frames == 0
        assert monitor.fps == 0.0

    def test_report_generation(self, monitor):
        monitor.frame_start()
        monitor.frame_complete()

        report = monitor.get_report()

        assert "FPS" in report
        assert "Latency" in report
        assert "Skipped" in report


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
