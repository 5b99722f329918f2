"""Logging, performance and visualization utilities.

``utils.config`` is imported directly; it depends on the other packages.
"""
from .performance import PerformanceMonitor, Timer

__all__ = ["PerformanceMonitor", "Timer"]
