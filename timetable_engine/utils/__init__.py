# timetable_engine/utils/__init__.py

"""
Utilities package for the timetable engine.
Provides structured logging and performance monitoring.
"""

from .logging import (
    SchedulingLogger,
    LogLevel,
    SchedulingPhase,
    LogEntry,
    AnnealingLogMetrics,
    StructuredFormatter,
    get_logger,
    setup_logging,
    log_operation,
)

from .performance import (
    PerformanceProfiler,
    PerformanceMetricType,
    SchedulingStage,
    PerformanceMetric,
    TimingMetrics,
    MemoryMetrics,
    get_profiler,
    profile_performance,
)

__all__ = [
    # Logging utilities
    "SchedulingLogger",
    "LogLevel",
    "SchedulingPhase",
    "LogEntry",
    "AnnealingLogMetrics",
    "StructuredFormatter",
    "get_logger",
    "setup_logging",
    "log_operation",
    # Performance utilities
    "PerformanceProfiler",
    "PerformanceMetricType",
    "SchedulingStage",
    "PerformanceMetric",
    "TimingMetrics",
    "MemoryMetrics",
    "get_profiler",
    "profile_performance",
]
