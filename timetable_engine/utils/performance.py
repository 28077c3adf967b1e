# timetable_engine/utils/performance.py

"""
Performance monitoring utilities for the timetable engine.
Wall and CPU timing per operation, counters and gauges, and a memory snapshot
of the running process.
"""

import time
import psutil
import threading
from datetime import datetime
from typing import Dict, List, Any, Optional, Union
from dataclasses import dataclass, field
from collections import defaultdict, deque
from enum import Enum
import statistics
from contextlib import contextmanager


class PerformanceMetricType(Enum):
    TIMING = "timing"
    MEMORY = "memory"
    ALGORITHM = "algorithm"
    QUALITY = "quality"


class SchedulingStage(Enum):
    """Stages of a scheduling run for performance tracking"""

    GREEDY_PLACEMENT = "greedy_placement"
    INITIAL_SOLUTION = "initial_solution"
    ANNEALING = "annealing"
    VALIDATION = "validation"
    SUBSTITUTION = "substitution"


@dataclass
class PerformanceMetric:
    name: str
    value: Union[int, float, str]
    metric_type: PerformanceMetricType
    timestamp: datetime
    stage: Optional[SchedulingStage] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TimingMetrics:
    """Timing measurements for one operation"""

    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    cpu_time: Optional[float] = None
    wall_time: Optional[float] = None

    def finalize(self):
        """Finalize timing measurements"""
        if self.end_time is None:
            self.end_time = time.time()
        self.duration = self.end_time - self.start_time
        self.wall_time = self.duration


@dataclass
class MemoryMetrics:
    rss_mb: float  # Resident Set Size in MB
    vms_mb: float  # Virtual Memory Size in MB
    percent: float


class PerformanceProfiler:
    """
    Collects operation timings, counters and gauges for scheduling runs.
    """

    def __init__(self, name: str = "timetable_performance", max_samples: int = 10000):
        self.name = name

        self._metrics: deque = deque(maxlen=max_samples)
        self._timing_data: Dict[str, List[TimingMetrics]] = defaultdict(list)

        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = defaultdict(float)

        self._lock = threading.Lock()

    def _record_metric(
        self,
        name: str,
        value: Union[int, float, str],
        metric_type: PerformanceMetricType,
        stage: Optional[SchedulingStage] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self._metrics.append(
            PerformanceMetric(
                name=name,
                value=value,
                metric_type=metric_type,
                timestamp=datetime.now(),
                stage=stage,
                metadata=metadata or {},
            )
        )

    def snapshot_memory(self) -> MemoryMetrics:
        """Record the current memory usage of this process"""
        process = psutil.Process()
        memory_info = process.memory_info()
        metrics = MemoryMetrics(
            rss_mb=memory_info.rss / (1024 * 1024),
            vms_mb=memory_info.vms / (1024 * 1024),
            percent=process.memory_percent(),
        )
        with self._lock:
            self._record_metric(
                "memory_rss_mb", metrics.rss_mb, PerformanceMetricType.MEMORY
            )
        return metrics

    @contextmanager
    def time_operation(
        self, operation_name: str, stage: Optional[SchedulingStage] = None
    ):
        """Context manager for timing operations with wall and CPU time"""
        timing = TimingMetrics(start_time=time.time())

        process = psutil.Process()
        start_cpu_times = process.cpu_times()

        try:
            yield timing
        finally:
            timing.finalize()

            end_cpu_times = process.cpu_times()
            timing.cpu_time = (end_cpu_times.user - start_cpu_times.user) + (
                end_cpu_times.system - start_cpu_times.system
            )

            with self._lock:
                self._timing_data[operation_name].append(timing)
                self._record_metric(
                    f"{operation_name}_duration",
                    timing.duration,  # type: ignore
                    PerformanceMetricType.TIMING,
                    stage=stage,
                    metadata={
                        "operation": operation_name,
                        "cpu_time": timing.cpu_time,
                        "wall_time": timing.wall_time,
                    },
                )

    def track_solution_quality(
        self, score: float, hard_violations: int = 0, stage: Optional[SchedulingStage] = None
    ):
        with self._lock:
            self._record_metric(
                "quality_score", score, PerformanceMetricType.QUALITY, stage
            )
            self._record_metric(
                "hard_violations", hard_violations, PerformanceMetricType.QUALITY, stage
            )

    # Counter and gauge methods
    def increment_counter(self, name: str, value: int = 1):
        with self._lock:
            self._counters[name] += value

    def set_gauge(self, name: str, value: float):
        with self._lock:
            self._gauges[name] = value

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        with self._lock:
            return self._gauges.get(name, 0.0)

    def get_timing_analysis(
        self, operation_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get timing statistics per operation"""
        with self._lock:
            if operation_name:
                operations = {operation_name: self._timing_data.get(operation_name, [])}
            else:
                operations = dict(self._timing_data)

        analysis = {}
        for op_name, timing_list in operations.items():
            durations = [t.duration for t in timing_list if t.duration is not None]
            cpu_times = [t.cpu_time for t in timing_list if t.cpu_time is not None]

            if durations:
                analysis[op_name] = {
                    "count": len(durations),
                    "total_duration": sum(durations),
                    "average_duration": statistics.mean(durations),
                    "median_duration": statistics.median(durations),
                    "min_duration": min(durations),
                    "max_duration": max(durations),
                    "total_cpu_time": sum(cpu_times) if cpu_times else 0,
                }

        return analysis

    def generate_performance_report(self) -> Dict[str, Any]:
        return {
            "report_timestamp": datetime.now().isoformat(),
            "profiler_name": self.name,
            "timing_analysis": self.get_timing_analysis(),
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
            "total_metrics_collected": len(self._metrics),
        }

    def reset(self):
        with self._lock:
            self._metrics.clear()
            self._timing_data.clear()
            self._counters.clear()
            self._gauges.clear()


# Global profiler instance
_default_profiler: Optional[PerformanceProfiler] = None


def get_profiler(name: str = "timetable_performance") -> PerformanceProfiler:
    """Get or create a performance profiler instance"""
    global _default_profiler

    if _default_profiler is None or _default_profiler.name != name:
        _default_profiler = PerformanceProfiler(name=name)

    return _default_profiler


def profile_performance(
    operation_name: Optional[str] = None,
    stage: Optional[SchedulingStage] = None,
    profiler: Optional[PerformanceProfiler] = None,
):
    """Decorator to automatically profile function performance"""

    def decorator(func):
        name = operation_name or func.__name__

        def wrapper(*args, **kwargs):
            prof = profiler or get_profiler()
            with prof.time_operation(name, stage):
                return func(*args, **kwargs)

        return wrapper

    return decorator
