# timetable_engine/utils/logging.py

"""
Structured logging utilities for the timetable engine: phase-aware log
entries, operation timing and annealing progress tracking.
"""

import logging
import json
import time
from datetime import datetime
from typing import Dict, Any, List, Optional, Tuple, Union
from enum import Enum
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading
from collections import defaultdict, deque
import statistics


class LogLevel(Enum):
    """Log levels for scheduling operations"""

    TRACE = "TRACE"  # Detailed execution traces
    DEBUG = "DEBUG"
    INFO = "INFO"
    NOTICE = "NOTICE"  # Notable events
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @property
    def python_level(self) -> int:
        return _PYTHON_LEVELS[self]


_PYTHON_LEVELS = {
    LogLevel.TRACE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


class SchedulingPhase(Enum):
    """Phases of a scheduling run for context logging"""

    DATA_PREPARATION = "data_preparation"
    INITIAL_SOLUTION = "initial_solution"
    PLACEMENT = "placement"
    ANNEALING = "annealing"
    VALIDATION = "validation"
    SUBSTITUTION = "substitution"
    FINALIZATION = "finalization"


@dataclass
class LogEntry:
    """Structured log entry for scheduling operations"""

    timestamp: datetime
    level: LogLevel
    phase: Optional[SchedulingPhase]
    component: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    performance_metrics: Dict[str, Union[int, float]] = field(default_factory=dict)
    run_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary for JSON serialization"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "phase": self.phase.value if self.phase else None,
            "component": self.component,
            "message": self.message,
            "context": self.context,
            "performance_metrics": self.performance_metrics,
            "run_id": self.run_id,
        }


@dataclass
class AnnealingLogMetrics:
    """One temperature level of a simulated annealing run"""

    temperature: float = 0.0
    current_energy: int = 0
    best_energy: int = 0
    accepted_moves: int = 0
    rejected_moves: int = 0
    iterations_without_improvement: int = 0

    @property
    def acceptance_rate(self) -> float:
        total = self.accepted_moves + self.rejected_moves
        return self.accepted_moves / total if total else 0.0


class SchedulingLogger:
    """
    Logger for scheduling runs with structured entries, phase timing and
    annealing progress history.
    """

    def __init__(
        self,
        name: str = "timetable_engine",
        level: LogLevel = LogLevel.INFO,
        run_id: Optional[str] = None,
        max_log_entries: int = 10000,
        max_annealing_steps: int = 10000,
    ):
        self.name = name
        self.level = level
        self.run_id = run_id

        self._setup_python_logger()

        # Performance tracking, phase starts keyed by (thread id, phase)
        self._phase_timers: Dict[Tuple[int, SchedulingPhase], float] = {}
        self._operation_timers: Dict[str, List[float]] = defaultdict(list)
        self._performance_counters: Dict[str, int] = defaultdict(int)

        # Log storage for analysis
        self._log_entries: deque = deque(maxlen=max_log_entries)
        self._annealing_metrics: deque = deque(maxlen=max_annealing_steps)

        # Thread safety
        self._lock = threading.Lock()

    def _setup_python_logger(self):
        """Setup the underlying Python logger with a structured console handler"""
        self._logger = logging.getLogger(self.name)
        self._logger.setLevel(self.level.python_level)

        if not self._logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(self.level.python_level)
            console_handler.setFormatter(StructuredFormatter())
            self._logger.addHandler(console_handler)

    def _log(
        self,
        level: LogLevel,
        message: str,
        phase: Optional[SchedulingPhase] = None,
        component: str = "core",
        context: Optional[Dict[str, Any]] = None,
        performance_metrics: Optional[Dict[str, Union[int, float]]] = None,
    ):
        """Core logging method with structured data"""
        with self._lock:
            entry = LogEntry(
                timestamp=datetime.now(),
                level=level,
                phase=phase,
                component=component,
                message=message,
                context=context or {},
                performance_metrics=performance_metrics or {},
                run_id=self.run_id,
            )
            self._log_entries.append(entry)

            self._logger.log(
                level.python_level, json.dumps(entry.to_dict(), default=str)
            )

    def trace(self, message: str, **kwargs):
        self._log(LogLevel.TRACE, message, **kwargs)

    def debug(self, message: str, **kwargs):
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(LogLevel.INFO, message, **kwargs)

    def notice(self, message: str, **kwargs):
        self._log(LogLevel.NOTICE, message, **kwargs)

    def warn(self, message: str, **kwargs):
        self._log(LogLevel.WARN, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(LogLevel.ERROR, message, **kwargs)

    def fatal(self, message: str, **kwargs):
        self._log(LogLevel.FATAL, message, **kwargs)

    # Phase-aware logging methods
    def log_phase_start(
        self, phase: SchedulingPhase, context: Optional[Dict[str, Any]] = None
    ):
        with self._lock:
            self._phase_timers[(threading.get_ident(), phase)] = time.time()
        self.debug(f"Starting {phase.value} phase", phase=phase, context=context or {})

    def log_phase_end(
        self, phase: SchedulingPhase, context: Optional[Dict[str, Any]] = None
    ):
        with self._lock:
            started = self._phase_timers.pop((threading.get_ident(), phase), None)
        if started is not None:
            duration = time.time() - started
            self.debug(
                f"Completed {phase.value} phase",
                phase=phase,
                context=context or {},
                performance_metrics={"duration_seconds": duration},
            )
        else:
            self.warn(f"Phase {phase.value} ended without corresponding start")

    @contextmanager
    def phase_context(
        self, phase: SchedulingPhase, context: Optional[Dict[str, Any]] = None
    ):
        """Context manager for automatic phase timing"""
        self.log_phase_start(phase, context)
        try:
            yield
        finally:
            self.log_phase_end(phase, context)

    @contextmanager
    def operation_timer(self, operation_name: str):
        """Context manager for timing specific operations"""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            with self._lock:
                self._operation_timers[operation_name].append(duration)

            self.trace(
                f"Operation {operation_name} completed",
                performance_metrics={"duration_seconds": duration},
            )

    def increment_counter(self, counter_name: str, value: int = 1):
        with self._lock:
            self._performance_counters[counter_name] += value

    def get_counter(self, counter_name: str) -> int:
        with self._lock:
            return self._performance_counters.get(counter_name, 0)

    # Engine specific logging methods
    def log_unscheduled(self, warning: str, component: str = "greedy"):
        self.increment_counter("unscheduled_instances")
        self.warn(warning, phase=SchedulingPhase.PLACEMENT, component=component)

    def start_annealing_run(self):
        """Forget the temperature steps of earlier annealing runs"""
        with self._lock:
            self._annealing_metrics.clear()

    def log_temperature_step(self, metrics: AnnealingLogMetrics):
        """Record the state of the search at the end of a temperature level"""
        with self._lock:
            self._annealing_metrics.append(metrics)

        self.debug(
            f"Temperature {metrics.temperature:.4f} completed",
            phase=SchedulingPhase.ANNEALING,
            component="annealing",
            context={
                "iterations_without_improvement": metrics.iterations_without_improvement,
            },
            performance_metrics={
                "current_energy": metrics.current_energy,
                "best_energy": metrics.best_energy,
                "acceptance_rate": round(metrics.acceptance_rate, 4),
            },
        )

    def log_constraint_violations(self, violations: List[Dict[str, Any]]):
        """Log constraint violations found during validation"""
        if violations:
            self.warn(
                f"Found {len(violations)} constraint violations",
                phase=SchedulingPhase.VALIDATION,
                component="constraint_validator",
                context={"violations": violations},
            )
        else:
            self.info(
                "No constraint violations found",
                phase=SchedulingPhase.VALIDATION,
                component="constraint_validator",
            )

    # Performance analysis methods
    def get_phase_performance_summary(self) -> Dict[str, Any]:
        """Get duration statistics for all completed phases"""
        summary = {}
        phase_durations = defaultdict(list)

        with self._lock:
            for entry in self._log_entries:
                if entry.phase and "duration_seconds" in entry.performance_metrics:
                    phase_durations[entry.phase].append(
                        entry.performance_metrics["duration_seconds"]
                    )

        for phase, durations in phase_durations.items():
            summary[phase.value] = {
                "total_time": sum(durations),
                "average_time": statistics.mean(durations),
                "count": len(durations),
            }

        return summary

    def get_operation_performance_summary(self) -> Dict[str, Any]:
        summary = {}

        with self._lock:
            for operation, durations in self._operation_timers.items():
                if durations:
                    summary[operation] = {
                        "total_time": sum(durations),
                        "average_time": statistics.mean(durations),
                        "min_time": min(durations),
                        "max_time": max(durations),
                        "count": len(durations),
                    }

        return summary

    def get_annealing_summary(self) -> Dict[str, Any]:
        with self._lock:
            history = list(self._annealing_metrics)

        if not history:
            return {}

        return {
            "temperature_steps": len(history),
            "final_temperature": history[-1].temperature,
            "initial_energy": history[0].current_energy,
            "best_energy": min(m.best_energy for m in history),
            "average_acceptance_rate": statistics.mean(
                m.acceptance_rate for m in history
            ),
        }

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._log_entries)

    def clear_logs(self):
        with self._lock:
            self._log_entries.clear()
            self._annealing_metrics.clear()
            self._operation_timers.clear()
            self._performance_counters.clear()
            self._phase_timers.clear()


class StructuredFormatter(logging.Formatter):
    """Render JSON log entries as a single readable line"""

    def format(self, record):
        try:
            log_data = json.loads(record.getMessage())

            parts = [
                f"[{log_data.get('timestamp', '')}]",
                f"[{log_data.get('level', 'INFO')}]",
            ]
            if log_data.get("phase"):
                parts.append(f"[{log_data['phase']}]")
            if log_data.get("component"):
                parts.append(f"[{log_data['component']}]")

            parts.append(log_data.get("message", ""))

            perf_metrics = log_data.get("performance_metrics", {})
            if perf_metrics:
                metrics_str = " | ".join(f"{k}={v}" for k, v in perf_metrics.items())
                parts.append(f"| {metrics_str}")

            return " ".join(parts)

        except (json.JSONDecodeError, AttributeError):
            return super().format(record)


# Global logger instance
_default_logger: Optional[SchedulingLogger] = None


def get_logger(
    name: str = "timetable_engine", run_id: Optional[str] = None
) -> SchedulingLogger:
    """Get or create the shared scheduling logger"""
    global _default_logger

    if _default_logger is None or _default_logger.name != name:
        _default_logger = SchedulingLogger(name=name, run_id=run_id)

    return _default_logger


def setup_logging(level: LogLevel = LogLevel.INFO, name: str = "timetable_engine"):
    """Replace the shared scheduling logger"""
    global _default_logger
    _default_logger = SchedulingLogger(name=name, level=level)
    return _default_logger


def log_operation(operation_name: str, logger: Optional[SchedulingLogger] = None):
    """Decorator to automatically log and time function operations"""

    def decorator(func):
        def wrapper(*args, **kwargs):
            log = logger or get_logger()
            with log.operation_timer(operation_name):
                return func(*args, **kwargs)

        return wrapper

    return decorator
