"""Analysis and visualization of simulation runs."""

from brew_control.analyzer.metrics import PerformanceMetrics
from brew_control.analyzer.accuracy import reference_trajectory, substep_error
from brew_control.analyzer.linearization import (
    FirstOrderApproximation,
    linearize,
    pid_transfer_function,
    closed_loop_analysis,
)
from brew_control.analyzer.plots import HistoryPlotter

__all__ = [
    "PerformanceMetrics",
    "reference_trajectory",
    "substep_error",
    "FirstOrderApproximation",
    "linearize",
    "pid_transfer_function",
    "closed_loop_analysis",
    "HistoryPlotter",
]
