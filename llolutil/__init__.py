"""Running statistics, timers, numeric helpers and tiny least squares solvers."""

__version__ = "0.1.0"

__all__ = ["stats", "timer", "manager", "numerics", "ocv", "nlls", "solver"]