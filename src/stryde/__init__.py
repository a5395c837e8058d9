"""stryde: calibrated stride length, live GPS tracking and activity insights."""

__version__ = "0.1.0"
