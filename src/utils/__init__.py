"""Utility functions for Block Sudoku."""
from .logger import Logger, MetricsTracker, convert_to_serializable

__all__ = [
    "Logger",
    "MetricsTracker",
    "convert_to_serializable",
]
