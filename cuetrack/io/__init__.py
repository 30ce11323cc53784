"""
IO module - Replay data loading and saving utilities

Provides:
- CSV reading/writing of observation and track tables with dataclasses
"""

from .csv_handler import (
    CSVWriter,
    CSVReader,
    ObservationRow,
    TrackRow,
)

__all__ = [
    "CSVWriter",
    "CSVReader",
    "ObservationRow",
    "TrackRow",
]
