"""Data generation, validation and conversion helpers."""

from .mock_data import MockDataGenerator, DataValidator
from .frames import bars_to_frame, frame_to_bars

__all__ = ['MockDataGenerator', 'DataValidator', 'bars_to_frame', 'frame_to_bars']
