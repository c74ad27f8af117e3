"""
Capture Implementations Package

Exposes concrete implementations of capture interfaces.
"""

from capture.implementations.ffmpeg_platform import FFmpegCapturePlatform
from capture.implementations.logging_surface import LoggingSurface
from capture.implementations.mock_platform import MockCapturePlatform
from capture.implementations.mock_surface import MockSurface

# Public API
__all__ = [
    "FFmpegCapturePlatform",
    "LoggingSurface",
    "MockCapturePlatform",
    "MockSurface",
]
