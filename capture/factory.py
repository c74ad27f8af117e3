"""
Capture Factory

Chooses the capture platform for a session: the V4L2/FFmpeg platform
when FFmpeg and a camera node are present, the mock platform otherwise
(or when forced, e.g. in tests).
"""

import logging
from typing import Literal

from capture.implementations.ffmpeg_platform import FFmpegCapturePlatform
from capture.implementations.mock_platform import MockCapturePlatform
from capture.interfaces.capture_platform_interface import CapturePlatformInterface

PlatformMode = Literal["auto", "real", "mock"]


class CaptureFactory:
    """
    Factory for creating capture platform implementations.

    Usage:
        # Auto-detect (uses FFmpeg if available, mock otherwise)
        platform = CaptureFactory.create_platform()

        # Force mock mode (useful for testing)
        platform = CaptureFactory.create_platform(mode="mock")

        # Force real capture (raises error if not available)
        platform = CaptureFactory.create_platform(mode="real")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_platform(cls, mode: PlatformMode = "auto") -> CapturePlatformInterface:
        """
        Create a capture platform instance.

        Args:
            mode: "auto" (detect), "real" (force FFmpeg), "mock" (force mock)

        Returns:
            CapturePlatformInterface implementation

        Raises:
            RuntimeError: If mode="real" but FFmpeg or camera not available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Capture Platform")
            return MockCapturePlatform()

        if mode == "real":
            platform = FFmpegCapturePlatform()
            if not platform.is_available():
                raise RuntimeError(
                    "Real capture requested but FFmpeg or camera not available",
                )
            cls._logger.info("Creating FFmpeg Capture Platform (forced)")
            return platform

        # mode == "auto" - try real first, fall back to mock
        platform = FFmpegCapturePlatform()
        if platform.is_available():
            cls._logger.info("Creating FFmpeg Capture Platform (auto-detected)")
            return platform

        cls._logger.warning("FFmpeg or camera not available, using Mock Capture Platform")
        return MockCapturePlatform()


def create_platform(force_mock: bool = False) -> CapturePlatformInterface:
    """
    Quick platform creation.

    Args:
        force_mock: If True, always use mock

    Example:
        platform = create_platform(force_mock=True)
    """
    return CaptureFactory.create_platform(mode="mock" if force_mock else "auto")
