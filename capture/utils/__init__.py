"""
Capture Utilities Package

Exposes shared utility functions for capture operations.
"""

from capture.utils.capture_utils import (
    build_constraints,
    discover_audio_devices,
    discover_video_devices,
    format_countdown,
    validate_camera_device,
)

# Public API
__all__ = [
    "build_constraints",
    "discover_audio_devices",
    "discover_video_devices",
    "format_countdown",
    "validate_camera_device",
]
