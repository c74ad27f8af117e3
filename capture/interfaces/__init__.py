"""
Capture Interfaces Package

Exposes abstract interfaces and exceptions for capture components.
"""

from capture.interfaces.capture_platform_interface import (
    AccessDeniedError,
    CaptureError,
    CapturePlatformInterface,
    DeviceBusyError,
    DeviceNotFoundError,
    DeviceUnavailableError,
    NoVideoTrackError,
    ProbeTimeoutError,
    RecorderInitError,
    RecorderInterface,
    StreamInterface,
)
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface

# Public API
__all__ = [
    # Exceptions
    "AccessDeniedError",
    "CaptureError",
    "DeviceBusyError",
    "DeviceNotFoundError",
    "DeviceUnavailableError",
    "NoVideoTrackError",
    "ProbeTimeoutError",
    "RecorderInitError",
    # Interfaces
    "CapturePlatformInterface",
    "RecorderInterface",
    "RenderingSurfaceInterface",
    "StreamInterface",
]
