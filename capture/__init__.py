"""
Capture Module

Single-session video capture: permission probe, camera selection,
time-boxed recording into memory, review and camera switching.

Provides automatic detection and graceful fallback between the real
V4L2/FFmpeg platform and a mock platform for testing.

Public API:
    - SessionStateMachine: The session orchestrator
    - CaptureFactory: Factory for creating capture platforms
    - create_platform: Quick platform creation with auto-detection
    - SessionState / PermissionState: State enumerations
    - CaptureError: Base exception

Usage:
    from capture import SessionStateMachine, create_platform

    session = SessionStateMachine(create_platform())
    await session.initialize()
    await session.start_recording()
    # ... countdown auto-stops at 00:00 ...
    print(session.clip.size_bytes)
"""

from capture.constants import PermissionFailure, PermissionState, SessionState
from capture.models import Clip, DeviceDescriptor, PermissionResult
from capture.interfaces.capture_platform_interface import (
    CaptureError,
    CapturePlatformInterface,
)
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface
from capture.controllers.session_state_machine import SessionStateMachine
from capture.factory import CaptureFactory, create_platform
from capture.utils.capture_utils import format_countdown

__all__ = [
    "CaptureError",
    "CaptureFactory",
    "CapturePlatformInterface",
    "Clip",
    "DeviceDescriptor",
    "PermissionFailure",
    "PermissionResult",
    "PermissionState",
    "RenderingSurfaceInterface",
    "SessionState",
    "SessionStateMachine",
    "create_platform",
    "format_countdown",
]
