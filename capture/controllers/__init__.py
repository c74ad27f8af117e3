"""
Capture Controllers Package

High-level controllers that orchestrate the capture session.
"""

from capture.controllers.capture_resource_manager import CaptureResourceManager
from capture.controllers.device_registry import DeviceRegistry
from capture.controllers.permission_resolver import PermissionResolver
from capture.controllers.recording_timer import RecordingTimer
from capture.controllers.session_state_machine import SessionStateMachine

# Public API
__all__ = [
    "CaptureResourceManager",
    "DeviceRegistry",
    "PermissionResolver",
    "RecordingTimer",
    "SessionStateMachine",
]
