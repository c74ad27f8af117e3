"""
Capture Test Configuration and Fixtures

Shared fixtures for capture module tests.
"""

import pytest

from capture.constants import DeviceKind
from capture.controllers.capture_resource_manager import CaptureResourceManager
from capture.controllers.device_registry import DeviceRegistry
from capture.controllers.permission_resolver import PermissionResolver
from capture.controllers.session_state_machine import SessionStateMachine
from capture.implementations.mock_platform import MockCapturePlatform
from capture.implementations.mock_surface import MockSurface
from capture.models import DeviceDescriptor

CAMERA_A = DeviceDescriptor("cam-a", "Camera A", DeviceKind.VIDEO_INPUT)
CAMERA_B = DeviceDescriptor("cam-b", "Camera B", DeviceKind.VIDEO_INPUT)
MICROPHONE = DeviceDescriptor("mic-0", "Microphone", DeviceKind.AUDIO_INPUT)

# =============================================================================
# PLATFORM FIXTURES
# =============================================================================


@pytest.fixture
def mock_platform():
    """
    Provide MockCapturePlatform with one camera and one microphone.

    Usage:
        async def test_access(mock_platform):
            stream = await mock_platform.request_access(MediaConstraints())
    """
    platform = MockCapturePlatform()
    yield platform
    platform.cleanup()


@pytest.fixture
def two_camera_platform():
    """
    Provide MockCapturePlatform with cameras A and B.

    For camera switching tests.
    """
    platform = MockCapturePlatform(devices=[CAMERA_A, MICROPHONE, CAMERA_B])
    yield platform
    platform.cleanup()


@pytest.fixture
def mock_surface():
    """Provide a MockSurface that records what would have been displayed"""
    return MockSurface()


# =============================================================================
# CONTROLLER FIXTURES
# =============================================================================


@pytest.fixture
def registry():
    """Provide an empty DeviceRegistry"""
    return DeviceRegistry()


@pytest.fixture
def resolver(mock_platform, registry):
    """
    Provide PermissionResolver with a short probe timeout.

    Usage:
        async def test_probe(resolver):
            result = await resolver.resolve()
    """
    return PermissionResolver(mock_platform, registry, timeout=0.2)


@pytest.fixture
def resource_manager(mock_platform, mock_surface):
    """Provide CaptureResourceManager bound to the mock platform and surface"""
    manager = CaptureResourceManager(mock_platform, mock_surface)
    yield manager
    manager.cleanup()


# =============================================================================
# SESSION FIXTURES
# =============================================================================


def _make_session(platform, surface, **kwargs):
    options = {
        "max_clip_seconds": 3,
        "probe_timeout": 0.2,
        "live_preview": False,
        "auto_tick": False,
    }
    options.update(kwargs)
    return SessionStateMachine(platform, surface, **options)


@pytest.fixture
def session(mock_platform, mock_surface):
    """
    Provide SessionStateMachine driven by manual ticks (no preview).

    Usage:
        async def test_session(session):
            await session.initialize()
            await session.start_recording()
            await session.handle_tick()
    """
    machine = _make_session(mock_platform, mock_surface)
    yield machine
    machine.dispose()


@pytest.fixture
def preview_session(mock_platform, mock_surface):
    """Provide SessionStateMachine that keeps a live preview while READY"""
    machine = _make_session(mock_platform, mock_surface, live_preview=True)
    yield machine
    machine.dispose()


@pytest.fixture
def switch_session(two_camera_platform, mock_surface):
    """Provide SessionStateMachine with two cameras and live preview"""
    machine = _make_session(two_camera_platform, mock_surface, live_preview=True)
    yield machine
    machine.dispose()


# =============================================================================
# CALLBACK TRACKING FIXTURES
# =============================================================================


@pytest.fixture
def callback_tracker():
    """
    Provide helper for tracking callback calls.

    Usage:
        def test_callback(session, callback_tracker):
            session.on_error = callback_tracker.track
            # ... trigger error ...
            assert callback_tracker.was_called()
    """

    class CallbackTracker:
        def __init__(self):
            self.calls = []

        def track(self, *args, **kwargs):
            """Record a callback invocation"""
            self.calls.append({"args": args, "kwargs": kwargs})

        def was_called(self) -> bool:
            return len(self.calls) > 0

        def get_call_count(self) -> int:
            return len(self.calls)

        def get_last_call(self):
            return self.calls[-1] if self.calls else None

        def reset(self):
            self.calls.clear()

    return CallbackTracker()


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """
    Configure pytest with custom markers for capture tests.
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "unit_integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
