"""
Capture Service Tests

Tests for the service entry point showing:
- Operator command dispatch
- Control file polling
- Shutdown releasing every stream

To run:
    pytest tests/capture/test_capture_service.py -v
"""

import pytest

from capture.constants import SessionState
from capture.implementations.mock_platform import MockCapturePlatform
from capture.implementations.mock_surface import MockSurface
from capture_service import CaptureService


@pytest.fixture
def service(tmp_path):
    """CaptureService on the mock platform with a temporary control file"""
    svc = CaptureService(
        platform=MockCapturePlatform(),
        surface=MockSurface(),
        control_file=str(tmp_path / "control.cmd"),
    )
    svc.session.live_preview = False
    yield svc
    svc.session.dispose()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_and_stop_commands(service):
    """Test START then STOP produces a clip for review."""
    await service.session.initialize()

    assert await service.process_command("START") is True
    assert service.session.state is SessionState.RECORDING
    assert await service.process_command("STOP") is True
    assert service.session.state is SessionState.REVIEWING


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reset_command(service):
    """Test RESET returns from review to READY."""
    await service.session.initialize()
    await service.process_command("START")
    await service.process_command("STOP")

    assert await service.process_command("RESET") is True
    assert service.session.state is SessionState.READY


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retry_command_when_ready(service):
    """Test RETRY is refused unless permission was denied."""
    await service.session.initialize()

    assert await service.process_command("RETRY") is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_status_and_unknown_commands(service):
    """Test STATUS is accepted and unknown commands are not."""
    await service.session.initialize()

    assert await service.process_command("STATUS") is True
    assert await service.process_command("REWIND") is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_control_file_is_consumed(service):
    """Test the control file is read once and deleted."""
    await service.session.initialize()
    service.control_file.write_text("start\n")

    await service._check_control_commands()

    assert not service.control_file.exists()
    assert service.session.state is SessionState.RECORDING


@pytest.mark.unit
@pytest.mark.asyncio
async def test_no_control_file(service):
    """Test polling without a command does nothing."""
    await service.session.initialize()

    await service._check_control_commands()

    assert service.session.state is SessionState.READY


@pytest.mark.unit
@pytest.mark.asyncio
async def test_shutdown_releases_streams(service):
    """Test shutdown mid-recording leaves no stream open."""
    await service.session.initialize()
    await service.process_command("START")

    service._shutdown()

    assert service.platform.open_streams() == []
    assert service.session.timer.running is False
