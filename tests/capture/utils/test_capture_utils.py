"""
Capture Utilities Tests

Tests for utility functions showing:
- Countdown formatting
- Constraint building
- V4L2 and ALSA device discovery
- FFmpeg command construction

To run:
    pytest tests/capture/utils/test_capture_utils.py -v
"""

import pytest

from capture.constants import DeviceKind, get_ffmpeg_command
from capture.utils import capture_utils
from capture.utils.capture_utils import (
    build_constraints,
    discover_audio_devices,
    discover_video_devices,
    format_countdown,
    validate_camera_device,
)

# =============================================================================
# COUNTDOWN FORMATTING TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "seconds, expected",
    [
        (15, "00:15"),
        (9, "00:09"),
        (0, "00:00"),
        (60, "01:00"),
        (75, "01:15"),
        (-3, "00:00"),
    ],
)
def test_format_countdown(seconds, expected):
    """Test MM:SS formatting with clamping."""
    assert format_countdown(seconds) == expected


# =============================================================================
# CONSTRAINT TESTS
# =============================================================================


@pytest.mark.unit
def test_build_constraints_exact_device():
    """Test constraints request audio and video bound to one device."""
    constraints = build_constraints("/dev/video2")

    assert constraints.audio is True
    assert constraints.video is True
    assert constraints.device_id == "/dev/video2"


@pytest.mark.unit
def test_build_constraints_default_device():
    """Test no device id means platform default."""
    assert build_constraints().device_id is None


# =============================================================================
# DEVICE DISCOVERY TESTS
# =============================================================================


@pytest.mark.unit
def test_validate_camera_device_regular_file(tmp_path):
    """Test a regular file is not a camera."""
    fake = tmp_path / "video0"
    fake.write_text("")

    assert validate_camera_device(str(fake)) is False
    assert validate_camera_device(str(tmp_path / "missing")) is False


@pytest.mark.unit
def test_discover_video_devices_natural_order(tmp_path, monkeypatch):
    """Test nodes are listed video2 before video10 with sysfs labels."""
    dev_dir = tmp_path / "dev"
    sysfs = tmp_path / "sysfs"
    dev_dir.mkdir()
    for name in ("video10", "video2", "video0"):
        (dev_dir / name).write_text("")
    (sysfs / "video0").mkdir(parents=True)
    (sysfs / "video0" / "name").write_text("HD Webcam C920\n")
    monkeypatch.setattr(capture_utils, "validate_camera_device", lambda path: True)

    devices = discover_video_devices(str(dev_dir / "video*"), str(sysfs))

    assert [d.id.rsplit("/", 1)[-1] for d in devices] == ["video0", "video2", "video10"]
    assert devices[0].label == "HD Webcam C920"
    assert devices[1].label == "video2"
    assert all(d.kind is DeviceKind.VIDEO_INPUT for d in devices)


@pytest.mark.unit
def test_discover_video_devices_skips_non_devices(tmp_path):
    """Test regular files matching the glob are ignored."""
    (tmp_path / "video0").write_text("")

    assert discover_video_devices(str(tmp_path / "video*"), str(tmp_path)) == []


@pytest.mark.unit
def test_discover_audio_devices(tmp_path):
    """Test ALSA cards are parsed into audio inputs."""
    cards = tmp_path / "cards"
    cards.write_text(
        " 0 [PCH            ]: HDA-Intel - HDA Intel PCH\n"
        "                      HDA Intel PCH at 0xf7f10000 irq 32\n"
        " 1 [C920           ]: USB-Audio - HD Pro Webcam C920\n"
        "                      HD Pro Webcam C920 at usb-0000:00:14.0-2\n",
    )

    devices = discover_audio_devices(str(cards))

    assert [d.id for d in devices] == ["hw:0", "hw:1"]
    assert devices[1].label == "HD Pro Webcam C920"
    assert all(d.kind is DeviceKind.AUDIO_INPUT for d in devices)


@pytest.mark.unit
def test_discover_audio_devices_missing_file(tmp_path):
    """Test an unreadable cards file yields no devices."""
    assert discover_audio_devices(str(tmp_path / "missing")) == []


# =============================================================================
# FFMPEG COMMAND TESTS
# =============================================================================


@pytest.mark.unit
def test_ffmpeg_command_pipes_to_stdout():
    """Test the command writes encoded output to stdout."""
    command = get_ffmpeg_command("/dev/video0")

    assert command[0] == "ffmpeg"
    assert "/dev/video0" in command
    assert command[-1] == "pipe:1"


@pytest.mark.unit
def test_ffmpeg_command_without_audio():
    """Test video-only capture has a single input."""
    command = get_ffmpeg_command("/dev/video0", capture_audio=False)

    assert command.count("-i") == 1


@pytest.mark.unit
def test_ffmpeg_command_custom_size():
    """Test resolution and frame rate are passed through."""
    command = get_ffmpeg_command("/dev/video1", width=640, height=480, fps=15)

    assert "640x480" in command
    assert command[command.index("-framerate") + 1] == "15"
