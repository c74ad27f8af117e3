"""
Capture Utilities

Shared helper functions for capture operations: countdown formatting,
constraint building and Linux device discovery.
"""

import glob
import logging
import re
from pathlib import Path
from typing import List, Optional

from capture.constants import DeviceKind
from capture.models import DeviceDescriptor, MediaConstraints
from config.settings import AUDIO_CARDS_FILE, VIDEO_DEVICE_GLOB, VIDEO_DEVICE_SYSFS

logger = logging.getLogger(__name__)

# " 0 [PCH            ]: HDA-Intel - HDA Intel PCH"
_ALSA_CARD_PATTERN = re.compile(r"^\s*(\d+)\s+\[([^\]]+)\]\s*:\s*(.+)$")


def format_countdown(seconds: int) -> str:
    """
    Format remaining seconds as MM:SS.

    Negative values are clamped to zero.

    Args:
        seconds: Remaining seconds

    Returns:
        Zero-padded minutes and seconds

    Example:
        format_countdown(15) -> "00:15"
        format_countdown(75) -> "01:15"
    """
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def build_constraints(device_id: Optional[str] = None) -> MediaConstraints:
    """
    Build audio+video constraints bound to a device.

    Args:
        device_id: Exact camera id, or None for the platform default

    Returns:
        MediaConstraints requesting camera and microphone
    """
    return MediaConstraints(audio=True, video=True, device_id=device_id)


def validate_camera_device(device_path: str) -> bool:
    """
    Check if camera device exists and is a character device.

    Example:
        if validate_camera_device("/dev/video0"):
            print("Camera found!")
    """
    device = Path(device_path)
    return device.exists() and device.is_char_device()


def _read_video_label(device_path: str, sysfs_root: str) -> str:
    """Read the V4L2 card name from sysfs, falling back to the node name"""
    name_file = Path(sysfs_root) / Path(device_path).name / "name"
    try:
        label = name_file.read_text().strip()
    except OSError:
        label = ""
    return label or Path(device_path).name


def _natural_key(path: str):
    match = re.search(r"(\d+)$", path)
    return (int(match.group(1)) if match else -1, path)


def discover_video_devices(
    pattern: str = VIDEO_DEVICE_GLOB,
    sysfs_root: str = VIDEO_DEVICE_SYSFS,
) -> List[DeviceDescriptor]:
    """
    List V4L2 camera nodes in numeric order.

    Args:
        pattern: Glob for device nodes
        sysfs_root: sysfs directory holding per-node metadata

    Returns:
        One descriptor per character device; id is the device path

    Example:
        discover_video_devices()
        -> [DeviceDescriptor(id="/dev/video0", label="HD Webcam", ...)]
    """
    devices = []
    for path in sorted(glob.glob(pattern), key=_natural_key):
        if not validate_camera_device(path):
            continue
        devices.append(
            DeviceDescriptor(
                id=path,
                label=_read_video_label(path, sysfs_root),
                kind=DeviceKind.VIDEO_INPUT,
            ),
        )
    logger.debug(f"Discovered {len(devices)} video node(s)")
    return devices


def discover_audio_devices(cards_file: str = AUDIO_CARDS_FILE) -> List[DeviceDescriptor]:
    """
    List ALSA sound cards as audio input descriptors.

    Args:
        cards_file: Path to /proc/asound/cards

    Returns:
        Descriptors with ids like "hw:0"; empty if the file is unreadable
    """
    try:
        content = Path(cards_file).read_text()
    except OSError as e:
        logger.debug(f"Cannot read {cards_file}: {e}")
        return []

    devices = []
    for line in content.splitlines():
        match = _ALSA_CARD_PATTERN.match(line)
        if not match:
            continue
        index, short_name, description = match.groups()
        label = description.split(" - ")[-1].strip() or short_name.strip()
        devices.append(
            DeviceDescriptor(
                id=f"hw:{index}",
                label=label,
                kind=DeviceKind.AUDIO_INPUT,
            ),
        )
    return devices
