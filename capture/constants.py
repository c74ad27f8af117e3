"""
Capture Constants

Enums and FFmpeg-specific constants for the capture session.

Note: Tunable values (clip length, probe timeout, video settings, etc.)
live in config/settings.py. This file contains only enums, FFmpeg
command construction and the operator-facing permission messages.
"""

from enum import Enum
from typing import Optional

from config.settings import (
    AUDIO_BITRATE,
    AUDIO_CHANNELS,
    AUDIO_CODEC,
    AUDIO_INPUT_DEVICE,
    AUDIO_INPUT_FORMAT,
    AUDIO_SAMPLE_RATE,
    VIDEO_CODEC,
    VIDEO_CRF,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_PRESET,
    VIDEO_WIDTH,
)

# =============================================================================
# FFMPEG COMMAND CONFIGURATION
# =============================================================================

# Video input format (Video4Linux2)
VIDEO_INPUT_FORMAT = "v4l2"

# FFmpeg log level - "error" keeps stderr small enough to report verbatim
FFMPEG_LOG_LEVEL = "error"

# Input queue size for USB camera timing jitter (frames)
THREAD_QUEUE_SIZE = 512

# Encoded output goes to stdout so chunks can be buffered in memory
FFMPEG_PIPE_OUTPUT = "pipe:1"


# =============================================================================
# STATE ENUMS
# =============================================================================


class PermissionState(Enum):
    """
    Outcome of the camera+microphone permission probe.

    Lifecycle: REQUESTING -> GRANTED | DENIED (re-probe resets to REQUESTING)
    """

    REQUESTING = "requesting"
    GRANTED = "granted"
    DENIED = "denied"


class SessionState(Enum):
    """
    States exposed to the operator.

    Derived from permission, capture resources and clip presence;
    never assigned directly.
    """

    LOADING = "loading"  # Permission probe in progress
    PERMISSION_DENIED = "permission_denied"  # Probe failed, retry offered
    READY = "ready"  # Camera selected, not recording
    RECORDING = "recording"  # Recorder running, countdown active
    REVIEWING = "reviewing"  # Finished clip available for playback


class DeviceKind(Enum):
    """Kinds of media devices reported by enumeration."""

    VIDEO_INPUT = "videoinput"
    AUDIO_INPUT = "audioinput"


class PermissionFailure(Enum):
    """
    Classified causes of a DENIED permission result.

    The value is the short reason tag; see PERMISSION_MESSAGES for the
    text shown to the operator.
    """

    ACCESS_DENIED = "denied"
    DEVICE_NOT_FOUND = "not found"
    DEVICE_BUSY = "in use"
    NO_CAMERA = "no camera found"
    TIMED_OUT = "timed out"
    UNSPECIFIED = "failed"


PERMISSION_MESSAGES = {
    PermissionFailure.ACCESS_DENIED: (
        "Camera access was denied. "
        "Please allow camera permissions and try again."
    ),
    PermissionFailure.DEVICE_NOT_FOUND: "No camera found on this device.",
    PermissionFailure.DEVICE_BUSY: (
        "Camera is already in use by another application."
    ),
    PermissionFailure.NO_CAMERA: "No camera devices found on this device.",
    PermissionFailure.TIMED_OUT: "Camera access timed out. Please try again.",
    PermissionFailure.UNSPECIFIED: "Camera access failed: {detail}",
}


def describe_permission_failure(
    failure: PermissionFailure,
    detail: Optional[str] = None,
) -> str:
    """
    Build the operator-facing explanation for a permission failure.

    Args:
        failure: Classified cause
        detail: Platform error text (only used for UNSPECIFIED)

    Returns:
        Human-readable message

    Example:
        describe_permission_failure(PermissionFailure.TIMED_OUT)
        -> "Camera access timed out. Please try again."
    """
    if failure is PermissionFailure.UNSPECIFIED:
        return PERMISSION_MESSAGES[failure].format(detail=detail or "unknown error")
    return PERMISSION_MESSAGES[failure]


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_ffmpeg_command(
    input_device: str,
    capture_audio: bool = True,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> list[str]:
    """
    Generate FFmpeg command for in-memory clip capture.

    Captures video from a V4L2 device (and audio from the PulseAudio
    default source when requested) and writes fragmented MP4 to stdout.

    Args:
        input_device: Camera device path (e.g., /dev/video0)
        capture_audio: Whether to add the microphone input
        width: Video width in pixels
        height: Video height in pixels
        fps: Frame rate

    Returns:
        List of command arguments for subprocess

    Example:
        cmd = get_ffmpeg_command("/dev/video0")
        await asyncio.create_subprocess_exec(*cmd, stdout=PIPE)
    """
    command = [
        "ffmpeg",
        "-f",
        VIDEO_INPUT_FORMAT,
        "-video_size",
        f"{width}x{height}",
        "-framerate",
        str(fps),
        "-thread_queue_size",
        str(THREAD_QUEUE_SIZE),
        "-i",
        input_device,
    ]

    if capture_audio:
        command.extend(
            [
                "-f",
                AUDIO_INPUT_FORMAT,
                "-ac",
                str(AUDIO_CHANNELS),
                "-ar",
                str(AUDIO_SAMPLE_RATE),
                "-thread_queue_size",
                str(THREAD_QUEUE_SIZE),
                "-i",
                AUDIO_INPUT_DEVICE,
            ],
        )

    command.extend(
        [
            "-c:v",
            VIDEO_CODEC,
            "-preset",
            VIDEO_PRESET,
            "-crf",
            str(VIDEO_CRF),
            "-pix_fmt",
            "yuv420p",
        ],
    )

    if capture_audio:
        command.extend(["-c:a", AUDIO_CODEC, "-b:a", AUDIO_BITRATE])

    command.extend(
        [
            # A pipe cannot be seeked back to write the moov atom, so the
            # output must be fragmented with the moov up front.
            "-movflags",
            "+frag_keyframe+empty_moov",
            "-f",
            "mp4",
            "-loglevel",
            FFMPEG_LOG_LEVEL,
            FFMPEG_PIPE_OUTPUT,
        ],
    )

    return command
