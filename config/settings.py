"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Machine-specific overrides go in .env, NOT here
- Import these settings in modules: from config.settings import MAX_CLIP_SECONDS
- Keep values generic and domain-agnostic
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# SESSION CONFIGURATION
# =============================================================================

# Maximum clip length (in seconds). The countdown starts here and the
# recording stops automatically when it reaches zero.
MAX_CLIP_SECONDS = int(os.getenv("MAX_CLIP_SECONDS", "15"))

# Countdown tick interval (seconds of wall-clock time per tick)
TICK_INTERVAL = 1.0

# Upper bound on the startup permission probe. Some platforms never answer
# when the prompt is dismissed silently.
PERMISSION_PROBE_TIMEOUT = float(os.getenv("PERMISSION_PROBE_TIMEOUT", "10.0"))

# Keep a live camera feed open while READY (hands the stream to the surface)
LIVE_PREVIEW = os.getenv("LIVE_PREVIEW", "true").lower() in ("1", "true", "yes")

# =============================================================================
# CAPTURE DEVICE CONFIGURATION
# =============================================================================

# Video4Linux2 device nodes scanned during enumeration
VIDEO_DEVICE_GLOB = "/dev/video*"
VIDEO_DEVICE_SYSFS = "/sys/class/video4linux"

# ALSA card list, used to enumerate microphones
AUDIO_CARDS_FILE = "/proc/asound/cards"

# Audio Input Configuration (for recording)
# "default" tells PulseAudio to use the default input device
AUDIO_INPUT_DEVICE = "default"  # PulseAudio default source
AUDIO_INPUT_FORMAT = "pulse"  # Use PulseAudio (not raw ALSA)
AUDIO_CHANNELS = 1  # 1 = mono, 2 = stereo
AUDIO_SAMPLE_RATE = 44100  # Hz
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "128k"

# Video Settings
VIDEO_WIDTH = 1280
VIDEO_HEIGHT = 720
VIDEO_FPS = 30
VIDEO_CODEC = "libx264"
VIDEO_PRESET = "ultrafast"  # FFmpeg encoding preset
VIDEO_CRF = 23  # Constant Rate Factor (quality)

# =============================================================================
# RECORDER CONFIGURATION
# =============================================================================

# Bytes read from the encoder pipe per chunk
RECORDER_CHUNK_SIZE = 64 * 1024

# Seconds to wait for FFmpeg to flush after SIGTERM before killing it
RECORDER_STOP_TIMEOUT = 5.0

# Media type negotiated by the FFmpeg recorder (fragmented MP4 on a pipe)
RECORDER_MIME_TYPE = "video/mp4"

# Seconds to let FFmpeg open the devices before checking it is still alive
RECORDER_WARMUP_TIME = 0.5

# =============================================================================
# SERVICE CONFIGURATION
# =============================================================================

# Remote Control Configuration
# File-based control for triggering operator actions via SSH/scripts
# Commands: RETRY, START, STOP, SWITCH, RESET, STATUS
CONTROL_FILE = os.getenv(
    "CONTROL_FILE",
    "/tmp/capture_control.cmd",  # noqa: S108
)
CONTROL_POLL_INTERVAL = 0.1  # seconds

# Logging Configuration
LOG_DIR = os.getenv("LOG_DIR", "/var/log/capture")
LOG_SERVICE_FILE = "service.log"
LOG_BACKUP_COUNT = 7
