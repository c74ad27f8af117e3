"""
FFmpeg Capture Platform Implementation

Real capture on Linux: cameras are Video4Linux2 nodes, microphones are
ALSA cards, and recording is an FFmpeg subprocess that encodes fragmented
MP4 to its stdout. The encoded bytes are read in chunks and handed to the
recorder's owner, so clips never touch the disk.
"""

import asyncio
import errno
import logging
import os
import shutil
from typing import List, Optional

from capture.constants import get_ffmpeg_command
from capture.interfaces.capture_platform_interface import (
    AccessDeniedError,
    CaptureError,
    CapturePlatformInterface,
    DeviceBusyError,
    DeviceNotFoundError,
    RecorderInitError,
    RecorderInterface,
    StreamInterface,
)
from capture.models import DeviceDescriptor, MediaConstraints
from capture.utils.capture_utils import (
    discover_audio_devices,
    discover_video_devices,
    validate_camera_device,
)
from config.settings import (
    AUDIO_CARDS_FILE,
    RECORDER_CHUNK_SIZE,
    RECORDER_MIME_TYPE,
    RECORDER_STOP_TIMEOUT,
    RECORDER_WARMUP_TIME,
    VIDEO_DEVICE_GLOB,
    VIDEO_DEVICE_SYSFS,
)

_ACCESS_DENIED_ERRNOS = {errno.EACCES, errno.EPERM}
_NOT_FOUND_ERRNOS = {errno.ENOENT, errno.ENODEV, errno.ENXIO}


def open_device(device_path: str) -> int:
    """
    Open a V4L2 node, translating OS errors into capture errors.

    Returns:
        File descriptor (caller must close it)

    Raises:
        AccessDeniedError: EACCES/EPERM (user not in the video group)
        DeviceNotFoundError: Node missing or unplugged
        DeviceBusyError: Node held exclusively elsewhere
        CaptureError: Anything else
    """
    try:
        return os.open(device_path, os.O_RDWR | os.O_NONBLOCK)
    except OSError as e:
        if e.errno in _ACCESS_DENIED_ERRNOS:
            raise AccessDeniedError(f"Permission denied: {device_path}") from e
        if e.errno in _NOT_FOUND_ERRNOS:
            raise DeviceNotFoundError(f"Camera device not found: {device_path}") from e
        if e.errno == errno.EBUSY:
            raise DeviceBusyError(f"Camera is busy: {device_path}") from e
        raise CaptureError(f"Cannot open {device_path}: {e}") from e


class FFmpegStream(StreamInterface):
    """
    An open camera node plus the microphone choice.

    Holding the descriptor open reserves the device for this session;
    FFmpeg opens the same node when recording starts.
    """

    def __init__(self, device_path: str, fd: int, capture_audio: bool):
        self.logger = logging.getLogger(__name__)
        self.device_path = device_path
        self.capture_audio = capture_audio
        self._fd: Optional[int] = fd
        self._stream_id = f"{device_path}#{fd}"

    @property
    def stream_id(self) -> str:
        return self._stream_id

    @property
    def device_id(self) -> Optional[str]:
        return self.device_path

    @property
    def is_active(self) -> bool:
        return self._fd is not None

    def has_video_track(self) -> bool:
        return self._fd is not None and validate_camera_device(self.device_path)

    def stop_all_tracks(self) -> None:
        if self._fd is None:
            return
        try:
            os.close(self._fd)
        except OSError as e:
            self.logger.warning(f"Error closing {self.device_path}: {e}")
        finally:
            self._fd = None
        self.logger.debug(f"Stream released: {self._stream_id}")


class FFmpegRecorder(RecorderInterface):
    """
    Records a stream by running FFmpeg and reading its stdout.

    Usage:
        recorder = FFmpegRecorder(stream)
        recorder.on_data = chunks.append
        await recorder.start()
        ...
        mime_type = await recorder.stop()
    """

    def __init__(self, stream: FFmpegStream, ffmpeg_path: str = "ffmpeg"):
        self.logger = logging.getLogger(__name__)
        self.stream = stream
        self.ffmpeg_path = ffmpeg_path
        self.on_data = None

        self._process: Optional[asyncio.subprocess.Process] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._reap_task: Optional[asyncio.Task] = None

    @property
    def mime_type(self) -> str:
        return RECORDER_MIME_TYPE

    @property
    def is_active(self) -> bool:
        # Active until FFmpeg's stdout reaches EOF, so no chunk is lost
        # when the process ends on its own.
        return self._reader_task is not None and not self._reader_task.done()

    async def start(self) -> None:
        if self._process is not None:
            raise RecorderInitError("Recorder already started")

        command = get_ffmpeg_command(
            input_device=self.stream.device_path,
            capture_audio=self.stream.capture_audio,
        )
        command[0] = self.ffmpeg_path
        self.logger.debug(f"FFmpeg command: {' '.join(command)}")

        try:
            self._process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise RecorderInitError(
                "FFmpeg not found. Install with: sudo apt-get install ffmpeg",
            ) from e
        except OSError as e:
            raise RecorderInitError(f"Cannot start FFmpeg: {e}") from e

        self._reader_task = asyncio.create_task(self._read_stdout())
        self._stderr_task = asyncio.create_task(self._process.stderr.read())

        # Give FFmpeg time to open the devices
        await asyncio.sleep(RECORDER_WARMUP_TIME)

        if self._process.returncode is not None:
            error_msg = (await self._stderr_task).decode("utf-8", errors="ignore")
            await self._reader_task
            self._process = None
            raise RecorderInitError(f"FFmpeg failed to start: {error_msg.strip()}")

        self.logger.info(
            f"FFmpeg recorder started (PID: {self._process.pid}, "
            f"device: {self.stream.device_path})",
        )

    async def _read_stdout(self) -> None:
        assert self._process is not None and self._process.stdout is not None
        while True:
            chunk = await self._process.stdout.read(RECORDER_CHUNK_SIZE)
            if not chunk:
                break
            if self.on_data:
                self.on_data(chunk)

    async def stop(self) -> str:
        if self._process is None:
            return self.mime_type

        if self._process.returncode is None:
            # SIGTERM lets FFmpeg flush the last fragment
            self._process.terminate()
            try:
                await asyncio.wait_for(self._process.wait(), RECORDER_STOP_TIMEOUT)
            except asyncio.TimeoutError:
                self.logger.warning("FFmpeg didn't stop gracefully, force killing")
                self._process.kill()
                await self._process.wait()

        if self._reader_task:
            await self._reader_task
        if self._stderr_task:
            stderr = await self._stderr_task
            if self._process.returncode not in (0, 255, -15):
                self.logger.warning(
                    f"FFmpeg exited with code {self._process.returncode}: "
                    f"{stderr.decode('utf-8', errors='ignore').strip()}",
                )

        self.logger.info("FFmpeg recorder stopped")
        return self.mime_type

    def abort(self) -> None:
        if self._process is not None and self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass
            self.logger.warning(f"FFmpeg recorder killed (PID: {self._process.pid})")
        for task in (self._reader_task, self._stderr_task):
            if task is not None and not task.done():
                task.cancel()
        if self._process is not None and self._reap_task is None:
            self._reap_task = self._schedule_reap(self._process)

    def _schedule_reap(
        self,
        process: asyncio.subprocess.Process,
    ) -> Optional[asyncio.Task]:
        """Wait for the killed child in the background so it is reaped"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Loop already gone; nothing left to reap with
            return None
        return loop.create_task(process.wait())


class FFmpegCapturePlatform(CapturePlatformInterface):
    """
    Capture platform backed by V4L2 devices and FFmpeg.

    Usage:
        platform = FFmpegCapturePlatform()
        if platform.is_available():
            stream = await platform.request_access(MediaConstraints())
    """

    def __init__(
        self,
        video_glob: str = VIDEO_DEVICE_GLOB,
        sysfs_root: str = VIDEO_DEVICE_SYSFS,
        audio_cards_file: str = AUDIO_CARDS_FILE,
    ):
        self.logger = logging.getLogger(__name__)
        self.video_glob = video_glob
        self.sysfs_root = sysfs_root
        self.audio_cards_file = audio_cards_file
        self.ffmpeg_path = shutil.which("ffmpeg")
        self._streams: List[FFmpegStream] = []

        self.logger.info(
            f"FFmpeg Capture Platform initialized "
            f"(ffmpeg: {self.ffmpeg_path or 'not found'})",
        )

    def _video_devices(self) -> List[DeviceDescriptor]:
        return discover_video_devices(self.video_glob, self.sysfs_root)

    async def request_access(self, constraints: MediaConstraints) -> FFmpegStream:
        cameras = self._video_devices()
        if constraints.device_id is not None:
            device_path = constraints.device_id
        elif cameras:
            device_path = cameras[0].id
        else:
            raise DeviceNotFoundError("No camera found")

        if constraints.audio and not discover_audio_devices(self.audio_cards_file):
            raise DeviceNotFoundError("No microphone found")

        fd = open_device(device_path)
        stream = FFmpegStream(device_path, fd, capture_audio=constraints.audio)
        self._streams = [s for s in self._streams if s.is_active]
        self._streams.append(stream)
        self.logger.debug(f"Access granted: {stream.stream_id}")
        return stream

    async def enumerate_devices(self) -> List[DeviceDescriptor]:
        return self._video_devices() + discover_audio_devices(self.audio_cards_file)

    def create_recorder(self, stream: StreamInterface) -> FFmpegRecorder:
        if not isinstance(stream, FFmpegStream) or not stream.is_active:
            raise RecorderInitError("Stream is not an open FFmpeg stream")
        if not self.ffmpeg_path:
            raise RecorderInitError(
                "FFmpeg not found. Install with: sudo apt-get install ffmpeg",
            )
        return FFmpegRecorder(stream, ffmpeg_path=self.ffmpeg_path)

    def is_available(self) -> bool:
        if not self.ffmpeg_path:
            self.logger.warning("FFmpeg not found in PATH")
            return False
        if not self._video_devices():
            self.logger.warning(f"No camera matches {self.video_glob}")
            return False
        return True

    def cleanup(self) -> None:
        self.logger.info("Cleaning up FFmpeg Capture Platform")
        for stream in self._streams:
            stream.stop_all_tracks()
        self._streams.clear()
