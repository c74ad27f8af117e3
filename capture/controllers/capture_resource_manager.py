"""
Capture Resource Manager

Sole owner of the live capture stream and the recorder layered on it.

Every stream that is acquired here is released here: a leaked stream keeps
the camera locked for the lifetime of the process. The rendering surface
only borrows the stream; release() also stops whatever reference the
surface cached.

SOLID Principles:
- Single Responsibility: Only manages capture resource lifecycle
- Dependency Inversion: Depends on CapturePlatformInterface
"""

import logging
from typing import Optional

from capture.interfaces.capture_platform_interface import (
    CaptureError,
    CapturePlatformInterface,
    DeviceBusyError,
    DeviceUnavailableError,
    NoVideoTrackError,
    RecorderInitError,
    StreamInterface,
)
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface
from capture.models import CaptureSession, Clip, RecordingHandle
from capture.utils.capture_utils import build_constraints


class CaptureResourceManager:
    """
    Owns the single CaptureSession (stream + optional recording).

    Usage:
        manager = CaptureResourceManager(platform)
        stream = await manager.acquire("/dev/video0")
        handle = await manager.start_recording(stream)
        # ... recording happens ...
        clip = await manager.stop_recording(handle)  # also releases stream
        manager.cleanup()
    """

    def __init__(
        self,
        platform: CapturePlatformInterface,
        surface: Optional[RenderingSurfaceInterface] = None,
    ):
        """
        Initialize resource manager.

        Args:
            platform: Capture platform that opens streams and recorders
            surface: Rendering surface that may cache the displayed stream
        """
        self.logger = logging.getLogger(__name__)
        self.platform = platform
        self.surface = surface
        self._session = CaptureSession()

    # =========================================================================
    # STATUS
    # =========================================================================

    @property
    def session(self) -> CaptureSession:
        """The live capture session (read it, don't mutate it)"""
        return self._session

    @property
    def stream(self) -> Optional[StreamInterface]:
        return self._session.stream

    @property
    def recording(self) -> Optional[RecordingHandle]:
        return self._session.recording

    @property
    def has_stream(self) -> bool:
        return self._session.has_stream

    @property
    def is_recording(self) -> bool:
        return self._session.is_recording

    # =========================================================================
    # STREAM LIFECYCLE
    # =========================================================================

    async def acquire(self, device_id: Optional[str] = None) -> StreamInterface:
        """
        Open camera+microphone, bound to a device.

        Any stream already held is released first.

        Args:
            device_id: Exact camera id, or None for the platform default

        Returns:
            The newly held stream (borrow it, don't stop it)

        Raises:
            DeviceUnavailableError: Device cannot be opened
            DeviceBusyError: An overlapping acquire finished first
            NoVideoTrackError: Stream has no usable video track
        """
        self.release()

        constraints = build_constraints(device_id)
        try:
            stream = await self.platform.request_access(constraints)
        except DeviceUnavailableError as e:
            self.logger.error(f"Device unavailable ({device_id or 'default'}): {e}")
            raise
        except CaptureError as e:
            self.logger.error(f"Cannot open device ({device_id or 'default'}): {e}")
            raise DeviceUnavailableError(str(e)) from e

        if not stream.has_video_track():
            stream.stop_all_tracks()
            self.logger.error(f"No video track on stream {stream.stream_id}")
            raise NoVideoTrackError("No video track found")

        if self._session.stream is not None:
            # Overlapping acquire finished first; never tear down its stream
            stream.stop_all_tracks()
            self.logger.error(
                f"Discarding {stream.stream_id}: "
                f"{self._session.stream.stream_id} acquired meanwhile",
            )
            raise DeviceBusyError("Camera acquired by another request")

        self._session.stream = stream
        self._session.active_device_id = device_id or stream.device_id
        self.logger.info(
            f"Stream acquired: {stream.stream_id} "
            f"(device: {self._session.active_device_id})",
        )
        return stream

    def release(self) -> None:
        """
        Stop every track of the held stream and of the surface's copy.

        Aborts a recording still running on the stream. Safe to call
        when nothing is held.
        """
        if self._session.recording is not None:
            self._abort_recording()

        stream = self._session.stream
        self._session.stream = None
        self._session.active_device_id = None

        if stream is not None:
            stream.stop_all_tracks()
            self.logger.info(f"Stream released: {stream.stream_id}")

        if self.surface is not None:
            cached = self.surface.detach_stream()
            if cached is not None and cached is not stream and cached.is_active:
                cached.stop_all_tracks()
                self.logger.warning(
                    f"Released stream cached by surface: {cached.stream_id}",
                )

    # =========================================================================
    # RECORDING LIFECYCLE
    # =========================================================================

    async def start_recording(self, stream: StreamInterface) -> RecordingHandle:
        """
        Start buffering encoded chunks from the held stream.

        Args:
            stream: The stream returned by acquire()

        Returns:
            Handle for the active recording

        Raises:
            RecorderInitError: Recorder cannot be built or started
        """
        if stream is not self._session.stream or not stream.is_active:
            raise RecorderInitError("Stream is not held by this session")
        if self._session.recording is not None:
            raise RecorderInitError("Already recording")

        try:
            recorder = self.platform.create_recorder(stream)
        except RecorderInitError as e:
            self.logger.error(f"Recorder init failed: {e}")
            raise
        except CaptureError as e:
            self.logger.error(f"Recorder init failed: {e}")
            raise RecorderInitError(str(e)) from e

        handle = RecordingHandle(recorder=recorder, stream=stream)
        recorder.on_data = handle.append
        await recorder.start()

        if self._session.stream is not stream:
            recorder.abort()
            raise RecorderInitError("Stream was released while the recorder started")

        self._session.recording = handle
        self.logger.info(f"Recording started on {stream.stream_id}")
        return handle

    async def stop_recording(self, handle: Optional[RecordingHandle]) -> Optional[Clip]:
        """
        Finalize a recording into a Clip and release the stream.

        Idempotent: a handle that was already finalized (or discarded)
        yields None and changes nothing. A recorder that ended on its own
        is not stopped again.

        Returns:
            The clip, or None if there was nothing to finalize
        """
        if handle is None or handle.finalized or handle is not self._session.recording:
            self.logger.debug("No active recording to stop")
            return None

        needs_stop = handle.recorder.is_active
        handle.finalized = True

        try:
            if needs_stop:
                mime_type = await handle.recorder.stop()
            else:
                self.logger.info("Recorder already stopped, finalizing buffered data")
                mime_type = handle.recorder.mime_type

            if self._session.recording is not handle:
                # Torn down while the recorder was flushing
                return None

            clip = Clip(
                data=b"".join(handle.chunks),
                mime_type=mime_type or handle.recorder.mime_type,
            )
            self.logger.info(
                f"Clip finalized: {clip.size_bytes} bytes ({clip.mime_type})",
            )
            return clip
        finally:
            if self._session.recording is handle:
                self._session.recording = None
            self.release()

    def _abort_recording(self) -> None:
        handle = self._session.recording
        self._session.recording = None
        if handle is None:
            return
        handle.finalized = True
        if handle.recorder.is_active:
            handle.recorder.abort()
        self.logger.warning(
            f"Recording discarded ({handle.buffered_bytes} bytes buffered)",
        )

    def cleanup(self) -> None:
        """
        Discard any recording and release the stream.

        Always call this when done with the manager!
        """
        self.logger.info("Cleaning up Capture Resource Manager")
        self.release()
