"""
Mock Capture Platform Implementation

Simulated cameras, streams and recorders for testing without hardware.
Mimics the real platform's behavior (including its failure modes) so the
session logic can be exercised end to end.

This is a "Fake" (test double) - it has working logic but no real hardware.
"""

import asyncio
import itertools
import logging
from typing import List, Optional

from capture.constants import DeviceKind
from capture.interfaces.capture_platform_interface import (
    CaptureError,
    CapturePlatformInterface,
    DeviceNotFoundError,
    RecorderInitError,
    RecorderInterface,
    StreamInterface,
)
from capture.models import DeviceDescriptor, MediaConstraints

MOCK_MIME_TYPE = "video/webm"
MOCK_CHUNK = b"\x1a\x45\xdf\xa3mock-frame"

_stream_ids = itertools.count(1)


def default_mock_devices() -> List[DeviceDescriptor]:
    """One camera and one microphone"""
    return [
        DeviceDescriptor("mock-camera-0", "Mock Camera 0", DeviceKind.VIDEO_INPUT),
        DeviceDescriptor("mock-mic-0", "Mock Microphone 0", DeviceKind.AUDIO_INPUT),
    ]


class MockStream(StreamInterface):
    """Fake live stream that only tracks whether it was stopped."""

    def __init__(self, device_id: Optional[str], has_video: bool = True):
        self._stream_id = f"mock-stream-{next(_stream_ids)}"
        self._device_id = device_id
        self._has_video = has_video
        self._active = True
        self.stop_count = 0

    @property
    def stream_id(self) -> str:
        return self._stream_id

    @property
    def device_id(self) -> Optional[str]:
        return self._device_id

    @property
    def is_active(self) -> bool:
        return self._active

    def has_video_track(self) -> bool:
        return self._has_video and self._active

    def stop_all_tracks(self) -> None:
        self.stop_count += 1
        self._active = False

    def __repr__(self) -> str:
        state = "active" if self._active else "stopped"
        return f"<MockStream {self._stream_id} device={self._device_id} {state}>"


class MockRecorder(RecorderInterface):
    """
    Fake recorder.

    Emits one chunk on start and one on stop. Tests can push more with
    emit() or make the recorder end on its own with simulate_self_stop().
    """

    def __init__(self, stream: MockStream, mime_type: str = MOCK_MIME_TYPE):
        self.logger = logging.getLogger(__name__)
        self.stream = stream
        self.on_data = None
        self._mime_type = mime_type
        self._active = False
        self.stop_calls = 0
        self.aborted = False

    @property
    def mime_type(self) -> str:
        return self._mime_type

    @property
    def is_active(self) -> bool:
        return self._active

    async def start(self) -> None:
        self._active = True
        self.emit(MOCK_CHUNK)
        self.logger.debug(f"[MOCK] Recorder started on {self.stream.stream_id}")

    async def stop(self) -> str:
        self.stop_calls += 1
        if self._active:
            self.emit(MOCK_CHUNK)
            self._active = False
        self.logger.debug(f"[MOCK] Recorder stopped ({self.stop_calls} call(s))")
        return self._mime_type

    def abort(self) -> None:
        self.aborted = True
        self._active = False

    # =========================================================================
    # TESTING HELPER METHODS (not part of RecorderInterface)
    # =========================================================================

    def emit(self, chunk: bytes) -> None:
        """Push an encoded chunk to the owner"""
        if self.on_data:
            self.on_data(chunk)

    def simulate_self_stop(self) -> None:
        """End recording without a stop() call (e.g. track ended)"""
        if self._active:
            self.emit(MOCK_CHUNK)
            self._active = False


class MockCapturePlatform(CapturePlatformInterface):
    """
    Mock capture platform for testing.

    Usage:
        platform = MockCapturePlatform()
        stream = await platform.request_access(MediaConstraints())
        stream.stop_all_tracks()

    Failure scenarios are configured with the simulate_* helpers.
    """

    def __init__(
        self,
        devices: Optional[List[DeviceDescriptor]] = None,
        latency: float = 0.0,
    ):
        """
        Initialize mock platform.

        Args:
            devices: Devices reported by enumeration (default: one camera,
                     one microphone)
            latency: Seconds each access request takes (0 = immediate)
        """
        self.logger = logging.getLogger(__name__)
        self.latency = latency
        self._devices: List[DeviceDescriptor] = (
            list(devices) if devices is not None else default_mock_devices()
        )

        # Tracking
        self.streams: List[MockStream] = []
        self.recorders: List[MockRecorder] = []
        self.access_requests: List[MediaConstraints] = []
        self.peak_open_streams = 0

        # Configuration for test scenarios
        self._access_errors: List[CaptureError] = []
        self._hang = False
        self._hang_event: Optional[asyncio.Event] = None
        self._no_video_track = False
        self._recorder_failure = False

        self.logger.info(f"Mock Capture Platform initialized ({len(self._devices)} devices)")

    async def request_access(self, constraints: MediaConstraints) -> MockStream:
        self.access_requests.append(constraints)

        if self._hang:
            self.logger.debug("[MOCK] Access request hanging")
            self._hang_event = asyncio.Event()
            await self._hang_event.wait()

        if self.latency:
            await asyncio.sleep(self.latency)

        if self._access_errors:
            error = self._access_errors.pop(0)
            self.logger.debug(f"[MOCK] Simulated access failure: {error!r}")
            raise error

        cameras = [d for d in self._devices if d.is_video_input]
        if constraints.video and not cameras:
            raise DeviceNotFoundError("Requested device not found")

        device_id = constraints.device_id
        if device_id is not None and device_id not in {d.id for d in cameras}:
            raise DeviceNotFoundError(f"Requested device not found: {device_id}")
        if device_id is None and constraints.video:
            device_id = cameras[0].id

        stream = MockStream(device_id, has_video=not self._no_video_track)
        self.streams.append(stream)
        self.peak_open_streams = max(self.peak_open_streams, len(self.open_streams()))
        self.logger.debug(f"[MOCK] Access granted: {stream!r}")
        return stream

    async def enumerate_devices(self) -> List[DeviceDescriptor]:
        return list(self._devices)

    def create_recorder(self, stream: StreamInterface) -> MockRecorder:
        if self._recorder_failure:
            raise RecorderInitError("Simulated recorder failure")
        if not isinstance(stream, MockStream) or not stream.is_active:
            raise RecorderInitError("Cannot record an inactive stream")
        recorder = MockRecorder(stream)
        self.recorders.append(recorder)
        return recorder

    def is_available(self) -> bool:
        """Mock platform is always available"""
        return True

    def cleanup(self) -> None:
        self.logger.debug("[MOCK] Cleanup")
        if self._hang_event:
            self._hang_event.set()
        for stream in self.open_streams():
            stream.stop_all_tracks()

    # =========================================================================
    # TESTING HELPER METHODS (not part of CapturePlatformInterface)
    # =========================================================================

    def open_streams(self) -> List[MockStream]:
        """Streams that have not been stopped"""
        return [s for s in self.streams if s.is_active]

    def simulate_access_failure(self, error: CaptureError, count: int = 1) -> None:
        """
        Fail the next `count` access requests with `error`.

        Example:
            platform.simulate_access_failure(AccessDeniedError("NotAllowed"))
        """
        self._access_errors.extend([error] * count)

    def simulate_hang(self) -> None:
        """Make access requests never settle (prompt silently dismissed)"""
        self._hang = True

    def simulate_no_video_track(self) -> None:
        """Return streams without a usable video track"""
        self._no_video_track = True

    def simulate_recorder_failure(self) -> None:
        """Make create_recorder() raise RecorderInitError"""
        self._recorder_failure = True

    def set_devices(self, devices: List[DeviceDescriptor]) -> None:
        """Replace the enumerated device list"""
        self._devices = list(devices)

    def reset_test_config(self) -> None:
        """Reset test configuration to normal operation"""
        self._access_errors.clear()
        self._hang = False
        if self._hang_event:
            self._hang_event.set()
            self._hang_event = None
        self._no_video_track = False
        self._recorder_failure = False
