"""
Capture Platform Interface

Abstract interfaces for the platform that owns cameras, microphones and
media encoders. Defines the contract any capture backend must follow.

High-level code (PermissionResolver, CaptureResourceManager) depends on
these abstractions, not on V4L2/FFmpeg directly. This keeps the session
logic testable with MockCapturePlatform.

Three contracts:
1. CapturePlatformInterface: access requests, enumeration, recorders
2. StreamInterface: a live audio+video handle from one device
3. RecorderInterface: encodes a stream into binary chunks
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from capture.models import DeviceDescriptor, MediaConstraints


class StreamInterface(ABC):
    """
    A live handle to audio+video data from one capture device.

    Stopping all tracks releases the hardware. Stopping twice is harmless.
    """

    @property
    @abstractmethod
    def stream_id(self) -> str:
        """Unique id of this stream (for logging and identity checks)"""
        pass

    @property
    @abstractmethod
    def device_id(self) -> Optional[str]:
        """Id of the video device feeding this stream"""
        pass

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True until stop_all_tracks() is called"""
        pass

    @abstractmethod
    def has_video_track(self) -> bool:
        """
        Check the stream carries a usable video track.

        Returns:
            True if at least one live video track is present
        """
        pass

    @abstractmethod
    def stop_all_tracks(self) -> None:
        """
        Stop every track and release the underlying device.

        Must be idempotent and should never raise.
        """
        pass


class RecorderInterface(ABC):
    """
    Encodes a stream into a sequence of binary chunks.

    The owner assigns `on_data` before start(); every encoded chunk is
    passed to it. stop() flushes the final chunks and returns the
    negotiated media type.
    """

    on_data: Optional[Callable[[bytes], None]] = None

    @property
    @abstractmethod
    def mime_type(self) -> str:
        """Media type of the encoded output (e.g. "video/mp4")"""
        pass

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True between start() and the end of stop() (or a self-stop)"""
        pass

    @abstractmethod
    async def start(self) -> None:
        """
        Begin encoding.

        Raises:
            RecorderInitError: If the encoder cannot be started
        """
        pass

    @abstractmethod
    async def stop(self) -> str:
        """
        Stop encoding and flush buffered output to on_data.

        Returns:
            The negotiated media type
        """
        pass

    @abstractmethod
    def abort(self) -> None:
        """
        Stop immediately without flushing (synchronous teardown).

        Buffered output is discarded. Should never raise.
        """
        pass


class CapturePlatformInterface(ABC):
    """
    Abstract base class for capture platforms.

    Any backend (V4L2+FFmpeg, GStreamer, a browser bridge, ...) must
    implement these methods to work with the capture controllers.
    """

    @abstractmethod
    async def request_access(self, constraints: MediaConstraints) -> StreamInterface:
        """
        Open a stream matching the constraints.

        Args:
            constraints: Audio/video flags and optional exact device id

        Returns:
            A live stream (caller owns it and must stop it)

        Raises:
            AccessDeniedError: Access not allowed
            DeviceNotFoundError: No matching device
            DeviceBusyError: Device is held by another process
            CaptureError: Any other platform failure
        """
        pass

    @abstractmethod
    async def enumerate_devices(self) -> List[DeviceDescriptor]:
        """
        List media devices in platform order.

        Returns:
            Descriptors of all input devices (video and audio)
        """
        pass

    @abstractmethod
    def create_recorder(self, stream: StreamInterface) -> RecorderInterface:
        """
        Construct a recorder for a stream.

        Raises:
            RecorderInitError: If no recorder can be built for the stream
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this platform can be used on the current machine.

        Returns:
            True if the capture backend is usable
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """
        Release platform resources. Should never raise.
        """
        pass


class CaptureError(Exception):
    """
    Base exception for capture failures.

    Examples:
    - Camera not found
    - Camera already in use
    - Encoder failed to start
    """
    pass


class DeviceUnavailableError(CaptureError):
    """The requested device could not be opened"""
    pass


class AccessDeniedError(DeviceUnavailableError):
    """Access to camera/microphone was refused"""
    pass


class DeviceNotFoundError(DeviceUnavailableError):
    """Capture device not found or removed"""
    pass


class DeviceBusyError(DeviceUnavailableError):
    """Capture device is in use by another process"""
    pass


class NoVideoTrackError(CaptureError):
    """Stream opened but has no usable video track"""
    pass


class RecorderInitError(CaptureError):
    """Recorder could not be constructed or started"""
    pass


class ProbeTimeoutError(CaptureError):
    """Permission probe did not settle in time"""
    pass
