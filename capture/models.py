"""
Capture Models

Data classes shared by the capture controllers: device descriptors,
permission results, the single capture session, clips and countdown
snapshots.
"""

import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from capture.constants import (
    DeviceKind,
    PermissionFailure,
    PermissionState,
    describe_permission_failure,
)

if TYPE_CHECKING:
    from capture.interfaces.capture_platform_interface import (
        RecorderInterface,
        StreamInterface,
    )


@dataclass(frozen=True)
class DeviceDescriptor:
    """
    A capture device as reported by enumeration.

    Identity is the opaque `id`; the label is for display only.
    """

    id: str
    label: str
    kind: DeviceKind = DeviceKind.VIDEO_INPUT

    @property
    def is_video_input(self) -> bool:
        return self.kind is DeviceKind.VIDEO_INPUT


@dataclass(frozen=True)
class MediaConstraints:
    """
    What to request from the platform.

    device_id=None means "platform default camera".
    """

    audio: bool = True
    video: bool = True
    device_id: Optional[str] = None


@dataclass(frozen=True)
class PermissionResult:
    """Tri-state probe result with the classified cause of a denial."""

    state: PermissionState
    failure: Optional[PermissionFailure] = None
    message: Optional[str] = None

    @classmethod
    def requesting(cls) -> "PermissionResult":
        return cls(PermissionState.REQUESTING)

    @classmethod
    def granted(cls) -> "PermissionResult":
        return cls(PermissionState.GRANTED)

    @classmethod
    def denied(
        cls,
        failure: PermissionFailure,
        detail: Optional[str] = None,
    ) -> "PermissionResult":
        return cls(
            PermissionState.DENIED,
            failure=failure,
            message=describe_permission_failure(failure, detail),
        )

    @property
    def reason(self) -> Optional[str]:
        """Short reason tag ("denied", "timed out", ...) or None"""
        return self.failure.value if self.failure else None


@dataclass(frozen=True)
class Countdown:
    """Snapshot of the recording countdown."""

    remaining_seconds: int = 0
    running: bool = False


@dataclass
class Clip:
    """
    Finished recording held in memory.

    Ownership passes to whoever reviews it; the session drops its
    reference on reset or camera switch.
    """

    data: bytes
    mime_type: str
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def open(self) -> io.BytesIO:
        """Playable byte source for the review widget"""
        return io.BytesIO(self.data)


@dataclass
class RecordingHandle:
    """
    An active recorder layered on top of the session's stream.

    Chunks emitted by the recorder are buffered here until the
    recording is finalized into a Clip.
    """

    recorder: "RecorderInterface"
    stream: "StreamInterface"
    chunks: List[bytes] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finalized: bool = False

    def append(self, chunk: bytes) -> None:
        if chunk:
            self.chunks.append(chunk)

    @property
    def is_live(self) -> bool:
        """True while the recorder still needs an explicit stop"""
        return not self.finalized and self.recorder.is_active

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)


@dataclass
class CaptureSession:
    """
    The one live hardware resource.

    Invariant: recording is not None => stream is not None.
    """

    active_device_id: Optional[str] = None
    stream: Optional["StreamInterface"] = None
    recording: Optional[RecordingHandle] = None

    @property
    def has_stream(self) -> bool:
        return self.stream is not None

    @property
    def is_recording(self) -> bool:
        return self.recording is not None

    def is_consistent(self) -> bool:
        """Check the recording-implies-stream invariant"""
        return self.recording is None or self.stream is not None
