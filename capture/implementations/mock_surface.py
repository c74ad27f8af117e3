"""
Mock Rendering Surface

Records every call so tests can assert what the operator would have seen.
"""

from typing import List, Optional

from capture.interfaces.capture_platform_interface import StreamInterface
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface
from capture.models import Clip


class MockSurface(RenderingSurfaceInterface):
    """Fake rendering surface with call tracking."""

    def __init__(self):
        self.stream: Optional[StreamInterface] = None
        self.clip: Optional[Clip] = None
        self.countdowns: List[str] = []
        self.alerts: List[str] = []
        self.permission_messages: List[str] = []
        self.streams_shown: List[StreamInterface] = []

    def show_stream(self, stream: StreamInterface) -> None:
        self.stream = stream
        self.streams_shown.append(stream)

    def detach_stream(self) -> Optional[StreamInterface]:
        stream, self.stream = self.stream, None
        return stream

    def show_clip(self, clip: Clip) -> None:
        self.clip = clip

    def clear_clip(self) -> None:
        self.clip = None

    def show_countdown(self, text: str) -> None:
        self.countdowns.append(text)

    def show_permission_denied(self, message: str) -> None:
        self.permission_messages.append(message)

    def alert(self, message: str) -> None:
        self.alerts.append(message)
