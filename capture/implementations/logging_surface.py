"""
Logging Rendering Surface

Headless surface for the capture service: instead of drawing frames it
logs what would be shown. Used when no display is attached.
"""

import logging
from typing import Optional

from capture.interfaces.capture_platform_interface import StreamInterface
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface
from capture.models import Clip


class LoggingSurface(RenderingSurfaceInterface):
    """Rendering surface that reports to the log."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._stream: Optional[StreamInterface] = None
        self._last_countdown: Optional[str] = None

    def show_stream(self, stream: StreamInterface) -> None:
        self._stream = stream
        self.logger.info(f"Live feed: {stream.stream_id}")

    def detach_stream(self) -> Optional[StreamInterface]:
        stream, self._stream = self._stream, None
        return stream

    def show_clip(self, clip: Clip) -> None:
        self.logger.info(
            f"Reviewing clip: {clip.size_bytes / 1024:.1f} KB ({clip.mime_type})",
        )

    def clear_clip(self) -> None:
        self.logger.debug("Clip cleared")

    def show_countdown(self, text: str) -> None:
        if text != self._last_countdown:
            self._last_countdown = text
            self.logger.info(f"REC {text}")

    def show_permission_denied(self, message: str) -> None:
        self.logger.warning(f"Camera Access Required: {message}")

    def alert(self, message: str) -> None:
        self.logger.error(f"ALERT: {message}")
