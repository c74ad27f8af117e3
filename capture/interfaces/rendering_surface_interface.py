"""
Rendering Surface Interface

Boundary to whatever displays the camera feed and plays back clips.
The capture controllers never render pixels; they hand borrowed stream
references and finished clips across this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from capture.interfaces.capture_platform_interface import StreamInterface
from capture.models import Clip


class RenderingSurfaceInterface(ABC):
    """
    Display contract used by SessionStateMachine.

    The surface only borrows streams. It may cache the one it displays,
    in which case detach_stream() must hand that reference back so the
    resource manager can stop it.
    """

    @abstractmethod
    def show_stream(self, stream: StreamInterface) -> None:
        """Display a live feed (borrowed reference)"""
        pass

    @abstractmethod
    def detach_stream(self) -> Optional[StreamInterface]:
        """
        Stop displaying the live feed.

        Returns:
            The stream reference the surface held, or None
        """
        pass

    @abstractmethod
    def show_clip(self, clip: Clip) -> None:
        """Display a finished clip for review"""
        pass

    @abstractmethod
    def clear_clip(self) -> None:
        """Remove the reviewed clip"""
        pass

    @abstractmethod
    def show_countdown(self, text: str) -> None:
        """Update the REC indicator (MM:SS)"""
        pass

    @abstractmethod
    def show_permission_denied(self, message: str) -> None:
        """Display the permission screen with a retry affordance"""
        pass

    @abstractmethod
    def alert(self, message: str) -> None:
        """Alert-level notification to the operator"""
        pass
