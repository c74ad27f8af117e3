"""
Session State Machine

Orchestrates one capture session: permission probe, camera selection,
recording with a countdown, review of the finished clip and camera
switching.

The state is never stored. It is derived from the permission result,
the capture resources and the presence of a clip, so the components
cannot disagree about it.

State Flow:
    LOADING → READY → RECORDING → REVIEWING → READY
       ↓        ↺ (switch camera)
    PERMISSION_DENIED → (retry) → LOADING

SOLID Principles:
- Single Responsibility: Only decides which transition is allowed
- Dependency Inversion: Depends on CapturePlatformInterface and
  RenderingSurfaceInterface
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from capture.constants import PermissionState, SessionState
from capture.controllers.capture_resource_manager import CaptureResourceManager
from capture.controllers.device_registry import DeviceRegistry
from capture.controllers.permission_resolver import PermissionResolver
from capture.controllers.recording_timer import RecordingTimer
from capture.interfaces.capture_platform_interface import (
    CaptureError,
    CapturePlatformInterface,
)
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface
from capture.models import Clip, DeviceDescriptor, PermissionResult
from capture.utils.capture_utils import format_countdown
from config.settings import (
    LIVE_PREVIEW,
    MAX_CLIP_SECONDS,
    PERMISSION_PROBE_TIMEOUT,
    TICK_INTERVAL,
)


class SessionStateMachine:
    """
    Single-session capture controller.

    Features:
    - Permission probe with timeout and retry
    - Time-boxed recording (MAX_CLIP_SECONDS) with auto-stop
    - Review / record again
    - Camera switching with wrap-around
    - Callbacks for state changes, ticks, clips and errors

    Usage:
        session = SessionStateMachine(platform, surface)
        await session.initialize()

        if session.state is SessionState.READY:
            await session.start_recording()
            # ... ticks arrive every second, auto-stop at 0 ...
            await session.stop_recording()

        session.dispose()
    """

    def __init__(
        self,
        platform: CapturePlatformInterface,
        surface: Optional[RenderingSurfaceInterface] = None,
        max_clip_seconds: int = MAX_CLIP_SECONDS,
        probe_timeout: float = PERMISSION_PROBE_TIMEOUT,
        live_preview: bool = LIVE_PREVIEW,
        auto_tick: bool = True,
        tick_interval: float = TICK_INTERVAL,
    ):
        """
        Initialize session.

        Args:
            platform: Capture platform (real or mock)
            surface: Rendering surface, or None for headless use
            max_clip_seconds: Countdown start value
            probe_timeout: Upper bound on the permission probe
            live_preview: Keep a camera feed open while READY
            auto_tick: Drive the countdown from an asyncio task. When
                       False, call handle_tick() yourself.
            tick_interval: Seconds between automatic ticks
        """
        self.logger = logging.getLogger(__name__)
        self.surface = surface
        self.max_clip_seconds = max_clip_seconds
        self.live_preview = live_preview

        self.registry = DeviceRegistry()
        self.resolver = PermissionResolver(platform, self.registry, timeout=probe_timeout)
        self.resources = CaptureResourceManager(platform, surface)
        self.timer = RecordingTimer(
            on_tick=self.handle_tick if auto_tick else None,
            tick_interval=tick_interval,
            limit_seconds=max_clip_seconds,
        )

        self._clip: Optional[Clip] = None
        self._acquiring = False
        self._resolving = False
        self._disposed = False
        self._last_state = self.state

        # Callbacks for events
        self.on_state_change: Optional[Callable[[SessionState, SessionState], None]] = None
        self.on_tick: Optional[Callable[[str], None]] = None
        self.on_clip: Optional[Callable[[Clip], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None

        self.logger.info(
            f"Session State Machine initialized "
            f"(max clip: {format_countdown(max_clip_seconds)}, "
            f"live preview: {live_preview})",
        )

    # =========================================================================
    # DERIVED STATE
    # =========================================================================

    @property
    def state(self) -> SessionState:
        permission = self.resolver.state
        if permission is PermissionState.REQUESTING:
            return SessionState.LOADING
        if permission is PermissionState.DENIED:
            return SessionState.PERMISSION_DENIED
        if self.resources.is_recording:
            return SessionState.RECORDING
        if self._clip is not None:
            return SessionState.REVIEWING
        return SessionState.READY

    @property
    def permission(self) -> PermissionResult:
        return self.resolver.result

    @property
    def clip(self) -> Optional[Clip]:
        return self._clip

    @property
    def devices(self) -> List[DeviceDescriptor]:
        return self.registry.list()

    @property
    def selected_device(self) -> Optional[DeviceDescriptor]:
        return self.registry.selected()

    @property
    def countdown_display(self) -> str:
        """Remaining time as MM:SS (never negative)"""
        return format_countdown(self.timer.remaining())

    @property
    def is_busy(self) -> bool:
        """True while a probe or stream acquisition is in flight"""
        return self._acquiring or self._resolving

    @property
    def can_switch_camera(self) -> bool:
        return (
            self.state in (SessionState.READY, SessionState.REVIEWING)
            and len(self.registry) > 1
            and not self.is_busy
        )

    # =========================================================================
    # PERMISSIONS
    # =========================================================================

    async def initialize(self) -> PermissionResult:
        """
        Run the startup permission probe.

        Only the first probe runs here; later probes go through
        retry_permissions(). A session past LOADING is left untouched.

        Returns:
            The permission result (GRANTED → READY, DENIED → PERMISSION_DENIED)
        """
        if self.state is not SessionState.LOADING or self._resolving:
            self.logger.warning(
                f"Session already initialized (state: {self.state.value})",
            )
            return self.resolver.result
        return await self._resolve()

    async def retry_permissions(self) -> bool:
        """
        Re-run the probe after a denial (or run it if it never ran).

        Returns:
            True if the probe was re-run, False if not allowed now
        """
        allowed = (SessionState.PERMISSION_DENIED, SessionState.LOADING)
        if self.state not in allowed or self._resolving:
            self.logger.warning(
                f"Cannot retry permissions - session in state: {self.state.value}",
            )
            return False

        await self._resolve()
        return True

    async def _resolve(self) -> PermissionResult:
        if self._resolving:
            self.logger.warning("Permission probe already in progress")
            return self.resolver.result

        self._resolving = True
        try:
            self.resources.release()
            self.timer.reset()
            self._drop_clip()
            self.resolver.reset()
            self._notify_state("probing permissions")

            result = await self.resolver.resolve()
        finally:
            self._resolving = False

        if result.state is PermissionState.DENIED:
            if self.surface:
                self.surface.show_permission_denied(result.message or "")
            self._trigger_error_callback(result.message or "Camera access denied")
            self._notify_state(f"permission denied: {result.reason}")
            return result

        self._notify_state("permission granted")
        if self.live_preview:
            await self._open_preview()
        return result

    # =========================================================================
    # RECORDING
    # =========================================================================

    async def start_recording(self) -> bool:
        """
        Acquire the selected camera, start the recorder and the countdown.

        Failures are reported to the operator and leave the session READY.

        Returns:
            True if recording started, False otherwise
        """
        if self.state is not SessionState.READY:
            self.logger.error(f"Cannot start - session in state: {self.state.value}")
            return False
        if self._acquiring:
            self.logger.warning("Cannot start - camera acquisition in progress")
            return False

        device = self.registry.selected()
        device_id = device.id if device else None
        self.logger.info(
            f"Starting recording ({device.label if device else 'default camera'}, "
            f"{format_countdown(self.max_clip_seconds)})",
        )

        self._acquiring = True
        error: Optional[CaptureError] = None
        try:
            stream = await self.resources.acquire(device_id)
            await self.resources.start_recording(stream)
        except CaptureError as e:
            error = e
            self.resources.release()
        finally:
            self._acquiring = False

        if self._disposed:
            self.resources.release()
            return False

        if error is not None:
            self._report_error(f"Cannot start recording: {error}")
            self._notify_state("start failed")
            if self.live_preview:
                await self._open_preview()
            return False

        self.timer.start(self.max_clip_seconds)
        if self.surface:
            self.surface.show_stream(stream)
            self.surface.show_countdown(self.countdown_display)
        self._notify_state("recording started")
        return True

    async def stop_recording(self) -> bool:
        """
        Finalize the recording into a clip.

        Safe to call at any time: without an active recording (or when
        another stop already finalized it) this is a no-op.

        Returns:
            True if this call produced the clip, False otherwise
        """
        if self.state is not SessionState.RECORDING:
            self.logger.debug(f"No recording to stop (state: {self.state.value})")
            return False

        # Stop the countdown first so stray ticks during finalize do nothing
        self.timer.stop()
        handle = self.resources.recording

        try:
            clip = await self.resources.stop_recording(handle)
        except CaptureError as e:
            self._report_error(f"Recording failed: {e}")
            self._notify_state("recording failed")
            return False

        if clip is None:
            self._notify_state()
            return False

        self._clip = clip
        if self.surface:
            self.surface.show_clip(clip)
        self._trigger_clip_callback(clip)
        self._notify_state("recording finished")
        return True

    async def handle_tick(self) -> None:
        """
        Consume one countdown tick.

        Auto-stops through stop_recording() when the countdown expires
        or the recorder ended on its own.
        """
        if not self.timer.running:
            return

        expired = self.timer.tick()
        display = self.countdown_display
        if self.surface:
            self.surface.show_countdown(display)
        self._trigger_tick_callback(display)

        handle = self.resources.recording
        if expired:
            self.logger.info("Time limit reached, auto-stopping")
            await self.stop_recording()
        elif handle is not None and not handle.is_live:
            self.logger.warning("Recorder stopped on its own, finalizing clip")
            await self.stop_recording()

    # =========================================================================
    # CAMERA AND REVIEW
    # =========================================================================

    async def switch_camera(self) -> bool:
        """
        Move to the next camera (wrapping around).

        Releases the held stream and discards any reviewed clip.

        Returns:
            True if the camera changed, False if not allowed now
        """
        state = self.state
        if state not in (SessionState.READY, SessionState.REVIEWING):
            self.logger.warning(f"Cannot switch camera - session in state: {state.value}")
            return False
        if self._acquiring:
            self.logger.warning("Cannot switch camera - camera acquisition in progress")
            return False

        current = self.registry.selected()
        next_device = self.registry.next(current.id if current else None)
        if next_device is None:
            self.logger.warning("Cannot switch camera - only one camera available")
            return False

        self.resources.release()
        self.timer.reset()
        self._drop_clip()
        self.registry.select(next_device.id)
        self._notify_state(f"switched to {next_device.label}")

        if self.live_preview:
            await self._open_preview()
        return True

    async def reset_to_ready(self) -> bool:
        """
        Drop the reviewed clip and clear the countdown (record again).

        Does not re-probe permissions or re-enumerate devices.

        Returns:
            True if the session is READY afterwards
        """
        if self.state not in (SessionState.REVIEWING, SessionState.READY):
            self.logger.warning(f"Cannot reset - session in state: {self.state.value}")
            return False

        self._drop_clip()
        self.timer.reset()
        self._notify_state("record again")

        if self.live_preview and not self.resources.has_stream and not self._acquiring:
            await self._open_preview()
        return True

    async def _open_preview(self) -> bool:
        """Acquire the selected camera and hand it to the surface"""
        if self._acquiring or self._disposed:
            return False

        device = self.registry.selected()
        self._acquiring = True
        try:
            stream = await self.resources.acquire(device.id if device else None)
        except CaptureError as e:
            self._report_error(f"Camera unavailable: {e}")
            return False
        finally:
            self._acquiring = False

        if self._disposed:
            self.resources.release()
            return False

        if self.surface:
            self.surface.show_stream(stream)
        return True

    def _drop_clip(self) -> None:
        if self._clip is None:
            return
        self._clip = None
        if self.surface:
            self.surface.clear_clip()

    # =========================================================================
    # CALLBACK TRIGGERS
    # =========================================================================

    def _notify_state(self, reason: str = "") -> None:
        new_state = self.state
        old_state = self._last_state
        if new_state is old_state:
            return
        self._last_state = new_state

        log_msg = f"State transition: {old_state.value} -> {new_state.value}"
        if reason:
            log_msg += f" ({reason})"
        self.logger.info(log_msg)

        if self.on_state_change:
            try:
                self.on_state_change(old_state, new_state)
            except Exception as e:
                self.logger.error(f"Error in state change callback: {e}")

    def _report_error(self, message: str) -> None:
        """Notify the operator of a failure that did not end the session"""
        self.logger.error(message)
        if self.surface:
            self.surface.alert(message)
        self._trigger_error_callback(message)

    def _trigger_error_callback(self, message: str) -> None:
        if self.on_error:
            try:
                self.on_error(message)
            except Exception as e:
                self.logger.error(f"Error in error callback: {e}")

    def _trigger_tick_callback(self, display: str) -> None:
        if self.on_tick:
            try:
                self.on_tick(display)
            except Exception as e:
                self.logger.error(f"Error in tick callback: {e}")

    def _trigger_clip_callback(self, clip: Clip) -> None:
        if self.on_clip:
            try:
                self.on_clip(clip)
            except Exception as e:
                self.logger.error(f"Error in clip callback: {e}")

    # =========================================================================
    # STATUS AND TEARDOWN
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """
        Get complete session status.

        Returns:
            Dictionary with status information
        """
        selected = self.registry.selected()
        return {
            "state": self.state.value,
            "permission": self.permission.state.value,
            "permission_reason": self.permission.reason,
            "permission_message": self.permission.message,
            "devices": [d.label for d in self.registry.list()],
            "selected_device": selected.label if selected else None,
            "countdown": self.countdown_display,
            "has_stream": self.resources.has_stream,
            "clip_bytes": self._clip.size_bytes if self._clip else None,
            "can_switch_camera": self.can_switch_camera,
        }

    def dispose(self) -> None:
        """
        Synchronous teardown: stop the countdown, discard any recording,
        release the stream.

        Always call this when done with the session!
        """
        self.logger.info("Disposing capture session")
        self._disposed = True
        self.timer.reset()
        self.resources.cleanup()
        self._drop_clip()
