"""
Permission Resolver

Runs the one-time camera+microphone probe, classifies the outcome and
fills the device registry.

The probe stream is released immediately; it only proves access. Some
platforms never answer when the prompt is dismissed, so the probe is
bounded by PERMISSION_PROBE_TIMEOUT.
"""

import asyncio
import logging

from capture.constants import PermissionFailure, PermissionState
from capture.controllers.device_registry import DeviceRegistry
from capture.interfaces.capture_platform_interface import (
    AccessDeniedError,
    CaptureError,
    CapturePlatformInterface,
    DeviceBusyError,
    DeviceNotFoundError,
    ProbeTimeoutError,
)
from capture.models import MediaConstraints, PermissionResult
from config.settings import PERMISSION_PROBE_TIMEOUT


def classify_capture_error(error: Exception) -> PermissionFailure:
    """
    Map a platform error to a permission failure cause.

    Example:
        classify_capture_error(DeviceBusyError()) -> PermissionFailure.DEVICE_BUSY
    """
    if isinstance(error, ProbeTimeoutError):
        return PermissionFailure.TIMED_OUT
    if isinstance(error, AccessDeniedError):
        return PermissionFailure.ACCESS_DENIED
    if isinstance(error, DeviceNotFoundError):
        return PermissionFailure.DEVICE_NOT_FOUND
    if isinstance(error, DeviceBusyError):
        return PermissionFailure.DEVICE_BUSY
    return PermissionFailure.UNSPECIFIED


class PermissionResolver:
    """
    Resolves capture permission to GRANTED or DENIED.

    Usage:
        resolver = PermissionResolver(platform, registry)
        result = await resolver.resolve()
        if result.state is PermissionState.DENIED:
            print(result.message)
    """

    def __init__(
        self,
        platform: CapturePlatformInterface,
        registry: DeviceRegistry,
        timeout: float = PERMISSION_PROBE_TIMEOUT,
    ):
        self.logger = logging.getLogger(__name__)
        self.platform = platform
        self.registry = registry
        self.timeout = timeout
        self._result = PermissionResult.requesting()

    @property
    def result(self) -> PermissionResult:
        return self._result

    @property
    def state(self) -> PermissionState:
        return self._result.state

    def reset(self) -> None:
        """Forget the previous outcome (back to REQUESTING)"""
        self._result = PermissionResult.requesting()

    async def resolve(self) -> PermissionResult:
        """
        Probe access and enumerate cameras.

        Safe to call again after a denial; the probe is fully re-run.

        Returns:
            GRANTED if access works and a camera exists, DENIED otherwise
        """
        self.reset()
        self.logger.info("Requesting camera permission...")

        try:
            try:
                self._result = await asyncio.wait_for(self._probe(), self.timeout)
            except asyncio.TimeoutError as e:
                raise ProbeTimeoutError(
                    f"No answer within {self.timeout:.0f}s",
                ) from e
        except CaptureError as e:
            failure = classify_capture_error(e)
            self.logger.error(
                f"Camera detection error ({failure.value}): {type(e).__name__}: {e}",
            )
            self._result = PermissionResult.denied(failure, detail=str(e))
        except Exception as e:
            self.logger.error(
                f"Unexpected camera detection error: {type(e).__name__}: {e}",
                exc_info=True,
            )
            self._result = PermissionResult.denied(
                PermissionFailure.UNSPECIFIED,
                detail=str(e),
            )

        if self._result.state is PermissionState.DENIED:
            # Cameras from an earlier grant are no longer usable
            self.registry.clear()

        self.logger.info(
            f"Camera detection completed: {self._result.state.value}"
            + (f" ({self._result.reason})" if self._result.reason else ""),
        )
        return self._result

    async def _probe(self) -> PermissionResult:
        probe = await self.platform.request_access(
            MediaConstraints(audio=True, video=True),
        )
        self.logger.info("Camera permission granted")
        probe.stop_all_tracks()

        devices = await self.platform.enumerate_devices()
        self.registry.populate(devices)
        cameras = self.registry.list()
        self.logger.info(
            f"Found video devices: {[d.label for d in cameras]}",
        )

        if not cameras:
            return PermissionResult.denied(PermissionFailure.NO_CAMERA)
        return PermissionResult.granted()
