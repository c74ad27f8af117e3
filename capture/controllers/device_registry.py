"""
Device Registry

Holds the cameras found by the last successful permission probe and
tracks which one is selected.
"""

import logging
from typing import Iterable, List, Optional

from capture.models import DeviceDescriptor


class DeviceRegistry:
    """
    Ordered set of video input devices plus the current selection.

    Order is whatever the platform reported; it is only stable within
    one enumeration.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._devices: List[DeviceDescriptor] = []
        self._selected_id: Optional[str] = None

    def populate(self, devices: Iterable[DeviceDescriptor]) -> None:
        """
        Replace the registry contents with freshly enumerated cameras.

        Non-video devices and duplicate ids are dropped. The first device
        is auto-selected when nothing (still present) is selected.
        """
        seen = set()
        cameras = []
        for device in devices:
            if not device.is_video_input or device.id in seen:
                continue
            seen.add(device.id)
            cameras.append(device)
        self._devices = cameras

        if self._selected_id not in seen:
            self._selected_id = cameras[0].id if cameras else None
            if self._selected_id:
                self.logger.info(f"Selected device: {cameras[0].label}")

    def list(self) -> List[DeviceDescriptor]:
        return list(self._devices)

    def __len__(self) -> int:
        return len(self._devices)

    def selected(self) -> Optional[DeviceDescriptor]:
        return self.get(self._selected_id) if self._selected_id else None

    def get(self, device_id: str) -> Optional[DeviceDescriptor]:
        for device in self._devices:
            if device.id == device_id:
                return device
        return None

    def select(self, device_id: str) -> DeviceDescriptor:
        """
        Select a device by id.

        Raises:
            KeyError: If the id is not in the registry
        """
        device = self.get(device_id)
        if device is None:
            raise KeyError(device_id)
        self._selected_id = device_id
        self.logger.info(f"Selected device: {device.label}")
        return device

    def next(self, current_id: Optional[str]) -> Optional[DeviceDescriptor]:
        """
        Device following `current_id`, wrapping to the first.

        Returns None when there is nothing to switch to (0 or 1 devices).
        An unknown `current_id` yields the first device.
        """
        if len(self._devices) < 2:
            return None
        ids = [d.id for d in self._devices]
        index = ids.index(current_id) if current_id in ids else -1
        return self._devices[(index + 1) % len(self._devices)]

    def clear(self) -> None:
        self._devices = []
        self._selected_id = None
