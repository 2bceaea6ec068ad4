"""
Device discovery and lookup.

DeviceManager resolves the adb and scrcpy-server paths, lists connected
devices, and hands out one AndroidDevice per serial.
"""

import logging
import os
import threading
from typing import Dict, List, Optional

from scrcpy_capture.core.adb import (
    ADBRunner,
    find_adb_executable,
    find_server_path,
    parse_devices,
)
from scrcpy_capture.client.config import CaptureConfig
from scrcpy_capture.client.device import AndroidDevice

logger = logging.getLogger(__name__)


class DeviceManager:
    """
    Android device manager

    Example:
        >>> manager = DeviceManager()
        >>> for serial in manager.get_connected_devices():
        ...     device = manager.get_device(serial)
        ...     device.capture_screenshot_to_file(f"{serial}.png")
    """

    def __init__(
        self,
        adb_path: Optional[str] = None,
        server_path: Optional[str] = None,
        config: Optional[CaptureConfig] = None,
        search_dir: Optional[str] = None,
    ):
        """
        Initialize the manager

        Args:
            adb_path: Path to adb executable (default: search directory, then PATH)
            server_path: Path to scrcpy-server file (default: search directory)
            config: Capture configuration shared by all devices
            search_dir: Application directory searched for adb and scrcpy-server

        Raises:
            ServerNotFoundError: If server_path is None and no payload is found
        """
        self.config = config or CaptureConfig()
        self._adb_path = adb_path or find_adb_executable(search_dir)
        self._server_path = server_path or find_server_path(search_dir)
        self.runner = ADBRunner(self._adb_path, timeout=self.config.command_timeout)
        self._devices: Dict[str, AndroidDevice] = {}
        self._lock = threading.Lock()

    @property
    def adb_path(self) -> str:
        return self._adb_path

    @property
    def server_path(self) -> str:
        return self._server_path

    def get_connected_devices(self) -> List[str]:
        """
        List serials of devices in the `device` state

        Returns:
            Serials in adb output order (empty if adb failed)
        """
        result = self.runner.devices()
        if not result.success:
            logger.warning(f"adb devices failed: {result.error.strip()}")
            return []

        serials = [d.serial for d in parse_devices(result.output) if d.is_ready()]
        logger.debug(f"Connected devices: {serials}")
        return serials

    def get_device(self, serial: str) -> Optional[AndroidDevice]:
        """
        Get the device for a serial, creating it on first use

        Returns:
            AndroidDevice, or None for a blank serial
        """
        if not serial or not serial.strip():
            return None

        with self._lock:
            device = self._devices.get(serial)
            if device is None:
                device = AndroidDevice(
                    serial,
                    adb_path=self._adb_path,
                    server_path=self._server_path,
                    config=self.config,
                    runner=self.runner,
                )
                self._devices[serial] = device
            return device

    def is_adb_available(self) -> bool:
        """Check that adb runs and identifies itself"""
        result = self.runner.version()
        return result.success and "Android Debug Bridge" in result.output

    def is_server_available(self) -> bool:
        """Check that the scrcpy-server payload exists"""
        return os.path.isfile(self._server_path)

    def close(self) -> None:
        """Disconnect every device handed out by this manager"""
        with self._lock:
            devices = list(self._devices.values())
        for device in devices:
            device.disconnect()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


__all__ = [
    "DeviceManager",
]
