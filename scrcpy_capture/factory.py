"""
Convenience functions for one-off screenshots.
"""

import logging
from typing import Optional

from PIL import Image

from scrcpy_capture.client.config import CaptureConfig
from scrcpy_capture.client.manager import DeviceManager

logger = logging.getLogger(__name__)


def create_device_manager(
    adb_path: Optional[str] = None,
    server_path: Optional[str] = None,
    config: Optional[CaptureConfig] = None,
) -> DeviceManager:
    """Create a DeviceManager (paths are discovered when None)"""
    return DeviceManager(adb_path=adb_path, server_path=server_path, config=config)


def capture_screenshot_from_first_device(
    adb_path: Optional[str] = None,
    server_path: Optional[str] = None,
    config: Optional[CaptureConfig] = None,
) -> Optional[Image.Image]:
    """
    Capture a screenshot from the first connected device

    Returns:
        Screenshot, or None if no device is connected

    Raises:
        CaptureFailedError: If the capture failed
    """
    manager = create_device_manager(adb_path, server_path, config)
    devices = manager.get_connected_devices()
    if not devices:
        logger.warning("No connected devices")
        return None

    device = manager.get_device(devices[0])
    return device.capture_screenshot() if device is not None else None


def capture_screenshot_from_device(
    serial: str,
    adb_path: Optional[str] = None,
    server_path: Optional[str] = None,
    config: Optional[CaptureConfig] = None,
) -> Optional[Image.Image]:
    """
    Capture a screenshot from a specific device

    Returns:
        Screenshot, or None for a blank serial

    Raises:
        CaptureFailedError: If the capture failed
    """
    if not serial or not serial.strip():
        return None

    manager = create_device_manager(adb_path, server_path, config)
    device = manager.get_device(serial)
    return device.capture_screenshot() if device is not None else None


def save_screenshot_from_first_device(
    file_path: str,
    adb_path: Optional[str] = None,
    server_path: Optional[str] = None,
    config: Optional[CaptureConfig] = None,
) -> bool:
    """
    Save a screenshot of the first connected device

    Returns:
        True if the screenshot was saved
    """
    manager = create_device_manager(adb_path, server_path, config)
    devices = manager.get_connected_devices()
    if not devices:
        logger.warning("No connected devices")
        return False

    device = manager.get_device(devices[0])
    return device is not None and device.capture_screenshot_to_file(file_path)


__all__ = [
    "create_device_manager",
    "capture_screenshot_from_first_device",
    "capture_screenshot_from_device",
    "save_screenshot_from_first_device",
]
