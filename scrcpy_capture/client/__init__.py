"""
scrcpy_capture/client

Client package for scrcpy-capture.

This package contains the device-facing API:
- device: AndroidDevice, the capture orchestrator for one device
- manager: DeviceManager for listing and looking up devices
- config: Configuration and state dataclasses
- exceptions: Errors raised to callers

Usage:
    from scrcpy_capture.client import DeviceManager

    manager = DeviceManager()
    device = manager.get_device(manager.get_connected_devices()[0])
    device.capture_screenshot_to_file("screen.png")
"""

from .config import CaptureConfig, ConnectionState, DeviceState
from .device import AndroidDevice
from .manager import DeviceManager
from .exceptions import (
    ScreenCaptureError,
    CaptureFailedError,
    NotConnectedError,
    MirrorConnectError,
)

__all__ = [
    # Devices
    "AndroidDevice",
    "DeviceManager",

    # Configuration
    "CaptureConfig",
    "ConnectionState",
    "DeviceState",

    # Exceptions
    "ScreenCaptureError",
    "CaptureFailedError",
    "NotConnectedError",
    "MirrorConnectError",
]
