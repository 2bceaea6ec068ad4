"""
scrcpy-capture - Android Screenshot Capture

Captures screenshots from Android devices using adb and scrcpy-server.

This package provides functionality to:
- List connected devices via ADB
- Capture screenshots through a scrcpy-server mirror session, falling
  back to `screencap` when no frame is available
- Keep a mirror session open across repeated captures
- Save screenshots as PNG, JPEG, BMP or GIF

Based on scrcpy from Genymobile:
https://github.com/Genymobile/scrcpy

Example:
    >>> from scrcpy_capture import DeviceManager
    >>>
    >>> manager = DeviceManager()
    >>> device = manager.get_device("ABC123")
    >>> device.capture_screenshot_to_file("screen.png")
"""

from .core import (
    ADBRunner,
    ADBDevice,
    ADBError,
    CommandResult,
    ServerNotFoundError,
    MirrorServerController,
    VideoStream,
    FrameReader,
    ScreencapCapture,
    run_command,
)
from .client import (
    AndroidDevice,
    DeviceManager,
    CaptureConfig,
    ConnectionState,
    ScreenCaptureError,
    CaptureFailedError,
    NotConnectedError,
    MirrorConnectError,
)
from .factory import (
    create_device_manager,
    capture_screenshot_from_first_device,
    capture_screenshot_from_device,
    save_screenshot_from_first_device,
)

__version__ = "0.1.0"
__all__ = [
    # ADB and server
    "ADBRunner",
    "ADBDevice",
    "ADBError",
    "CommandResult",
    "ServerNotFoundError",
    "MirrorServerController",
    "VideoStream",
    "FrameReader",
    "ScreencapCapture",
    "run_command",
    # Client
    "AndroidDevice",
    "DeviceManager",
    "CaptureConfig",
    "ConnectionState",
    # Exceptions
    "ScreenCaptureError",
    "CaptureFailedError",
    "NotConnectedError",
    "MirrorConnectError",
    # Convenience
    "create_device_manager",
    "capture_screenshot_from_first_device",
    "capture_screenshot_from_device",
    "save_screenshot_from_first_device",
]
