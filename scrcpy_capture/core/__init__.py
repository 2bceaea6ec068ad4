"""
scrcpy_capture Core Module

Building blocks of the capture engine:
- adb command execution and device list parsing
- scrcpy-server parameters and lifecycle
- video stream socket
- frame extraction hook
- screencap fallback capture
- image encoding

Based on scrcpy (Screen Copy) from Genymobile
https://github.com/Genymobile/scrcpy
"""

from .adb import (
    ADBRunner,
    ADBDevice,
    ADBDeviceState,
    ADBError,
    CommandResult,
    ServerNotFoundError,
    find_adb_executable,
    find_server_path,
    parse_devices,
    run_command,
)
from .server_params import ServerOptions, build_server_command
from .server import MirrorServerController, MirrorServerHandle
from .socket import (
    ScrcpySocket,
    VideoStream,
    SocketConfig,
    SocketState,
    SocketError,
    SocketConnectionError,
    SocketReadError,
)
from .frame import FrameReader
from .screencap import ScreencapCapture
from .imaging import image_format_for_path, save_image, to_rgb_array

__all__ = [
    # ADB
    "ADBRunner",
    "ADBDevice",
    "ADBDeviceState",
    "ADBError",
    "CommandResult",
    "ServerNotFoundError",
    "find_adb_executable",
    "find_server_path",
    "parse_devices",
    "run_command",
    # Server
    "ServerOptions",
    "build_server_command",
    "MirrorServerController",
    "MirrorServerHandle",
    # Socket
    "ScrcpySocket",
    "VideoStream",
    "SocketConfig",
    "SocketState",
    "SocketError",
    "SocketConnectionError",
    "SocketReadError",
    # Capture
    "FrameReader",
    "ScreencapCapture",
    "image_format_for_path",
    "save_image",
    "to_rgb_array",
]
