"""
Configuration and state for the capture client.

This module contains the configuration and per-device state dataclasses
used by AndroidDevice and DeviceManager.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from scrcpy_capture.core.server import (
    DEFAULT_PORT,
    DEFAULT_REMOTE_PATH,
    DEFAULT_SOCKET_NAME,
)
from scrcpy_capture.core.server_params import (
    DEFAULT_MAIN_CLASS,
    DEFAULT_SERVER_VERSION,
    ServerOptions,
)
from scrcpy_capture.core.screencap import DEFAULT_DEVICE_PATH
from scrcpy_capture.core.socket.types import SocketConfig


@dataclass
class CaptureConfig:
    """
    Configuration for screenshot capture.
    """
    # Connection settings
    host: str = "127.0.0.1"
    local_port: int = DEFAULT_PORT
    socket_name: str = DEFAULT_SOCKET_NAME

    # Server settings
    remote_server_path: str = DEFAULT_REMOTE_PATH
    server_main_class: str = DEFAULT_MAIN_CLASS
    server_version: str = DEFAULT_SERVER_VERSION
    settle_delay: float = 2.0  # Time for the server to bind its socket

    # Optional video settings forwarded to the server
    max_size: Optional[int] = None
    max_fps: Optional[int] = None
    display_id: Optional[int] = None

    # Timeouts
    connect_timeout: float = 5.0
    connect_retries: int = 3
    read_timeout: float = 5.0
    command_timeout: float = 30.0
    stop_timeout: float = 5.0

    # screencap fallback
    device_screenshot_path: str = DEFAULT_DEVICE_PATH
    temp_dir: Optional[str] = None  # None = system temp directory

    # File output
    jpeg_quality: int = 95

    def server_options(self) -> ServerOptions:
        return ServerOptions(
            version=self.server_version,
            max_size=self.max_size,
            max_fps=self.max_fps,
            display_id=self.display_id,
        )

    def socket_config(self) -> SocketConfig:
        return SocketConfig(
            host=self.host,
            port=self.local_port,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )


class ConnectionState(Enum):
    """Mirror connection state of one device"""

    DISCONNECTED = "disconnected"
    SERVER_STARTING = "server_starting"
    STREAM_CONNECTING = "stream_connecting"
    CONNECTED = "connected"


@dataclass
class DeviceState:
    """Per-device state tracking."""
    serial: str
    name: Optional[str] = None  # Cached after the first successful lookup
    connection: ConnectionState = ConnectionState.DISCONNECTED


__all__ = [
    "CaptureConfig",
    "ConnectionState",
    "DeviceState",
]
