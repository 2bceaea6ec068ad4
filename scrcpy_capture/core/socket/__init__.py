"""
Socket Communication Package

This package provides the socket layer for the scrcpy video stream,
reached through an adb forward tunnel on the local host.
"""

from .types import (
    SocketState,
    SocketConfig,
    SocketError,
    SocketConnectionError,
    SocketReadError,
    SocketTimeoutError,
)
from .base import ScrcpySocket
from .video import VideoStream, HEADER_SIZE

__all__ = [
    # Types
    "SocketState",
    "SocketConfig",
    # Exceptions
    "SocketError",
    "SocketConnectionError",
    "SocketReadError",
    "SocketTimeoutError",
    # Sockets
    "ScrcpySocket",
    "VideoStream",
    "HEADER_SIZE",
]
