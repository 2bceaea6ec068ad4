"""
Socket Types and Configuration

This module defines socket states, configuration, and exceptions
for the mirror video stream connection.
"""

from dataclasses import dataclass
from enum import Enum


class SocketState(Enum):
    """Socket connection state"""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class SocketConfig:
    """
    Socket configuration

    Attributes:
        host: Target host address
        port: Target port number
        connect_timeout: Timeout for each connection attempt in seconds
        read_timeout: Timeout for each receive call in seconds
        buffer_size: Receive buffer size
        tcp_nodelay: Enable TCP_NODELAY
    """

    host: str = "127.0.0.1"
    port: int = 27183
    connect_timeout: float = 5.0
    read_timeout: float = 5.0
    buffer_size: int = 64 * 1024
    tcp_nodelay: bool = True


class SocketError(Exception):
    """Base exception for socket operations"""

    pass


class SocketConnectionError(SocketError):
    """Exception raised when connection fails"""

    pass


class SocketReadError(SocketError):
    """Exception raised when read operation fails"""

    pass


class SocketTimeoutError(SocketReadError):
    """Exception raised when a read times out; the connection stays usable"""

    pass
