"""
Base Socket Class

This module provides the ScrcpySocket class that handles low-level
TCP client operations: connection establishment with retries, bounded
reads, state management and idempotent close.
"""

import socket
import threading
import logging
import time

from .types import (
    SocketConfig,
    SocketState,
    SocketConnectionError,
    SocketReadError,
    SocketTimeoutError,
)

logger = logging.getLogger(__name__)


class ScrcpySocket:
    """
    Client socket for an adb-forwarded scrcpy port

    Example:
        >>> sock = ScrcpySocket(SocketConfig(port=27183))
        >>> sock.connect()
        >>> data = sock.recv(1024)
        >>> sock.close()
    """

    def __init__(self, config: SocketConfig):
        self.config = config
        self._socket: socket.socket | None = None
        self._state = SocketState.DISCONNECTED
        self._lock = threading.RLock()
        self._closed = False

    @property
    def state(self) -> SocketState:
        """Get current socket state"""
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        """Check if socket is connected"""
        with self._lock:
            return self._state == SocketState.CONNECTED

    def connect(self, retries: int = 3, retry_delay: float = 0.1) -> bool:
        """
        Establish socket connection

        Args:
            retries: Number of connection attempts
            retry_delay: Delay between attempts in seconds

        Returns:
            True if connection successful

        Raises:
            SocketConnectionError: If connection fails after all retries
        """
        with self._lock:
            if self._state == SocketState.CONNECTED:
                logger.warning("Socket already connected")
                return True

            if self._closed:
                raise SocketConnectionError("Socket is closed")

            self._state = SocketState.CONNECTING

        last_error = None
        attempts = max(1, retries)

        for attempt in range(attempts):
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                sock.settimeout(self.config.connect_timeout)
                if self.config.tcp_nodelay:
                    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

                logger.debug(
                    f"Connecting to {self.config.host}:{self.config.port} "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                sock.connect((self.config.host, self.config.port))
                sock.settimeout(self.config.read_timeout)

                with self._lock:
                    self._socket = sock
                    self._state = SocketState.CONNECTED

                logger.info(f"Connected to {self.config.host}:{self.config.port}")
                return True

            except socket.timeout:
                last_error = (
                    f"Connection timeout to {self.config.host}:{self.config.port}"
                )
                logger.debug(f"Connection attempt {attempt + 1} timed out")
            except ConnectionRefusedError:
                last_error = (
                    f"Connection refused by {self.config.host}:{self.config.port}"
                )
                logger.debug(f"Connection attempt {attempt + 1} refused")
            except OSError as e:
                last_error = f"Socket error: {e}"
                logger.debug(f"Connection attempt {attempt + 1} failed: {e}")

            sock.close()
            if attempt < attempts - 1:
                time.sleep(retry_delay)

        with self._lock:
            self._state = SocketState.ERROR

        raise SocketConnectionError(
            f"Failed to connect after {attempts} attempts: {last_error}"
        )

    def recv(self, size: int) -> bytes:
        """
        Receive up to `size` bytes

        Raises:
            SocketTimeoutError: If nothing arrived within read_timeout
            SocketReadError: If not connected, the peer closed, or the read failed
        """
        with self._lock:
            sock = self._socket
            if not sock or self._state != SocketState.CONNECTED:
                raise SocketReadError("Socket not connected")

        try:
            data = sock.recv(size)
        except socket.timeout:
            raise SocketTimeoutError("Receive timeout")
        except OSError as e:
            with self._lock:
                self._state = SocketState.ERROR
            raise SocketReadError(f"Receive error: {e}")

        if not data:
            with self._lock:
                self._state = SocketState.ERROR
            raise SocketReadError("Connection closed by remote")
        return data

    def recv_all(self, size: int) -> bytes:
        """
        Receive exactly `size` bytes

        Raises:
            SocketReadError: If a receive fails before `size` bytes arrive
        """
        data = bytearray()
        remaining = size

        while remaining > 0:
            chunk = self.recv(min(remaining, self.config.buffer_size))
            data.extend(chunk)
            remaining -= len(chunk)

        return bytes(data)

    def close(self) -> None:
        """Close socket connection (safe to call repeatedly)"""
        with self._lock:
            if self._closed:
                return

            self._closed = True
            self._state = SocketState.DISCONNECTED

            if self._socket:
                try:
                    self._socket.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass  # Not connected or already shut down

                self._socket.close()
                self._socket = None

                logger.debug("Socket closed")
