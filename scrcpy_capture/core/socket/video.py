"""
Video Socket Module

This module provides the VideoStream class, the connection to the
adb-forwarded scrcpy video port.
"""

import logging
from dataclasses import replace

from .base import ScrcpySocket
from .types import SocketConfig, SocketConnectionError

logger = logging.getLogger(__name__)

# Device-info header preceding the elementary stream:
# dummy byte (1) + device name (64) + codec id (4)
DEVICE_NAME_FIELD_LENGTH = 64
HEADER_SIZE = 1 + DEVICE_NAME_FIELD_LENGTH + 4


class VideoStream(ScrcpySocket):
    """
    Video stream socket

    Right after the server is launched the remote side may still be binding
    its socket, so a failed connect is an expected outcome and is reported
    as False rather than raised.

    Example:
        >>> stream = VideoStream(SocketConfig(port=27183))
        >>> if stream.connect():
        ...     header = stream.read_header()
        >>> stream.close()
    """

    def __init__(self, config: SocketConfig | None = None, retries: int = 3):
        if config is None:
            config = SocketConfig()

        # Larger buffer for video; the caller's config is left untouched
        super().__init__(replace(config, buffer_size=256 * 1024))
        self.retries = retries
        self.header: bytes | None = None
        self._partial_header = bytearray()

    def connect(self, retries: int | None = None, retry_delay: float = 0.1) -> bool:
        """
        Connect to the forwarded port

        Returns:
            True if connected, False on refusal or timeout
        """
        try:
            return super().connect(
                retries=self.retries if retries is None else retries,
                retry_delay=retry_delay,
            )
        except SocketConnectionError as e:
            logger.warning(f"Video stream connection failed: {e}")
            return False

    @property
    def header_consumed(self) -> bool:
        return self.header is not None

    def read_header(self) -> bytes:
        """
        Read the device-info header that precedes the video stream

        Bytes received before a timeout are kept, so a later call resumes
        where this one stopped.

        Raises:
            SocketTimeoutError: If the header did not arrive within read_timeout
            SocketReadError: If the header cannot be read
        """
        while len(self._partial_header) < HEADER_SIZE:
            self._partial_header.extend(
                self.recv(HEADER_SIZE - len(self._partial_header))
            )

        self.header = bytes(self._partial_header)
        logger.debug(f"Read {len(self.header)}-byte stream header")
        return self.header
