"""
Frame extraction from the mirror video stream.

The stream carries an H.264 elementary stream after its device-info header.
Decoding it into an image is not implemented: FrameReader consumes the
header and reports that no frame is available, so callers fall back to the
screencap strategy. This is the place to plug in a codec decoder.
"""

import logging
from typing import Optional

from PIL import Image

from .socket.types import SocketTimeoutError
from .socket.video import VideoStream

logger = logging.getLogger(__name__)


class FrameReader:
    """Reads a single frame from a connected VideoStream."""

    def read_frame(self, stream: VideoStream) -> Optional[Image.Image]:
        """
        Returns:
            Always None until a decoder is implemented. A stream that stays
            silent past its read timeout also yields None.

        Raises:
            SocketReadError: If the peer closed or the read failed
        """
        if not stream.header_consumed:
            try:
                stream.read_header()
            except SocketTimeoutError:
                logger.debug("No stream header within the read timeout, no frame available")
                return None

        logger.debug("Video frame decoding is not implemented, no frame available")
        return None
