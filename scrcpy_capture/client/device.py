"""
Android device screenshot capture.

AndroidDevice sequences the two capture strategies for one device:

1. Mirror stream: start scrcpy-server, connect to the forwarded video port,
   read one frame, tear everything down.
2. screencap fallback: render on the device and pull the PNG.

It also keeps a persistent mirror session open across capture calls
(connect_persistent / capture_from_connected / disconnect).

Connection state machine:

    DISCONNECTED -> SERVER_STARTING -> STREAM_CONNECTING -> CONNECTED
         ^                |                   |                 |
         +----------------+-------------------+-----------------+
                     (failure, disconnect, transport error)
"""

import logging
import threading
from typing import Callable, Optional

import numpy as np
from PIL import Image

from scrcpy_capture.core.adb import ADBRunner
from scrcpy_capture.core.frame import FrameReader
from scrcpy_capture.core.imaging import save_image, to_rgb_array
from scrcpy_capture.core.screencap import ScreencapCapture
from scrcpy_capture.core.server import MirrorServerController
from scrcpy_capture.core.socket.types import SocketError, SocketTimeoutError
from scrcpy_capture.core.socket.video import VideoStream

from scrcpy_capture.client.config import CaptureConfig, ConnectionState, DeviceState
from scrcpy_capture.client.exceptions import (
    CaptureFailedError,
    MirrorConnectError,
    NotConnectedError,
    ScreenCaptureError,
)

logger = logging.getLogger(__name__)

StreamFactory = Callable[..., VideoStream]


class AndroidDevice:
    """
    Screenshot capture for one Android device.

    Public operations are serialized by a per-device lock; different devices
    share no state and can be used concurrently.

    Example:
        >>> device = AndroidDevice("ABC123", adb_path="adb", server_path="scrcpy-server")
        >>> image = device.capture_screenshot()
        >>> device.capture_screenshot_to_file("screen.jpg")
        >>>
        >>> # Persistent session
        >>> if device.connect_persistent():
        ...     for _ in range(10):
        ...         image = device.capture_from_connected()
        ...     device.disconnect()
    """

    def __init__(
        self,
        serial: str,
        adb_path: str = "adb",
        server_path: str = "scrcpy-server",
        config: Optional[CaptureConfig] = None,
        runner: Optional[ADBRunner] = None,
        frame_reader: Optional[FrameReader] = None,
        stream_factory: StreamFactory = VideoStream,
    ):
        """
        Initialize the device.

        Args:
            serial: Device serial number
            adb_path: Path to adb executable
            server_path: Path to scrcpy-server payload
            config: Capture configuration (uses defaults if None)
            runner: adb runner (created from adb_path if None)
            frame_reader: Frame extraction hook (FrameReader if None)
            stream_factory: Creates the VideoStream from a SocketConfig
        """
        if not serial or not serial.strip():
            raise ValueError("Device serial cannot be empty")

        self.config = config or CaptureConfig()
        self.runner = runner or ADBRunner(adb_path, timeout=self.config.command_timeout)
        self.server_path = server_path
        self._state = DeviceState(serial=serial)
        self._lock = threading.RLock()

        self._controller = MirrorServerController(
            self.runner,
            serial,
            server_path,
            options=self.config.server_options(),
            remote_path=self.config.remote_server_path,
            main_class=self.config.server_main_class,
            socket_name=self.config.socket_name,
            local_port=self.config.local_port,
            settle_delay=self.config.settle_delay,
            stop_timeout=self.config.stop_timeout,
        )
        self._screencap = ScreencapCapture(
            self.runner,
            serial,
            device_path=self.config.device_screenshot_path,
            temp_dir=self.config.temp_dir,
        )
        self._frame_reader = frame_reader or FrameReader()
        self._stream_factory = stream_factory

    # ========== Properties ==========

    @property
    def serial(self) -> str:
        return self._state.serial

    @property
    def name(self) -> str:
        """Device model name, looked up once; the serial if the lookup fails"""
        with self._lock:
            if self._state.name is None:
                result = self.runner.shell(self.serial, "getprop", "ro.product.model")
                name = result.output.strip() if result.success else ""
                if not name:
                    logger.debug(f"[{self.serial}] Device name lookup failed")
                    return self.serial
                self._state.name = name
            return self._state.name

    @property
    def is_connected(self) -> bool:
        """Whether adb reports the device in the `device` state"""
        result = self.runner.get_state(self.serial)
        return result.success and result.output.strip() == "device"

    @property
    def connection_state(self) -> ConnectionState:
        with self._lock:
            return self._state.connection

    @property
    def is_mirror_connected(self) -> bool:
        """Whether a persistent mirror session is open"""
        return self.connection_state is ConnectionState.CONNECTED

    # ========== One-shot capture ==========

    def capture_screenshot(self) -> Image.Image:
        """
        Capture a screenshot.

        Runs a complete mirror session (start, connect, read, teardown) and
        falls back to screencap if it yields no frame. When a persistent
        session is open, it is reused instead.

        Returns:
            Screenshot image

        Raises:
            CaptureFailedError: If no capture strategy produced an image
        """
        with self._lock:
            if self._state.connection is ConnectionState.CONNECTED:
                logger.debug(f"[{self.serial}] Using persistent session for screenshot")
                return self._capture_from_session()

            try:
                image = self._capture_via_mirror()
                if image is None:
                    logger.info(f"[{self.serial}] Falling back to screencap")
                    image = self._screencap.capture()
            except Exception as e:
                raise CaptureFailedError(
                    self.serial, f"Screenshot capture failed: {e}"
                ) from e

            if image is None:
                raise CaptureFailedError(
                    self.serial, "Screenshot capture failed: no capture method succeeded"
                )
            return image

    def capture_screenshot_to_file(self, file_path: str) -> bool:
        """
        Capture a screenshot and save it.

        The encoder follows the file extension (.png, .jpg/.jpeg, .bmp, .gif;
        anything else is saved as PNG).

        Returns:
            True if the screenshot was saved

        Raises:
            ValueError: If file_path is empty
        """
        if not file_path or not str(file_path).strip():
            raise ValueError("File path cannot be empty")

        try:
            image = self.capture_screenshot()
            save_image(image, str(file_path), jpeg_quality=self.config.jpeg_quality)
            return True
        except (ScreenCaptureError, OSError) as e:
            logger.error(f"[{self.serial}] Failed to save screenshot to {file_path}: {e}")
            return False

    def capture_screenshot_array(self) -> np.ndarray:
        """
        Capture a screenshot as an RGB numpy array with shape (height, width, 3).

        Raises:
            CaptureFailedError: If no capture strategy produced an image
        """
        return to_rgb_array(self.capture_screenshot())

    # ========== Persistent session ==========

    def connect_persistent(self) -> bool:
        """
        Open a mirror session that stays connected across captures.

        Any previous session is torn down first.

        Returns:
            True if connected, False if server start or stream connect failed

        Raises:
            MirrorConnectError: If setup failed with an unexpected error
        """
        with self._lock:
            if self._state.connection is not ConnectionState.DISCONNECTED:
                logger.info(f"[{self.serial}] Closing previous session before reconnecting")
                self.disconnect()

            try:
                if self._open_session():
                    logger.info(f"[{self.serial}] Persistent mirror session connected")
                    return True
            except Exception as e:
                self._teardown()
                raise MirrorConnectError(
                    self.serial, f"Failed to connect to scrcpy server: {e}"
                ) from e

            self._teardown()
            return False

    def capture_from_connected(self) -> Image.Image:
        """
        Capture a screenshot from the open persistent session.

        A missing frame or a read timeout falls back to screencap and keeps
        the session; a transport error (peer closed, socket failure) closes
        the session before falling back.

        Returns:
            Screenshot image

        Raises:
            NotConnectedError: If connect_persistent() has not succeeded
            CaptureFailedError: If no capture strategy produced an image
        """
        with self._lock:
            if (
                self._state.connection is not ConnectionState.CONNECTED
                or self._controller.handle.stream is None
            ):
                raise NotConnectedError(
                    self.serial,
                    "Not connected to scrcpy server. Call connect_persistent() first",
                )
            return self._capture_from_session()

    def disconnect(self) -> None:
        """Close the mirror session. Safe in any state; never raises."""
        with self._lock:
            try:
                self._teardown()
            except Exception as e:
                logger.debug(f"[{self.serial}] Ignoring disconnect error: {e}")

    def close(self) -> None:
        self.disconnect()

    # ========== Internals ==========

    def _set_connection(self, state: ConnectionState) -> None:
        logger.debug(f"[{self.serial}] {self._state.connection.value} -> {state.value}")
        self._state.connection = state

    def _open_session(self) -> bool:
        """Start the server and connect the stream; leaves partial state for _teardown"""
        self._set_connection(ConnectionState.SERVER_STARTING)
        if not self._controller.start():
            return False

        self._set_connection(ConnectionState.STREAM_CONNECTING)
        stream = self._stream_factory(
            self.config.socket_config(), retries=self.config.connect_retries
        )
        self._controller.attach_stream(stream)
        if not stream.connect():
            return False

        self._set_connection(ConnectionState.CONNECTED)
        return True

    def _teardown(self) -> None:
        try:
            self._controller.stop()
        finally:
            self._set_connection(ConnectionState.DISCONNECTED)

    def _capture_via_mirror(self) -> Optional[Image.Image]:
        try:
            if not self._open_session():
                return None
            return self._frame_reader.read_frame(self._controller.handle.stream)
        except Exception as e:
            logger.warning(f"[{self.serial}] Mirror capture failed: {e}")
            return None
        finally:
            self._teardown()

    def _capture_from_session(self) -> Image.Image:
        image = None
        try:
            image = self._frame_reader.read_frame(self._controller.handle.stream)
        except SocketTimeoutError as e:
            logger.debug(f"[{self.serial}] No frame within the read timeout: {e}")
        except (SocketError, OSError) as e:
            logger.warning(f"[{self.serial}] Video stream lost, disconnecting: {e}")
            self._teardown()
        except Exception as e:
            logger.warning(f"[{self.serial}] Frame read failed: {e}")

        if image is None:
            image = self._screencap.capture()

        if image is None:
            raise CaptureFailedError(
                self.serial,
                "Screenshot capture from connected server failed: "
                "no capture method succeeded",
            )
        return image

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"AndroidDevice(serial={self.serial!r}, state={self.connection_state.value})"


__all__ = [
    "AndroidDevice",
]
