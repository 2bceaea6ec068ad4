"""
Mirror Server Controller

Deploys scrcpy-server to a device, forwards its abstract socket to a local
TCP port, launches it through `adb shell app_process`, and tears all of it
down again.

Startup is a fail-fast pipeline:
1. Push the payload to the device
2. Create the forward tunnel
3. Launch the server as a local supervisor process
4. Wait for the server to bind its socket

Teardown is the opposite: every resource is released best-effort, whichever
of them were actually acquired.
"""

import logging
import subprocess
import tempfile
import time
from dataclasses import dataclass
from typing import IO, Callable, Optional

from .adb import ADBRunner
from .server_params import DEFAULT_MAIN_CLASS, ServerOptions, build_server_command
from .socket.video import VideoStream

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_PATH = "/data/local/tmp/scrcpy-server.jar"
DEFAULT_SOCKET_NAME = "scrcpy"
DEFAULT_PORT = 27183


@dataclass
class MirrorServerHandle:
    """
    Resources of one running mirror session

    Attributes:
        process: Local adb process supervising the remote server
        stream: Connected video stream, once attached
        stderr_log: Temporary file receiving the supervisor's stderr
    """

    process: Optional[subprocess.Popen] = None
    stream: Optional[VideoStream] = None
    stderr_log: Optional[IO[bytes]] = None


class MirrorServerController:
    """
    Lifecycle of scrcpy-server for one device

    Example:
        >>> controller = MirrorServerController(ADBRunner(), "ABC123", "scrcpy-server")
        >>> if controller.start():
        ...     ...  # connect to 127.0.0.1:27183
        >>> controller.stop()
    """

    def __init__(
        self,
        runner: ADBRunner,
        serial: str,
        server_path: str,
        options: Optional[ServerOptions] = None,
        remote_path: str = DEFAULT_REMOTE_PATH,
        main_class: str = DEFAULT_MAIN_CLASS,
        socket_name: str = DEFAULT_SOCKET_NAME,
        local_port: int = DEFAULT_PORT,
        settle_delay: float = 2.0,
        stop_timeout: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the controller

        Args:
            runner: adb command runner
            serial: Device serial
            server_path: Local path of the scrcpy-server payload
            options: Server launch options (capture-only defaults if None)
            remote_path: Device path the payload is pushed to
            main_class: Server entry point
            socket_name: Device-side abstract socket name
            local_port: Local TCP port forwarded to the device socket
            settle_delay: Seconds to wait for the server to bind its socket
            stop_timeout: Seconds to wait for the supervisor to exit
            sleep: Delay function used for the settle wait
        """
        self.runner = runner
        self.serial = serial
        self.server_path = server_path
        self.options = options or ServerOptions()
        self.remote_path = remote_path
        self.main_class = main_class
        self.socket_name = socket_name
        self.local_port = local_port
        self.settle_delay = settle_delay
        self.stop_timeout = stop_timeout
        self._sleep = sleep
        self.handle = MirrorServerHandle()

    @property
    def is_running(self) -> bool:
        """Whether the supervisor process is alive"""
        process = self.handle.process
        return process is not None and process.poll() is None

    def start(self) -> bool:
        """
        Push, forward, launch and wait for the server

        Returns:
            True if the server is running, False if any step failed
        """
        logger.info(f"[{self.serial}] Starting mirror server")

        push = self.runner.push(self.serial, self.server_path, self.remote_path)
        if not push.success:
            logger.warning(f"[{self.serial}] Failed to push server: {push.error.strip()}")
            return False

        forward = self.runner.forward(self.serial, self.local_port, self.socket_name)
        if not forward.success:
            logger.warning(
                f"[{self.serial}] Failed to forward tcp:{self.local_port}: "
                f"{forward.error.strip()}"
            )
            return False
        logger.debug(
            f"[{self.serial}] Tunnel created: tcp:{self.local_port} <-> "
            f"localabstract:{self.socket_name}"
        )

        args = build_server_command(self.remote_path, self.options, self.main_class)
        self.handle.stderr_log = tempfile.TemporaryFile()
        try:
            self.handle.process = self.runner.spawn(
                self.serial, args, stderr=self.handle.stderr_log
            )
        except OSError as e:
            logger.warning(f"[{self.serial}] Failed to launch server: {e}")
            return False

        self._sleep(self.settle_delay)

        returncode = self.handle.process.poll()
        if returncode is not None:
            stderr = self._read_stderr(self.handle.stderr_log)
            logger.warning(
                f"[{self.serial}] Server exited during startup "
                f"(code {returncode}): {stderr}"
            )
            return False

        logger.info(f"[{self.serial}] Mirror server running")
        return True

    def attach_stream(self, stream: VideoStream) -> None:
        """Record the connected stream so it is released with the server"""
        self.handle.stream = stream

    def stop(self) -> None:
        """
        Release the stream, the supervisor process and the forward tunnel

        Safe to call in any state and repeatedly; never raises.
        """
        handle = self.handle
        self.handle = MirrorServerHandle()

        if handle.stream is not None:
            try:
                handle.stream.close()
            except Exception as e:
                logger.debug(f"[{self.serial}] Ignoring stream close error: {e}")

        if handle.process is not None:
            self._terminate(handle.process)

        if handle.stderr_log is not None:
            try:
                handle.stderr_log.close()
            except OSError as e:
                logger.debug(f"[{self.serial}] Ignoring stderr log close error: {e}")

        try:
            result = self.runner.remove_forward(self.serial, self.local_port)
            if not result.success:
                logger.debug(
                    f"[{self.serial}] Forward removal reported: {result.error.strip()}"
                )
        except Exception as e:
            logger.debug(f"[{self.serial}] Ignoring forward removal error: {e}")

        logger.debug(f"[{self.serial}] Mirror server stopped")

    def _terminate(self, process: subprocess.Popen) -> None:
        try:
            if process.poll() is None:
                process.terminate()
                process.wait(timeout=self.stop_timeout)
        except Exception as e:
            logger.warning(f"[{self.serial}] Failed to terminate server process: {e}")
            try:
                process.kill()
                process.wait(timeout=self.stop_timeout)
            except Exception:
                logger.debug(f"[{self.serial}] Ignoring kill error", exc_info=True)

    @staticmethod
    def _read_stderr(log: Optional[IO[bytes]]) -> str:
        if log is None:
            return ""
        try:
            log.flush()
            log.seek(0)
            data = log.read()
        except (OSError, ValueError):
            return ""
        return data.decode("utf-8", errors="replace").strip()
