"""
ADB Command Module

This module wraps the adb command-line tool: running one-off commands,
spawning the long-running mirror server supervisor, parsing the device list,
and locating the adb executable and the scrcpy-server payload.

Every command returns a CommandResult instead of raising, so callers treat
tool failures as data.
"""

import os
import platform
import shutil
import subprocess
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class ADBDeviceState(Enum):
    """ADB device state"""

    UNKNOWN = "unknown"
    OFFLINE = "offline"
    DEVICE = "device"
    UNAUTHORIZED = "unauthorized"
    NO_PERMISSION = "no permissions"


@dataclass
class ADBDevice:
    """
    Represents one line of `adb devices` output

    Attributes:
        serial: Device serial number or IP:port
        state: Device state text as reported by adb (rest of the line)
    """

    serial: str
    state: str

    @property
    def device_state(self) -> ADBDeviceState:
        """State text mapped onto ADBDeviceState (UNKNOWN if unrecognized)"""
        for known in ADBDeviceState:
            if self.state == known.value or self.state.startswith(known.value + " "):
                return known
        return ADBDeviceState.UNKNOWN

    def is_ready(self) -> bool:
        """Check if device is ready for commands"""
        return self.device_state is ADBDeviceState.DEVICE


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one external command

    Attributes:
        success: True when the process exited with code 0
        output: Captured stdout
        error: Captured stderr, or the launch failure description
        returncode: Process exit code (None if the process never ran)
    """

    success: bool
    output: str = ""
    error: str = ""
    returncode: Optional[int] = None


class ADBError(Exception):
    """Base exception for ADB operations"""

    pass


class ServerNotFoundError(ADBError, FileNotFoundError):
    """Raised when the scrcpy-server payload cannot be located"""

    pass


def run_command(
    tool_path: str, args: Sequence[str], timeout: Optional[float] = None
) -> CommandResult:
    """
    Run an external tool and capture its output.

    Args:
        tool_path: Executable to run
        args: Argument list (without the executable)
        timeout: Seconds to wait for the process (None waits forever)

    Returns:
        CommandResult. A launch failure or timeout is reported as a
        non-success result carrying the failure description; this
        function never raises for tool failures.
    """
    cmd = [tool_path, *args]
    logger.debug(f"Executing command: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.debug(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        return CommandResult(
            success=False, error=f"Command timed out after {timeout}s"
        )
    except OSError as e:
        logger.debug(f"Failed to launch {tool_path}: {e}")
        return CommandResult(success=False, error=str(e))

    stdout = result.stdout or ""
    stderr = result.stderr or ""
    if stdout:
        logger.debug(f"stdout: {stdout[:200]}")
    if stderr:
        logger.debug(f"stderr: {stderr[:200]}")

    return CommandResult(
        success=result.returncode == 0,
        output=stdout,
        error=stderr,
        returncode=result.returncode,
    )


def parse_devices(output: str) -> List[ADBDevice]:
    """
    Parse `adb devices` output

    Args:
        output: Raw stdout of `adb devices`

    Returns:
        One ADBDevice per listed device, in output order
    """
    devices = []
    for line in output.splitlines():
        line = line.strip()
        if not line or line.startswith("List of devices") or line.startswith("*"):
            continue

        # State may span several words, e.g. "no permissions (...)"
        parts = line.split(None, 1)
        if len(parts) < 2:
            continue

        devices.append(ADBDevice(serial=parts[0], state=parts[1].strip()))

    return devices


class ADBRunner:
    """
    adb command wrapper

    Device-scoped commands are issued as `adb -s <serial> <subcommand> ...`,
    global ones as `adb <subcommand>`.

    Example:
        >>> adb = ADBRunner("adb")
        >>> result = adb.shell("ABC123", "getprop", "ro.product.model")
        >>> if result.success:
        ...     print(result.output.strip())
    """

    def __init__(self, adb_path: str = "adb", timeout: Optional[float] = 30.0):
        """
        Initialize the runner

        Args:
            adb_path: Path to adb executable
            timeout: Default timeout for adb commands
        """
        self.adb_path = adb_path
        self.timeout = timeout

    def run(
        self,
        args: Sequence[str],
        serial: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run an adb command, optionally targeting one device"""
        full_args: List[str] = []
        if serial:
            full_args.extend(["-s", serial])
        full_args.extend(args)
        return run_command(
            self.adb_path,
            full_args,
            timeout=timeout if timeout is not None else self.timeout,
        )

    def devices(self) -> CommandResult:
        return self.run(["devices"])

    def version(self) -> CommandResult:
        return self.run(["version"])

    def get_state(self, serial: str) -> CommandResult:
        return self.run(["get-state"], serial=serial)

    def shell(self, serial: str, *command: str) -> CommandResult:
        return self.run(["shell", *command], serial=serial)

    def push(self, serial: str, local_path: PathLike, remote_path: str) -> CommandResult:
        return self.run(["push", os.fspath(local_path), remote_path], serial=serial)

    def pull(self, serial: str, remote_path: str, local_path: PathLike) -> CommandResult:
        return self.run(["pull", remote_path, os.fspath(local_path)], serial=serial)

    def forward(self, serial: str, local_port: int, socket_name: str) -> CommandResult:
        """Create `tcp:<local_port>` -> `localabstract:<socket_name>` forwarding"""
        return self.run(
            ["forward", f"tcp:{local_port}", f"localabstract:{socket_name}"],
            serial=serial,
            timeout=5.0,
        )

    def remove_forward(self, serial: str, local_port: int) -> CommandResult:
        return self.run(
            ["forward", "--remove", f"tcp:{local_port}"], serial=serial, timeout=5.0
        )

    def spawn(
        self, serial: str, args: Sequence[str], stderr: Optional[IO[bytes]] = None
    ) -> subprocess.Popen:
        """
        Start a long-running adb process without waiting for it.

        stdout is discarded. stderr is written to `stderr` (a real file,
        never a pipe) or discarded when it is None.

        Raises:
            OSError: If the adb executable cannot be launched
        """
        cmd = [self.adb_path, "-s", serial, *args]
        logger.debug(f"Spawning: {' '.join(cmd)}")
        return subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=stderr if stderr is not None else subprocess.DEVNULL,
            creationflags=subprocess.CREATE_NO_WINDOW
            if platform.system() == "Windows"
            else 0,
        )


def find_adb_executable(search_dir: Optional[PathLike] = None) -> str:
    """
    Find the adb executable

    Checks, in order: the search directory, the ADB environment variable,
    PATH, and common Android SDK locations.

    Args:
        search_dir: Application directory to check first (default: cwd)

    Returns:
        Path to adb, or plain "adb" if nothing was found (commands will
        then fail with a launch error rather than at construction time)
    """
    base = Path(search_dir) if search_dir is not None else Path.cwd()
    for name in ("adb.exe", "adb") if platform.system() == "Windows" else ("adb",):
        candidate = base / name
        if candidate.is_file():
            logger.debug(f"Using adb from application directory: {candidate}")
            return str(candidate)

    adb_from_env = os.environ.get("ADB")
    if adb_from_env and os.path.isfile(adb_from_env):
        logger.debug(f"Using adb from environment: {adb_from_env}")
        return adb_from_env

    adb_path = shutil.which("adb")
    if adb_path:
        logger.debug(f"Using adb from PATH: {adb_path}")
        return adb_path

    possible_paths = [
        # macOS
        os.path.expanduser("~/Library/Android/sdk/platform-tools/adb"),
        # Linux
        os.path.expanduser("~/Android/Sdk/platform-tools/adb"),
        "/usr/bin/adb",
        "/usr/local/bin/adb",
        # Windows
        os.path.expanduser("~/AppData/Local/Android/Sdk/platform-tools/adb.exe"),
        "C:\\Android\\sdk\\platform-tools\\adb.exe",
    ]
    for path in possible_paths:
        if os.path.isfile(path):
            logger.debug(f"Using adb from: {path}")
            return path

    logger.warning("adb executable not found, falling back to 'adb'")
    return "adb"


def find_server_path(search_dir: Optional[PathLike] = None) -> str:
    """
    Find the scrcpy-server payload

    Args:
        search_dir: Application directory to check (default: cwd)

    Returns:
        Path to the scrcpy-server file

    Raises:
        ServerNotFoundError: If the payload is not found
    """
    server_from_env = os.environ.get("SCRCPY_SERVER_PATH")
    if server_from_env and os.path.isfile(server_from_env):
        logger.debug(f"Using scrcpy-server from environment: {server_from_env}")
        return server_from_env

    base = Path(search_dir) if search_dir is not None else Path.cwd()
    for name in ("scrcpy-server", "scrcpy-server.jar"):
        candidate = base / name
        if candidate.is_file():
            return str(candidate)

    raise ServerNotFoundError(
        f"scrcpy-server file not found in {base}. "
        "Please place it in the application directory or set SCRCPY_SERVER_PATH."
    )
