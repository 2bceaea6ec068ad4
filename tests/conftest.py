"""Shared fakes for adb, the server process and the video stream."""

import socket

import pytest
from PIL import Image

from scrcpy_capture.client.config import CaptureConfig
from scrcpy_capture.client.device import AndroidDevice
from scrcpy_capture.core.adb import ADBRunner, CommandResult
from scrcpy_capture.core.socket.video import HEADER_SIZE

SERIAL = "ABC123"
SCREEN_SIZE = (8, 4)


def write_png(path, size=SCREEN_SIZE, mode="RGBA"):
    Image.new(mode, size, (10, 20, 30, 255)[: len(mode)]).save(path, format="PNG")


def free_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class FakeProcess:
    """Stand-in for the adb supervisor Popen."""

    def __init__(self, returncode=None):
        self.returncode = returncode
        self.terminated = False
        self.killed = False

    def poll(self):
        return self.returncode

    def terminate(self):
        self.terminated = True
        self.returncode = -15

    def kill(self):
        self.killed = True
        self.returncode = -9

    def wait(self, timeout=None):
        return self.returncode


def _pull_png(args):
    # pull <remote> <local>
    write_png(args[2])
    return CommandResult(success=True, output="1 file pulled", returncode=0)


class FakeRunner(ADBRunner):
    """
    Records adb invocations and answers them from `responses`.

    Responses are looked up by "<subcommand> <first arg>" and then by
    "<subcommand>"; a value is either a CommandResult or a callable taking the
    argument list. Unknown commands succeed with empty output.
    """

    def __init__(self):
        super().__init__("adb", timeout=1.0)
        self.calls = []
        self.responses = {"pull": _pull_png}
        self.processes = []
        self.spawn_error = None
        self.process_returncode = None
        self.process_stderr = b""
        self.stderr_logs = []

    def run(self, args, serial=None, timeout=None):
        args = list(args)
        self.calls.append((serial, args))

        keys = [" ".join(args[:2]), args[0]] if args else []
        for key in keys:
            if key in self.responses:
                response = self.responses[key]
                return response(args) if callable(response) else response
        return CommandResult(success=True, returncode=0)

    def spawn(self, serial, args, stderr=None):
        self.calls.append((serial, ["<spawn>", *args]))
        if self.spawn_error is not None:
            raise self.spawn_error
        self.stderr_logs.append(stderr)
        if stderr is not None and self.process_stderr:
            stderr.write(self.process_stderr)
        process = FakeProcess(returncode=self.process_returncode)
        self.processes.append(process)
        return process

    def fail(self, key, error="error"):
        self.responses[key] = CommandResult(success=False, error=error, returncode=1)

    def commands(self, *prefix):
        """Argument lists of recorded calls starting with `prefix`"""
        return [args for _, args in self.calls if args[: len(prefix)] == list(prefix)]

    def index_of(self, *prefix, start=0):
        for index, (_, args) in enumerate(self.calls[start:], start):
            if args[: len(prefix)] == list(prefix):
                return index
        return -1


class FakeStream:
    """Stand-in for VideoStream."""

    def __init__(self, config, retries=3, connect_ok=True):
        self.config = config
        self.retries = retries
        self.connect_ok = connect_ok
        self.connected = False
        self.closed = False
        self.header = None

    def connect(self, retries=None, retry_delay=0.1):
        self.connected = self.connect_ok
        return self.connect_ok

    @property
    def header_consumed(self):
        return self.header is not None

    def read_header(self):
        self.header = bytes(HEADER_SIZE)
        return self.header

    def close(self):
        self.closed = True
        self.connected = False


class StreamFactory:
    def __init__(self, connect_ok=True):
        self.connect_ok = connect_ok
        self.streams = []

    def __call__(self, config, retries=3):
        stream = FakeStream(config, retries=retries, connect_ok=self.connect_ok)
        self.streams.append(stream)
        return stream


class NoFrameReader:
    def __init__(self):
        self.calls = 0

    def read_frame(self, stream):
        self.calls += 1
        return None


class RaisingReader:
    def __init__(self, exc):
        self.exc = exc

    def read_frame(self, stream):
        raise self.exc


class ImageReader:
    def __init__(self, image):
        self.image = image

    def read_frame(self, stream):
        return self.image


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def config(tmp_path):
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()
    return CaptureConfig(settle_delay=0, temp_dir=str(temp_dir))


@pytest.fixture
def streams():
    return StreamFactory()


@pytest.fixture
def make_device(runner, config, streams):
    def factory(frame_reader=None, stream_factory=None):
        return AndroidDevice(
            SERIAL,
            server_path="scrcpy-server",
            config=config,
            runner=runner,
            frame_reader=frame_reader,
            stream_factory=stream_factory or streams,
        )

    return factory
