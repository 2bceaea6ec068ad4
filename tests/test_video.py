"""Tests for the video stream connector against real loopback sockets."""

import socket

import pytest

from scrcpy_capture.core.socket import (
    HEADER_SIZE,
    SocketConfig,
    SocketReadError,
    SocketState,
    SocketTimeoutError,
    VideoStream,
)

from conftest import free_port


@pytest.fixture
def listener():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    server.settimeout(5.0)
    yield server
    server.close()


def _stream(port, read_timeout=2.0):
    return VideoStream(
        SocketConfig(port=port, connect_timeout=1.0, read_timeout=read_timeout),
        retries=1,
    )


def test_connect_and_read_header(listener):
    stream = _stream(listener.getsockname()[1])
    assert stream.connect()
    assert stream.state is SocketState.CONNECTED

    peer, _ = listener.accept()
    with peer:
        peer.sendall(b"\x00" + b"Pixel".ljust(64, b"\x00") + b"h264" + b"payload")
        header = stream.read_header()

    assert len(header) == HEADER_SIZE
    assert header[1:6] == b"Pixel"
    assert stream.header_consumed
    stream.close()


def test_refused_connection_returns_false():
    stream = _stream(free_port())
    assert stream.connect() is False
    assert stream.state is SocketState.ERROR


def test_read_after_peer_closed_raises(listener):
    stream = _stream(listener.getsockname()[1])
    assert stream.connect()
    peer, _ = listener.accept()
    peer.close()

    with pytest.raises(SocketReadError):
        stream.read_header()
    stream.close()


def test_silent_stream_times_out_and_stays_connected(listener):
    stream = _stream(listener.getsockname()[1], read_timeout=0.1)
    assert stream.connect()
    peer, _ = listener.accept()
    with peer:
        with pytest.raises(SocketTimeoutError):
            stream.read_header()
        assert stream.state is SocketState.CONNECTED
        assert not stream.header_consumed
    stream.close()


def test_header_read_resumes_after_timeout(listener):
    stream = _stream(listener.getsockname()[1], read_timeout=0.2)
    assert stream.connect()
    peer, _ = listener.accept()
    header = b"\x00" + b"Pixel".ljust(64, b"\x00") + b"h264"
    with peer:
        peer.sendall(header[:10])
        with pytest.raises(SocketTimeoutError):
            stream.read_header()

        peer.sendall(header[10:])
        assert stream.read_header() == header
    stream.close()


def test_caller_config_not_modified():
    config = SocketConfig(port=free_port())
    stream = VideoStream(config)

    assert config.buffer_size == 64 * 1024
    assert stream.config.buffer_size == 256 * 1024
    assert stream.config.port == config.port


def test_read_without_connection_raises():
    with pytest.raises(SocketReadError):
        _stream(free_port()).read_header()


def test_close_is_idempotent(listener):
    stream = _stream(listener.getsockname()[1])
    stream.connect()
    stream.close()
    stream.close()
    assert stream.state is SocketState.DISCONNECTED
