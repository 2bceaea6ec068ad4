"""
scrcpy_capture/client/exceptions.py

Exception classes raised by the capture client.
"""


__all__ = [
    'ScreenCaptureError',
    'CaptureFailedError',
    'NotConnectedError',
    'MirrorConnectError',
]


class ScreenCaptureError(Exception):
    """Base exception for capture errors, carrying the device serial."""

    def __init__(self, serial: str, message: str):
        super().__init__(f"{message} (device {serial})")
        self.serial = serial


class CaptureFailedError(ScreenCaptureError):
    """Raised when every capture strategy failed."""
    pass


class NotConnectedError(ScreenCaptureError):
    """Raised when capturing from a persistent session that is not connected."""
    pass


class MirrorConnectError(ScreenCaptureError):
    """Raised when establishing a persistent session fails unexpectedly."""
    pass
