"""
scrcpy Server Parameter Builder

Builds the argument list used to launch scrcpy-server in capture-only mode:
forward tunnel, no control channel, no clipboard sync and no frame metadata.

Based on scrcpy server source code:
- server/src/main/java/com/genymobile/scrcpy/Options.java
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAIN_CLASS = "com.genymobile.scrcpy.Server"
DEFAULT_SERVER_VERSION = "2.0"


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass
class ServerOptions:
    """
    scrcpy Server Options (capture-only defaults)

    Attributes:
        version: Client version string, the server's first positional argument
        info: Value of the `info` parameter
        tunnel_forward: Use adb forward instead of reverse
        control: Enable control channel
        cleanup: Let the server clean up device settings on exit
        power_off_on_close: Turn the screen off when the server stops
        clipboard_autosync: Synchronize the clipboard
        downsize_on_error: Retry encoding at a lower resolution on failure
        send_frame_meta: Prefix each packet with a frame header
        send_dummy_byte: Send one byte on accept (forward mode)
        send_device_meta: Send the device name on connect
        send_codec_meta: Send the codec id and size on connect
        raw_video_stream: Raw elementary stream without any metadata
        max_size: Maximum video dimension (multiple of 8)
        max_fps: Maximum framerate
        display_id: Display ID to mirror
    """

    version: str = DEFAULT_SERVER_VERSION
    info: str = "-"
    tunnel_forward: bool = True
    control: bool = False
    cleanup: bool = False
    power_off_on_close: bool = False
    clipboard_autosync: bool = False
    downsize_on_error: bool = False
    send_frame_meta: bool = False
    send_dummy_byte: bool = False
    send_device_meta: bool = False
    send_codec_meta: bool = False
    raw_video_stream: bool = False
    max_size: Optional[int] = None
    max_fps: Optional[int] = None
    display_id: Optional[int] = None

    def __post_init__(self):
        if not self.version:
            raise ValueError("Server version is required")

        if self.max_size is not None and self.max_size % 8 != 0:
            logger.warning(
                f"max_size should be multiple of 8, got {self.max_size}. "
                f"Will be adjusted to {self.max_size & ~7}"
            )

    def build_params(self) -> List[str]:
        """
        Build parameter list for scrcpy server

        Returns:
            Version followed by "key=value" parameter strings
        """
        params = [
            self.version,
            f"info={self.info}",
            f"tunnel_forward={_flag(self.tunnel_forward)}",
            f"control={_flag(self.control)}",
            f"cleanup={_flag(self.cleanup)}",
            f"power_off_on_close={_flag(self.power_off_on_close)}",
            f"clipboard_autosync={_flag(self.clipboard_autosync)}",
            f"downsize_on_error={_flag(self.downsize_on_error)}",
            f"send_frame_meta={_flag(self.send_frame_meta)}",
            f"send_dummy_byte={_flag(self.send_dummy_byte)}",
            f"send_device_meta={_flag(self.send_device_meta)}",
            f"send_codec_meta={_flag(self.send_codec_meta)}",
            f"raw_video_stream={_flag(self.raw_video_stream)}",
        ]

        if self.max_size is not None:
            params.append(f"max_size={self.max_size & ~7}")

        if self.max_fps is not None:
            params.append(f"max_fps={self.max_fps}")

        if self.display_id is not None:
            params.append(f"display_id={self.display_id}")

        logger.debug(f"Built {len(params)} server parameters")
        return params


def build_server_command(
    remote_path: str,
    options: ServerOptions,
    main_class: str = DEFAULT_MAIN_CLASS,
) -> List[str]:
    """
    Build the adb arguments that launch scrcpy-server with app_process

    Command equivalent:
    adb -s <serial> shell CLASSPATH=<remote_path> app_process / <main_class> <version> [params...]

    Args:
        remote_path: Payload location on the device
        options: Server options
        main_class: Server entry point

    Returns:
        Arguments following `adb -s <serial>`
    """
    return [
        "shell",
        f"CLASSPATH={remote_path}",
        "app_process",
        "/",
        main_class,
        *options.build_params(),
    ]
