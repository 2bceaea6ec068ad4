"""
Command line entry point: scrcpy-capture

Examples:
    scrcpy-capture --list
    scrcpy-capture screen.png
    scrcpy-capture -s ABC123 --count 5 frames/shot.jpg
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from scrcpy_capture.client.config import CaptureConfig
from scrcpy_capture.client.device import AndroidDevice
from scrcpy_capture.client.exceptions import ScreenCaptureError
from scrcpy_capture.client.manager import DeviceManager
from scrcpy_capture.core.adb import ADBError
from scrcpy_capture.core.imaging import save_image

logger = logging.getLogger(__name__)


def _numbered_path(path: str, index: int) -> str:
    root, ext = os.path.splitext(path)
    return f"{root}_{index:03d}{ext}"


def _capture_series(device: AndroidDevice, output: str, count: int) -> int:
    """Capture `count` screenshots over one persistent session"""
    if not device.connect_persistent():
        logger.warning("Persistent session unavailable, capturing one-shot")

    saved = 0
    try:
        for index in range(count):
            path = _numbered_path(output, index)
            try:
                image = (
                    device.capture_from_connected()
                    if device.is_mirror_connected
                    else device.capture_screenshot()
                )
                save_image(image, path, jpeg_quality=device.config.jpeg_quality)
                print(path)
                saved += 1
            except (ScreenCaptureError, OSError) as e:
                logger.error(f"Capture {index} failed: {e}")
    finally:
        device.disconnect()

    return 0 if saved == count else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point for the scrcpy-capture command."""
    parser = argparse.ArgumentParser(
        description="scrcpy-capture - Capture screenshots from Android devices"
    )
    parser.add_argument("output", nargs="?", default="screenshot.png",
                        help="Output file (.png, .jpg, .bmp, .gif)")
    parser.add_argument("-s", "--serial", help="Specific device serial")
    parser.add_argument("--adb", help="Path to adb executable")
    parser.add_argument("--server", help="Path to scrcpy-server file")
    parser.add_argument("--list", action="store_true", help="List connected devices")
    parser.add_argument("--count", type=int, default=1,
                        help="Number of screenshots over one persistent session")
    parser.add_argument("--port", type=int, default=27183, help="Local forward port")
    parser.add_argument("--settle-delay", type=float, default=2.0,
                        help="Seconds to wait for the server to start")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = CaptureConfig(local_port=args.port, settle_delay=args.settle_delay)
    try:
        manager = DeviceManager(adb_path=args.adb, server_path=args.server, config=config)
    except ADBError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not manager.is_adb_available():
        print(f"Error: adb is not available ({manager.adb_path})", file=sys.stderr)
        return 1

    serials = manager.get_connected_devices()

    if args.list:
        for serial in serials:
            device = manager.get_device(serial)
            print(f"{serial}\t{device.name}")
        return 0

    serial = args.serial or (serials[0] if serials else None)
    if serial is None:
        print("Error: no connected devices", file=sys.stderr)
        return 1

    device = manager.get_device(serial)
    if args.count > 1:
        return _capture_series(device, args.output, args.count)

    if device.capture_screenshot_to_file(args.output):
        print(args.output)
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
