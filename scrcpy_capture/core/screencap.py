"""
screencap fallback capture

Renders a screenshot on the device with `screencap -p`, pulls it to a
unique local temporary file, and decodes it with Pillow. Independent of the
mirror server; used whenever the video stream yields no frame.
"""

import logging
import os
import tempfile
import uuid
from typing import Optional

from PIL import Image

from .adb import ADBRunner

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_PATH = "/sdcard/temp_screenshot.png"


class ScreencapCapture:
    """
    Screenshot via `adb shell screencap` + `adb pull`

    Example:
        >>> image = ScreencapCapture(ADBRunner(), "ABC123").capture()
    """

    def __init__(
        self,
        runner: ADBRunner,
        serial: str,
        device_path: str = DEFAULT_DEVICE_PATH,
        temp_dir: Optional[str] = None,
    ):
        self.runner = runner
        self.serial = serial
        self.device_path = device_path
        self.temp_dir = temp_dir

    def _temp_path(self) -> str:
        directory = self.temp_dir or tempfile.gettempdir()
        return os.path.join(directory, f"screenshot_{uuid.uuid4().hex}.png")

    def capture(self) -> Optional[Image.Image]:
        """
        Capture a screenshot

        Returns:
            Decoded image, or None if any step failed
        """
        local_path = self._temp_path()

        try:
            render = self.runner.shell(self.serial, "screencap", "-p", self.device_path)
            if not render.success:
                logger.warning(
                    f"[{self.serial}] screencap failed: {render.error.strip()}"
                )
                return None

            pull = self.runner.pull(self.serial, self.device_path, local_path)
            if not pull.success:
                logger.warning(
                    f"[{self.serial}] Failed to pull screenshot: {pull.error.strip()}"
                )
                return None

            # Device copy is disposable; a failed removal does not matter
            self.runner.shell(self.serial, "rm", self.device_path)

            if not os.path.exists(local_path):
                logger.warning(f"[{self.serial}] Pulled screenshot missing: {local_path}")
                return None

            with Image.open(local_path) as image:
                image.load()
                result = image.copy()

            logger.debug(f"[{self.serial}] screencap captured {result.size}")
            return result

        except Exception as e:
            logger.warning(f"[{self.serial}] screencap capture failed: {e}")
            return None

        finally:
            if os.path.exists(local_path):
                try:
                    os.remove(local_path)
                except OSError as e:
                    logger.debug(f"Ignoring temp file cleanup error: {e}")
