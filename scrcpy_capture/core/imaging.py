"""
Image encoding helpers.

The output encoder is chosen from the destination file extension:
.png PNG, .jpg/.jpeg JPEG, .bmp BMP, .gif GIF, anything else PNG.
"""

import logging
import os

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".bmp": "BMP",
    ".gif": "GIF",
}
DEFAULT_FORMAT = "PNG"

# Encoders that cannot store an alpha channel
_NO_ALPHA_FORMATS = {"JPEG", "BMP"}


def image_format_for_path(path: str) -> str:
    """Pillow format name for a destination path"""
    extension = os.path.splitext(path)[1].lower()
    return IMAGE_FORMATS.get(extension, DEFAULT_FORMAT)


def save_image(image: Image.Image, path: str, jpeg_quality: int = 95) -> str:
    """
    Save an image, creating parent directories as needed

    Args:
        image: Image to save
        path: Destination file
        jpeg_quality: Quality used for JPEG output

    Returns:
        Pillow format name that was used

    Raises:
        OSError: If the file cannot be written
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    image_format = image_format_for_path(path)
    if image_format in _NO_ALPHA_FORMATS and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    if image_format == "JPEG":
        image.save(path, format=image_format, quality=jpeg_quality)
    else:
        image.save(path, format=image_format)

    logger.info(f"Screenshot saved: {path} ({image_format})")
    return image_format


def to_rgb_array(image: Image.Image) -> np.ndarray:
    """Convert an image to an RGB numpy array with shape (height, width, 3)"""
    if image.mode != "RGB":
        image = image.convert("RGB")
    return np.asarray(image)
