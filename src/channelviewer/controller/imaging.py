"""
Image decoding and numpy <-> QImage conversion.

Background images are kept as (H, W, 3) uint8 RGB arrays so the obstacle
analysis never touches Qt objects.
"""
from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import numpy as np
from PySide6.QtGui import QImage

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class ImageDecodeError(ValueError):
    """The file does not exist or is not a decodable image."""


def decode_image(path: str) -> npt.NDArray[np.uint8]:
    """
    Decode an image file into an (H, W, 3) RGB array.

    Raises:
        ImageDecodeError: If the file is missing or cannot be decoded.
    """
    if not os.path.isfile(path):
        raise ImageDecodeError(f"Image file '{path}' does not exist.")

    image = QImage(path)
    if image.isNull():
        raise ImageDecodeError(f"Could not decode image '{path}'.")

    image = image.convertToFormat(QImage.Format.Format_RGB888)
    w, h = image.width(), image.height()
    stride = image.bytesPerLine()

    # Rows are padded to 4-byte boundaries
    buffer = np.frombuffer(image.constBits(), dtype=np.uint8, count=stride * h).reshape(h, stride)
    pixels = buffer[:, : w * 3].reshape(h, w, 3).copy()

    logger.info(f"Decoded image '{path}' ({w}x{h} px).")
    return pixels


def rgb_to_qimage(pixels: npt.NDArray[np.uint8]) -> QImage:
    """(H, W, 3) RGB array -> detached QImage."""
    rgb = np.ascontiguousarray(pixels[..., :3], dtype=np.uint8)
    h, w = rgb.shape[:2]
    return QImage(rgb.tobytes(), w, h, 3 * w, QImage.Format.Format_RGB888).copy()


def rgba_to_qimage(rgba: npt.NDArray[np.uint8]) -> QImage:
    """(H, W, 4) RGBA array -> detached QImage."""
    rgba = np.ascontiguousarray(rgba, dtype=np.uint8)
    h, w = rgba.shape[:2]
    return QImage(rgba.tobytes(), w, h, 4 * w, QImage.Format.Format_RGBA8888).copy()
