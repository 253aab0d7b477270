import numpy as np
import pytest
from PySide6.QtGui import QColor, QImage

from channelviewer.controller.imaging import ImageDecodeError, decode_image, rgb_to_qimage, rgba_to_qimage


def test_decode_png(qapp, tmp_path):
    # Odd width so QImage rows carry padding
    image = QImage(5, 3, QImage.Format.Format_RGB32)
    image.fill(QColor(10, 20, 30))
    image.setPixelColor(4, 2, QColor(200, 100, 50))
    path = str(tmp_path / "floor.png")
    assert image.save(path)

    pixels = decode_image(path)

    assert pixels.shape == (3, 5, 3)
    assert pixels.dtype == np.uint8
    assert tuple(pixels[0, 0]) == (10, 20, 30)
    assert tuple(pixels[2, 4]) == (200, 100, 50)


def test_missing_file(qapp, tmp_path):
    with pytest.raises(ImageDecodeError):
        decode_image(str(tmp_path / "nothing.png"))


def test_garbage_file(qapp, tmp_path):
    path = tmp_path / "garbage.png"
    path.write_bytes(b"\x00\x01definitely not an image")
    with pytest.raises(ImageDecodeError):
        decode_image(str(path))


def test_array_to_qimage(qapp):
    rgb = np.zeros((2, 3, 3), dtype=np.uint8)
    rgb[1, 2] = (1, 2, 3)
    image = rgb_to_qimage(rgb)
    assert (image.width(), image.height()) == (3, 2)
    assert image.pixelColor(2, 1).getRgb()[:3] == (1, 2, 3)

    rgba = np.zeros((2, 3, 4), dtype=np.uint8)
    rgba[0, 1] = (255, 0, 0, 255)
    image = rgba_to_qimage(rgba)
    assert image.pixelColor(1, 0).getRgb() == (255, 0, 0, 255)
    assert image.pixelColor(0, 0).alpha() == 0
