"""
Obstacle Extraction
===================
Derives rectangular obstacles from a background image by color matching.

Why is this file needed?
------------------------
1. Quantisation: The image is divided into square cells; a cell is an
   obstacle when any of its pixels is close enough to a target color.
2. Mapping: Obstacle cells are scaled from image pixels into the world
   footprint of the background image.
3. Registration: The resulting rectangles replace whatever obstacles the
   channel model held before, one column at a time so the operation can be
   cancelled and its progress shown.

Adjacent cells are registered separately; they are not merged.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

import numpy as np

from channelviewer.config import MASK_PREVIEW_COLOR
from channelviewer.model.geometry import ObstacleRect, WorldRect
from channelviewer.model.results import ObstacleMask

if TYPE_CHECKING:
    import numpy.typing as npt
    from channelviewer.model.medium import ChannelModel

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

# progress(columns_done, total_columns)
ProgressCallback = Callable[[int, int], None]


def build_mask(
    pixels: npt.NDArray[np.uint8],
    target_rgb: RGB,
    tolerance: int,
    cell_size: int,
) -> ObstacleMask:
    """
    Classify every cell of an image as obstacle or free.

    Args:
        pixels: (H, W, 3) uint8 RGB image. A fourth (alpha) channel is ignored.
        target_rgb: Color that marks obstacles.
        tolerance: Maximum Manhattan distance |dr| + |dg| + |db| of a match.
        cell_size: Cell edge in pixels. Right and bottom cells may be partial.

    Raises:
        ValueError: On a negative tolerance, a cell size below 1 or a
            malformed image array.
    """
    if tolerance < 0:
        raise ValueError(f"Tolerance must be >= 0, got {tolerance}.")
    if cell_size < 1:
        raise ValueError(f"Cell size must be >= 1, got {cell_size}.")

    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {pixels.shape}.")

    h, w = pixels.shape[:2]
    cols = -(-w // cell_size)
    rows = -(-h // cell_size)

    # 1. Per-pixel match
    target = np.asarray(target_rgb, dtype=np.int32)
    distance = np.abs(pixels[..., :3].astype(np.int32) - target).sum(axis=2)
    matches = distance <= tolerance

    # 2. Pad to whole cells; padding never matches
    padded = np.zeros((rows * cell_size, cols * cell_size), dtype=bool)
    padded[:h, :w] = matches

    # 3. Any match inside a cell -> obstacle; transpose to [cx, cy]
    cells = padded.reshape(rows, cell_size, cols, cell_size).any(axis=(1, 3)).T

    mask = ObstacleMask(cells=cells, cell_size=cell_size, image_width=w, image_height=h)
    logger.info(
        f"Obstacle mask {cols}x{rows} cells (size {cell_size} px, tolerance {tolerance}): "
        f"{mask.obstacle_count} obstacle cells."
    )
    return mask


def mask_to_rects(mask: ObstacleMask, footprint: WorldRect) -> List[List[ObstacleRect]]:
    """
    World rectangles of the obstacle cells, grouped per cell column.

    Cells are clipped to the footprint: the last column/row shrinks rather
    than reaching past the image edge.
    """
    if mask.image_width == 0 or mask.image_height == 0:
        return []

    cell_w = mask.cell_size * footprint.width / mask.image_width
    cell_h = mask.cell_size * footprint.height / mask.image_height

    columns: List[List[ObstacleRect]] = []
    n_cols, n_rows = mask.shape
    for cx in range(n_cols):
        column: List[ObstacleRect] = []
        for cy in range(n_rows):
            if not mask.cells[cx, cy]:
                continue
            x = footprint.x + cx * cell_w
            y = footprint.y + cy * cell_h
            width = min(cell_w, footprint.max_x - x)
            height = min(cell_h, footprint.max_y - y)
            column.append(ObstacleRect(x, y, width, height))
        columns.append(column)
    return columns


def mask_overlay(mask: ObstacleMask) -> npt.NDArray[np.uint8]:
    """(H, W, 4) RGBA preview: obstacle cells tinted, everything else transparent."""
    s = mask.cell_size
    per_pixel = np.repeat(np.repeat(mask.cells.T, s, axis=0), s, axis=1)
    per_pixel = per_pixel[: mask.image_height, : mask.image_width]

    overlay = np.zeros((mask.image_height, mask.image_width, 4), dtype=np.uint8)
    overlay[per_pixel] = MASK_PREVIEW_COLOR
    return overlay


def pick_color(pixels: npt.NDArray[np.uint8], x: int, y: int) -> RGB:
    """RGB of the pixel at image coordinates (x, y)."""
    h, w = pixels.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        raise ValueError(f"Pixel ({x}, {y}) outside {w}x{h} image.")
    r, g, b = (int(c) for c in pixels[y, x, :3])
    return r, g, b


@dataclass(frozen=True)
class RegistrationReport:
    registered: int
    cancelled: bool
    # A newer registration was requested before this one finished
    superseded: bool = False


class ObstacleRegistrar:
    """Replaces the channel model's obstacles with the cells of a mask."""

    def __init__(self, model: ChannelModel) -> None:
        self.model = model

    def register(
        self,
        mask: ObstacleMask,
        footprint: WorldRect,
        cancel_event: Optional[threading.Event] = None,
        progress: Optional[ProgressCallback] = None,
        is_current: Optional[Callable[[], bool]] = None,
    ) -> RegistrationReport:
        """
        Install the mask's obstacles column by column.

        Cancellation and `is_current` are checked before every column. A
        cancelled run keeps the obstacles already installed and does not
        notify the model. A superseded run stops without touching the model
        again, leaving it to the newer registration.
        """
        columns = mask_to_rects(mask, footprint)
        total = len(columns)
        registered = 0

        if is_current is not None and not is_current():
            logger.info("Obstacle registration superseded before it started.")
            return RegistrationReport(registered=0, cancelled=True, superseded=True)

        self.model.clear_obstacles()
        logger.info(f"Registering obstacles from {total} columns...")

        for index, column in enumerate(columns):
            if is_current is not None and not is_current():
                logger.info(f"Obstacle registration superseded after {registered} obstacles.")
                return RegistrationReport(registered=registered, cancelled=True, superseded=True)

            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Obstacle registration cancelled after {registered} obstacles.")
                return RegistrationReport(registered=registered, cancelled=True)

            self._add_column(column)
            registered += len(column)

            if progress is not None:
                progress(index + 1, total)

        self.model.notify_changed()
        logger.info(f"Registered {registered} obstacles.")
        return RegistrationReport(registered=registered, cancelled=False)

    def _add_column(self, column: Sequence[ObstacleRect]) -> None:
        for rect in column:
            self.model.add_obstacle(rect.x, rect.y, rect.width, rect.height)
