"""
Result Objects
==============
Immutable products of one sampling pass and one obstacle analysis pass.

A SampleGrid is built completely on the worker thread and only then handed to
the UI, so its arrays are frozen (read-only) before it leaves the constructor.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from channelviewer.model.color_ramp import RangeState, classify_range
from channelviewer.model.geometry import WorldRect
from channelviewer.model.metrics import Metric

if TYPE_CHECKING:
    import numpy.typing as npt


def _frozen(a: npt.NDArray) -> npt.NDArray:
    a = np.array(a, copy=True)
    a.flags.writeable = False
    return a


@dataclass(frozen=True, eq=False)
class SampleGrid:
    """
    One sampled channel map.

    Attributes:
        values: (r, r) float64 array indexed [x, y] (column-major sampling order).
        region: World rectangle covered by the grid.
        metric: Metric the values represent.
        low, high: Realized color bounds (nominal or observed).
        raster: (r, r, 4) uint8 RGBA colors indexed [x, y].
        sequence: Request sequence number this grid answers.
    """
    values: npt.NDArray[np.float64]
    region: WorldRect
    metric: Metric
    low: float
    high: float
    raster: npt.NDArray[np.uint8]
    sequence: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen(self.values))
        object.__setattr__(self, "raster", _frozen(self.raster))

    @property
    def resolution(self) -> int:
        return int(self.values.shape[0])

    @property
    def range_state(self) -> RangeState:
        return classify_range(self.low, self.high)


@dataclass(frozen=True, eq=False)
class ObstacleMask:
    """
    Obstacle occupancy of an image divided into square cells.

    Attributes:
        cells: (ceil(W/s), ceil(H/s)) bool array indexed [cx, cy].
        cell_size: Cell edge in image pixels.
        image_width, image_height: Size of the analysed image in pixels.
    """
    cells: npt.NDArray[np.bool_]
    cell_size: int
    image_width: int
    image_height: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "cells", _frozen(self.cells))

    @property
    def shape(self) -> tuple[int, int]:
        return int(self.cells.shape[0]), int(self.cells.shape[1])

    @property
    def obstacle_count(self) -> int:
        return int(np.count_nonzero(self.cells))
