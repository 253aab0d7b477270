"""
Color Ramp
==========
Maps a sampled value and its [low, high] bounds to an RGBA color.

Higher values add green (top half of the range), values around the middle
add blue (triangular, peaking at the midpoint) and lower values add red
(bottom half). Values outside the bounds get a fixed over/under color.

`color_of` is the scalar definition; `colorize` applies exactly the same
arithmetic to a whole numpy array and is what the sampler uses for rasters.
Both assume low < high; use `classify_range` first.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from channelviewer.config import OVER_RANGE_COLOR, RAMP_ALPHA, UNDER_RANGE_COLOR

if TYPE_CHECKING:
    import numpy.typing as npt

RGBA = tuple[int, int, int, int]


class RangeState(Enum):
    NORMAL = "normal"
    CONSTANT = "constant"
    NON_FINITE = "non_finite"


def classify_range(low: float, high: float) -> RangeState:
    """Tell whether [low, high] can be fed to the color ramp."""
    if not (math.isfinite(low) and math.isfinite(high)):
        return RangeState.NON_FINITE
    if high == low:
        return RangeState.CONSTANT
    return RangeState.NORMAL


def _clamp_channel(v: float) -> int:
    return max(0, min(255, int(v)))


def color_of(value: float, low: float, high: float) -> RGBA:
    if value > high:
        return OVER_RANGE_COLOR
    if value < low:
        return UNDER_RANGE_COLOR

    half = (high - low) / 2
    mid = low + half
    red = green = blue = 0

    if value > high - half:
        green = _clamp_channel(255 - 255 * (high - value) / half)

    if mid - half < value < mid + half:
        blue = _clamp_channel(255 - 255 * abs(mid - value) / half)

    if value < low + half:
        red = _clamp_channel(255 - 255 * (value - low) / half)

    return red, green, blue, RAMP_ALPHA


def colorize(values: npt.ArrayLike, low: float, high: float) -> npt.NDArray[np.uint8]:
    """
    Vectorized `color_of`.

    Args:
        values: Array of any shape.
        low, high: Color bounds (low < high).

    Returns:
        uint8 array of shape values.shape + (4,) holding (r, g, b, a).
    """
    v = np.asarray(values, dtype=np.float64)
    half = (high - low) / 2
    mid = low + half

    def ramp(mask: npt.NDArray[np.bool_], raw: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        channel = np.where(mask, np.trunc(raw), 0.0)
        return np.clip(channel, 0, 255)

    with np.errstate(invalid="ignore"):
        green = ramp(v > high - half, 255 - 255 * (high - v) / half)
        blue = ramp((v > mid - half) & (v < mid + half), 255 - 255 * np.abs(mid - v) / half)
        red = ramp(v < low + half, 255 - 255 * (v - low) / half)

    rgba = np.empty(v.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = red
    rgba[..., 1] = green
    rgba[..., 2] = blue
    rgba[..., 3] = RAMP_ALPHA

    rgba[v > high] = OVER_RANGE_COLOR
    rgba[v < low] = UNDER_RANGE_COLOR
    return rgba
