"""
Channel Sampling
================
Samples one metric of the channel model over a square grid of world points
and turns it into a colored raster.

Why is this file needed?
------------------------
1. Separation: The propagation model answers single point-to-point queries.
   This module owns the grid walk, the value range and the coloring.
2. Threading: It is pure Python/numpy with no Qt dependency, so it runs on a
   worker thread and is tested without a GUI. Progress and cancellation are
   plain callables and a threading.Event.

The grid is walked column by column (x outer, y inner). Values are stored
first; colors are only computed once the final [low, high] bounds are known.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, TYPE_CHECKING

import numpy as np

from channelviewer.config import RESOLUTION_MAX, RESOLUTION_MIN, UNBOUNDED_NOISE_FLOOR
from channelviewer.model.color_ramp import RangeState, classify_range, color_of, colorize
from channelviewer.model.geometry import Position, WorldRect
from channelviewer.model.metrics import Metric, nominal_range
from channelviewer.model.results import SampleGrid

if TYPE_CHECKING:
    from channelviewer.model.medium import ChannelModel

logger = logging.getLogger(__name__)

# progress(columns_done, total_columns)
ProgressCallback = Callable[[int, int], None]
PointQuery = Callable[[Position, Position], float]

# Uniform color of a grid whose values are all equal
CONSTANT_GRID_COLOR = color_of(0.5, 0.0, 1.0)


class SamplingError(RuntimeError):
    """A channel query failed while sampling; partial values are discarded."""


@dataclass(frozen=True)
class SampleRequest:
    transmitter: Position
    region: WorldRect
    resolution: int
    metric: Metric
    fixed_coloring: bool = True

    def __post_init__(self) -> None:
        if not RESOLUTION_MIN <= self.resolution <= RESOLUTION_MAX:
            raise ValueError(
                f"Resolution {self.resolution} outside [{RESOLUTION_MIN}, {RESOLUTION_MAX}]."
            )


class ChannelSampler:
    def __init__(self, model: ChannelModel) -> None:
        self.model = model

    def _query_for(self, metric: Metric) -> PointQuery:
        model = self.model
        if metric == Metric.SIGNAL_STRENGTH:
            return lambda src, dst: model.sample_signal(src, dst)[0]
        if metric == Metric.SIGNAL_STRENGTH_VARIANCE:
            return lambda src, dst: model.sample_signal(src, dst)[1]
        if metric == Metric.SNR:
            return lambda src, dst: model.sample_sinr(src, dst, UNBOUNDED_NOISE_FLOOR)[0]
        if metric == Metric.SNR_VARIANCE:
            return lambda src, dst: model.sample_sinr(src, dst, UNBOUNDED_NOISE_FLOOR)[1]
        if metric == Metric.RECEPTION_PROBABILITY:
            return lambda src, dst: model.sample_reception_probability(src, dst, UNBOUNDED_NOISE_FLOOR)
        if metric == Metric.RMS_DELAY_SPREAD:
            return lambda src, dst: model.sample_rms_delay_spread(src, dst)
        raise ValueError(f"Unsupported metric: {metric}")

    def sample(
        self,
        request: SampleRequest,
        sequence: int = 0,
        cancel_event: Optional[threading.Event] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Optional[SampleGrid]:
        """
        Run one sampling pass.

        Args:
            request: What to sample and where.
            sequence: Request number stamped onto the result.
            cancel_event: Checked once per column; when set the pass stops.
            progress: Called after each completed column.

        Returns:
            The finished grid, or None if the pass was cancelled.

        Raises:
            SamplingError: If a channel query fails.
        """
        start_time = time.perf_counter()
        query = self._query_for(request.metric)
        r = request.resolution
        region = request.region
        values = np.empty((r, r), dtype=np.float64)

        logger.info(f"Sampling {request.metric} at {r}x{r} over {region} (request #{sequence})...")

        # 1. Values, column-major
        for x in range(r):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Sampling request #{sequence} cancelled at column {x}/{r}.")
                return None

            world_x = region.x + region.width * x / r
            for y in range(r):
                world_y = region.y + region.height * y / r
                try:
                    values[x, y] = query(request.transmitter, (world_x, world_y))
                except Exception as e:
                    raise SamplingError(
                        f"Channel query failed at ({world_x:.3f}, {world_y:.3f}): {e}"
                    ) from e

            if progress is not None:
                progress(x + 1, r)

        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Sampling request #{sequence} cancelled after last column.")
            return None

        # 2. Bounds
        if request.fixed_coloring:
            low, high = nominal_range(request.metric)
        else:
            low, high = float(values.min()), float(values.max())

        # 3. Colors
        raster = self.colorize_grid(values, low, high)

        elapsed = time.perf_counter() - start_time
        logger.info(f"Sampling request #{sequence} done in {elapsed:.2f} s, range [{low}, {high}].")

        return SampleGrid(
            values=values,
            region=region,
            metric=request.metric,
            low=low,
            high=high,
            raster=raster,
            sequence=sequence,
        )

    @staticmethod
    def colorize_grid(values: np.ndarray, low: float, high: float) -> np.ndarray:
        """Color a value grid, handling bounds the ramp cannot take."""
        state = classify_range(low, high)
        if state is RangeState.NORMAL:
            return colorize(values, low, high)

        raster = np.zeros(values.shape + (4,), dtype=np.uint8)
        if state is RangeState.CONSTANT:
            raster[...] = CONSTANT_GRID_COLOR
        else:
            logger.warning(f"Non-finite value range [{low}, {high}], raster left transparent.")
        return raster
