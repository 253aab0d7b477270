"""
World-space geometry primitives shared by the transform, the sampler,
the obstacle extractor and the renderer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# World position in meters
Position = Tuple[float, float]


@dataclass(frozen=True)
class WorldRect:
    """Axis-aligned rectangle in world coordinates (meters)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0


# Obstacles registered in the channel model are plain world rectangles
ObstacleRect = WorldRect


@dataclass(frozen=True)
class Segment:
    """A line segment in world coordinates (e.g. one traced ray)."""
    x1: float
    y1: float
    x2: float
    y2: float
