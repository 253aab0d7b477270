"""
Session State (Data Model)
==========================
This module defines the central data structure of a running viewer session.

Why is this file needed?
------------------------
1. State Management: It holds the view transform, the layer switches, the
   channel visualization settings and the background image in one place.
2. Persistence: This object is what gets serialized when saving a session.
3. Decoupling: Views read from this object; Controllers write to this object.

Classes:
    LayerVisibility: One switch per rendered layer.
    SessionState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional, TYPE_CHECKING

import numpy as np

from channelviewer.config import RESOLUTION_DEFAULT, RESOLUTION_MAX, RESOLUTION_MIN
from channelviewer.model.geometry import WorldRect
from channelviewer.model.metrics import Metric
from channelviewer.model.transform import ViewTransform

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass
class LayerVisibility:
    """Which layers the scene renderer composes."""
    background: bool = True
    obstacles: bool = True
    channel: bool = True
    radios: bool = True
    activity: bool = True
    scale_arrow: bool = True


@dataclass
class SessionState:
    """
    Holds the entire state of the open viewer session.
    Pass this instance to your Controllers and Views.
    """
    transform: ViewTransform = field(default_factory=ViewTransform)
    layers: LayerVisibility = field(default_factory=LayerVisibility)
    controls_visible: bool = True

    metric: Metric = Metric.SIGNAL_STRENGTH
    fixed_coloring: bool = True
    resolution: int = RESOLUTION_DEFAULT

    # Background image: path + declared world footprint are persisted,
    # the decoded (H, W, 3) pixels are not.
    background_path: Optional[str] = None
    background_footprint: WorldRect = field(default_factory=lambda: WorldRect(0.0, 0.0, 0.0, 0.0))
    background_pixels: Optional[npt.NDArray[np.uint8]] = None

    @property
    def has_background(self) -> bool:
        return self.background_pixels is not None

    def set_resolution(self, value: int) -> None:
        clamped = min(RESOLUTION_MAX, max(RESOLUTION_MIN, int(value)))
        if clamped != value:
            logger.debug(f"Resolution {value} clamped to {clamped}.")
        self.resolution = clamped

    def set_background(self, path: str, pixels: npt.NDArray[np.uint8], footprint: WorldRect) -> None:
        self.background_path = path
        self.background_pixels = pixels
        self.background_footprint = footprint
        logger.info(f"Background set to '{path}' ({pixels.shape[1]}x{pixels.shape[0]} px) at {footprint}.")

    def reset(self) -> None:
        """Restore defaults for a new session."""
        self.transform = ViewTransform()
        self.layers = LayerVisibility()
        self.controls_visible = True
        self.metric = Metric.SIGNAL_STRENGTH
        self.fixed_coloring = True
        self.resolution = RESOLUTION_DEFAULT
        self.background_path = None
        self.background_footprint = WorldRect(0.0, 0.0, 0.0, 0.0)
        self.background_pixels = None
        logger.info("Session state has been reset.")
