"""
Channel Canvas
==============
The central drawing surface of the viewer.

Why is this file needed?
------------------------
1. Painting: On every paint it gathers the current radios, obstacles, channel
   map and activity into a Scene and hands it to the SceneRenderer.
2. Input: It forwards mouse presses, drags and clicks to the
   InteractionController; it does not interpret them itself.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from PySide6.QtCore import QPointF, QSize, Qt
from PySide6.QtGui import QImage, QMouseEvent, QPainter
from PySide6.QtWidgets import QWidget

from channelviewer.config import DEFAULT_CANVAS_SIZE
from channelviewer.controller.imaging import rgb_to_qimage
from channelviewer.view.renderer import Scene, SceneRenderer

if TYPE_CHECKING:
    import numpy as np
    from channelviewer.controller.interaction import InteractionController
    from channelviewer.controller.publish import ResultSlot
    from channelviewer.model.medium import ChannelModel, RadioMedium
    from channelviewer.model.results import SampleGrid
    from channelviewer.model.state import SessionState

logger = logging.getLogger(__name__)

# A press and release closer than this (pixels) is a click
CLICK_SLOP = 2


class ChannelCanvas(QWidget):
    def __init__(
        self,
        state: SessionState,
        interaction: InteractionController,
        medium: RadioMedium,
        channel_model: ChannelModel,
        results: ResultSlot[SampleGrid],
        parent=None,
    ):
        super().__init__(parent)
        self.state = state
        self.interaction = interaction
        self.medium = medium
        self.channel_model = channel_model
        self.results = results
        self.renderer = SceneRenderer(icon_size=interaction.icon_size)

        self._press_pos: Optional[QPointF] = None
        self._background_image: Optional[QImage] = None
        self._background_source: Optional[np.ndarray] = None

        self.setMouseTracking(False)

        self.interaction.view_changed.connect(self.update)
        self.interaction.rays_changed.connect(self.update)
        self.interaction.selection_changed.connect(lambda *_: self.update())
        self.interaction.mode_changed.connect(lambda *_: self.update())

    def sizeHint(self) -> QSize:
        return QSize(*DEFAULT_CANVAS_SIZE)

    def _background_qimage(self) -> Optional[QImage]:
        pixels = self.state.background_pixels
        if pixels is None:
            self._background_image = None
            self._background_source = None
            return None
        if pixels is not self._background_source:
            self._background_image = rgb_to_qimage(pixels)
            self._background_source = pixels
        return self._background_image

    def build_scene(self) -> Scene:
        return Scene(
            transform=self.state.transform,
            layers=self.state.layers,
            radios=self.medium.list_radios(),
            selected=self.interaction.selected,
            obstacles=self.channel_model.list_obstacles(),
            grid=self.results.current(),
            background=self._background_qimage(),
            background_footprint=self.state.background_footprint,
            transmissions=self.medium.current_transmissions(),
            interferences=self.medium.current_interferences(),
            transfers=self.medium.current_transfers(),
            rays=self.interaction.visible_rays(),
        )

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), Qt.GlobalColor.white)
            self.renderer.paint(painter, self.width(), self.height(), self.build_scene())
        finally:
            painter.end()

    # ---- mouse ----

    @staticmethod
    def _point(event: QMouseEvent) -> tuple[float, float]:
        pos = event.position()
        return pos.x(), pos.y()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        self._press_pos = event.position()
        self.interaction.press(self._point(event))

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if event.buttons() != Qt.MouseButton.NoButton:
            self.interaction.drag(self._point(event))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if self._press_pos is not None:
            moved = (event.position() - self._press_pos).manhattanLength()
            if moved <= CLICK_SLOP:
                self.interaction.click(self._point(event), event.button())
        self._press_pos = None
