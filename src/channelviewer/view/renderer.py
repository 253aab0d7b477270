"""
Scene Rendering
===============
Composes the viewer's layers onto a QPainter, back to front:

    background image -> obstacles -> channel map -> radios -> radio activity
    -> scale arrow -> tracked rays

The renderer holds no state of its own besides a small image cache. Everything
it draws comes in through a `Scene` built by the canvas for each paint.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import pyqtgraph as pg
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPolygonF

from channelviewer.config import (
    OBSTACLE_FILL_COLOR, RADIO_ICON_SIZE, SELECTED_RADIO_FILL, TRANSMISSION_DOT_SIZE,
)
from channelviewer.controller.imaging import rgba_to_qimage
from channelviewer.model.geometry import Position, Segment, WorldRect
from channelviewer.model.medium import Radio
from channelviewer.model.results import SampleGrid
from channelviewer.model.state import LayerVisibility
from channelviewer.model.transform import ViewTransform

logger = logging.getLogger(__name__)

SCALE_STEPS_M = (1.0, 10.0, 100.0, 1000.0)


def scale_arrow_distance(zoom: float, canvas_width: int) -> float:
    """
    Length in meters of the scale arrow.

    The largest step whose on-screen length stays below half the canvas
    width; 0.1 m when even 1 m is too long.
    """
    half_width = canvas_width // 2
    distance = 0.1
    for step in SCALE_STEPS_M:
        if step * zoom < half_width:
            distance = step
    return distance


@dataclass
class Scene:
    """Everything one paint needs."""
    transform: ViewTransform
    layers: LayerVisibility
    radios: Sequence[Radio] = ()
    selected: Optional[Radio] = None
    obstacles: Sequence[WorldRect] = ()
    grid: Optional[SampleGrid] = None
    background: Optional[QImage] = None
    background_footprint: Optional[WorldRect] = None
    transmissions: Sequence[Position] = ()
    interferences: Sequence[Tuple[Position, Position]] = ()
    transfers: Sequence[Tuple[Position, Position]] = ()
    rays: Sequence[Segment] = field(default_factory=list)


class SceneRenderer:
    def __init__(self, icon_size: Tuple[int, int] = RADIO_ICON_SIZE) -> None:
        self.icon_size = icon_size
        self._grid_image: Optional[QImage] = None
        self._grid_source: Optional[SampleGrid] = None

    def paint(self, painter: QPainter, width: int, height: int, scene: Scene) -> None:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)
        t = scene.transform
        layers = scene.layers

        if layers.background and scene.background is not None and scene.background_footprint is not None:
            self._draw_background(painter, t, scene.background, scene.background_footprint)

        if layers.obstacles and scene.obstacles:
            self._draw_obstacles(painter, t, scene.obstacles)

        if layers.channel and scene.grid is not None:
            self._draw_grid(painter, t, scene.grid)

        if layers.radios:
            self._draw_radios(painter, t, scene.radios, scene.selected)

        if layers.activity:
            self._draw_activity(painter, t, scene)

        if layers.scale_arrow:
            self._draw_scale_arrow(painter, t, width, height)

        if scene.rays:
            self._draw_rays(painter, t, scene.rays)

    # ---- layers ----

    @staticmethod
    def _screen_rect(t: ViewTransform, rect: WorldRect) -> QRectF:
        return QRectF(*t.world_rect_to_screen(rect))

    def _draw_background(self, painter: QPainter, t: ViewTransform, image: QImage, footprint: WorldRect) -> None:
        painter.drawImage(self._screen_rect(t, footprint), image)

    def _draw_obstacles(self, painter: QPainter, t: ViewTransform, obstacles: Sequence[WorldRect]) -> None:
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(pg.mkBrush(OBSTACLE_FILL_COLOR))
        for rect in obstacles:
            painter.drawRect(self._screen_rect(t, rect))

    def _grid_qimage(self, grid: SampleGrid) -> QImage:
        # Raster is indexed [x, y]; QImage wants rows first
        if self._grid_source is not grid or self._grid_image is None:
            self._grid_image = rgba_to_qimage(grid.raster.transpose(1, 0, 2))
            self._grid_source = grid
        return self._grid_image

    def _draw_grid(self, painter: QPainter, t: ViewTransform, grid: SampleGrid) -> None:
        painter.drawImage(self._screen_rect(t, grid.region), self._grid_qimage(grid))

    def _draw_radios(
        self,
        painter: QPainter,
        t: ViewTransform,
        radios: Sequence[Radio],
        selected: Optional[Radio],
    ) -> None:
        w, h = self.icon_size
        for radio in radios:
            sx, sy = t.world_to_screen(*radio.position)
            box = QRectF(int(sx) - w // 2, int(sy) - h // 2, w, h)

            if radio == selected:
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(pg.mkBrush(SELECTED_RADIO_FILL))
                painter.drawRect(box)
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.setPen(pg.mkPen("b"))
                painter.drawRect(box)

            self._draw_antenna(painter, box)

    @staticmethod
    def _draw_antenna(painter: QPainter, box: QRectF) -> None:
        """Mast with a triangular top, filling the icon box."""
        cx = box.center().x()
        top, bottom = box.top() + 2, box.bottom() - 2
        half = box.width() / 4

        painter.setPen(pg.mkPen("k", width=2))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawLine(QPointF(cx, top), QPointF(cx, bottom))
        painter.drawPolyline(QPolygonF([
            QPointF(cx - half, top),
            QPointF(cx, top + box.height() / 3),
            QPointF(cx + half, top),
        ]))

    def _draw_activity(self, painter: QPainter, t: ViewTransform, scene: Scene) -> None:
        painter.setBrush(Qt.BrushStyle.NoBrush)

        painter.setPen(pg.mkPen("r"))
        for src, dst in scene.interferences:
            painter.drawLine(QPointF(*t.world_to_screen(*src)), QPointF(*t.world_to_screen(*dst)))

        painter.setPen(pg.mkPen("g"))
        for src, dst in scene.transfers:
            painter.drawLine(QPointF(*t.world_to_screen(*src)), QPointF(*t.world_to_screen(*dst)))

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(pg.mkBrush("b"))
        for position in scene.transmissions:
            sx, sy = t.world_to_screen(*position)
            painter.drawEllipse(QRectF(int(sx), int(sy), TRANSMISSION_DOT_SIZE, TRANSMISSION_DOT_SIZE))

    def _draw_scale_arrow(self, painter: QPainter, t: ViewTransform, width: int, height: int) -> None:
        distance = scale_arrow_distance(t.zoom_x, width)
        length = int(distance * t.zoom_x)

        painter.save()
        painter.translate(width - 120, height - 20)
        painter.setPen(pg.mkPen("k"))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPolyline(QPolygonF([
            QPointF(-length, -5), QPointF(-length, 5), QPointF(-length, 0),
            QPointF(0, 0), QPointF(0, -5), QPointF(0, 5),
        ]))
        painter.drawText(QPointF(-30, -10), f"{distance}m")
        painter.restore()

    def _draw_rays(self, painter: QPainter, t: ViewTransform, rays: Sequence[Segment]) -> None:
        for ray in rays:
            painter.setPen(pg.mkPen(QColor(255, random.randrange(255), random.randrange(255))))
            painter.drawLine(
                QPointF(*t.world_to_screen(ray.x1, ray.y1)),
                QPointF(*t.world_to_screen(ray.x2, ray.y2)),
            )
