"""
View Transform
==============
World <-> screen coordinate mapping driving every spatial query of the viewer.

    screen = (world + pan) * zoom
    world  = screen / zoom - pan

Pan is stored in world units, zoom in pixels per meter. The zoom gesture keeps
both zoom factors equal; they are stored separately because saved sessions
carry both values.
"""
from __future__ import annotations

from dataclasses import dataclass

from channelviewer.config import ZOOM_MAX, ZOOM_MIN, ZOOM_RATE
from channelviewer.model.geometry import Position, WorldRect


@dataclass
class ViewTransform:
    zoom_x: float = 1.0
    zoom_y: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def world_to_screen(self, x: float, y: float) -> tuple[float, float]:
        return (x + self.pan_x) * self.zoom_x, (y + self.pan_y) * self.zoom_y

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        return sx / self.zoom_x - self.pan_x, sy / self.zoom_y - self.pan_y

    def zoom_at(self, screen_point: Position, delta: float) -> None:
        """
        Zoom by a dragged distance while keeping the world point under
        `screen_point` fixed on screen.

        Args:
            screen_point: Anchor of the zoom gesture (pixels).
            delta: Signed drag distance in pixels (positive zooms in).
        """
        sx, sy = screen_point
        anchor_x, anchor_y = self.screen_to_world(sx, sy)

        zoom = self.zoom_y * (1.0 + ZOOM_RATE * delta)
        zoom = min(ZOOM_MAX, max(ZOOM_MIN, zoom))
        self.zoom_y = zoom
        self.zoom_x = zoom

        # Re-anchor: solve screen = (anchor + pan) * zoom for pan
        self.pan_x = sx / self.zoom_x - anchor_x
        self.pan_y = sy / self.zoom_y - anchor_y

    def pan_by(self, dx: float, dy: float) -> None:
        """Pan by a screen-pixel distance; the canvas follows the mouse at any zoom."""
        self.pan_x += dx / self.zoom_x
        self.pan_y += dy / self.zoom_y

    def visible_region(self, width_px: int, height_px: int) -> WorldRect:
        """World rectangle currently covered by a canvas of the given size."""
        return WorldRect(
            -self.pan_x,
            -self.pan_y,
            width_px / self.zoom_x,
            height_px / self.zoom_y,
        )

    def world_rect_to_screen(self, rect: WorldRect) -> tuple[float, float, float, float]:
        """Screen (x, y, w, h) of a world rectangle."""
        sx, sy = self.world_to_screen(rect.x, rect.y)
        return sx, sy, rect.width * self.zoom_x, rect.height * self.zoom_y

    def copy(self) -> ViewTransform:
        return ViewTransform(self.zoom_x, self.zoom_y, self.pan_x, self.pan_y)
