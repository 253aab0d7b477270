"""
Canvas Interaction
==================
Translates mouse gestures on the canvas into view, selection and ray-tracking
changes.

Why is this file needed?
------------------------
1. Explicit modes: Exactly one of select / pan / zoom / track-rays is active.
   Each mode is one handler object; the controller dispatches every mouse
   event to the handler of the current mode.
2. Testability: The canvas widget only forwards positions and buttons, so
   the gesture logic is tested without synthesizing Qt mouse events.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from PySide6.QtCore import QObject, Qt, Signal

from channelviewer.config import RADIO_ICON_SIZE
from channelviewer.controller.hit_test import cycle_selection, hit_radios
from channelviewer.model.geometry import Position, Segment

if TYPE_CHECKING:
    from channelviewer.model.medium import ChannelModel, Radio, RadioMedium
    from channelviewer.model.state import SessionState

logger = logging.getLogger(__name__)


class InteractionMode(Enum):
    SELECT = "select"
    PAN = "pan"
    ZOOM = "zoom"
    TRACK = "track"


class ModeHandler:
    """Default gesture handling: remember where the button went down."""

    def press(self, ctl: InteractionController, point: Position) -> None:
        ctl.last_point = point

    def drag(self, ctl: InteractionController, point: Position) -> None:
        pass

    def click(self, ctl: InteractionController, point: Position, button: Qt.MouseButton) -> None:
        pass


class SelectHandler(ModeHandler):
    def click(self, ctl: InteractionController, point: Position, button: Qt.MouseButton) -> None:
        hits = hit_radios(point, ctl.state.transform, ctl.medium.list_radios(), ctl.icon_size)

        if not hits:
            # Secondary button on empty space deselects
            if button != Qt.MouseButton.LeftButton:
                ctl.set_selected(None)
            return

        ctl.set_selected(cycle_selection(hits, ctl.selected))


class PanHandler(ModeHandler):
    def drag(self, ctl: InteractionController, point: Position) -> None:
        if ctl.last_point is None:
            ctl.last_point = point
            return
        ctl.state.transform.pan_by(point[0] - ctl.last_point[0], point[1] - ctl.last_point[1])
        ctl.last_point = point
        ctl.view_changed.emit()


class ZoomHandler(ModeHandler):
    """Vertical drag zooms around the point where the button went down."""

    def press(self, ctl: InteractionController, point: Position) -> None:
        super().press(ctl, point)
        ctl.zoom_anchor = point

    def drag(self, ctl: InteractionController, point: Position) -> None:
        if ctl.last_point is None or ctl.zoom_anchor is None:
            ctl.last_point = point
            ctl.zoom_anchor = point
            return
        # Dragging up zooms in
        ctl.state.transform.zoom_at(ctl.zoom_anchor, ctl.last_point[1] - point[1])
        ctl.last_point = point
        ctl.view_changed.emit()


class TrackHandler(ModeHandler):
    def click(self, ctl: InteractionController, point: Position, button: Qt.MouseButton) -> None:
        if ctl.selected is None:
            return
        target = ctl.state.transform.screen_to_world(*point)
        ctl.tracked_rays = list(ctl.channel_model.trace_rays(ctl.selected.position, target))
        logger.debug(f"Tracked {len(ctl.tracked_rays)} rays from {ctl.selected.radio_id} to {target}.")
        ctl.rays_changed.emit()


MODE_HANDLERS: Dict[InteractionMode, ModeHandler] = {
    InteractionMode.SELECT: SelectHandler(),
    InteractionMode.PAN: PanHandler(),
    InteractionMode.ZOOM: ZoomHandler(),
    InteractionMode.TRACK: TrackHandler(),
}


class InteractionController(QObject):
    # Signals
    selection_changed = Signal(object)  # Radio or None
    view_changed = Signal()
    rays_changed = Signal()
    mode_changed = Signal(object)  # InteractionMode

    def __init__(
        self,
        state: SessionState,
        medium: RadioMedium,
        channel_model: ChannelModel,
        icon_size: Tuple[int, int] = RADIO_ICON_SIZE,
    ) -> None:
        super().__init__()
        self.state = state
        self.medium = medium
        self.channel_model = channel_model
        self.icon_size = icon_size

        self.mode = InteractionMode.SELECT
        self.selected: Optional[Radio] = None
        self.tracked_rays: List[Segment] = []

        self.last_point: Optional[Position] = None
        self.zoom_anchor: Optional[Position] = None

    @property
    def handler(self) -> ModeHandler:
        return MODE_HANDLERS[self.mode]

    def set_mode(self, mode: InteractionMode) -> None:
        if mode == self.mode:
            return
        logger.debug(f"Interaction mode: {self.mode.value} -> {mode.value}")
        self.mode = mode
        self.last_point = None
        self.zoom_anchor = None
        self.mode_changed.emit(mode)

    def set_selected(self, radio: Optional[Radio]) -> None:
        if radio == self.selected:
            return
        self.selected = radio
        logger.info(f"Selected radio: {radio.radio_id if radio is not None else None}")
        self.selection_changed.emit(radio)

    def visible_rays(self) -> Sequence[Segment]:
        """Rays are only shown while tracking."""
        return self.tracked_rays if self.mode == InteractionMode.TRACK else []

    # ---- mouse events forwarded by the canvas ----

    def press(self, point: Position) -> None:
        self.handler.press(self, point)

    def drag(self, point: Position) -> None:
        self.handler.drag(self, point)

    def click(self, point: Position, button: Qt.MouseButton = Qt.MouseButton.LeftButton) -> None:
        self.handler.click(self, point, button)
