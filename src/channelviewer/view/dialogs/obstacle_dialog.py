"""
Obstacle Analysis Dialog
========================
Lets the user choose the obstacle color, the match tolerance and the cell
size, and previews the resulting obstacle cells on top of the background
image before anything is registered.

The image is shown in a pyqtgraph ViewBox (pan/zoom for free). While "Pick
color" is checked, a click on the image takes that pixel's color as target.
"""
import logging
from typing import Optional

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QSlider, QLabel,
    QPushButton, QDialogButtonBox, QFrame
)

from channelviewer.config import (
    CELL_SIZE_DEFAULT, CELL_SIZE_MAX, CELL_SIZE_MIN, TOLERANCE_MAX, TOLERANCE_MIN
)
from channelviewer.controller.obstacles import build_mask, mask_overlay, pick_color
from channelviewer.model.results import ObstacleMask

logger = logging.getLogger(__name__)


class ObstacleAnalysisDialog(QDialog):
    def __init__(self, pixels: np.ndarray, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Analyze for obstacles")
        self.resize(900, 650)

        self.pixels = pixels
        self.mask: Optional[ObstacleMask] = None

        self._init_ui()
        self._update_swatch()

    def _init_ui(self):
        layout = QHBoxLayout(self)

        # --- LEFT: image preview ---
        self.graphics = pg.GraphicsLayoutWidget()
        self.view_box = self.graphics.addViewBox()
        self.view_box.setAspectLocked(True)
        self.view_box.invertY(True)

        self.image_item = pg.ImageItem(axisOrder="row-major")
        self.image_item.setImage(self.pixels, autoLevels=False, levels=(0, 255))
        self.overlay_item = pg.ImageItem(axisOrder="row-major")
        self.overlay_item.setZValue(10)
        self.view_box.addItem(self.image_item)
        self.view_box.addItem(self.overlay_item)

        self.graphics.scene().sigMouseClicked.connect(self._on_scene_clicked)
        layout.addWidget(self.graphics, 1)

        # --- RIGHT: controls ---
        side = QVBoxLayout()

        color_group = QGroupBox("Obstacle color")
        color_form = QFormLayout(color_group)
        self.slider_r = self._make_slider(0, 255, 0)
        self.slider_g = self._make_slider(0, 255, 0)
        self.slider_b = self._make_slider(0, 255, 0)
        color_form.addRow("Red:", self.slider_r)
        color_form.addRow("Green:", self.slider_g)
        color_form.addRow("Blue:", self.slider_b)

        self.swatch = QFrame()
        self.swatch.setFixedHeight(20)
        self.swatch.setFrameShape(QFrame.Box)
        color_form.addRow("", self.swatch)

        self.btn_pick = QPushButton("Pick color")
        self.btn_pick.setCheckable(True)
        color_form.addRow("", self.btn_pick)
        side.addWidget(color_group)

        for slider in (self.slider_r, self.slider_g, self.slider_b):
            slider.valueChanged.connect(self._update_swatch)

        analysis_group = QGroupBox("Analysis")
        analysis_form = QFormLayout(analysis_group)
        self.slider_tolerance = self._make_slider(TOLERANCE_MIN, TOLERANCE_MAX, 0)
        self.slider_cell = self._make_slider(CELL_SIZE_MIN, CELL_SIZE_MAX, CELL_SIZE_DEFAULT)
        self.lbl_tolerance = QLabel()
        self.lbl_cell = QLabel()
        analysis_form.addRow("Tolerance:", self.slider_tolerance)
        analysis_form.addRow("", self.lbl_tolerance)
        analysis_form.addRow("Obstacle size (px):", self.slider_cell)
        analysis_form.addRow("", self.lbl_cell)
        side.addWidget(analysis_group)

        self.slider_tolerance.valueChanged.connect(lambda v: self.lbl_tolerance.setText(str(v)))
        self.slider_cell.valueChanged.connect(lambda v: self.lbl_cell.setText(str(v)))
        self.lbl_tolerance.setText(str(self.slider_tolerance.value()))
        self.lbl_cell.setText(str(self.slider_cell.value()))

        self.btn_preview = QPushButton("Preview obstacles")
        self.btn_preview.clicked.connect(self.on_preview)
        side.addWidget(self.btn_preview)

        self.lbl_status = QLabel("No preview yet.")
        self.lbl_status.setWordWrap(True)
        side.addWidget(self.lbl_status)

        side.addStretch()

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.on_accept)
        buttons.rejected.connect(self.reject)
        side.addWidget(buttons)

        layout.addLayout(side)

    @staticmethod
    def _make_slider(minimum: int, maximum: int, value: int) -> QSlider:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(minimum, maximum)
        slider.setValue(value)
        return slider

    # --- Parameters ---

    def target_rgb(self) -> tuple[int, int, int]:
        return self.slider_r.value(), self.slider_g.value(), self.slider_b.value()

    def tolerance(self) -> int:
        return self.slider_tolerance.value()

    def cell_size(self) -> int:
        return self.slider_cell.value()

    def _update_swatch(self):
        r, g, b = self.target_rgb()
        self.swatch.setStyleSheet(f"background-color: rgb({r}, {g}, {b});")

    # --- Slots ---

    def _on_scene_clicked(self, event):
        if not self.btn_pick.isChecked():
            return
        pos = self.image_item.mapFromScene(event.scenePos())
        x, y = int(pos.x()), int(pos.y())
        try:
            r, g, b = pick_color(self.pixels, x, y)
        except ValueError:
            logger.debug(f"Picked outside the image at ({x}, {y}).")
            return

        for slider, value in ((self.slider_r, r), (self.slider_g, g), (self.slider_b, b)):
            slider.setValue(value)
        self.btn_pick.setChecked(False)
        logger.info(f"Picked obstacle color ({r}, {g}, {b}) at pixel ({x}, {y}).")

    def _analyze(self) -> ObstacleMask:
        return build_mask(self.pixels, self.target_rgb(), self.tolerance(), self.cell_size())

    def on_preview(self):
        self.mask = self._analyze()
        self.overlay_item.setImage(mask_overlay(self.mask), autoLevels=False, levels=(0, 255))
        cols, rows = self.mask.shape
        self.lbl_status.setText(f"{self.mask.obstacle_count} obstacle cells of {cols * rows}.")

    def on_accept(self):
        # Always register what the current settings produce
        self.mask = self._analyze()
        self.accept()
