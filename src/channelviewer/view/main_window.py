"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the Canvas and the Control
Panel.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (File -> Save, Recalculate, Analyze)
   to the appropriate controllers and background workers.
"""
import logging
import os
from typing import List, Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QScrollArea, QGroupBox,
    QRadioButton, QCheckBox, QPushButton, QSlider, QLabel, QButtonGroup,
    QFileDialog, QMessageBox, QProgressDialog
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction

from channelviewer.config import (
    IMAGE_FILE_FILTER, RESOLUTION_MAX, RESOLUTION_MIN, SESSION_FILE_FILTER, VISIBLE_APP_NAME
)
from channelviewer.controller.imaging import ImageDecodeError, decode_image
from channelviewer.controller.interaction import InteractionController, InteractionMode
from channelviewer.controller.obstacles import RegistrationReport
from channelviewer.controller.publish import ResultSlot
from channelviewer.controller.sampler import SampleRequest
from channelviewer.controller.workers import ObstacleWorker, SamplingWorker
from channelviewer.model.io import SessionIO
from channelviewer.model.medium import ChannelModel, RadioMedium
from channelviewer.model.metrics import METRIC_METADATA, Metric
from channelviewer.model.results import SampleGrid
from channelviewer.model.state import SessionState
from channelviewer.view.canvas import ChannelCanvas
from channelviewer.view.dialogs.background_dialog import BackgroundImageDialog
from channelviewer.view.dialogs.obstacle_dialog import ObstacleAnalysisDialog
from channelviewer.view.legend import ColorLegend

logger = logging.getLogger(__name__)

MODE_LABELS = {
    InteractionMode.SELECT: "Select",
    InteractionMode.PAN: "Pan",
    InteractionMode.ZOOM: "Zoom",
    InteractionMode.TRACK: "Track rays",
}

LAYER_LABELS = {
    "background": "Background",
    "obstacles": "Obstacles",
    "channel": "Channel",
    "radios": "Radios",
    "activity": "Radio Activity",
    "scale_arrow": "Scale arrow",
}


class MainWindow(QMainWindow):
    def __init__(self, session_state: SessionState, medium: RadioMedium, channel_model: ChannelModel) -> None:
        super().__init__()
        self.state: SessionState = session_state
        self.medium = medium
        self.channel_model = channel_model
        self.filepath: Optional[str] = None

        self.results: ResultSlot[SampleGrid] = ResultSlot()
        self.registrations: ResultSlot[RegistrationReport] = ResultSlot()
        self.interaction = InteractionController(self.state, self.medium, self.channel_model)

        self._workers: List = []
        self._sampling_count = 0

        self.update_window_title()
        self.resize(1100, 750)

        # --- MAIN CONTAINER ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: Canvas ---
        self.canvas = ChannelCanvas(
            self.state, self.interaction, self.medium, self.channel_model, self.results
        )
        splitter.addWidget(self.canvas)

        # --- RIGHT SIDE: Controls ---
        self.controls_scroll = QScrollArea()
        self.controls_scroll.setWidgetResizable(True)
        self.controls_scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.controls_scroll.setWidget(self._build_controls())
        splitter.addWidget(self.controls_scroll)
        splitter.setSizes([800, 300])

        # --- SIGNAL CONNECTIONS ---
        self.interaction.selection_changed.connect(self.on_selection_changed)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        self.refresh_ui_from_state()

    # ---------------------------------------------------------------------
    # UI construction
    # ---------------------------------------------------------------------

    def _build_controls(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)

        # 1. Mouse mode
        mode_group = QGroupBox("Mouse mode")
        mode_layout = QVBoxLayout(mode_group)
        self.mode_buttons = QButtonGroup(self)
        self.mode_radios = {}
        for mode, label in MODE_LABELS.items():
            radio = QRadioButton(label)
            radio.toggled.connect(lambda checked, m=mode: checked and self.interaction.set_mode(m))
            self.mode_buttons.addButton(radio)
            self.mode_radios[mode] = radio
            mode_layout.addWidget(radio)
        self.mode_radios[InteractionMode.SELECT].setChecked(True)
        layout.addWidget(mode_group)

        # 2. Layers
        layer_group = QGroupBox("View")
        layer_layout = QVBoxLayout(layer_group)
        self.layer_checks = {}
        for attr, label in LAYER_LABELS.items():
            check = QCheckBox(label)
            check.toggled.connect(lambda checked, a=attr: self.on_layer_toggled(a, checked))
            self.layer_checks[attr] = check
            layer_layout.addWidget(check)
        layout.addWidget(layer_group)

        # 3. Background & obstacles
        self.btn_background = QPushButton("Set background image")
        self.btn_background.clicked.connect(self.on_set_background)
        layout.addWidget(self.btn_background)

        self.btn_analyze = QPushButton("Analyze background for obstacles")
        self.btn_analyze.clicked.connect(self.on_analyze_obstacles)
        layout.addWidget(self.btn_analyze)

        # 4. Channel visualization
        channel_group = QGroupBox("Channel")
        channel_layout = QVBoxLayout(channel_group)

        self.radio_fixed = QRadioButton("Fixed channel coloring")
        self.radio_relative = QRadioButton("Relative channel coloring")
        coloring_group = QButtonGroup(self)
        coloring_group.addButton(self.radio_fixed)
        coloring_group.addButton(self.radio_relative)
        self.radio_fixed.toggled.connect(self.on_coloring_toggled)
        channel_layout.addWidget(self.radio_fixed)
        channel_layout.addWidget(self.radio_relative)

        self.legend = ColorLegend()
        channel_layout.addWidget(self.legend)

        self.metric_buttons = QButtonGroup(self)
        self.metric_radios = {}
        for metric in Metric:
            radio = QRadioButton(METRIC_METADATA[metric].label)
            radio.toggled.connect(lambda checked, m=metric: checked and self.on_metric_selected(m))
            self.metric_buttons.addButton(radio)
            self.metric_radios[metric] = radio
            channel_layout.addWidget(radio)

        channel_layout.addWidget(QLabel("Image resolution:"))
        self.slider_resolution = QSlider(Qt.Horizontal)
        self.slider_resolution.setRange(RESOLUTION_MIN, RESOLUTION_MAX)
        self.slider_resolution.setTickInterval(100)
        self.slider_resolution.setTickPosition(QSlider.TicksBelow)
        self.lbl_resolution = QLabel()
        self.slider_resolution.valueChanged.connect(self.on_resolution_changed)
        channel_layout.addWidget(self.slider_resolution)
        channel_layout.addWidget(self.lbl_resolution)

        self.btn_recalculate = QPushButton("Recalculate visible area")
        self.btn_recalculate.clicked.connect(self.on_recalculate)
        channel_layout.addWidget(self.btn_recalculate)

        layout.addWidget(channel_group)
        layout.addStretch()
        return panel

    def _create_actions(self) -> None:
        # File Actions
        self.act_new = QAction("New Session", self)
        self.act_new.triggered.connect(self.on_file_new)

        self.act_open = QAction("Open Session...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_save = QAction("Save Session", self)
        self.act_save.setShortcut("Ctrl+S")
        self.act_save.triggered.connect(self.on_file_save)

        self.act_save_as = QAction("Save Session As...", self)
        self.act_save_as.setShortcut("Ctrl+Shift+S")
        self.act_save_as.triggered.connect(self.on_file_save_as)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        # View Actions
        self.act_show_controls = QAction("Show settings", self)
        self.act_show_controls.setCheckable(True)
        self.act_show_controls.toggled.connect(self.on_controls_toggled)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_new)
        file_menu.addSeparator()
        file_menu.addAction(self.act_open)
        file_menu.addSeparator()
        file_menu.addAction(self.act_save)
        file_menu.addAction(self.act_save_as)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self.act_show_controls)

    def update_window_title(self) -> None:
        name = os.path.basename(self.filepath) if self.filepath else "Untitled"
        self.setWindowTitle(f"{VISIBLE_APP_NAME} - {name}")

    # ---------------------------------------------------------------------
    # State <-> widgets
    # ---------------------------------------------------------------------

    def refresh_ui_from_state(self) -> None:
        """
        After loading a file, the State is updated, but the Widgets are old.
        We need to force the Widgets to read from the State again.
        """
        widgets = [
            *self.layer_checks.values(), *self.metric_radios.values(),
            self.radio_fixed, self.radio_relative, self.slider_resolution, self.act_show_controls,
        ]
        for w in widgets:
            w.blockSignals(True)
        try:
            for attr, check in self.layer_checks.items():
                check.setChecked(getattr(self.state.layers, attr))
            self.metric_radios[self.state.metric].setChecked(True)
            self.radio_fixed.setChecked(self.state.fixed_coloring)
            self.radio_relative.setChecked(not self.state.fixed_coloring)
            self.slider_resolution.setValue(self.state.resolution)
            self.act_show_controls.setChecked(self.state.controls_visible)
        finally:
            for w in widgets:
                w.blockSignals(False)

        self.lbl_resolution.setText(f"{self.state.resolution} x {self.state.resolution}")
        self.controls_scroll.setVisible(self.state.controls_visible)
        self._update_legend()
        self.canvas.update()

    def _update_legend(self) -> None:
        grid = self.results.current()
        if grid is not None:
            self.legend.set_range(grid.low, grid.high, grid.metric)
        else:
            self.legend.reset(self.state.metric)
        self.legend.set_calculating(self._sampling_count > 0)

    # ---------------------------------------------------------------------
    # Control slots
    # ---------------------------------------------------------------------

    def on_layer_toggled(self, attr: str, checked: bool) -> None:
        setattr(self.state.layers, attr, checked)
        self.canvas.update()

    def on_coloring_toggled(self, fixed: bool) -> None:
        self.state.fixed_coloring = fixed

    def on_metric_selected(self, metric: Metric) -> None:
        self.state.metric = metric

    def on_resolution_changed(self, value: int) -> None:
        self.state.set_resolution(value)
        self.lbl_resolution.setText(f"{self.state.resolution} x {self.state.resolution}")

    def on_controls_toggled(self, visible: bool) -> None:
        self.state.controls_visible = visible
        self.controls_scroll.setVisible(visible)

    def on_selection_changed(self, radio) -> None:
        # A channel map belongs to the transmitter it was computed for
        self.results.clear()
        self._update_legend()
        self.canvas.update()

    # ---------------------------------------------------------------------
    # Background & obstacles
    # ---------------------------------------------------------------------

    def on_set_background(self) -> None:
        fname, _ = QFileDialog.getOpenFileName(self, "Set background image", "", IMAGE_FILE_FILTER)
        if not fname:
            return

        try:
            pixels = decode_image(fname)
        except ImageDecodeError as e:
            logger.error(f"Background image rejected: {e}")
            QMessageBox.critical(self, "Error", f"Could not load image:\n{e}")
            return

        h, w = pixels.shape[:2]
        dialog = BackgroundImageDialog(os.path.basename(fname), (w, h), self)
        if not dialog.exec():
            logger.info("Background image cancelled by user.")
            return

        self.state.set_background(fname, pixels, dialog.footprint())
        self.state.layers.background = True
        self.refresh_ui_from_state()

    def on_analyze_obstacles(self) -> None:
        if not self.state.has_background:
            QMessageBox.information(self, "Analyze", "Set a background image first.")
            return

        dialog = ObstacleAnalysisDialog(self.state.background_pixels, self)
        if not dialog.exec() or dialog.mask is None:
            return

        worker = ObstacleWorker(
            self.channel_model, dialog.mask, self.state.background_footprint, self.registrations
        )
        # Older registrations are stale now; they exit at their next column
        for older in [w for w in self._workers if isinstance(w, ObstacleWorker)]:
            older.stop()
            older.wait()

        progress = self._make_progress("Registering obstacles", worker)

        worker.finished.connect(lambda: self._on_obstacles_done(worker, progress))
        worker.cancelled.connect(lambda: self._on_obstacles_done(worker, progress))
        worker.error_occurred.connect(lambda msg: self._on_worker_error(worker, progress, msg))

        self._workers.append(worker)
        worker.start()

    def _on_obstacles_done(self, worker: ObstacleWorker, progress: QProgressDialog) -> None:
        progress.close()
        self._release(worker)
        logger.info(f"Obstacle registration finished with {worker.registered} obstacles.")
        self.canvas.update()

    # ---------------------------------------------------------------------
    # Channel sampling
    # ---------------------------------------------------------------------

    def on_recalculate(self) -> None:
        selected = self.interaction.selected
        if selected is None:
            self.statusBar().showMessage("Select a transmitting radio first.", 5000)
            return

        request = SampleRequest(
            transmitter=selected.position,
            region=self.state.transform.visible_region(self.canvas.width(), self.canvas.height()),
            resolution=self.state.resolution,
            metric=self.state.metric,
            fixed_coloring=self.state.fixed_coloring,
        )

        worker = SamplingWorker(self.channel_model, request, self.results)
        progress = self._make_progress("Calculating channel", worker)

        worker.finished.connect(lambda: self._on_sampling_done(worker, progress))
        worker.cancelled.connect(lambda: self._on_sampling_done(worker, progress))
        worker.error_occurred.connect(lambda msg: self._on_worker_error(worker, progress, msg))

        self._workers.append(worker)
        self._sampling_count += 1
        self._update_legend()
        worker.start()

    def _on_sampling_done(self, worker: SamplingWorker, progress: QProgressDialog) -> None:
        progress.close()
        self._release(worker)
        self._update_legend()
        self.canvas.update()

    # ---------------------------------------------------------------------
    # Worker plumbing
    # ---------------------------------------------------------------------

    def _make_progress(self, title: str, worker) -> QProgressDialog:
        progress = QProgressDialog(title, "Cancel", 0, 100, self)
        progress.setWindowTitle(title)
        progress.setMinimumDuration(0)
        progress.setAutoClose(False)
        progress.setAutoReset(False)
        progress.canceled.connect(worker.stop)
        worker.progress_updated.connect(lambda value, msg: (progress.setValue(value), progress.setLabelText(msg)))
        progress.show()
        return progress

    def _on_worker_error(self, worker, progress: QProgressDialog, message: str) -> None:
        progress.close()
        self._release(worker)
        self._update_legend()
        QMessageBox.critical(self, "Error", message)

    def _release(self, worker) -> None:
        # run() has emitted its last signal; wait for the thread to exit
        worker.wait()
        if worker in self._workers:
            self._workers.remove(worker)
        if isinstance(worker, SamplingWorker):
            self._sampling_count -= 1

    # ---------------------------------------------------------------------
    # File slots
    # ---------------------------------------------------------------------

    def on_file_new(self) -> None:
        self.state.reset()
        self.interaction.set_selected(None)
        self.results.clear()
        self.filepath = None
        self.update_window_title()
        self.refresh_ui_from_state()

    def load_session(self, fname: str) -> None:
        SessionIO.load_session(self.state, fname, image_loader=decode_image)
        self.filepath = fname
        self.update_window_title()
        self.refresh_ui_from_state()

    def on_file_open(self) -> None:
        fname, _ = QFileDialog.getOpenFileName(self, "Open Session", "", SESSION_FILE_FILTER)
        if fname:
            try:
                self.load_session(fname)
            except Exception as e:
                QMessageBox.critical(self, "Error", f"Could not open file:\n{e}")

    def on_file_save(self) -> None:
        if self.filepath:
            try:
                SessionIO.save_session(self.state, self.filepath)
            except Exception as e:
                QMessageBox.critical(self, "Error", f"Could not save file:\n{e}")
        else:
            self.on_file_save_as()

    def on_file_save_as(self) -> None:
        fname, _ = QFileDialog.getSaveFileName(self, "Save Session", "", SESSION_FILE_FILTER)
        if fname:
            # Ensure extension
            if not fname.endswith(".h5"):
                fname += ".h5"

            try:
                SessionIO.save_session(self.state, fname)
                self.filepath = fname
                self.update_window_title()
            except Exception as e:
                QMessageBox.critical(self, "Error", f"Could not save file:\n{e}")

    def closeEvent(self, event, /) -> None:
        for worker in list(self._workers):
            worker.stop()
            worker.wait()
        self._workers.clear()
        super().closeEvent(event)
