"""Dialog for placing a loaded background image in world coordinates."""
import logging

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QDoubleSpinBox, QDialogButtonBox, QLabel
)

from channelviewer.model.geometry import WorldRect

logger = logging.getLogger(__name__)


class BackgroundImageDialog(QDialog):
    """Asks for the world rectangle (meters) the image covers."""

    def __init__(self, image_name: str, image_size: tuple[int, int], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Image settings")

        layout = QVBoxLayout(self)
        w, h = image_size
        layout.addWidget(QLabel(f"<b>{image_name}</b> ({w} x {h} px)"))

        form = QFormLayout()
        self.spin_x = self._make_spin(0.0)
        self.spin_y = self._make_spin(0.0)
        self.spin_width = self._make_spin(100.0, minimum=0.0)
        self.spin_height = self._make_spin(100.0, minimum=0.0)
        form.addRow("Start X (m):", self.spin_x)
        form.addRow("Start Y (m):", self.spin_y)
        form.addRow("Width (m):", self.spin_width)
        form.addRow("Height (m):", self.spin_height)
        layout.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    @staticmethod
    def _make_spin(value: float, minimum: float = -1e9) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(minimum, 1e9)
        spin.setDecimals(3)
        spin.setValue(value)
        return spin

    def footprint(self) -> WorldRect:
        return WorldRect(
            self.spin_x.value(),
            self.spin_y.value(),
            self.spin_width.value(),
            self.spin_height.value(),
        )
