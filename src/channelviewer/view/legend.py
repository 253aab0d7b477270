"""Color legend shown under the channel controls."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QColor, QPainter
from PySide6.QtWidgets import QSizePolicy, QWidget

from channelviewer.model.color_ramp import RangeState, classify_range, color_of
from channelviewer.model.metrics import METRIC_METADATA, Metric, nominal_range

CALCULATING_TEXT = "[calculating]"
INFINITE_TEXT = "INFINITE VALUES EXIST"


def format_number(value: float) -> str:
    """Grouped thousands, at most three decimals, no trailing zeros."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_bound(value: float, metric: Metric) -> str:
    if metric == Metric.RECEPTION_PROBABILITY:
        return f"{value:.0%}"
    return format_number(value) + METRIC_METADATA[metric].unit


@dataclass(frozen=True)
class LegendContent:
    """Either a centered message, or a gradient with its two end labels."""
    message: Optional[str] = None
    low_label: str = ""
    high_label: str = ""


def legend_content(low: float, high: float, metric: Metric, calculating: bool = False) -> LegendContent:
    if calculating:
        return LegendContent(message=CALCULATING_TEXT)

    state = classify_range(low, high)
    if state is RangeState.NON_FINITE:
        return LegendContent(message=INFINITE_TEXT)
    if state is RangeState.CONSTANT:
        return LegendContent(message=f"CONSTANT VALUES ({format_number(high)})")

    return LegendContent(low_label=format_bound(low, metric), high_label=format_bound(high, metric))


class ColorLegend(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedHeight(20)
        self.setMinimumWidth(200)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)

        self.metric = Metric.SIGNAL_STRENGTH
        self.low, self.high = nominal_range(self.metric)
        self.calculating = False

    def set_range(self, low: float, high: float, metric: Metric) -> None:
        self.low, self.high, self.metric = low, high, metric
        self.update()

    def reset(self, metric: Metric) -> None:
        """No channel map shown: fall back to the metric's nominal range."""
        self.set_range(*nominal_range(metric), metric)

    def set_calculating(self, calculating: bool) -> None:
        self.calculating = calculating
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            w, h = self.width(), self.height()
            content = legend_content(self.low, self.high, self.metric, self.calculating)

            if content.message is not None:
                painter.fillRect(0, 0, w, h, Qt.GlobalColor.white)
                painter.setPen(Qt.GlobalColor.black)
                painter.drawText(QRectF(0, 0, w, h), Qt.AlignmentFlag.AlignCenter, content.message)
            else:
                span = self.high - self.low
                for i in range(w):
                    painter.setPen(QColor(*color_of(self.low + i / w * span, self.low, self.high)))
                    painter.drawLine(i, 0, i, h)

                painter.setPen(Qt.GlobalColor.black)
                text_rect = QRectF(3, 0, w - 6, h)
                painter.drawText(text_rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter, content.low_label)
                painter.drawText(text_rect, Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter, content.high_label)

            painter.setPen(Qt.GlobalColor.black)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(0, 0, w - 1, h - 1)
        finally:
            painter.end()
