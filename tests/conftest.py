"""Pytest configuration and shared fixtures."""
import os
import sys
import threading

# Qt must not try to open a display during tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from channelviewer.model.geometry import Segment, WorldRect


@pytest.fixture(scope="session")
def qapp():
    """Ensure a QApplication exists for Qt images, threading and signals."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


class RecordingChannelModel:
    """Channel model fake: values are a function of the destination point."""

    def __init__(self, value_fn=None, variance_fn=None):
        self.value_fn = value_fn or (lambda dst: -dst[0])
        self.variance_fn = variance_fn or (lambda dst: dst[1])
        self.noise_floors = []
        self.queries = 0
        self.obstacles = []
        self.calls = []
        self.notify_count = 0
        self._lock = threading.Lock()

    def _count(self):
        with self._lock:
            self.queries += 1

    def sample_signal(self, src, dst):
        self._count()
        return self.value_fn(dst), self.variance_fn(dst)

    def sample_sinr(self, src, dst, noise_floor):
        self._count()
        self.noise_floors.append(noise_floor)
        return self.value_fn(dst), self.variance_fn(dst)

    def sample_reception_probability(self, src, dst, noise_floor):
        self._count()
        self.noise_floors.append(noise_floor)
        return self.value_fn(dst)

    def sample_rms_delay_spread(self, src, dst):
        self._count()
        return self.value_fn(dst)

    def list_obstacles(self):
        return list(self.obstacles)

    def add_obstacle(self, x, y, width, height):
        self.calls.append("add")
        self.obstacles.append(WorldRect(x, y, width, height))

    def clear_obstacles(self):
        self.calls.append("clear")
        self.obstacles.clear()

    def notify_changed(self):
        self.calls.append("notify")
        self.notify_count += 1

    def trace_rays(self, src, dst):
        return [Segment(src[0], src[1], dst[0], dst[1]), Segment(src[0], src[1], 0.0, 0.0)]


class StaticRadioMedium:
    def __init__(self, radios):
        self.radios = list(radios)

    def list_radios(self):
        return list(self.radios)

    def current_transmissions(self):
        return []

    def current_interferences(self):
        return []

    def current_transfers(self):
        return []


@pytest.fixture
def channel_model():
    return RecordingChannelModel()
