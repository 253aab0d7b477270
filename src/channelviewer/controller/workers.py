"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling long-running tasks.

Why is this file needed?
------------------------
1. Responsiveness: Sampling a 600x600 channel map or registering thousands of
   obstacles on the main thread would freeze the GUI. These classes push the
   work to a background thread.
2. Signals: They provide a safe way to update the GUI (Progress Dialogs, Logs)
   from the background process using Qt Signals.
3. Cancellation: stop() sets a threading.Event the pure-Python loops poll
   once per column.

Classes:
    SamplingWorker: Runs one ChannelSampler pass and publishes the result.
    ObstacleWorker: Registers the obstacles of an ObstacleMask; yields to newer ones.
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from PySide6.QtCore import QThread, Signal

from channelviewer.controller.obstacles import ObstacleRegistrar
from channelviewer.controller.sampler import ChannelSampler, SampleRequest

if TYPE_CHECKING:
    from channelviewer.controller.obstacles import RegistrationReport
    from channelviewer.controller.publish import ResultSlot
    from channelviewer.model.geometry import WorldRect
    from channelviewer.model.medium import ChannelModel
    from channelviewer.model.results import ObstacleMask, SampleGrid

logger = logging.getLogger(__name__)


def _percent(done: int, total: int) -> int:
    return int(100 * done / total) if total else 100


class SamplingWorker(QThread):
    # Signals to update the UI from the background
    progress_updated = Signal(int, str)  # e.g., (10, "Column 20/200")
    finished = Signal()
    cancelled = Signal()
    error_occurred = Signal(str)

    def __init__(self, model: ChannelModel, request: SampleRequest, slot: ResultSlot[SampleGrid]):
        super().__init__()
        self.sampler = ChannelSampler(model)
        self.request = request
        self.slot = slot
        self.sequence = slot.next_sequence()
        self.is_running = True
        self._cancel = threading.Event()

    def run(self):
        try:
            logger.info(f"Starting sampling request #{self.sequence} in background thread...")
            self.progress_updated.emit(0, "Calculating channel...")

            def progress_callback(done: int, total: int) -> None:
                self.progress_updated.emit(_percent(done, total), f"Column {done}/{total}")

            grid = self.sampler.sample(
                self.request,
                sequence=self.sequence,
                cancel_event=self._cancel,
                progress=progress_callback,
            )

            if grid is None:
                self.cancelled.emit()
                return

            self.slot.publish(self.sequence, grid)
            self.finished.emit()

        except Exception as e:
            logger.error(f"Error in SamplingWorker: {e}")
            self.error_occurred.emit(str(e))
        finally:
            self.is_running = False

    def stop(self) -> None:
        self.is_running = False
        self._cancel.set()


class ObstacleWorker(QThread):
    progress_updated = Signal(int, str)
    finished = Signal()
    cancelled = Signal()
    error_occurred = Signal(str)

    def __init__(
        self,
        model: ChannelModel,
        mask: ObstacleMask,
        footprint: WorldRect,
        slot: ResultSlot[RegistrationReport],
    ):
        super().__init__()
        self.registrar = ObstacleRegistrar(model)
        self.mask = mask
        self.footprint = footprint
        self.slot = slot
        self.sequence = slot.next_sequence()
        self.is_running = True
        self.registered = 0
        self._cancel = threading.Event()

    def run(self):
        try:
            logger.info(f"Starting obstacle registration #{self.sequence} in background thread...")
            self.progress_updated.emit(0, "Registering obstacles...")

            def progress_callback(done: int, total: int) -> None:
                self.progress_updated.emit(_percent(done, total), f"Column {done}/{total}")

            report = self.registrar.register(
                self.mask,
                self.footprint,
                cancel_event=self._cancel,
                progress=progress_callback,
                is_current=lambda: self.slot.is_latest(self.sequence),
            )
            self.registered = report.registered

            if report.cancelled:
                self.cancelled.emit()
                return

            self.slot.publish(self.sequence, report)
            self.finished.emit()

        except Exception as e:
            logger.error(f"Error in ObstacleWorker: {e}")
            self.error_occurred.emit(str(e))
        finally:
            self.is_running = False

    def stop(self) -> None:
        self.is_running = False
        self._cancel.set()
