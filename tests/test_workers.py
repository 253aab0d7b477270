import numpy as np
import pytest

from conftest import RecordingChannelModel

from channelviewer.controller.obstacles import build_mask
from channelviewer.controller.publish import ResultSlot
from channelviewer.controller.sampler import SampleRequest
from channelviewer.controller.workers import ObstacleWorker, SamplingWorker
from channelviewer.model.geometry import WorldRect
from channelviewer.model.metrics import Metric

REGION = WorldRect(0.0, 0.0, 30.0, 30.0)


def make_request():
    return SampleRequest(transmitter=(0.0, 0.0), region=REGION, resolution=30, metric=Metric.SIGNAL_STRENGTH)


def test_sampling_worker_publishes_result(qapp, channel_model):
    slot = ResultSlot()
    worker = SamplingWorker(channel_model, make_request(), slot)
    finished, progress = [], []
    worker.finished.connect(lambda: finished.append(True))
    worker.progress_updated.connect(lambda pct, msg: progress.append(pct))

    # run() directly: same thread, signals delivered synchronously
    worker.run()

    assert finished == [True]
    assert progress[0] == 0
    assert progress[-1] == 100
    assert slot.current().sequence == worker.sequence
    assert not worker.is_running


def test_stopped_sampling_worker_publishes_nothing(qapp, channel_model):
    slot = ResultSlot()
    worker = SamplingWorker(channel_model, make_request(), slot)
    cancelled = []
    worker.cancelled.connect(lambda: cancelled.append(True))

    worker.stop()
    worker.run()

    assert cancelled == [True]
    assert slot.current() is None
    assert channel_model.queries == 0


def test_sampling_worker_reports_errors(qapp):
    def explode(dst):
        raise RuntimeError("model broke")

    slot = ResultSlot()
    worker = SamplingWorker(RecordingChannelModel(value_fn=explode), make_request(), slot)
    errors = []
    worker.error_occurred.connect(errors.append)

    worker.run()

    assert len(errors) == 1
    assert slot.current() is None


def test_obstacle_worker_registers_mask(qapp):
    model = RecordingChannelModel()
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    mask = build_mask(image, (0, 0, 0), tolerance=0, cell_size=5)
    slot = ResultSlot()
    worker = ObstacleWorker(model, mask, WorldRect(0.0, 0.0, 10.0, 10.0), slot)
    finished = []
    worker.finished.connect(lambda: finished.append(True))

    worker.run()

    assert finished == [True]
    assert worker.registered == 4
    assert model.notify_count == 1
    assert slot.current().registered == 4


def test_older_obstacle_worker_yields_to_newer(qapp):
    model = RecordingChannelModel()
    mask = build_mask(np.zeros((10, 10, 3), dtype=np.uint8), (0, 0, 0), tolerance=0, cell_size=5)
    slot = ResultSlot()
    older = ObstacleWorker(model, mask, WorldRect(0.0, 0.0, 10.0, 10.0), slot)
    newer = ObstacleWorker(model, mask, WorldRect(50.0, 0.0, 10.0, 10.0), slot)
    cancelled = []
    older.cancelled.connect(lambda: cancelled.append(True))

    older.run()
    newer.run()

    assert cancelled == [True]
    assert older.registered == 0
    assert slot.current().registered == 4
    assert all(rect.x >= 50.0 for rect in model.obstacles)
    assert model.notify_count == 1


@pytest.mark.parametrize("resolution", [30, 600])
def test_new_worker_takes_newer_sequence(qapp, channel_model, resolution):
    slot = ResultSlot()
    request = SampleRequest(transmitter=(0.0, 0.0), region=REGION, resolution=resolution, metric=Metric.SNR)
    first = SamplingWorker(channel_model, request, slot)
    second = SamplingWorker(channel_model, request, slot)
    assert second.sequence > first.sequence
