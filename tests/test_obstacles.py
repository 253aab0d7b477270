import threading

import numpy as np
import pytest

from conftest import RecordingChannelModel

from channelviewer.config import MASK_PREVIEW_COLOR
from channelviewer.controller.obstacles import (
    ObstacleRegistrar, build_mask, mask_overlay, mask_to_rects, pick_color,
)
from channelviewer.controller.publish import ResultSlot
from channelviewer.model.geometry import WorldRect

RED = (200, 30, 30)


def uniform_image(width, height, color=RED):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[...] = color
    return image


def test_uniform_image_all_obstacles():
    mask = build_mask(uniform_image(10, 10), RED, tolerance=0, cell_size=5)

    assert mask.shape == (2, 2)
    assert mask.cells.all()
    assert mask.obstacle_count == 4


def test_rects_cover_footprint():
    mask = build_mask(uniform_image(10, 10), RED, tolerance=0, cell_size=5)
    columns = mask_to_rects(mask, WorldRect(2.0, 3.0, 20.0, 40.0))

    rects = [r for column in columns for r in column]
    assert rects == [
        WorldRect(2.0, 3.0, 10.0, 20.0),
        WorldRect(2.0, 23.0, 10.0, 20.0),
        WorldRect(12.0, 3.0, 10.0, 20.0),
        WorldRect(12.0, 23.0, 10.0, 20.0),
    ]


def test_partial_edge_cells_and_clipping():
    # 12 x 7 image, 5 px cells -> 3 columns x 2 rows, last ones partial
    mask = build_mask(uniform_image(12, 7), RED, tolerance=0, cell_size=5)
    assert mask.shape == (3, 2)

    columns = mask_to_rects(mask, WorldRect(0.0, 0.0, 12.0, 7.0))
    assert len(columns) == 3
    last_column = columns[2]
    assert last_column[0] == WorldRect(10.0, 0.0, 2.0, 5.0)
    assert last_column[1] == WorldRect(10.0, 5.0, 2.0, 2.0)


def test_single_matching_pixel_marks_its_cell():
    image = uniform_image(10, 10, color=(255, 255, 255))
    image[7, 2] = RED  # row 7, column 2 -> cell (0, 1)
    mask = build_mask(image, RED, tolerance=0, cell_size=5)

    assert mask.cells.tolist() == [[False, True], [False, False]]


def test_tolerance_is_manhattan_distance():
    image = uniform_image(4, 4, color=(RED[0] + 10, RED[1] - 5, RED[2] + 5))  # distance 20

    assert not build_mask(image, RED, tolerance=19, cell_size=4).cells.any()
    assert build_mask(image, RED, tolerance=20, cell_size=4).cells.all()


def test_maximal_tolerance_matches_everything():
    rng = np.random.default_rng(0)
    image = rng.integers(0, 256, size=(17, 23, 3), dtype=np.uint8)
    mask = build_mask(image, (0, 0, 0), tolerance=765, cell_size=4)

    assert mask.shape == (6, 5)
    assert mask.cells.all()


def test_alpha_channel_ignored():
    image = np.zeros((5, 5, 4), dtype=np.uint8)
    image[..., :3] = RED
    assert build_mask(image, RED, tolerance=0, cell_size=5).cells.all()


@pytest.mark.parametrize("tolerance,cell_size", [(-1, 5), (0, 0)])
def test_invalid_parameters(tolerance, cell_size):
    with pytest.raises(ValueError):
        build_mask(uniform_image(5, 5), RED, tolerance=tolerance, cell_size=cell_size)


def test_mask_overlay_tints_obstacle_cells():
    image = uniform_image(10, 6, color=(255, 255, 255))
    image[0, 0] = RED
    overlay = mask_overlay(build_mask(image, RED, tolerance=0, cell_size=5))

    assert overlay.shape == (6, 10, 4)
    assert tuple(overlay[4, 4]) == MASK_PREVIEW_COLOR
    assert tuple(overlay[0, 5]) == (0, 0, 0, 0)
    assert tuple(overlay[5, 0]) == (0, 0, 0, 0)


def test_pick_color():
    image = uniform_image(3, 2, color=(1, 2, 3))
    image[1, 2] = (9, 8, 7)
    assert pick_color(image, 2, 1) == (9, 8, 7)
    with pytest.raises(ValueError):
        pick_color(image, 3, 0)


# ---- registration ----

def test_registration_replaces_previous_obstacles():
    model = RecordingChannelModel()
    model.obstacles.append(WorldRect(-5.0, -5.0, 1.0, 1.0))
    mask = build_mask(uniform_image(10, 10), RED, tolerance=0, cell_size=5)

    report = ObstacleRegistrar(model).register(mask, WorldRect(0.0, 0.0, 10.0, 10.0))

    assert report.registered == 4
    assert not report.cancelled
    assert model.calls[0] == "clear"
    assert model.calls.count("add") == 4
    assert model.calls[-1] == "notify"
    assert model.notify_count == 1
    assert WorldRect(-5.0, -5.0, 1.0, 1.0) not in model.obstacles


def test_registration_is_idempotent():
    model = RecordingChannelModel()
    mask = build_mask(uniform_image(10, 10), RED, tolerance=0, cell_size=5)
    registrar = ObstacleRegistrar(model)

    registrar.register(mask, WorldRect(0.0, 0.0, 10.0, 10.0))
    first = model.list_obstacles()
    registrar.register(mask, WorldRect(0.0, 0.0, 10.0, 10.0))

    assert model.list_obstacles() == first


def test_cancelled_registration_keeps_partial_obstacles():
    model = RecordingChannelModel()
    mask = build_mask(uniform_image(20, 10), RED, tolerance=0, cell_size=5)  # 4 columns x 2
    cancel = threading.Event()
    progress_calls = []

    def progress(done, total):
        progress_calls.append((done, total))
        cancel.set()

    report = ObstacleRegistrar(model).register(
        mask, WorldRect(0.0, 0.0, 20.0, 10.0), cancel_event=cancel, progress=progress,
    )

    # Stops before the next column
    assert progress_calls == [(1, 4)]
    assert report.cancelled
    assert not report.superseded
    assert report.registered == 2
    assert len(model.obstacles) == 2
    assert model.notify_count == 0


def test_cancel_during_last_column_still_completes():
    model = RecordingChannelModel()
    mask = build_mask(uniform_image(20, 10), RED, tolerance=0, cell_size=5)
    cancel = threading.Event()

    def progress(done, total):
        if done == total:
            cancel.set()

    report = ObstacleRegistrar(model).register(
        mask, WorldRect(0.0, 0.0, 20.0, 10.0), cancel_event=cancel, progress=progress,
    )

    assert not report.cancelled
    assert report.registered == 8
    assert model.notify_count == 1


def test_newer_registration_supersedes_running_one():
    model = RecordingChannelModel()
    slot = ResultSlot()
    older_mask = build_mask(uniform_image(20, 10), RED, tolerance=0, cell_size=5)  # 4 columns x 2
    newer_mask = build_mask(uniform_image(5, 5), RED, tolerance=0, cell_size=5)
    newer_footprint = WorldRect(100.0, 0.0, 5.0, 5.0)
    older_seq = slot.next_sequence()
    newer_reports = []

    def progress(done, total):
        # A second analysis starts and finishes while the first is on column 1
        if done == 1:
            newer_seq = slot.next_sequence()
            newer_reports.append(ObstacleRegistrar(model).register(
                newer_mask, newer_footprint, is_current=lambda: slot.is_latest(newer_seq),
            ))

    older = ObstacleRegistrar(model).register(
        older_mask, WorldRect(0.0, 0.0, 20.0, 10.0),
        progress=progress, is_current=lambda: slot.is_latest(older_seq),
    )

    assert older.cancelled and older.superseded
    assert not newer_reports[0].cancelled
    assert model.obstacles == [newer_footprint]
    assert model.notify_count == 1
    assert model.calls[-1] == "notify"


def test_stale_registration_never_touches_model():
    model = RecordingChannelModel()
    model.obstacles.append(WorldRect(1.0, 1.0, 1.0, 1.0))
    slot = ResultSlot()
    stale = slot.next_sequence()
    slot.next_sequence()

    report = ObstacleRegistrar(model).register(
        build_mask(uniform_image(10, 10), RED, tolerance=0, cell_size=5),
        WorldRect(0.0, 0.0, 10.0, 10.0),
        is_current=lambda: slot.is_latest(stale),
    )

    assert report.superseded
    assert model.calls == []
    assert model.obstacles == [WorldRect(1.0, 1.0, 1.0, 1.0)]
