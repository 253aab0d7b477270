import pytest
from PySide6.QtCore import Qt

from conftest import RecordingChannelModel, StaticRadioMedium

from channelviewer.controller.interaction import InteractionController, InteractionMode
from channelviewer.model.geometry import Segment
from channelviewer.model.medium import Radio
from channelviewer.model.state import SessionState

A = Radio(1, (10.0, 10.0))
B = Radio(2, (11.0, 10.0))


@pytest.fixture
def controller(qapp):
    return InteractionController(SessionState(), StaticRadioMedium([A, B]), RecordingChannelModel())


def test_click_selects_and_cycles(controller):
    emitted = []
    controller.selection_changed.connect(emitted.append)

    controller.click((10.5, 10.0))
    controller.click((10.5, 10.0))
    controller.click((10.5, 10.0))

    assert controller.selected == A
    assert emitted == [A, B, A]


def test_primary_click_on_empty_space_keeps_selection(controller):
    controller.click((10.5, 10.0))
    controller.click((300.0, 300.0), Qt.MouseButton.LeftButton)
    assert controller.selected == A


def test_secondary_click_on_empty_space_deselects(controller):
    emitted = []
    controller.click((10.5, 10.0))
    controller.selection_changed.connect(emitted.append)

    controller.click((300.0, 300.0), Qt.MouseButton.RightButton)

    assert controller.selected is None
    assert emitted == [None]


def test_pan_drag(controller):
    controller.state.transform.zoom_x = controller.state.transform.zoom_y = 2.0
    controller.set_mode(InteractionMode.PAN)

    controller.press((0.0, 0.0))
    controller.drag((10.0, 20.0))
    controller.drag((14.0, 20.0))

    t = controller.state.transform
    assert (t.pan_x, t.pan_y) == pytest.approx((7.0, 10.0))


def test_zoom_drag_keeps_press_point(controller):
    controller.set_mode(InteractionMode.ZOOM)
    t = controller.state.transform
    world = t.screen_to_world(100.0, 100.0)

    controller.press((100.0, 100.0))
    controller.drag((130.0, 90.0))  # up by 10 px
    controller.drag((160.0, 80.0))  # up by 10 px

    assert t.zoom_y == pytest.approx(1.05 * 1.05)
    assert t.zoom_x == t.zoom_y
    assert t.screen_to_world(100.0, 100.0) == pytest.approx(world)


def test_clicks_do_not_select_outside_select_mode(controller):
    controller.set_mode(InteractionMode.PAN)
    controller.click((10.5, 10.0))
    assert controller.selected is None


def test_track_rays_only_visible_in_track_mode(controller):
    controller.set_mode(InteractionMode.TRACK)
    controller.click((50.0, 50.0))
    assert controller.tracked_rays == []  # nothing selected yet

    controller.set_selected(A)
    controller.click((50.0, 50.0))
    assert controller.visible_rays()[0] == Segment(10.0, 10.0, 50.0, 50.0)

    controller.set_mode(InteractionMode.SELECT)
    assert controller.visible_rays() == []
