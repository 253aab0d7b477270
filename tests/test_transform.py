import pytest

from channelviewer.config import ZOOM_MAX, ZOOM_MIN
from channelviewer.model.geometry import WorldRect
from channelviewer.model.transform import ViewTransform


@pytest.mark.parametrize("zoom,pan", [(1.0, (0.0, 0.0)), (3.7, (-12.5, 40.0)), (0.05, (1000.0, -3.0))])
def test_world_screen_round_trip(zoom, pan):
    t = ViewTransform(zoom_x=zoom, zoom_y=zoom, pan_x=pan[0], pan_y=pan[1])
    for point in [(0.0, 0.0), (12.3, -4.5), (-100.0, 250.0)]:
        sx, sy = t.world_to_screen(*point)
        assert t.screen_to_world(sx, sy) == pytest.approx(point)


def test_world_to_screen_formula():
    t = ViewTransform(zoom_x=2.0, zoom_y=2.0, pan_x=10.0, pan_y=-5.0)
    assert t.world_to_screen(1.0, 1.0) == pytest.approx((22.0, -8.0))


def test_zoom_keeps_anchor_fixed():
    t = ViewTransform(zoom_x=1.5, zoom_y=1.5, pan_x=3.0, pan_y=-7.0)
    anchor = (120.0, 80.0)
    world_before = t.screen_to_world(*anchor)

    t.zoom_at(anchor, 40)

    assert t.zoom_y == pytest.approx(1.5 * (1 + 0.005 * 40))
    assert t.zoom_x == t.zoom_y
    assert t.screen_to_world(*anchor) == pytest.approx(world_before)


def test_zoom_equalizes_axes():
    t = ViewTransform(zoom_x=4.0, zoom_y=2.0)
    t.zoom_at((0.0, 0.0), 0)
    assert t.zoom_x == t.zoom_y == pytest.approx(2.0)


def test_zoom_is_clamped():
    t = ViewTransform()
    for _ in range(200):
        t.zoom_at((50.0, 50.0), 500)
    assert t.zoom_y == ZOOM_MAX

    for _ in range(200):
        t.zoom_at((50.0, 50.0), -190)
    assert t.zoom_y == ZOOM_MIN
    assert t.zoom_x == ZOOM_MIN


def test_pan_follows_mouse_at_any_zoom():
    t = ViewTransform(zoom_x=4.0, zoom_y=4.0)
    world = t.screen_to_world(100.0, 100.0)

    t.pan_by(20.0, -8.0)

    assert (t.pan_x, t.pan_y) == pytest.approx((5.0, -2.0))
    # The same world point is now under the moved mouse
    assert t.world_to_screen(*world) == pytest.approx((120.0, 92.0))


def test_visible_region():
    t = ViewTransform(zoom_x=2.0, zoom_y=2.0, pan_x=-10.0, pan_y=5.0)
    assert t.visible_region(400, 200) == WorldRect(10.0, -5.0, 200.0, 100.0)


def test_world_rect_to_screen():
    t = ViewTransform(zoom_x=2.0, zoom_y=2.0, pan_x=1.0, pan_y=1.0)
    assert t.world_rect_to_screen(WorldRect(0.0, 0.0, 10.0, 5.0)) == pytest.approx((2.0, 2.0, 20.0, 10.0))
