import math

import pytest

from channelviewer.model.metrics import Metric
from channelviewer.view.legend import format_bound, format_number, legend_content
from channelviewer.view.renderer import scale_arrow_distance


@pytest.mark.parametrize(
    "value,expected",
    [(1234.5, "1,234.5"), (-100.0, "-100"), (0.12345, "0.123"), (-0.0001, "0")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_bound_units():
    assert format_bound(-100.0, Metric.SIGNAL_STRENGTH) == "-100dBm"
    assert format_bound(12.5, Metric.SNR) == "12.5dB"
    assert format_bound(0.25, Metric.RECEPTION_PROBABILITY) == "25%"


def test_legend_gradient_labels():
    content = legend_content(-100.0, 0.0, Metric.SIGNAL_STRENGTH)
    assert content.message is None
    assert (content.low_label, content.high_label) == ("-100dBm", "0dBm")


def test_legend_calculating_wins():
    assert legend_content(0.0, 1.0, Metric.SNR, calculating=True).message == "[calculating]"


def test_legend_infinite_and_constant():
    assert legend_content(-math.inf, 0.0, Metric.SNR).message == "INFINITE VALUES EXIST"
    assert legend_content(-42.0, -42.0, Metric.SIGNAL_STRENGTH).message == "CONSTANT VALUES (-42)"


@pytest.mark.parametrize(
    "zoom,width,expected",
    [
        (1.0, 800, 100.0),
        (10.0, 800, 10.0),
        (0.1, 800, 1000.0),
        (500.0, 800, 0.1),
        (2.0, 201, 10.0),  # half width is 100 px, 100 m * 2 is too long
    ],
)
def test_scale_arrow_distance(zoom, width, expected):
    assert scale_arrow_distance(zoom, width) == expected
