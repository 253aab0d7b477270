import pytest

from conftest import RecordingChannelModel, StaticRadioMedium

from channelviewer.controller.sampler import ChannelSampler, SampleRequest
from channelviewer.model.geometry import WorldRect
from channelviewer.model.medium import Radio
from channelviewer.model.metrics import Metric
from channelviewer.model.state import SessionState
from channelviewer.view.legend import ColorLegend
from channelviewer.view.main_window import MainWindow

RADIO = Radio(1, (10.0, 10.0))


@pytest.fixture
def window(qapp):
    model = RecordingChannelModel()
    win = MainWindow(SessionState(), StaticRadioMedium([RADIO]), model)
    yield win
    win.close()


def test_legend_reset_uses_nominal_range(qapp):
    legend = ColorLegend()
    legend.set_range(-29.0, 0.0, Metric.SIGNAL_STRENGTH)

    legend.reset(Metric.SNR)

    assert (legend.low, legend.high, legend.metric) == (-10.0, 30.0, Metric.SNR)


def test_selection_change_resets_legend(window):
    request = SampleRequest(
        transmitter=(0.0, 0.0), region=WorldRect(0.0, 0.0, 30.0, 30.0),
        resolution=30, metric=Metric.SIGNAL_STRENGTH, fixed_coloring=False,
    )
    grid = ChannelSampler(window.channel_model).sample(request)
    window.results.publish(window.results.next_sequence(), grid)
    window._update_legend()
    assert (window.legend.low, window.legend.high) == (-29.0, 0.0)

    window.interaction.set_selected(RADIO)

    assert window.results.current() is None
    assert (window.legend.low, window.legend.high) == (-100.0, 0.0)
