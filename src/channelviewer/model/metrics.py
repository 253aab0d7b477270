"""
Channel Metrics
===============
Defines the quantities that can be sampled and visualized, together with the
nominal value range used by fixed coloring.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict


class Metric(StrEnum):
    SIGNAL_STRENGTH = "signal_strength"
    SIGNAL_STRENGTH_VARIANCE = "signal_strength_variance"
    SNR = "snr"
    SNR_VARIANCE = "snr_variance"
    RECEPTION_PROBABILITY = "reception_probability"
    RMS_DELAY_SPREAD = "rms_delay_spread"


@dataclass(frozen=True)
class MetricMetadata:
    label: str
    unit: str
    nominal_low: float
    nominal_high: float


# Centralized Metadata for UI, legend and fixed coloring
METRIC_METADATA: Dict[Metric, MetricMetadata] = {
    Metric.SIGNAL_STRENGTH: MetricMetadata(
        label="Signal strength", unit="dBm", nominal_low=-100.0, nominal_high=0.0),
    Metric.SIGNAL_STRENGTH_VARIANCE: MetricMetadata(
        label="Signal strength variance", unit="dBm", nominal_low=0.0, nominal_high=20.0),
    Metric.SNR: MetricMetadata(
        label="Signal to Noise ratio", unit="dB", nominal_low=-10.0, nominal_high=30.0),
    Metric.SNR_VARIANCE: MetricMetadata(
        label="Signal to Noise variance", unit="dB", nominal_low=0.0, nominal_high=20.0),
    Metric.RECEPTION_PROBABILITY: MetricMetadata(
        label="Probability of reception", unit="", nominal_low=0.0, nominal_high=1.0),
    Metric.RMS_DELAY_SPREAD: MetricMetadata(
        label="RMS delay spread", unit="us", nominal_low=0.0, nominal_high=5.0),
}


def nominal_range(metric: Metric) -> tuple[float, float]:
    meta = METRIC_METADATA[metric]
    return meta.nominal_low, meta.nominal_high


def parse_metric(identifier: str) -> Metric:
    """
    Resolve a persisted metric identifier.

    Raises:
        ValueError: If the identifier names no known metric.
    """
    try:
        return Metric(identifier)
    except ValueError:
        raise ValueError(f"Unknown metric identifier '{identifier}'.") from None
