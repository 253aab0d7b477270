"""
Demo Collaborators
==================
A minimal radio medium and channel model so the viewer can run without a
host simulator. Signal strength is free-space path loss (Friis) plus a fixed
penalty for every obstacle the direct path crosses; this is a placeholder
for a real propagation model, not one.
"""
from __future__ import annotations

import logging
import math
import threading
from typing import Sequence

from channelviewer.model.geometry import Position, Segment, WorldRect
from channelviewer.model.medium import Radio

logger = logging.getLogger(__name__)

SPEED_OF_LIGHT = 299_792_458.0


def free_space_path_loss(distance_m: float, frequency_hz: float) -> float:
    """FSPL(dB) = 20*log10(d) + 20*log10(f) + 20*log10(4π/c)"""
    distance_m = max(distance_m, 0.1)  # Minimum 10cm to avoid log(0)
    return (
        20 * math.log10(distance_m)
        + 20 * math.log10(frequency_hz)
        + 20 * math.log10(4 * math.pi / SPEED_OF_LIGHT)
    )


def _segment_crosses_rect(src: Position, dst: Position, rect: WorldRect) -> bool:
    """Liang-Barsky clipping: does the segment src->dst touch the rectangle?"""
    (x1, y1), (x2, y2) = src, dst
    dx, dy = x2 - x1, y2 - y1
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x1 - rect.x), (dx, rect.max_x - x1), (-dy, y1 - rect.y), (dy, rect.max_y - y1)):
        if p == 0:
            if q < 0:
                return False
            continue
        t = q / p
        if p < 0:
            t0 = max(t0, t)
        else:
            t1 = min(t1, t)
        if t0 > t1:
            return False
    return True


class DemoChannelModel:
    """Thread-safe obstacle store with a free-space channel."""

    def __init__(
        self,
        tx_power_dbm: float = 0.0,
        frequency_hz: float = 2.4e9,
        obstacle_loss_db: float = 6.0,
        noise_dbm: float = -100.0,
    ) -> None:
        self.tx_power_dbm = tx_power_dbm
        self.frequency_hz = frequency_hz
        self.obstacle_loss_db = obstacle_loss_db
        self.noise_dbm = noise_dbm

        self._lock = threading.Lock()
        self._obstacles: list[WorldRect] = []

    # ---- channel queries ----

    def sample_signal(self, src: Position, dst: Position) -> tuple[float, float]:
        distance = math.dist(src, dst)
        crossed = sum(1 for rect in self.list_obstacles() if _segment_crosses_rect(src, dst, rect))
        loss = free_space_path_loss(distance, self.frequency_hz) + crossed * self.obstacle_loss_db
        # Each crossed obstacle adds uncertainty
        return self.tx_power_dbm - loss, float(crossed)

    def sample_sinr(self, src: Position, dst: Position, noise_floor: float) -> tuple[float, float]:
        signal, variance = self.sample_signal(src, dst)
        noise = max(self.noise_dbm, noise_floor)
        return signal - noise, variance

    def sample_reception_probability(self, src: Position, dst: Position, noise_floor: float) -> float:
        snr, _ = self.sample_sinr(src, dst, noise_floor)
        # Logistic curve centred on 10 dB SNR
        exponent = min(-(snr - 10.0) / 2.0, 700.0)
        return 1.0 / (1.0 + math.exp(exponent))

    def sample_rms_delay_spread(self, src: Position, dst: Position) -> float:
        return math.dist(src, dst) / SPEED_OF_LIGHT * 1e6

    def trace_rays(self, src: Position, dst: Position) -> list[Segment]:
        return [Segment(src[0], src[1], dst[0], dst[1])]

    # ---- obstacles ----

    def list_obstacles(self) -> list[WorldRect]:
        with self._lock:
            return list(self._obstacles)

    def add_obstacle(self, x: float, y: float, width: float, height: float) -> None:
        with self._lock:
            self._obstacles.append(WorldRect(x, y, width, height))

    def clear_obstacles(self) -> None:
        with self._lock:
            self._obstacles.clear()

    def notify_changed(self) -> None:
        logger.debug(f"Channel model changed ({len(self._obstacles)} obstacles).")


class DemoRadioMedium:
    """A fixed set of radios with no activity."""

    def __init__(self, radios: Sequence[Radio]) -> None:
        self._radios = list(radios)

    @classmethod
    def with_default_radios(cls) -> DemoRadioMedium:
        positions = [(10.0, 10.0), (60.0, 25.0), (35.0, 70.0), (85.0, 80.0)]
        return cls([Radio(radio_id=i + 1, position=p) for i, p in enumerate(positions)])

    def list_radios(self) -> list[Radio]:
        return list(self._radios)

    def current_transmissions(self) -> list[Position]:
        return []

    def current_interferences(self) -> list[tuple[Position, Position]]:
        return []

    def current_transfers(self) -> list[tuple[Position, Position]]:
        return []
