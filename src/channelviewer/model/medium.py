"""
External Collaborators
======================
Interfaces of the radio medium and the channel model this viewer consumes.

Why is this file needed?
------------------------
The propagation model (ray tracing, SINR computation) and the radio registry
belong to the host simulator. The viewer only reads radio positions, queries
the channel and installs obstacles, so it depends on these small protocols
instead of a concrete simulator.

Implementations must be safe to call from a worker thread while the UI
thread reads them for painting.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Protocol, Sequence, Tuple

from channelviewer.model.geometry import Position, Segment, WorldRect


@dataclass(frozen=True)
class Radio:
    radio_id: Hashable
    position: Position


class ChannelModel(Protocol):
    def sample_signal(self, src: Position, dst: Position) -> Tuple[float, float]:
        """Received signal strength (mean, variance) in dBm."""
        ...

    def sample_sinr(self, src: Position, dst: Position, noise_floor: float) -> Tuple[float, float]:
        """Signal to interference+noise ratio (mean, variance) in dB."""
        ...

    def sample_reception_probability(self, src: Position, dst: Position, noise_floor: float) -> float:
        ...

    def sample_rms_delay_spread(self, src: Position, dst: Position) -> float:
        """RMS delay spread in microseconds."""
        ...

    def list_obstacles(self) -> Sequence[WorldRect]:
        ...

    def add_obstacle(self, x: float, y: float, width: float, height: float) -> None:
        ...

    def clear_obstacles(self) -> None:
        ...

    def notify_changed(self) -> None:
        ...

    def trace_rays(self, src: Position, dst: Position) -> Sequence[Segment]:
        ...


class RadioMedium(Protocol):
    def list_radios(self) -> Sequence[Radio]:
        ...

    def current_transmissions(self) -> Sequence[Position]:
        """Source positions of ongoing transmissions."""
        ...

    def current_interferences(self) -> Sequence[Tuple[Position, Position]]:
        ...

    def current_transfers(self) -> Sequence[Tuple[Position, Position]]:
        ...
