"""EEGStream — fixed-capacity ring buffer per EEG channel."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from ..ble.protocol import CHANNEL_NAMES, SAMPLE_RATE

logger = logging.getLogger(__name__)


class ChannelBuffer:
    """Circular sample store with a monotonically increasing write cursor.

    The physical slot for the next sample is ``write_cursor % capacity``.
    The cursor is never reset, so readers can snapshot it and later ask
    for everything written since.

    Usage::

        buf = ChannelBuffer(1024)
        buf.push(12.5)
        window = buf.read_newest(256)
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.samples = np.zeros(capacity, dtype=np.float64)
        self.write_cursor = 0

    def __len__(self) -> int:
        return min(self.write_cursor, self.capacity)

    def push(self, sample: float) -> None:
        self.samples[self.write_cursor % self.capacity] = sample
        self.write_cursor += 1

    def push_many(self, samples: Iterable[float]) -> None:
        for sample in samples:
            self.push(sample)

    def read_newest(self, count: int) -> np.ndarray:
        """Return the last ``count`` samples in arrival order (a copy).

        Asking for more than has been written returns only what exists.
        """
        n = max(0, min(count, len(self)))
        idx = np.arange(self.write_cursor - n, self.write_cursor) % self.capacity
        return self.samples[idx]

    def read_since(self, cursor: int) -> np.ndarray:
        """Return samples written after a previous ``write_cursor`` snapshot.

        If the reader fell more than one buffer behind, the overwritten
        samples are gone and only the last ``capacity`` are returned.
        """
        return self.read_newest(self.write_cursor - cursor)


class EEGStream:
    """One :class:`ChannelBuffer` per Muse EEG channel, addressed by index.

    Channel order follows :data:`CHANNEL_NAMES` (TP9, AF7, AF8, TP10).

    Usage::

        stream = EEGStream(duration=4.0)
        stream.append(1, [1.0, 2.0, 3.0])
        window = stream.get_window(1, 256)
    """

    def __init__(self, duration: float = 4.0, sample_rate: int = SAMPLE_RATE):
        self.duration = duration
        self.sample_rate = sample_rate
        self.capacity = int(duration * sample_rate)
        self.channels = [ChannelBuffer(self.capacity) for _ in CHANNEL_NAMES]

    def __len__(self) -> int:
        return len(self.channels)

    def __getitem__(self, channel: int) -> ChannelBuffer:
        return self.channels[channel]

    def push(self, channel: int, sample: float) -> None:
        """Append one sample; out-of-range channels are ignored."""
        if not 0 <= channel < len(self.channels):
            logger.debug("Dropping sample for unknown channel %r", channel)
            return
        self.channels[channel].push(sample)

    def append(self, channel: int, samples: Iterable[float]) -> None:
        """Append a packet of samples; out-of-range channels are ignored."""
        if not 0 <= channel < len(self.channels):
            logger.debug("Dropping packet for unknown channel %r", channel)
            return
        self.channels[channel].push_many(samples)

    def get_window(self, channel: int, count: int | None = None) -> np.ndarray:
        """Return the newest ``count`` samples (or all buffered) of a channel."""
        buf = self.channels[channel]
        return buf.read_newest(len(buf) if count is None else count)

    def cursors(self) -> list[int]:
        """Snapshot of every channel's write cursor."""
        return [buf.write_cursor for buf in self.channels]

    def total_samples(self) -> int:
        """Total samples ever written across all channels."""
        return sum(self.cursors())
