"""Synthetic headset signal for demos and tests without a Muse."""

from __future__ import annotations

import numpy as np

from ..ble.protocol import CHANNEL_NAMES, SAMPLE_RATE


class SyntheticHeadset:
    """Generates continuous four-channel EEG with a chosen dominant rhythm.

    Each channel carries a sinusoid at ``frequency`` plus white noise.
    Blinks (large frontal spikes) and clenches (large temporal spikes)
    can be scheduled and appear in the next generated chunk.

    Usage::

        headset = SyntheticHeadset(frequency=10.0, amplitude=50.0)
        headset.blink()
        chunk = headset.generate(26)   # shape (4, 26)
    """

    def __init__(
        self,
        frequency: float = 10.0,
        amplitude: float = 50.0,
        noise: float = 0.0,
        sample_rate: int = SAMPLE_RATE,
        seed: int = 42,
    ):
        self.frequency = frequency
        self.amplitude = amplitude
        self.noise = noise
        self.sample_rate = sample_rate
        self.position = 0
        self._rng = np.random.default_rng(seed)
        self._spikes: list[tuple[tuple[int, ...], float]] = []

    def blink(self, amplitude: float = 500.0) -> None:
        self._spikes.append(((1, 2), amplitude))

    def clench(self, amplitude: float = 400.0) -> None:
        self._spikes.append(((0, 3), amplitude))

    def generate(self, n: int) -> np.ndarray:
        """Return the next ``n`` samples for every channel, shape (channels, n)."""
        t = (self.position + np.arange(n)) / self.sample_rate
        tone = self.amplitude * np.sin(2 * np.pi * self.frequency * t)
        data = np.tile(tone, (len(CHANNEL_NAMES), 1))
        if self.noise > 0:
            data += self._rng.standard_normal(data.shape) * self.noise

        if n > 0:
            for channels, amplitude in self._spikes:
                data[list(channels), n // 2] = amplitude
            self._spikes.clear()

        self.position += n
        return data
