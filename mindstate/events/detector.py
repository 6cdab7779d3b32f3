"""ArtifactDetector — classify blinks vs jaw clenches from peak amplitudes."""

from __future__ import annotations

import logging

import numpy as np

from ..ble.protocol import FRONTAL_CHANNELS, TEMPORAL_CHANNELS
from ..eeg.stream import EEGStream
from .base import Event, EventType

logger = logging.getLogger(__name__)


class ArtifactDetector:
    """Detects blinks and jaw clenches from the samples that arrived since the last call.

    Blinks show up as large deflections on the forehead electrodes (AF7,
    AF8); clenches as large bursts behind the ears (TP9, TP10). Comparing
    the two groups' peak amplitudes disambiguates one from the other. Each
    event type has its own refractory period.
    """

    def __init__(
        self,
        blink_threshold: float = 400.0,
        clench_threshold: float = 300.0,
        dominance_ratio: float = 1.5,
        refractory: float = 0.6,
    ):
        self.blink_threshold = blink_threshold
        self.clench_threshold = clench_threshold
        self.dominance_ratio = dominance_ratio
        self.refractory = refractory

        self.blinks = 0
        self.clenches = 0
        self._last_blink: float | None = None
        self._last_clench: float | None = None
        self._cursors: list[int] = []

    def reset(self, stream: EEGStream) -> None:
        """Zero the counters and start scanning from the stream's current position."""
        self.blinks = 0
        self.clenches = 0
        self._last_blink = None
        self._last_clench = None
        self._cursors = stream.cursors()

    def peaks(self, stream: EEGStream) -> tuple[float, float]:
        """Return (frontal, temporal) max |amplitude| over the new samples."""
        if len(self._cursors) != len(stream):
            self._cursors = [0] * len(stream)

        frontal = 0.0
        temporal = 0.0
        for ch, buf in enumerate(stream.channels):
            new = buf.read_since(self._cursors[ch])
            if len(new) == 0:
                continue
            peak = float(np.max(np.abs(new)))
            if ch in FRONTAL_CHANNELS:
                frontal = max(frontal, peak)
            elif ch in TEMPORAL_CHANNELS:
                temporal = max(temporal, peak)
        return frontal, temporal

    def _ready(self, last: float | None, now: float) -> bool:
        return last is None or now - last >= self.refractory

    def detect(self, stream: EEGStream, now: float) -> list[Event]:
        """Scan new samples, update counters, and return any detected events.

        Called once per engine tick; advances the internal cursors.
        """
        frontal, temporal = self.peaks(stream)
        self._cursors = stream.cursors()

        peaks = {"frontal_peak": frontal, "temporal_peak": temporal}
        events: list[Event] = []

        if (
            frontal > self.blink_threshold
            and frontal > temporal * self.dominance_ratio
            and self._ready(self._last_blink, now)
        ):
            self.blinks += 1
            self._last_blink = now
            events.append(Event(EventType.BLINK, now, frontal, self.blinks, peaks))

        if (
            temporal > self.clench_threshold
            and temporal > frontal * self.dominance_ratio
            and self._ready(self._last_clench, now)
        ):
            self.clenches += 1
            self._last_clench = now
            events.append(Event(EventType.CLENCH, now, temporal, self.clenches, peaks))

        for event in events:
            logger.debug("Detected %r", event)
        return events
