"""BrainStateEngine — turns buffered EEG into a BrainState once per tick."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

import numpy as np

from ..config import MindStateConfig
from ..device import Telemetry, Vector3
from ..eeg.bands import ALL_BANDS, BAND_NAMES, compute_band_powers
from ..eeg.stream import EEGStream
from ..events.bus import EventBus
from ..events.detector import ArtifactDetector
from .calibration import Calibration
from .state import INITIAL_STATE, BrainState

logger = logging.getLogger(__name__)

StateObserver = Callable[[BrainState], None]


def _clamp01(value: float) -> float:
    return float(np.clip(value, 0.0, 1.0))


class BrainStateEngine:
    """Owns every piece of mutable analysis state.

    The engine is synchronous: something external (see
    :class:`~mindstate.engine.scheduler.TickScheduler`) calls :meth:`tick`
    on a fixed period, and ingestion code calls :meth:`push_sample`.

    Usage::

        engine = BrainStateEngine()
        engine.start()
        engine.push_samples(1, packet)
        state = engine.tick()
    """

    def __init__(
        self,
        config: MindStateConfig | None = None,
        stream: EEGStream | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or MindStateConfig()
        c = self.config

        self.stream = stream or EEGStream(c.buffer_seconds, c.sample_rate)
        self.clock = clock
        self.events = EventBus()
        self.detector = ArtifactDetector(
            c.blink_threshold, c.clench_threshold, c.dominance_ratio, c.refractory
        )
        self.calibration = Calibration(c.calibration_seconds, c.focus_percentile)

        self.accel = Vector3()
        self.gyro = Vector3()
        self.telemetry = Telemetry()

        self._smoothed: dict[str, float] | None = None
        self._state = INITIAL_STATE
        self._observers: list[StateObserver] = []
        self._streaming = False

    # --- Ingestion ---

    def push_sample(self, channel: int, value: float) -> None:
        self.stream.push(channel, value)

    def push_samples(self, channel: int, values: Iterable[float]) -> None:
        self.stream.append(channel, values)

    def set_motion(self, kind: str, vector: Vector3) -> None:
        """Record the latest ``"accel"`` or ``"gyro"`` reading."""
        if kind == "accel":
            self.accel = vector
        elif kind == "gyro":
            self.gyro = vector
        else:
            logger.debug("Ignoring unknown motion kind %r", kind)

    def set_telemetry(self, telemetry: Telemetry) -> None:
        self.telemetry = telemetry

    # --- Observation ---

    @property
    def latest_state(self) -> BrainState:
        return self._state

    @property
    def streaming(self) -> bool:
        return self._streaming

    @property
    def smoothed_bands(self) -> dict[str, float]:
        if self._smoothed is None:
            return {name: 0.0 for name in BAND_NAMES}
        return dict(self._smoothed)

    def subscribe(self, observer: StateObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: StateObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # --- Lifecycle ---

    def start(self, now: float | None = None) -> None:
        """(Re)start streaming; all analysis state from a previous stream is dropped."""
        now = self.clock() if now is None else now
        self._smoothed = None
        self._state = INITIAL_STATE
        self.calibration.start(now)
        self.detector.reset(self.stream)
        self._streaming = True
        logger.info("Engine started, calibrating for %.1fs", self.calibration.duration)

    def stop(self) -> None:
        self._streaming = False
        logger.info("Engine stopped")

    # --- Analysis ---

    def _average_band_powers(self) -> dict[str, float] | None:
        c = self.config
        sums = {name: 0.0 for name in BAND_NAMES}
        valid = 0
        for buf in self.stream.channels:
            if buf.write_cursor < c.fft_size:
                continue
            window = buf.read_newest(c.fft_size)
            for name, power in compute_band_powers(window, c.sample_rate, ALL_BANDS).items():
                sums[name] += power
            valid += 1

        if valid == 0:
            return None
        return {name: total / valid for name, total in sums.items()}

    def _smooth(self, raw: dict[str, float]) -> dict[str, float]:
        """EMA per band; a band still at exactly 0 takes the raw value."""
        prev = self._smoothed or {}
        w = self.config.smoothing
        smoothed = {}
        for name in BAND_NAMES:
            last = prev.get(name, 0.0)
            if last == 0.0:
                smoothed[name] = raw[name]
            else:
                smoothed[name] = last * (1.0 - w) + raw[name] * w
        self._smoothed = smoothed
        return smoothed

    def tick(self, now: float | None = None) -> BrainState | None:
        """Run one analysis step.

        Returns the new state, or ``None`` if nothing was produced (not
        streaming, or no channel has a full FFT window yet). In that case
        :attr:`latest_state` keeps its previous value.
        """
        if not self._streaming:
            return None
        now = self.clock() if now is None else now

        # 1. Artifacts from samples that arrived since the last tick
        for event in self.detector.detect(self.stream, now):
            self.events.publish(event)

        # 2. Band powers averaged across channels with enough data
        raw = self._average_band_powers()
        if raw is None:
            return None

        # 3. Exponential smoothing
        sb = self._smooth(raw)

        # 4. Relative powers
        total = sum(sb.values())
        rel = {name: sb[name] / total if total > 0 else 0.0 for name in BAND_NAMES}

        focus_ratio = sb["beta"] / sb["alpha"] if sb["alpha"] > 0 else 0.0

        # 5. Calibration window
        if self.calibration.update(now, focus_ratio, rel["alpha"]):
            state = BrainState(
                **rel,
                blinks=self.detector.blinks,
                clenches=self.detector.clenches,
                calibrating=True,
                calibration_progress=self.calibration.progress(now),
                timestamp=now,
            )
        else:
            state = self._score(now, rel, focus_ratio)

        self._state = state
        for observer in list(self._observers):
            observer(state)
        return state

    def _score(self, now: float, rel: dict[str, float], focus_ratio: float) -> BrainState:
        result = self.calibration.result
        threshold = result.focus_threshold
        baseline = result.calm_baseline

        if threshold is not None and threshold > 0:
            focus = _clamp01((focus_ratio / threshold - 0.5) * 1.2)
        else:
            focus = 0.0

        if baseline is not None and baseline > 0:
            calm = _clamp01(rel["alpha"] / (baseline * 2.0))
        else:
            calm = rel["alpha"]

        return BrainState(
            **rel,
            focus=focus,
            calm=calm,
            focused=threshold is not None and focus_ratio > threshold,
            blinks=self.detector.blinks,
            clenches=self.detector.clenches,
            calibrating=False,
            calibration_progress=1.0,
            timestamp=now,
        )
