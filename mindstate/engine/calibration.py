"""Calibration — one-shot per-user baseline for the focus and calm scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

logger = logging.getLogger(__name__)


class CalibrationPhase(Enum):
    UNCALIBRATED = auto()   # stream not started
    CALIBRATING = auto()    # collecting focus ratios
    CALIBRATED = auto()     # thresholds frozen until restart


@dataclass(frozen=True)
class CalibrationResult:
    # None when the window closed without a single observation
    focus_threshold: float | None
    calm_baseline: float | None


class Calibration:
    """Tracks the calibration window and freezes thresholds when it ends.

    During the window every tick's focus ratio is recorded. On the first
    tick at or after ``duration`` seconds the focus threshold becomes the
    ``percentile`` order statistic of those ratios and the calm baseline
    becomes the relative alpha power of that tick. The result is then
    fixed until :meth:`start` is called again.
    """

    def __init__(self, duration: float = 8.0, percentile: float = 0.6):
        self.duration = duration
        self.percentile = percentile
        self.phase = CalibrationPhase.UNCALIBRATED
        self.result: CalibrationResult | None = None
        self._observations: list[float] = []
        self._start_time = 0.0

    @property
    def calibrating(self) -> bool:
        return self.phase is not CalibrationPhase.CALIBRATED

    @property
    def observations(self) -> list[float]:
        return list(self._observations)

    def start(self, now: float) -> None:
        self.phase = CalibrationPhase.CALIBRATING
        self.result = None
        self._observations = []
        self._start_time = now

    def elapsed(self, now: float) -> float:
        return max(0.0, now - self._start_time)

    def progress(self, now: float) -> float:
        if self.phase is CalibrationPhase.CALIBRATED:
            return 1.0
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed(now) / self.duration)

    def update(self, now: float, focus_ratio: float, relative_alpha: float) -> bool:
        """Feed one tick; return True while the tick still belongs to the window."""
        if self.phase is CalibrationPhase.CALIBRATED:
            return False
        if self.phase is CalibrationPhase.UNCALIBRATED:
            self.start(now)

        if self.elapsed(now) < self.duration:
            self._observations.append(focus_ratio)
            return True

        self._finish(relative_alpha)
        return False

    def _finish(self, relative_alpha: float) -> None:
        if self._observations:
            ordered = sorted(self._observations)
            index = min(int(len(ordered) * self.percentile), len(ordered) - 1)
            self.result = CalibrationResult(ordered[index], relative_alpha)
        else:
            self.result = CalibrationResult(None, None)
        self.phase = CalibrationPhase.CALIBRATED
        logger.info(
            "Calibration done from %d observations: focus threshold=%s, calm baseline=%s",
            len(self._observations),
            self.result.focus_threshold,
            self.result.calm_baseline,
        )
