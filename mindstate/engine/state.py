"""BrainState — the immutable per-tick snapshot handed to presentation code."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class BrainState:
    # Relative band powers (0-1, sum ≈ 1)
    delta: float = 0.0
    theta: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    # Derived scores (0-1)
    focus: float = 0.0
    calm: float = 0.0
    focused: bool = False

    # Cumulative artifact counts since the stream started
    blinks: int = 0
    clenches: int = 0

    # Calibration
    calibrating: bool = True
    calibration_progress: float = 0.0

    timestamp: float = 0.0

    def bands(self) -> dict[str, float]:
        return {
            "delta": self.delta,
            "theta": self.theta,
            "alpha": self.alpha,
            "beta": self.beta,
            "gamma": self.gamma,
        }

    def as_dict(self) -> dict:
        return asdict(self)


INITIAL_STATE = BrainState()
