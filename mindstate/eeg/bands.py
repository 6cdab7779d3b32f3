"""EEG frequency band definitions and power computation."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy.signal import windows

from ..ble.protocol import SAMPLE_RATE
from .fft import fft


@dataclass(frozen=True)
class FrequencyBand:
    name: str
    low: float
    high: float
    color: str


# Standard EEG frequency bands; edges are inclusive at the bin level
DELTA = FrequencyBand("delta", 1.0, 4.0, "#9467bd")
THETA = FrequencyBand("theta", 4.0, 8.0, "#8c564b")
ALPHA = FrequencyBand("alpha", 8.0, 12.0, "#e377c2")
BETA = FrequencyBand("beta", 13.0, 30.0, "#17becf")
GAMMA = FrequencyBand("gamma", 30.0, 50.0, "#bcbd22")

ALL_BANDS = [DELTA, THETA, ALPHA, BETA, GAMMA]
BAND_NAMES = [b.name for b in ALL_BANDS]
BAND_COLORS = [b.color for b in ALL_BANDS]


def power_spectrum(samples: np.ndarray) -> np.ndarray:
    """Hann-windowed squared FFT magnitude (``re² + im²``) for every bin."""
    n = len(samples)
    re = np.asarray(samples, dtype=np.float64) * windows.hann(n, sym=True)
    im = np.zeros(n, dtype=np.float64)
    fft(re, im)
    return re * re + im * im


def mean_bin_power(
    spectrum: np.ndarray, sample_rate: float, low: float, high: float
) -> float:
    """Average power over the integer bins whose frequency lies in [low, high]."""
    bin_hz = sample_rate / len(spectrum)
    lo = math.ceil(low / bin_hz)
    hi = min(math.floor(high / bin_hz), len(spectrum) - 1)
    if hi < lo:
        return 0.0
    return float(np.sum(spectrum[lo:hi + 1]) / (hi - lo + 1))


def band_power(
    samples: np.ndarray,
    sample_rate: float,
    low: float,
    high: float,
) -> float:
    """Mean power per FFT bin (µV²) between ``low`` and ``high`` Hz.

    ``len(samples)`` must be a power of two.
    """
    return mean_bin_power(power_spectrum(samples), sample_rate, low, high)


def compute_band_powers(
    data: np.ndarray,
    sample_rate: float = SAMPLE_RATE,
    bands: list[FrequencyBand] | None = None,
) -> dict[str, float]:
    """Compute power in each frequency band from a single transform.

    Args:
        data: 1D window of EEG samples, power-of-two length.
        sample_rate: Sampling rate in Hz.
        bands: Frequency bands to compute. Defaults to ALL_BANDS.

    Returns:
        Dict mapping band name to mean bin power (µV²).
    """
    if bands is None:
        bands = ALL_BANDS

    spectrum = power_spectrum(data)
    return {
        band.name: mean_bin_power(spectrum, sample_rate, band.low, band.high)
        for band in bands
    }


def normalize_band_powers(powers: dict[str, float]) -> dict[str, float]:
    """Normalize band powers to relative values summing to 1.0."""
    total = sum(powers.values())
    if total <= 0:
        return {k: 0.0 for k in powers}
    return {k: v / total for k, v in powers.items()}
