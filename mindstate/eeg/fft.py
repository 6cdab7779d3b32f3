"""In-place radix-2 Cooley-Tukey FFT for the fixed-size band power pipeline."""

from __future__ import annotations

import math
from functools import lru_cache

import numpy as np


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


@lru_cache(maxsize=16)
def _bit_reversal(n: int) -> np.ndarray:
    """Index permutation that reorders an ``n``-point input for the butterflies."""
    perm = np.arange(n)
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            perm[i], perm[j] = perm[j], perm[i]
    perm.flags.writeable = False
    return perm


@lru_cache(maxsize=32)
def _twiddles(length: int) -> tuple[np.ndarray, np.ndarray]:
    """Twiddle factors for one sub-block of a pass, built by rotation recurrence."""
    half = length >> 1
    angle = -2.0 * math.pi / length
    step_re, step_im = math.cos(angle), math.sin(angle)

    w_re = np.empty(half, dtype=np.float64)
    w_im = np.empty(half, dtype=np.float64)
    c_re, c_im = 1.0, 0.0
    for k in range(half):
        w_re[k] = c_re
        w_im[k] = c_im
        c_re, c_im = c_re * step_re - c_im * step_im, c_re * step_im + c_im * step_re

    w_re.flags.writeable = False
    w_im.flags.writeable = False
    return w_re, w_im


def fft(re: np.ndarray, im: np.ndarray) -> None:
    """Forward DFT of ``re + j·im``, computed in place.

    Both arrays must be contiguous float64 of the same power-of-two length.
    Uses the negative-angle convention, matching :func:`numpy.fft.fft`.
    """
    n = len(re)
    if len(im) != n:
        raise ValueError(f"real and imaginary lengths differ: {n} != {len(im)}")
    if not _is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two, got {n}")
    if not (re.flags.c_contiguous and im.flags.c_contiguous):
        raise ValueError("FFT arrays must be contiguous to be transformed in place")

    perm = _bit_reversal(n)
    re[:] = re[perm]
    im[:] = im[perm]

    length = 2
    while length <= n:
        half = length >> 1
        w_re, w_im = _twiddles(length)

        # Every sub-block of this pass is one row
        rows_re = re.reshape(-1, length)
        rows_im = im.reshape(-1, length)
        a_re, b_re = rows_re[:, :half], rows_re[:, half:]
        a_im, b_im = rows_im[:, :half], rows_im[:, half:]

        t_re = b_re * w_re - b_im * w_im
        t_im = b_re * w_im + b_im * w_re
        b_re[:] = a_re - t_re
        b_im[:] = a_im - t_im
        a_re += t_re
        a_im += t_im

        length <<= 1
