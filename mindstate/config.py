"""MindState configuration — dataclass-based config with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MindStateConfig:
    # Source
    source: str = "ble"                 # "ble" or "relay"
    relay_url: str = "ws://localhost:8765/"

    # BLE
    device_name: str = "Muse-31A9"
    scan_timeout: float = 10.0
    connect_timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 2.0

    # EEG
    sample_rate: int = 256
    buffer_seconds: float = 4.0         # 1024 samples per channel
    fft_size: int = 256

    # Engine
    tick_interval: float = 0.1          # 100ms = 10 Hz analysis tick
    smoothing: float = 0.2              # EMA weight of the newest tick
    calibration_seconds: float = 8.0
    focus_percentile: float = 0.6

    # Event detection
    blink_threshold: float = 400.0      # µV peak on AF7/AF8
    clench_threshold: float = 300.0     # µV peak on TP9/TP10
    dominance_ratio: float = 1.5        # peak must beat the other group by this factor
    refractory: float = 0.6             # 600ms between events of one type
