"""Auxiliary headset readings that ride alongside EEG."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class Telemetry:
    battery: float | None = None       # percent
    temperature: float | None = None   # °C
