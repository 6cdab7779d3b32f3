"""Relay message decoding — JSON frames forwarded by the relay server.

Frames are produced by the headset bridge and fanned out verbatim to
consumers::

    {"type": "eeg", "ch": 1, "seq": 42, "samples": [12.1, -3.4, ...]}
    {"type": "accel", "x": 0.01, "y": -0.02, "z": 0.98}
    {"type": "gyro", "x": 1.2, "y": 0.0, "z": -0.4}
    {"type": "telemetry", "battery": 87, "temp": 31.5}
"""

from __future__ import annotations

import json
import logging

from ..device import Telemetry, Vector3
from ..engine.engine import BrainStateEngine

logger = logging.getLogger(__name__)

MOTION_TYPES = ("accel", "gyro")


def parse_message(raw: str | bytes) -> dict | None:
    """Decode one frame; returns None for anything that is not a JSON object."""
    try:
        msg = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug("Ignoring non-JSON frame: %r", raw[:80])
        return None
    if not isinstance(msg, dict):
        logger.debug("Ignoring non-object frame: %r", msg)
        return None
    return msg


def apply_message(engine: BrainStateEngine, msg: dict) -> bool:
    """Push a decoded frame into the engine; returns False if it was ignored."""
    kind = msg.get("type")
    try:
        if kind == "eeg":
            engine.push_samples(int(msg["ch"]), [float(s) for s in msg["samples"]])
        elif kind in MOTION_TYPES:
            engine.set_motion(
                kind, Vector3(float(msg["x"]), float(msg["y"]), float(msg["z"]))
            )
        elif kind == "telemetry":
            engine.set_telemetry(
                Telemetry(float(msg["battery"]), float(msg["temp"]))
            )
        else:
            logger.debug("Ignoring frame of unknown type %r", kind)
            return False
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Ignoring malformed %s frame: %s", kind, e)
        return False
    return True


def handle_frame(engine: BrainStateEngine, raw: str | bytes) -> bool:
    msg = parse_message(raw)
    if msg is None:
        return False
    return apply_message(engine, msg)
