"""SessionLog — append every BrainState to a CSV file for later plotting."""

from __future__ import annotations

import csv
import logging
import os
from dataclasses import fields
from typing import TextIO

from .engine.state import BrainState

logger = logging.getLogger(__name__)

COLUMNS = ["time_s"] + [f.name for f in fields(BrainState) if f.name != "timestamp"]


class SessionLog:
    """BrainState observer that writes one CSV row per tick.

    ``time_s`` is relative to the first logged state.

    Usage::

        with SessionLog("output/session.csv") as log:
            engine.subscribe(log)
            ...
    """

    def __init__(self, path: str):
        self.path = path
        self.rows = 0
        self._file: TextIO | None = None
        self._writer = None
        self._t0: float | None = None

    def open(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._file = open(self.path, "w", newline="")
        self._writer = csv.writer(self._file)
        self._writer.writerow(COLUMNS)
        logger.info("Logging states to %s", self.path)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None

    def __enter__(self) -> SessionLog:
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __call__(self, state: BrainState) -> None:
        if self._writer is None:
            raise RuntimeError("SessionLog is not open")
        if self._t0 is None:
            self._t0 = state.timestamp
        self._writer.writerow([
            f"{state.timestamp - self._t0:.2f}",
            f"{state.delta:.4f}", f"{state.theta:.4f}", f"{state.alpha:.4f}",
            f"{state.beta:.4f}", f"{state.gamma:.4f}",
            f"{state.focus:.3f}", f"{state.calm:.3f}", int(state.focused),
            state.blinks, state.clenches,
            int(state.calibrating), f"{state.calibration_progress:.3f}",
        ])
        self._file.flush()
        self.rows += 1
