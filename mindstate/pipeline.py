"""Pipeline — wires a headset source → BrainStateEngine → TickScheduler."""

from __future__ import annotations

import asyncio
import logging

from .ble.connection import MuseConnection
from .config import MindStateConfig
from .engine.engine import BrainStateEngine, StateObserver
from .engine.scheduler import TickScheduler
from .events.bus import EventHandler
from .relay.client import RelayConsumer

logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates ingestion and the analysis tick.

    ``config.source`` picks the ingestion path: ``"ble"`` talks to the
    headset directly, ``"relay"`` consumes frames from the relay server.

    Usage::

        pipeline = Pipeline(MindStateConfig(source="relay"))
        pipeline.on_state(print)
        await pipeline.start()  # blocks until cancelled or the source ends
    """

    def __init__(
        self,
        config: MindStateConfig | None = None,
        engine: BrainStateEngine | None = None,
    ):
        self.config = config or MindStateConfig()
        c = self.config
        if c.source not in ("ble", "relay"):
            raise ValueError(f"Unknown source {c.source!r} (expected 'ble' or 'relay')")

        self.engine = engine or BrainStateEngine(c)
        self.scheduler = TickScheduler(self.engine, c.tick_interval)
        self.connection: MuseConnection | None = None
        self.relay: RelayConsumer | None = None

        if c.source == "ble":
            self.connection = MuseConnection(
                c.device_name,
                scan_timeout=c.scan_timeout,
                connect_timeout=c.connect_timeout,
                max_retries=c.max_retries,
                retry_delay=c.retry_delay,
            )
            self.connection.on_eeg(self._eeg_callback)
            self.connection.on_motion(self.engine.set_motion)
            self.connection.on_telemetry(self.engine.set_telemetry)
        else:
            self.relay = RelayConsumer(c.relay_url, self.engine)

        self._running = False
        self._source_task: asyncio.Future | None = None

    def _eeg_callback(self, channel: int, samples: list[float], timestamp: float) -> None:
        """Called by MuseConnection for each decoded EEG packet."""
        self.engine.push_samples(channel, samples)

    def on_state(self, observer: StateObserver) -> None:
        self.engine.subscribe(observer)

    def on_event(self, handler: EventHandler) -> None:
        self.engine.events.subscribe(None, handler)

    async def _consume(self) -> None:
        """Runs until the source goes away."""
        if self.relay is not None:
            await self.relay.run()
            return
        while self.connection.connected:
            await asyncio.sleep(self.config.tick_interval)
        logger.warning("Headset disconnected")

    async def start(self) -> None:
        """Connect the source and tick the engine until stopped or the source ends."""
        if self.connection is not None:
            await self.connection.connect()

        self.engine.start()
        self.scheduler.start()
        self._running = True
        logger.info("Pipeline running (source=%s)", self.config.source)

        self._source_task = asyncio.ensure_future(self._consume())
        try:
            await self._source_task
        except asyncio.CancelledError:
            # Still running means start() itself was cancelled, not stop()
            if self._running:
                raise
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop ticking before anything else, then release the source."""
        if not self._running:
            return
        self._running = False
        try:
            await self.scheduler.stop()
        finally:
            self.engine.stop()
            if self._source_task is not None and not self._source_task.done():
                self._source_task.cancel()
            if self.connection is not None:
                await self.connection.disconnect()
            logger.info("Pipeline stopped")
