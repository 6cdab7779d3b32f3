"""RelayConsumer — receive headset frames from the relay over WebSocket."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import websockets
from websockets.exceptions import ConnectionClosed

from ..engine.engine import BrainStateEngine
from .messages import handle_frame

logger = logging.getLogger(__name__)


def consumer_url(url: str) -> str:
    """Return ``url`` with ``role=consumer`` set in its query string."""
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query))
    query["role"] = "consumer"
    return urlunsplit(parts._replace(path=parts.path or "/", query=urlencode(query)))


class RelayConsumer:
    """Connects to the relay as a consumer and feeds every frame to an engine.

    Usage::

        consumer = RelayConsumer("ws://pi.local:8765/", engine)
        await consumer.run()   # returns when the relay closes the socket
    """

    def __init__(self, url: str, engine: BrainStateEngine):
        self.url = consumer_url(url)
        self.engine = engine
        self.frames = 0
        self.ignored = 0

    async def run(self) -> None:
        logger.info("Connecting to relay %s", self.url)
        try:
            async with websockets.connect(self.url) as ws:
                logger.info("Relay connected")
                async for raw in ws:
                    self.frames += 1
                    if not handle_frame(self.engine, raw):
                        self.ignored += 1
        except ConnectionClosed as e:
            logger.warning("Relay connection closed: %s", e)
        logger.info("Relay stream ended after %d frames (%d ignored)", self.frames, self.ignored)
