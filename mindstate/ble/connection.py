"""MuseConnection — BLE lifecycle for the Muse 2 headband."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections.abc import Callable
from typing import Any

from bleak import BleakClient, BleakScanner

from ..device import Telemetry, Vector3
from .protocol import (
    ACCEL_SCALE,
    ACCEL_UUID,
    CMD_HALT,
    CMD_RESUME,
    CONTROL_UUID,
    EEG_UUIDS,
    GYRO_SCALE,
    GYRO_UUID,
    TELEMETRY_UUID,
    decode_imu,
    decode_packet,
    decode_telemetry,
)

logger = logging.getLogger(__name__)

EEGCallback = Callable[[int, list[float], float], None]
MotionCallback = Callable[[str, Vector3], None]
TelemetryCallback = Callable[[Telemetry], None]


class MuseConnection:
    """Manage scanning, connecting, and streaming from a Muse 2.

    Usage::

        conn = MuseConnection("Muse-31A9")
        conn.on_eeg(my_callback)  # called with (channel_index, samples, timestamp)
        await conn.connect()
        await asyncio.sleep(20)
        await conn.disconnect()
    """

    def __init__(
        self,
        device_name: str,
        *,
        scan_timeout: float = 10.0,
        connect_timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ):
        self.device_name = device_name
        self.scan_timeout = scan_timeout
        self.connect_timeout = connect_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self._eeg_callbacks: list[EEGCallback] = []
        self._motion_callbacks: list[MotionCallback] = []
        self._telemetry_callbacks: list[TelemetryCallback] = []
        self._client: BleakClient | None = None
        self._device: Any = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected and self._client is not None and self._client.is_connected

    def on_eeg(self, callback: EEGCallback) -> None:
        """Register ``callback(channel_index, samples, timestamp)``."""
        self._eeg_callbacks.append(callback)

    def on_motion(self, callback: MotionCallback) -> None:
        """Register ``callback(kind, vector)`` with kind ``"accel"`` or ``"gyro"``."""
        self._motion_callbacks.append(callback)

    def on_telemetry(self, callback: TelemetryCallback) -> None:
        self._telemetry_callbacks.append(callback)

    def _make_eeg_callback(self, channel: int):
        def callback(_sender: Any, data: bytearray) -> None:
            samples = decode_packet(data)
            ts = asyncio.get_running_loop().time()
            for cb in self._eeg_callbacks:
                cb(channel, samples, ts)
        return callback

    def _make_motion_callback(self, kind: str, scale: float):
        def callback(_sender: Any, data: bytearray) -> None:
            try:
                vector = Vector3(*decode_imu(data, scale))
            except ValueError as e:
                logger.debug("Dropping %s packet: %s", kind, e)
                return
            for cb in self._motion_callbacks:
                cb(kind, vector)
        return callback

    def _telemetry_callback(self, _sender: Any, data: bytearray) -> None:
        try:
            telemetry = Telemetry(*decode_telemetry(data))
        except ValueError as e:
            logger.debug("Dropping telemetry packet: %s", e)
            return
        for cb in self._telemetry_callbacks:
            cb(telemetry)

    async def _scan(self) -> None:
        logger.info("Scanning for %s...", self.device_name)
        self._device = await BleakScanner.find_device_by_name(
            self.device_name, timeout=self.scan_timeout
        )
        if not self._device:
            raise RuntimeError(
                f"{self.device_name} not found. Is it in pairing mode?"
            )
        logger.info("Found: %s (%s)", self._device.name, self._device.address)

    async def _trust(self) -> None:
        """Trust the device via bluetoothctl to avoid BlueZ auth issues."""
        try:
            subprocess.run(
                ["bluetoothctl", "trust", self._device.address],
                capture_output=True,
                timeout=5,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            logger.debug("bluetoothctl trust skipped: %s", e)

    async def _subscribe(self) -> None:
        for channel, uuid in enumerate(EEG_UUIDS.values()):
            await self._client.start_notify(uuid, self._make_eeg_callback(channel))
        await self._client.start_notify(
            ACCEL_UUID, self._make_motion_callback("accel", ACCEL_SCALE)
        )
        await self._client.start_notify(
            GYRO_UUID, self._make_motion_callback("gyro", GYRO_SCALE)
        )
        await self._client.start_notify(TELEMETRY_UUID, self._telemetry_callback)

    async def connect(self) -> None:
        """Scan, trust, and connect with retries. Starts streaming."""
        await self._scan()
        await self._trust()

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.info("Connecting (attempt %d/%d)...", attempt, self.max_retries)
                self._client = BleakClient(
                    self._device, timeout=self.connect_timeout
                )
                await self._client.connect()
                self._connected = True
                await self._subscribe()
                await self._client.write_gatt_char(CONTROL_UUID, CMD_RESUME)
                logger.info("Streaming from %s", self.device_name)
                return
            except Exception as e:
                self._connected = False
                logger.warning("Connection attempt %d failed: %s", attempt, e)
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay)

        raise RuntimeError("All connection attempts failed.")

    async def disconnect(self) -> None:
        """Stop streaming and disconnect gracefully."""
        if not self._client:
            return

        try:
            await self._client.write_gatt_char(CONTROL_UUID, CMD_HALT)
            for uuid in [*EEG_UUIDS.values(), ACCEL_UUID, GYRO_UUID, TELEMETRY_UUID]:
                await self._client.stop_notify(uuid)
        except Exception as e:
            logger.debug("Halt on disconnect failed (already gone?): %s", e)

        try:
            await self._client.disconnect()
        except Exception as e:
            logger.debug("Disconnect failed: %s", e)

        self._connected = False
        self._client = None
