"""Muse 2 BLE protocol — UUIDs, commands, packet decoding."""

from __future__ import annotations

import struct

# GATT characteristic UUIDs
CONTROL_UUID = "273e0001-4c4d-454d-96be-f03bac821358"

EEG_UUIDS = {
    "TP9":  "273e0003-4c4d-454d-96be-f03bac821358",
    "AF7":  "273e0004-4c4d-454d-96be-f03bac821358",
    "AF8":  "273e0005-4c4d-454d-96be-f03bac821358",
    "TP10": "273e0006-4c4d-454d-96be-f03bac821358",
}

GYRO_UUID = "273e0009-4c4d-454d-96be-f03bac821358"
ACCEL_UUID = "273e000a-4c4d-454d-96be-f03bac821358"
TELEMETRY_UUID = "273e000b-4c4d-454d-96be-f03bac821358"

CHANNEL_NAMES = list(EEG_UUIDS.keys())

# Electrode groups used to tell eye artifacts from jaw artifacts
FRONTAL_CHANNELS = (1, 2)   # AF7, AF8
TEMPORAL_CHANNELS = (0, 3)  # TP9, TP10

# Control commands
CMD_RESUME = bytearray([0x02, 0x64, 0x0A])  # 'd' — start streaming
CMD_HALT = bytearray([0x02, 0x68, 0x0A])    # 'h' — stop streaming

# Muse 2 EEG parameters
SAMPLE_RATE = 256
SAMPLES_PER_PACKET = 12
SCALE_FACTOR = 0.48828125  # 2000 / 4096
ZERO_OFFSET = 2048         # 12-bit midscale

ACCEL_SCALE = 1.0 / 16384.0  # g
GYRO_SCALE = 1.0 / 16.4      # deg/s at ±2000 dps


def encode_command(command: str) -> bytearray:
    """Encode a control command: length byte, ASCII payload, newline."""
    payload = command.encode("ascii") + b"\n"
    return bytearray([len(payload)]) + payload


def decode_packet(packet: bytearray) -> list[float]:
    """Decode a 20-byte Muse EEG packet into 12 µV samples.

    The packet has a 2-byte sequence header followed by 18 bytes of 12-bit
    samples packed MSB-first. Samples are centered on the 12-bit midscale.
    """
    bit_buffer = 0
    bit_count = 0
    samples = []
    for byte in packet[2:]:
        bit_buffer = (bit_buffer << 8) | byte
        bit_count += 8
        while bit_count >= 12:
            bit_count -= 12
            raw = (bit_buffer >> bit_count) & 0xFFF
            samples.append((raw - ZERO_OFFSET) * SCALE_FACTOR)
    return samples


def decode_imu(packet: bytearray, scale: float) -> tuple[float, float, float]:
    """Decode the first (x, y, z) triple of an accelerometer/gyro packet.

    Layout: 2-byte sequence, then big-endian int16 triples.
    """
    if len(packet) < 8:
        raise ValueError(f"IMU packet too short: {len(packet)} bytes")
    x, y, z = struct.unpack_from(">hhh", packet, 2)
    return x * scale, y * scale, z * scale


def decode_telemetry(packet: bytearray) -> tuple[int, float]:
    """Decode a telemetry packet into (battery %, temperature °C)."""
    if len(packet) < 10:
        raise ValueError(f"Telemetry packet too short: {len(packet)} bytes")
    (battery,) = struct.unpack_from(">H", packet, 2)
    (temp,) = struct.unpack_from(">h", packet, 8)
    return battery, temp / 10.0
