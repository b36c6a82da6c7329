"""
Port-order packing.

The firmware stores the motor-to-port assignment in float parameters.
The low word holds the configuration id in bits 0-7 and the ports of
the first six motors in successive 4-bit fields from bit 8; crafts with
more than six motors add a high word whose 4-bit fields from bit 0
hold the ports of motors 7 onward. Each word is stored by reinterpreting
its bits as an IEEE-754 single, not by numeric conversion.
"""

import struct
from typing import Optional, Sequence, Tuple

WORD_MASK = 0xFFFFFFFF
LOW_WORD_SLOTS = 6
HIGH_WORD_SLOTS = 8


def pack_port_order(ports: Sequence[int], config_id: int) -> Tuple[int, Optional[int]]:
    """
    Pack ports and configuration id into one or two 32-bit words.

    Fields are OR'd in without per-field masking, so a port number above
    15 spills into the next field exactly as the firmware tool does.

    Returns:
        (low, high) where high is None for six motors or fewer
    """
    low = 0
    for i, port in enumerate(ports[:LOW_WORD_SLOTS]):
        low |= int(port) << (8 + 4 * i)
    low = (low | int(config_id)) & WORD_MASK

    if len(ports) <= LOW_WORD_SLOTS:
        return low, None

    high = 0
    for i, port in enumerate(ports[LOW_WORD_SLOTS:LOW_WORD_SLOTS + HIGH_WORD_SLOTS]):
        high |= int(port) << (4 * i)
    return low, high & WORD_MASK


def reinterpret_as_float32(bits: int) -> float:
    """Read a 32-bit unsigned integer's bit pattern as a float32."""
    return struct.unpack("<f", struct.pack("<I", bits & WORD_MASK))[0]


def float32_bits(value: float) -> int:
    """Inverse of reinterpret_as_float32."""
    return struct.unpack("<I", struct.pack("<f", value))[0]


def unpack_port_order(low: int, high: Optional[int], motor_count: int) -> Tuple[int, Tuple[int, ...]]:
    """
    Recover (config_id, ports) from packed words.

    Only exact for port numbers below 16.
    """
    config_id = low & 0xFF
    ports = []
    for i in range(min(motor_count, LOW_WORD_SLOTS)):
        ports.append((low >> (8 + 4 * i)) & 0xF)
    if high is not None:
        for i in range(min(motor_count - LOW_WORD_SLOTS, HIGH_WORD_SLOTS)):
            ports.append((high >> (4 * i)) & 0xF)
    return config_id, tuple(ports)
