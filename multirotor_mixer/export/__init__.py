"""
Mixer Output

Port-order packing and the param / mix text formats.

Usage:
    from multirotor_mixer.export import MixerReport

    report = MixerReport(result)
    print(report.to_param())
    report.to_mix(pid=True, filepath="my_hex.mix")
"""

from .port_order import (
    pack_port_order,
    reinterpret_as_float32,
    float32_bits,
    unpack_port_order,
)

from .formatters import (
    MixerReport,
    TOOL_VERSION,
)

__all__ = [
    # Port order
    "pack_port_order",
    "reinterpret_as_float32",
    "float32_bits",
    "unpack_port_order",
    # Formatters
    "MixerReport",
    "TOOL_VERSION",
]
