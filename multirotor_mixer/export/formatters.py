"""
Mixer Output Formatters

Renders a mixer result in the text formats consumed downstream:
- param: C #define constants for compiling into, or loading onto, the
  flight controller
- mix: INI motor-mix file for ground-station configurators

Both formats can carry either the raw Mt/M/J matrices or the
normalised PID table. Per-motor values are written at single
precision, matching the firmware's parameter storage.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING

import numpy as np

from multirotor_mixer.config import OutputFormat
from multirotor_mixer.specs.craft_spec import NUM_PORTS
from .port_order import reinterpret_as_float32

if TYPE_CHECKING:
    from multirotor_mixer.pipeline import MixerResult

logger = logging.getLogger(__name__)

TOOL_VERSION = "150304.0"  # yymmdd.build, read by ground stations

_MIX_SECTIONS = ("Throttle", "Roll", "Pitch", "Yaw")
_MM_SECTIONS = ("MM_Roll", "MM_Pitch", "MM_Yaw")


def _f32(value) -> float:
    """Round-trip a value through single precision."""
    return float(np.float32(value))


def _round4(value: float) -> float:
    """Round to four decimals at single precision, halves away from zero."""
    scaled = np.float32(value) * np.float32(10000)
    rounded = math.copysign(math.floor(abs(float(scaled)) + 0.5), float(scaled))
    return float(np.float32(rounded) / np.float32(10000))


class MixerReport:
    """
    Text rendering of a MixerResult.

    Every method returns the rendered text and optionally writes it to
    `filepath`.
    """

    def __init__(self, result: 'MixerResult'):
        """
        Args:
            result: MixerResult from MixerPipeline.run
        """
        self.result = result
        self._slots = {port: j for j, port in enumerate(result.spec.ports)}

    # -------------------------------------------------------------------------
    # Shared pieces
    # -------------------------------------------------------------------------

    def header_lines(self) -> List[str]:
        """Tool, craft, mass and CG summary lines common to all formats."""
        spec = self.result.spec
        props = self.result.properties
        cg = props.cg_offset
        return [
            f"Tool_Version={TOOL_VERSION}",
            f"Craft={spec.identifier}",
            f"Motors={spec.motor_count}",
            "Mass=%f Kg (%d objects)" % (props.total_mass, props.contributor_count),
            "CG_Offset=%f, %f, %f" % (cg[0], cg[1], cg[2]),
        ]

    def port_order_lines(self) -> List[str]:
        low, high = self.result.port_order
        lines = ["#define DEFAULT_MOT_FRAME\t%.20g" % reinterpret_as_float32(low)]
        if high is not None:
            lines.append("#define DEFAULT_MOT_FRAME_H\t%.20g" % reinterpret_as_float32(high))
        return lines

    def _slot(self, port: int) -> Optional[int]:
        """Row of the motor wired to `port`, or None if the port is unused."""
        return self._slots.get(port)

    @staticmethod
    def matrix_lines(name: str, matrix: np.ndarray) -> List[str]:
        """Bracketed dump of a matrix, one row per line."""
        lines = [f"{name} = ["]
        for row in np.atleast_2d(matrix):
            lines.append("\t" + "".join("%+12.7f  " % v for v in row))
        lines.append("];")
        return lines

    def _matrices(self, pid: bool):
        alloc = self.result.allocation
        if pid:
            return [("PID", alloc.PID)]
        return [("Mt", alloc.Mt), ("M", alloc.M), ("J", self.result.properties.inertia)]

    # -------------------------------------------------------------------------
    # param format
    # -------------------------------------------------------------------------

    def _mixing_defines(self, matrix: np.ndarray) -> List[str]:
        lines = []
        for port in range(1, NUM_PORTS + 1):
            t = p = r = y = 0.0
            j = self._slot(port)
            if j is not None:
                t, r, p, y = (_f32(v) for v in matrix[j, :4])
            lines.append("#define DEFAULT_MOT_PWRD_%02d_T\t%+f" % (port, t))
            lines.append("#define DEFAULT_MOT_PWRD_%02d_P\t%+f" % (port, p))
            lines.append("#define DEFAULT_MOT_PWRD_%02d_R\t%+f" % (port, r))
            lines.append("#define DEFAULT_MOT_PWRD_%02d_Y\t%+f" % (port, y))
        lines.append("")
        return lines

    def _torque_defines(self, matrix: np.ndarray) -> List[str]:
        lines = []
        for port in range(1, NUM_PORTS + 1):
            r = p = y = 0.0
            j = self._slot(port)
            if j is not None:
                r, p, y = (_f32(v) for v in matrix[:3, j])
            lines.append("#define DEFAULT_QUATOS_MM_P%02d\t%+f" % (port, p))
            lines.append("#define DEFAULT_QUATOS_MM_R%02d\t%+f" % (port, r))
            lines.append("#define DEFAULT_QUATOS_MM_Y%02d\t%+f" % (port, y))
        lines.append("")
        return lines

    @staticmethod
    def _inertia_defines(J: np.ndarray) -> List[str]:
        return [
            "#define DEFAULT_QUATOS_J_ROLL\t%g" % J[0, 0],
            "#define DEFAULT_QUATOS_J_PITCH\t%g" % J[1, 1],
            "#define DEFAULT_QUATOS_J_YAW\t%g" % J[2, 2],
            "",
        ]

    def to_param(self, pid: bool = False, filepath: Optional[str] = None) -> str:
        """
        Render firmware #define constants.

        Args:
            pid: Emit the normalised PID table instead of Mt, M and J
            filepath: Optional path to save the output

        Returns:
            Rendered text
        """
        lines = self.header_lines()
        for name, matrix in self._matrices(pid):
            lines.extend(self.matrix_lines(name, matrix))
            if name == "J":
                lines.extend(self._inertia_defines(matrix))
            elif name == "M":
                lines.extend(self._torque_defines(matrix))
            else:
                lines.extend(self._mixing_defines(matrix))
        lines.extend(self.port_order_lines())

        return self._finish(lines, filepath)

    # -------------------------------------------------------------------------
    # mix format
    # -------------------------------------------------------------------------

    def _mix_sections(self, name: str, matrix: np.ndarray) -> List[str]:
        if name == "J":
            return [
                "[QUATOS]",
                "J_ROLL=%g" % matrix[0, 0],
                "J_PITCH=%g" % matrix[1, 1],
                "J_YAW=%g" % matrix[2, 2],
                "",
            ]

        torque = name == "M"
        sections = _MM_SECTIONS if torque else _MIX_SECTIONS
        lines = [""]
        for ii, section in enumerate(sections):
            lines.append(f"[{section}]")
            for port in range(1, NUM_PORTS + 1):
                val = 0.0
                j = self._slot(port)
                if j is not None:
                    val = matrix[ii, j] if torque else matrix[j, ii]
                lines.append("Motor%d=%g" % (port, _round4(val)))
            lines.append("")
        return lines

    def to_mix(self, pid: bool = False, filepath: Optional[str] = None) -> str:
        """
        Render an INI motor-mix file.

        Args:
            pid: Emit the normalised PID table instead of Mt, M and J
            filepath: Optional path to save the output

        Returns:
            Rendered text
        """
        spec = self.result.spec
        lines = [
            "[META]",
            f"ConfigId={spec.config_id}",
            "PortOrder=" + "".join(f"{p}," for p in spec.ports),
        ]
        lines.extend(self.header_lines())
        for name, matrix in self._matrices(pid):
            lines.extend(self._mix_sections(name, matrix))

        return self._finish(lines, filepath)

    # -------------------------------------------------------------------------

    def render(self, output_format: Optional[OutputFormat] = None, pid: Optional[bool] = None,
               filepath: Optional[str] = None) -> str:
        """
        Render in the given OutputFormat; OutputFormat.PID implies pid.

        Format and pid default to the MixerConfig the result was computed with.
        """
        config = self.result.config
        if output_format is None:
            output_format = config.output_format
        if pid is None:
            pid = config.use_pid
        if output_format is OutputFormat.MIX:
            return self.to_mix(pid=pid, filepath=filepath)
        return self.to_param(pid=pid or output_format is OutputFormat.PID, filepath=filepath)

    def _finish(self, lines: List[str], filepath: Optional[str]) -> str:
        text = "\n".join(lines) + "\n"
        if filepath:
            Path(filepath).parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, 'w') as f:
                f.write(text)
            logger.info(f"Wrote {self.result.spec.identifier} output to {filepath}")
        return text
