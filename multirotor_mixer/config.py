"""
Mixer configuration.

Numerical knobs and output selection, built by the CLI from its
arguments or by library users directly.
"""

from dataclasses import dataclass
from enum import Enum

from multirotor_mixer.control.control_allocation import DEFAULT_RANK_TOLERANCE
from multirotor_mixer.physics.mass_properties import DEFAULT_CELL_SIZE_M


class OutputFormat(Enum):
    """Rendering of a mixer result."""
    PARAM = "param"  # firmware #define constants
    PID = "pid"      # normalised mixing table as #define constants
    MIX = "mix"      # INI motor-mix file for ground-station configurators

    @property
    def file_suffix(self) -> str:
        return ".mix" if self is OutputFormat.MIX else ".param"


@dataclass
class MixerConfig:
    """Configuration for a mixer run."""

    cell_size_m: float = DEFAULT_CELL_SIZE_M
    """Edge length of the sub-cells used to integrate solid objects (m)."""

    strict: bool = False
    """Raise on low-rank axis solves instead of returning best effort."""

    rank_tolerance: float = DEFAULT_RANK_TOLERANCE
    """Relative residual above which an axis solve counts as unsatisfied."""

    output_format: OutputFormat = OutputFormat.PARAM
    """Default rendering of MixerResult.report().render()."""

    use_pid: bool = False
    """Default for render(): emit the normalised PID table in place of Mt, M and J."""

    def __post_init__(self):
        if self.cell_size_m <= 0:
            raise ValueError(f"cell_size_m must be positive, got {self.cell_size_m}")
        if self.rank_tolerance < 0:
            raise ValueError(f"rank_tolerance must be non-negative, got {self.rank_tolerance}")
        if isinstance(self.output_format, str):
            self.output_format = OutputFormat(self.output_format.lower())
