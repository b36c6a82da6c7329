"""
Mixer Pipeline

One call from craft description to mixing tables:
  load → resolve geometry → integrate mass/inertia → solve allocation

Each stage consumes the previous stage's immutable output; any failure
aborts the run with no partial result.

Example:
    >>> result = run_from_file("crafts.xml", craft_id="my_hex")
    >>> print(result.summary())
    >>> print(result.report().to_param())
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from multirotor_mixer.config import MixerConfig
from multirotor_mixer.control.control_allocation import (
    ControlAllocationMatrices,
    ControlAllocationSolver,
)
from multirotor_mixer.export.formatters import MixerReport
from multirotor_mixer.export.port_order import pack_port_order
from multirotor_mixer.physics.frame_geometry import FrameGeometry, FrameGeometryResolver
from multirotor_mixer.physics.mass_properties import MassInertiaIntegrator, PhysicalProperties
from multirotor_mixer.specs.craft_spec import CraftSpecification
from multirotor_mixer.specs.spec_loader import CraftSpecLoader

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class MixerResult:
    """Everything derived from one craft specification."""
    spec: CraftSpecification
    geometry: FrameGeometry
    properties: PhysicalProperties
    allocation: ControlAllocationMatrices
    port_order: Tuple[int, Optional[int]]
    config: MixerConfig = field(default_factory=MixerConfig)

    def report(self) -> MixerReport:
        return MixerReport(self)

    def summary(self) -> str:
        """Return a human-readable summary."""
        props = self.properties
        cg = props.cg_offset
        lines = [
            f"=== {self.spec.identifier} ({self.spec.frame_type.value}) ===",
            f"Motors: {self.spec.motor_count}",
            f"Mass: {props.total_mass:.4f} kg ({props.contributor_count} contributors)",
            f"CG offset: ({cg[0]:+.5f}, {cg[1]:+.5f}, {cg[2]:+.5f}) m",
            f"J diag: {props.j_roll:.6g}, {props.j_pitch:.6g}, {props.j_yaw:.6g} kg·m²",
        ]
        if self.allocation.rank_deficient_axes:
            lines.append(f"Low-rank axes: {', '.join(self.allocation.rank_deficient_axes)}")
        return "\n".join(lines)


# =============================================================================
# PIPELINE
# =============================================================================

class MixerPipeline:
    """
    Sequence the mixer stages for a craft.

    Args:
        config: MixerConfig, defaults if omitted
    """

    def __init__(self, config: Optional[MixerConfig] = None):
        self.config = config or MixerConfig()
        self.resolver = FrameGeometryResolver()
        self.integrator = MassInertiaIntegrator(self.config.cell_size_m)
        self.solver = ControlAllocationSolver(
            strict=self.config.strict,
            rank_tolerance=self.config.rank_tolerance,
        )
        self.loader = CraftSpecLoader()

    def run(self, spec: CraftSpecification) -> MixerResult:
        """
        Compute mass properties and mixing tables for a specification.

        Raises:
            MixerError: Any stage failed
        """
        logger.info(f"Running mixer for craft '{spec.identifier}'")

        geometry = self.resolver.resolve_spec(spec)
        properties = self.integrator.integrate(spec, geometry)

        positions = list(zip(geometry.x, geometry.y))
        allocation = self.solver.solve(
            positions,
            spec.spin_directions,
            spec.dist_motor_m,
            properties.cg_offset,
            spec.frame_type,
        )

        return MixerResult(
            spec=spec,
            geometry=geometry,
            properties=properties,
            allocation=allocation,
            port_order=pack_port_order(spec.ports, spec.config_id),
            config=self.config,
        )

    def run_file(self, path: Union[str, Path], craft_id: Optional[str] = None) -> MixerResult:
        """Load a craft description and run the mixer on it."""
        spec = self.loader.load(path, craft_id)
        return self.run(spec)


def run_from_file(
    path: Union[str, Path],
    craft_id: Optional[str] = None,
    config: Optional[MixerConfig] = None,
) -> MixerResult:
    """Convenience function to run the mixer on a craft description file."""
    return MixerPipeline(config).run_file(path, craft_id)
