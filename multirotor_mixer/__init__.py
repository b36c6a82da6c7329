"""
Multirotor Mixer

Turns a multirotor craft description into rigid-body mass properties
and the control-allocation mixing tables used by flight firmware.

Usage:
    from multirotor_mixer import run_from_file

    result = run_from_file("crafts.xml", craft_id="my_hex")
    print(result.summary())
    print(result.report().to_mix(pid=True))
"""

__version__ = "0.1.0"

from .errors import (
    MixerError,
    InvalidFrameType,
    DegenerateMass,
    SingularCoupling,
    DegenerateAxis,
    SpecificationError,
)

from .config import (
    MixerConfig,
    OutputFormat,
)

from .specs import (
    CraftSpecification,
    CraftSpecLoader,
    FrameType,
    MotorPort,
    PayloadObject,
    load_spec,
)

from .physics import (
    FrameGeometryResolver,
    MassInertiaIntegrator,
    PhysicalProperties,
)

from .control import (
    ControlAllocationMatrices,
    ControlAllocationSolver,
)

from .export import (
    MixerReport,
    pack_port_order,
    reinterpret_as_float32,
)

from .pipeline import (
    MixerPipeline,
    MixerResult,
    run_from_file,
)

__all__ = [
    # Errors
    "MixerError",
    "InvalidFrameType",
    "DegenerateMass",
    "SingularCoupling",
    "DegenerateAxis",
    "SpecificationError",
    # Config
    "MixerConfig",
    "OutputFormat",
    # Specs
    "CraftSpecification",
    "CraftSpecLoader",
    "FrameType",
    "MotorPort",
    "PayloadObject",
    "load_spec",
    # Physics
    "FrameGeometryResolver",
    "MassInertiaIntegrator",
    "PhysicalProperties",
    # Control
    "ControlAllocationMatrices",
    "ControlAllocationSolver",
    # Export
    "MixerReport",
    "pack_port_order",
    "reinterpret_as_float32",
    # Pipeline
    "MixerPipeline",
    "MixerResult",
    "run_from_file",
]
