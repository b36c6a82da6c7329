"""
Craft Specification System

Describes a multirotor's physical layout and loads it from the
configurator's XML format or from YAML.

Usage:
    from multirotor_mixer.specs import CraftSpecLoader

    loader = CraftSpecLoader()
    spec = loader.load("crafts.xml", craft_id="my_hex")
    print(spec.summary())
"""

from .craft_spec import (
    CraftSpecification,
    FrameType,
    MotorPort,
    PayloadObject,
    NUM_PORTS,
)

from .validator import (
    SpecValidator,
    ValidationResult,
    ValidationError,
    ValidationWarning,
    validate_spec,
)

from .spec_loader import (
    CraftSpecLoader,
    load_spec,
)

__all__ = [
    # Spec
    "CraftSpecification",
    "FrameType",
    "MotorPort",
    "PayloadObject",
    "NUM_PORTS",
    # Validator
    "SpecValidator",
    "ValidationResult",
    "ValidationError",
    "ValidationWarning",
    "validate_spec",
    # Loader
    "CraftSpecLoader",
    "load_spec",
]
