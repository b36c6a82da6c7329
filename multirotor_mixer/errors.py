"""
Mixer Error Taxonomy

Every failure raised by the engine derives from MixerError so callers
can catch the whole family at once. All of them are terminal for the
current computation: nothing is retried and no partial result exists.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from multirotor_mixer.specs.validator import ValidationResult


class MixerError(ValueError):
    """Base class for all mixer failures."""


class InvalidFrameType(MixerError):
    """Frame type is neither canonical nor a Custom frame with coordinates."""


class DegenerateMass(MixerError):
    """Total mass is zero or the contributor geometry collapses to a point."""


class SingularCoupling(MixerError):
    """The torque coupling M·PD cannot be inverted (or an axis is low-rank in strict mode)."""


class DegenerateAxis(MixerError):
    """A mixing column is entirely zero and cannot be normalised."""


class SpecificationError(MixerError):
    """
    A craft description could not be turned into a CraftSpecification.

    Carries the ValidationResult when the failure came from validation.
    """

    def __init__(self, message: str, result: Optional["ValidationResult"] = None):
        super().__init__(message)
        self.result = result

    def __str__(self) -> str:
        s = super().__str__()
        if self.result is not None and self.result.errors:
            s += "\n" + "\n".join(f"  - {e}" for e in self.result.errors)
        return s
