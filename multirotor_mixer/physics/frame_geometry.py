"""
Frame Geometry

Planar motor coordinates for canonical multirotor layouts. "Plus"
frames put a motor on the +x axis; "X" frames rotate the pattern so
the +x axis falls between two motors. Canonical tables are unit
vectors scaled by the motor distance; Custom frames carry absolute
coordinates that are used as given.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from multirotor_mixer.errors import InvalidFrameType
from multirotor_mixer.specs.craft_spec import CraftSpecification, FrameType

logger = logging.getLogger(__name__)

_S2 = np.sqrt(2.0) / 2.0
_S3 = np.sqrt(3.0) / 2.0

# (x, y) per motor, in port-list order
_CANONICAL_TABLES = {
    FrameType.QUAD_PLUS: (
        [1.0, 0.0, -1.0, 0.0],
        [0.0, 1.0, 0.0, -1.0],
    ),
    FrameType.QUAD_X: (
        [_S2, _S2, -_S2, -_S2],
        [-_S2, _S2, _S2, -_S2],
    ),
    FrameType.HEX_PLUS: (
        [1.0, 0.5, -0.5, -1.0, -0.5, 0.5],
        [0.0, _S3, _S3, 0.0, -_S3, -_S3],
    ),
    FrameType.HEX_X: (
        [_S3, _S3, 0.0, -_S3, -_S3, 0.0],
        [-0.5, 0.5, 1.0, 0.5, -0.5, -1.0],
    ),
    FrameType.OCTO_PLUS: (
        [1.0, _S2, 0.0, -_S2, -1.0, -_S2, 0.0, _S2],
        [0.0, _S2, 1.0, _S2, 0.0, -_S2, -1.0, -_S2],
    ),
    # 45 degree steps starting at -22.5 degrees
    FrameType.OCTO_X: (
        list(np.cos(np.radians(-22.5 + 45.0 * np.arange(8)))),
        list(np.sin(np.radians(-22.5 + 45.0 * np.arange(8)))),
    ),
}


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class FrameGeometry:
    """
    Resolved per-motor planar coordinates.

    `x`/`y` are unit-table coordinates for canonical frames and absolute
    meters for Custom frames; `lever_x`/`lever_y` are always meters
    from the airframe origin.
    """
    frame_type: FrameType
    x: np.ndarray
    y: np.ndarray
    dist_motor: float

    @property
    def motor_count(self) -> int:
        return len(self.x)

    @property
    def scale(self) -> float:
        """Factor taking x/y to meters (1.0 for Custom frames)."""
        return 1.0 if self.frame_type.is_custom else self.dist_motor

    @property
    def lever_x(self) -> np.ndarray:
        return self.x * self.scale

    @property
    def lever_y(self) -> np.ndarray:
        return self.y * self.scale

    def bearings(self) -> Tuple[np.ndarray, np.ndarray]:
        """Unit direction from the origin toward each motor."""
        if not self.frame_type.is_custom:
            return self.x, self.y
        norm = np.hypot(self.x, self.y)
        return self.x / norm, self.y / norm


class FrameGeometryResolver:
    """Map a frame type (or Custom coordinates) to per-motor positions."""

    def resolve(
        self,
        frame_type: Union[FrameType, str],
        dist_motor: float,
        custom_positions: Optional[Sequence[Tuple[float, float]]] = None,
    ) -> FrameGeometry:
        """
        Resolve motor coordinates.

        Args:
            frame_type: FrameType or its name ("quad_x", ...)
            dist_motor: Motor distance in meters (canonical frames only)
            custom_positions: (x, y) per motor in meters, required for Custom

        Returns:
            FrameGeometry

        Raises:
            InvalidFrameType: Unknown type, or Custom without coordinates
        """
        if isinstance(frame_type, str):
            try:
                frame_type = FrameType.from_name(frame_type)
            except ValueError:
                raise InvalidFrameType(f"Unknown frame type '{frame_type}'")
        if not isinstance(frame_type, FrameType):
            raise InvalidFrameType(f"Unknown frame type {frame_type!r}")

        if frame_type.is_custom:
            if not custom_positions:
                raise InvalidFrameType("Custom frame requires explicit motor coordinates")
            coords = np.array(custom_positions, dtype=float).reshape(-1, 2)
            x, y = coords[:, 0], coords[:, 1]
        else:
            x, y = _CANONICAL_TABLES[frame_type]

        geometry = FrameGeometry(
            frame_type=frame_type,
            x=_frozen(x),
            y=_frozen(y),
            dist_motor=float(dist_motor),
        )
        logger.debug(f"Resolved {frame_type.value} geometry: x={geometry.x}, y={geometry.y}")
        return geometry

    def resolve_spec(self, spec: CraftSpecification) -> FrameGeometry:
        """Resolve the geometry of a craft specification."""
        geometry = self.resolve(spec.frame_type, spec.dist_motor_m, spec.custom_positions)
        if geometry.motor_count != spec.motor_count:
            raise InvalidFrameType(
                f"{spec.frame_type.value} has {geometry.motor_count} positions "
                f"but craft '{spec.identifier}' lists {spec.motor_count} motors"
            )
        return geometry


def resolve_frame(spec: CraftSpecification) -> FrameGeometry:
    """Convenience function to resolve a craft's frame geometry."""
    return FrameGeometryResolver().resolve_spec(spec)
