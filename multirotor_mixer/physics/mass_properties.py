"""
Mass Properties

Expands a craft specification into point-mass and solid contributors
and integrates total mass, center of gravity and the inertia tensor
about the center of gravity.

Point masses contribute -m·S(r)² where S(r) is the cross-product
matrix of the CG-relative position, i.e. m(|r|²I - r·rᵀ). Solids are
split into cubic cells of edge `cell_size_m` (1 mm by default), each
cell treated as a point mass; the Riemann sum tends to the closed-form
solid-cuboid tensor as the cells shrink.

All internal computation is in SI units (kg, m, kg·m²).
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from multirotor_mixer.errors import DegenerateMass
from multirotor_mixer.specs.craft_spec import CraftSpecification
from .frame_geometry import FrameGeometry, FrameGeometryResolver

logger = logging.getLogger(__name__)

DEFAULT_CELL_SIZE_M = 1e-3


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MassContributor:
    """A single mass in the airframe build-up."""
    label: str
    mass_kg: float
    position: np.ndarray       # meters from the airframe origin
    dimensions: np.ndarray     # meters; all non-zero for a solid

    @property
    def is_solid(self) -> bool:
        return bool(np.all(self.dimensions != 0.0))


@dataclass(frozen=True)
class PhysicalProperties:
    """Rigid-body mass properties of the whole craft."""

    total_mass: float
    """Total mass (kg)."""

    cg_offset: np.ndarray
    """Center of gravity relative to the airframe origin (m)."""

    inertia: np.ndarray
    """3x3 inertia tensor about the center of gravity (kg·m²)."""

    contributor_count: int
    """Number of contributors integrated."""

    @property
    def j_roll(self) -> float:
        return float(self.inertia[0, 0])

    @property
    def j_pitch(self) -> float:
        return float(self.inertia[1, 1])

    @property
    def j_yaw(self) -> float:
        return float(self.inertia[2, 2])


# ---------------------------------------------------------------------------
# Inertia terms
# ---------------------------------------------------------------------------

def skew(r: np.ndarray) -> np.ndarray:
    """Cross-product matrix S(r), so that S(r)·v == r × v."""
    x, y, z = r
    return np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0],
    ])


def point_inertia(mass: float, r: np.ndarray) -> np.ndarray:
    """Inertia of a point mass at CG-relative position r."""
    S = skew(r)
    return -mass * (S @ S)


def cell_positions(anchor: np.ndarray, dimensions: np.ndarray, about: np.ndarray,
                   cell_size: float = DEFAULT_CELL_SIZE_M) -> List[np.ndarray]:
    """
    Per-axis cell coordinates of a solid, relative to `about`.

    Cells start half a dimension inside the anchor and step toward the
    origin side given by the sign of each anchor coordinate (zero counts
    as positive). Returns one 1-D array per axis; the solid's cells are
    their Cartesian product.
    """
    axes = []
    for a, d, c in zip(anchor, dimensions, about):
        sign = -1.0 if a < 0.0 else 1.0
        count = max(1, int(round(d / cell_size)))
        steps = np.arange(count) * cell_size
        axes.append(a - c - (d / 2.0 + steps) * sign)
    return axes


def solid_inertia(mass: float, anchor: np.ndarray, dimensions: np.ndarray, about: np.ndarray,
                  cell_size: float = DEFAULT_CELL_SIZE_M) -> np.ndarray:
    """
    Riemann-sum inertia of a uniform rectangular solid about `about`.

    Equivalent to summing point_inertia over every cell; the grid is a
    Cartesian product so each second moment factors into per-axis sums.
    """
    ux, uy, uz = cell_positions(anchor, dimensions, about, cell_size)
    nx, ny, nz = len(ux), len(uy), len(uz)
    cell_mass = mass / float(nx * ny * nz)

    sxx = ny * nz * np.sum(ux * ux)
    syy = nx * nz * np.sum(uy * uy)
    szz = nx * ny * np.sum(uz * uz)
    sxy = nz * np.sum(ux) * np.sum(uy)
    sxz = ny * np.sum(ux) * np.sum(uz)
    syz = nx * np.sum(uy) * np.sum(uz)

    return cell_mass * np.array([
        [syy + szz, -sxy, -sxz],
        [-sxy, sxx + szz, -syz],
        [-sxz, -syz, sxx + syy],
    ])


# ---------------------------------------------------------------------------
# Integrator
# ---------------------------------------------------------------------------

class MassInertiaIntegrator:
    """
    Compute total mass, CG offset and inertia tensor for a craft.

    Contributor order: for each motor a motor, an ESC and an arm point
    mass, then every auxiliary object as given.
    """

    def __init__(self, cell_size_m: float = DEFAULT_CELL_SIZE_M):
        if cell_size_m <= 0:
            raise ValueError(f"cell_size_m must be positive, got {cell_size_m}")
        self.cell_size_m = cell_size_m
        self.resolver = FrameGeometryResolver()

    def contributors(self, spec: CraftSpecification,
                     geometry: Optional[FrameGeometry] = None) -> List[MassContributor]:
        """Flatten the craft into an ordered list of mass contributors."""
        if geometry is None:
            geometry = self.resolver.resolve_spec(spec)

        lever_x, lever_y = geometry.lever_x, geometry.lever_y
        with np.errstate(invalid="raise", divide="raise"):
            try:
                bearing_x, bearing_y = geometry.bearings()
            except FloatingPointError:
                raise DegenerateMass(
                    f"craft '{spec.identifier}' has a motor at the origin; ESC bearing is undefined"
                )

        point = np.zeros(3)
        items: List[MassContributor] = []
        for i in range(geometry.motor_count):
            port = spec.motors[i].port
            items.append(MassContributor(
                label=f"motor {port}",
                mass_kg=spec.mass_motor_g / 1000.0,
                position=np.array([lever_x[i], lever_y[i], 0.0]),
                dimensions=point,
            ))
            items.append(MassContributor(
                label=f"esc {port}",
                mass_kg=spec.mass_esc_g / 1000.0,
                position=np.array([bearing_x[i], bearing_y[i], 0.0]) * spec.dist_esc_m,
                dimensions=point,
            ))
            items.append(MassContributor(
                label=f"arm {port}",
                mass_kg=spec.mass_arm_g / 1000.0,
                position=np.array([lever_x[i] / 2.0, lever_y[i] / 2.0, 0.0]),
                dimensions=point,
            ))

        for i, obj in enumerate(spec.payloads):
            items.append(MassContributor(
                label=f"object {i + 1}",
                mass_kg=obj.mass_g / 1000.0,
                position=np.array(obj.offset, dtype=float),
                dimensions=np.array(obj.dimensions, dtype=float),
            ))

        return items

    def integrate(self, spec: CraftSpecification,
                  geometry: Optional[FrameGeometry] = None) -> PhysicalProperties:
        """
        Integrate mass properties of a craft.

        Raises:
            DegenerateMass: No motors, zero total mass, or every
                contributor is a point mass at one shared position
        """
        if spec.motor_count == 0:
            raise DegenerateMass(f"craft '{spec.identifier}' has no motors")

        items = self.contributors(spec, geometry)

        masses = np.array([c.mass_kg for c in items])
        positions = np.array([c.position for c in items])

        total_mass = float(np.sum(masses))
        if not total_mass > 0.0:
            raise DegenerateMass(
                f"craft '{spec.identifier}' has zero total mass; center of gravity is undefined"
            )

        cg = (masses @ positions) / total_mass

        if not any(c.is_solid for c in items) and np.all(positions == positions[0]):
            raise DegenerateMass(
                f"craft '{spec.identifier}' contributors all coincide; inertia is degenerate"
            )

        J = np.zeros((3, 3))
        for c in items:
            if c.is_solid:
                J += solid_inertia(c.mass_kg, c.position, c.dimensions, cg, self.cell_size_m)
            else:
                J += point_inertia(c.mass_kg, c.position - cg)

        cg.setflags(write=False)
        J.setflags(write=False)

        logger.info(
            f"Integrated {len(items)} contributors for '{spec.identifier}': "
            f"mass={total_mass:.4f} kg, CG=({cg[0]:+.5f}, {cg[1]:+.5f}, {cg[2]:+.5f}) m"
        )
        logger.debug(f"J =\n{J}")

        return PhysicalProperties(
            total_mass=total_mass,
            cg_offset=cg,
            inertia=J,
            contributor_count=len(items),
        )


def integrate(spec: CraftSpecification, cell_size_m: float = DEFAULT_CELL_SIZE_M) -> PhysicalProperties:
    """Convenience function to integrate a craft's mass properties."""
    return MassInertiaIntegrator(cell_size_m).integrate(spec)
