"""
Airframe Physics

Frame geometry tables and rigid-body mass properties.

Usage:
    from multirotor_mixer.physics import FrameGeometryResolver, MassInertiaIntegrator

    geometry = FrameGeometryResolver().resolve_spec(spec)
    props = MassInertiaIntegrator().integrate(spec, geometry)
    print(props.total_mass, props.cg_offset)
"""

from .frame_geometry import (
    FrameGeometry,
    FrameGeometryResolver,
    resolve_frame,
)

from .mass_properties import (
    DEFAULT_CELL_SIZE_M,
    MassContributor,
    MassInertiaIntegrator,
    PhysicalProperties,
    cell_positions,
    integrate,
    point_inertia,
    skew,
    solid_inertia,
)

__all__ = [
    # Geometry
    "FrameGeometry",
    "FrameGeometryResolver",
    "resolve_frame",
    # Mass properties
    "DEFAULT_CELL_SIZE_M",
    "MassContributor",
    "MassInertiaIntegrator",
    "PhysicalProperties",
    "cell_positions",
    "integrate",
    "point_inertia",
    "skew",
    "solid_inertia",
]
