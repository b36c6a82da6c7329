"""
Control Allocation

Per-axis least-squares solves and the firmware mixing matrices.

Usage:
    from multirotor_mixer.control import ControlAllocationSolver

    solver = ControlAllocationSolver()
    matrices = solver.solve(positions, spins, 0.25, props.cg_offset, FrameType.QUAD_X)
    print(matrices.PID)
"""

from .pseudo_inverse import (
    LeastSquaresSolution,
    pseudo_inverse,
    solve_min_norm,
)

from .control_allocation import (
    AXES,
    MIX_COLUMNS,
    ControlAllocationMatrices,
    ControlAllocationSolver,
    axis_constraints,
    normalize_columns,
    solve_allocation,
    torque_influence,
)

__all__ = [
    # Pseudoinverse
    "LeastSquaresSolution",
    "pseudo_inverse",
    "solve_min_norm",
    # Allocation
    "AXES",
    "MIX_COLUMNS",
    "ControlAllocationMatrices",
    "ControlAllocationSolver",
    "axis_constraints",
    "normalize_columns",
    "solve_allocation",
    "torque_influence",
]
