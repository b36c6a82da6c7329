"""
Control Allocation

Derives the per-motor response to roll, pitch, yaw and throttle
commands from CG-corrected lever arms and spin directions, then
assembles the mixing matrices handed to the firmware.

Each axis is an independent minimum-norm solve:

    Roll      [ x; 1; -y ]        · r = [0, 0, 1]
    Pitch     [ -y; 1; x ]        · p = [0, 0, 1]
    Yaw       [ x; y; spin ]      · w = [0, 0, 1]
    Throttle  [ x; y; spin; 1 ]   · t = [0, 0, 0, n]

The attitude responses are then re-coupled through the torque
influence matrix M = [-y; x; spin] so that M·Mt[:, 1:] == I.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple, Union

import numpy as np

from multirotor_mixer.errors import DegenerateAxis, InvalidFrameType, SingularCoupling
from multirotor_mixer.specs.craft_spec import FrameType
from .pseudo_inverse import LeastSquaresSolution, solve_min_norm

logger = logging.getLogger(__name__)

AXES = ("roll", "pitch", "yaw", "throttle")

# Column order of Mt and PID
MIX_COLUMNS = ("throttle", "roll", "pitch", "yaw")

DEFAULT_RANK_TOLERANCE = 1e-9
PID_SCALE = 100.0


# ============================================================================
# RESULT
# ============================================================================

@dataclass(frozen=True)
class ControlAllocationMatrices:
    """
    Mixing matrices for one craft.

    Shapes, with n motors:
        roll, pitch, yaw, throttle, motor_x, motor_y, spin: (n,)
        M:   (3, n)  rows -y, x, spin
        PD:  (n, 3)  columns roll, pitch, yaw
        Mt:  (n, 4)  columns throttle, roll, pitch, yaw
        PID: (n, 4)  Mt with each column scaled to a peak of ±100
    """
    roll: np.ndarray
    pitch: np.ndarray
    yaw: np.ndarray
    throttle: np.ndarray
    M: np.ndarray
    PD: np.ndarray
    Mt: np.ndarray
    PID: np.ndarray
    motor_x: np.ndarray
    motor_y: np.ndarray
    spin: np.ndarray
    rank_deficient_axes: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def motor_count(self) -> int:
        return len(self.throttle)

    def response(self, axis: str) -> np.ndarray:
        """Per-motor response vector for a named axis."""
        if axis not in AXES:
            raise ValueError(f"Unknown axis '{axis}', expected one of {AXES}")
        return getattr(self, axis)


# ============================================================================
# CONSTRAINTS
# ============================================================================

def axis_constraints(motor_x: np.ndarray, motor_y: np.ndarray,
                     spin: np.ndarray) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """Coefficient matrix A and target b for each axis solve."""
    n = len(motor_x)
    ones = np.ones(n)
    return {
        "roll": (np.vstack([motor_x, ones, -motor_y]), np.array([0.0, 0.0, 1.0])),
        "pitch": (np.vstack([-motor_y, ones, motor_x]), np.array([0.0, 0.0, 1.0])),
        "yaw": (np.vstack([motor_x, motor_y, spin]), np.array([0.0, 0.0, 1.0])),
        "throttle": (np.vstack([motor_x, motor_y, spin, ones]), np.array([0.0, 0.0, 0.0, float(n)])),
    }


def torque_influence(motor_x: np.ndarray, motor_y: np.ndarray, spin: np.ndarray) -> np.ndarray:
    """M = [-y; x; spin], mapping per-motor thrust to roll/pitch/yaw torque."""
    return np.vstack([-motor_y, motor_x, spin])


def normalize_columns(Mt: np.ndarray, scale: float = PID_SCALE) -> np.ndarray:
    """
    Scale each column so its largest magnitude equals `scale`.

    Raises:
        DegenerateAxis: A column is entirely zero
    """
    peaks = np.max(np.abs(Mt), axis=0)
    for name, peak in zip(MIX_COLUMNS, peaks):
        if np.isclose(peak, 0.0, rtol=0.0, atol=1e-12):
            raise DegenerateAxis(f"{name} column of the mixing matrix is zero; cannot normalise")
    return Mt / peaks * scale


def _readonly(*arrays: np.ndarray):
    for arr in arrays:
        arr.setflags(write=False)


# ============================================================================
# SOLVER
# ============================================================================

class ControlAllocationSolver:
    """
    Solve the per-axis allocation problem and assemble Mt and PID.

    Args:
        strict: Raise SingularCoupling when any axis solve is low-rank
            instead of returning the best-effort answer
        rank_tolerance: Relative residual above which an axis counts as
            unsatisfied
    """

    def __init__(self, strict: bool = False, rank_tolerance: float = DEFAULT_RANK_TOLERANCE):
        self.strict = strict
        self.rank_tolerance = rank_tolerance

    def lever_arms(
        self,
        resolved_positions: Union[np.ndarray, Sequence[Tuple[float, float]]],
        dist_motor: float,
        cg_offset: Sequence[float],
        frame_type: Union[FrameType, str],
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Motor positions in meters measured from the center of gravity."""
        if isinstance(frame_type, str):
            try:
                frame_type = FrameType.from_name(frame_type)
            except ValueError:
                raise InvalidFrameType(f"Unknown frame type '{frame_type}'")
        coords = np.asarray(resolved_positions, dtype=float).reshape(-1, 2)
        scale = 1.0 if frame_type.is_custom else dist_motor
        motor_x = coords[:, 0] * scale - cg_offset[0]
        motor_y = coords[:, 1] * scale - cg_offset[1]
        return motor_x, motor_y

    def solve(
        self,
        resolved_positions: Union[np.ndarray, Sequence[Tuple[float, float]]],
        spin_directions: Sequence[int],
        dist_motor: float,
        cg_offset: Sequence[float],
        frame_type: Union[FrameType, str],
    ) -> ControlAllocationMatrices:
        """
        Build the mixing matrices.

        Args:
            resolved_positions: (n, 2) unit-table coordinates, or meters
                for Custom frames
            spin_directions: +1/-1 per motor, as written in the craft
            dist_motor: Motor distance in meters
            cg_offset: Center of gravity (x, y, z) in meters
            frame_type: FrameType or its name

        Raises:
            SingularCoupling: M·PD is not invertible, or strict mode and
                an axis is low-rank
            DegenerateAxis: A mixing column is zero
            InvalidFrameType: Unknown frame type name
        """
        motor_x, motor_y = self.lever_arms(resolved_positions, dist_motor, cg_offset, frame_type)
        spin = -np.asarray(spin_directions, dtype=float)

        if len(spin) != len(motor_x):
            raise ValueError(
                f"{len(spin_directions)} spin directions for {len(motor_x)} motor positions"
            )

        solutions: Dict[str, LeastSquaresSolution] = {}
        for axis, (A, b) in axis_constraints(motor_x, motor_y, spin).items():
            solutions[axis] = solve_min_norm(A, b)

        deficient = self._check_rank(solutions)

        roll = solutions["roll"].x
        pitch = solutions["pitch"].x
        yaw = solutions["yaw"].x
        throttle = solutions["throttle"].x

        M = torque_influence(motor_x, motor_y, spin)
        PD = np.column_stack([roll, pitch, yaw])

        coupling = M @ PD
        if np.linalg.matrix_rank(coupling) < 3:
            raise SingularCoupling(
                f"torque coupling M·PD is singular (rank {np.linalg.matrix_rank(coupling)})"
            )
        try:
            attitude = PD @ np.linalg.inv(coupling)
        except np.linalg.LinAlgError as e:
            raise SingularCoupling(f"torque coupling M·PD is not invertible: {e}")

        Mt = np.column_stack([throttle, attitude])
        PID = normalize_columns(Mt)

        _readonly(roll, pitch, yaw, throttle, M, PD, Mt, PID, motor_x, motor_y, spin)

        logger.info(
            f"Solved allocation for {len(spin)} motors"
            + (f" (low-rank: {', '.join(deficient)})" if deficient else "")
        )
        logger.debug(f"Mt =\n{Mt}")

        return ControlAllocationMatrices(
            roll=roll,
            pitch=pitch,
            yaw=yaw,
            throttle=throttle,
            M=M,
            PD=PD,
            Mt=Mt,
            PID=PID,
            motor_x=motor_x,
            motor_y=motor_y,
            spin=spin,
            rank_deficient_axes=deficient,
        )

    def _check_rank(self, solutions: Dict[str, LeastSquaresSolution]) -> Tuple[str, ...]:
        deficient = []
        for axis in AXES:
            sol = solutions[axis]
            if sol.full_rank and sol.residual <= self.rank_tolerance:
                continue
            deficient.append(axis)
            message = (
                f"{axis} solve is low-rank (rank {sol.rank} of {sol.rows}, "
                f"relative residual {sol.residual:.3g})"
            )
            if self.strict:
                raise SingularCoupling(message)
            logger.warning(f"{message}; response is best-effort")
        return tuple(deficient)


def solve_allocation(
    resolved_positions,
    spin_directions: Sequence[int],
    dist_motor: float,
    cg_offset: Sequence[float],
    frame_type: Union[FrameType, str],
    strict: bool = False,
) -> ControlAllocationMatrices:
    """Convenience function to solve a craft's control allocation."""
    return ControlAllocationSolver(strict=strict).solve(
        resolved_positions, spin_directions, dist_motor, cg_offset, frame_type
    )
