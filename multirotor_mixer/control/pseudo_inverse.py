"""
Moore-Penrose pseudoinverse and minimum-norm solves.

Singular values below eps * max(rows, cols) * s_max are discarded,
so rank-deficient systems still produce a finite least-squares answer.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class LeastSquaresSolution:
    """Minimum-norm solution of A·x = b."""
    x: np.ndarray
    rank: int           # singular values retained
    rows: int           # constraint count
    residual: float     # ‖A·x - b‖ / ‖b‖

    @property
    def full_rank(self) -> bool:
        return self.rank == self.rows


def pseudo_inverse(a: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Pseudoinverse of a 2-D matrix via SVD.

    Returns:
        (pinv, rank) where pinv has the transposed shape of `a`
    """
    a = np.atleast_2d(np.asarray(a, dtype=float))
    rows, cols = a.shape
    U, s, Vt = np.linalg.svd(a, full_matrices=False)

    if s.size == 0:
        return np.zeros((cols, rows)), 0

    tolerance = np.finfo(float).eps * max(rows, cols) * s[0]
    keep = s > tolerance
    s_inv = np.zeros_like(s)
    s_inv[keep] = 1.0 / s[keep]

    return (Vt.T * s_inv) @ U.T, int(np.count_nonzero(keep))


def solve_min_norm(a: np.ndarray, b: np.ndarray) -> LeastSquaresSolution:
    """Minimum-norm least-squares solution x = pinv(A)·b."""
    a = np.atleast_2d(np.asarray(a, dtype=float))
    b = np.asarray(b, dtype=float)
    pinv, rank = pseudo_inverse(a)
    x = pinv @ b

    scale = np.linalg.norm(b)
    residual = float(np.linalg.norm(a @ x - b) / (scale if scale > 0 else 1.0))
    return LeastSquaresSolution(x=x, rank=rank, rows=a.shape[0], residual=residual)
