"""
Tsai's moment-preserving two-class solver.

Find the two-point distribution (``mu0`` with mass ``p0``, ``mu1`` with mass
``1 - p0``) whose first three raw moments equal those of the histogram. In
raw moments the class means are the roots of

    z**2 + c1 * z + c0 = 0,
    c0 = (m1 * m3 - m2**2) / (m2 - m1**2),
    c1 = (m1 * m2 - m3) / (m2 - m1**2).

Shifting by the mean gives the equivalent centred form

    z**2 - (s / v) * z - v = 0,    mu = m1 + z,

with ``v`` the variance and ``s`` the third central moment. This form is the
one evaluated here; ``compute_moments`` sums ``v`` and ``s`` around the mean,
so large raw moments never cancel against each other.

Reference:
  Tsai, W.-H. (1985). Moment-preserving thresholding: a new approach.
  Computer Vision, Graphics, and Image Processing 29, 377-393.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from .errors import DegenerateDistributionError
from .histogram import Histogram
from .moments import MomentSet, compute_moments

logger = logging.getLogger(__name__)

VARIANCE_TOL = 1e-12
MASS_TOL = 1e-6


@dataclass(frozen=True)
class Solution:
    """Mixing probability, class means (bin units) and the separating bin."""

    p0: float
    mu0: float
    mu1: float
    t_bin: int


def solve_two_point(moments: MomentSet):
    """Return ``(p0, mu0, mu1)`` of the moment-matching two-point distribution."""
    m1 = moments.m1
    v = moments.variance
    if v <= VARIANCE_TOL:
        raise DegenerateDistributionError(
            f"Histogram has zero variance (variance={v:.3g}), no two-class split exists",
            quantity=v,
        )

    b = moments.third_central / v
    disc = b * b + 4.0 * v
    if disc < 0:
        raise DegenerateDistributionError(
            f"Moment equations have no real solution (discriminant={disc:.3g})",
            quantity=disc,
        )
    root = math.sqrt(disc)
    mu0 = m1 + 0.5 * (b - root)
    mu1 = m1 + 0.5 * (b + root)
    if not mu1 > mu0:
        raise DegenerateDistributionError(
            f"Class means coincide (mu0={mu0:.6g}, mu1={mu1:.6g})",
            quantity=(mu0, mu1),
        )

    p0 = (mu1 - m1) / (mu1 - mu0)
    return p0, mu0, mu1


def separating_bin(histogram: Histogram, p0: float) -> int:
    """
    First bin past the ``p0``-tile of the histogram.

    The last class-0 bin is the smallest ``k`` whose cumulative mass reaches
    ``p0``; the returned index is ``k + 1`` so that bins ``< t_bin`` are
    class 0.
    """
    cdf = np.cumsum(histogram.pmf())
    k = int(np.searchsorted(cdf, p0 - MASS_TOL, side="left"))
    return min(k, histogram.bins - 1) + 1


def solve(moments: MomentSet, histogram: Histogram) -> Solution:
    p0, mu0, mu1 = solve_two_point(moments)
    solution = Solution(p0=p0, mu0=mu0, mu1=mu1, t_bin=separating_bin(histogram, p0))
    logger.debug("solution: p0=%.6g mu0=%.6g mu1=%.6g t_bin=%d",
                 solution.p0, solution.mu0, solution.mu1, solution.t_bin)
    return solution


def moment_preserving_bin(histogram: Histogram) -> Solution:
    """Moments and solver in one call."""
    return solve(compute_moments(histogram), histogram)
