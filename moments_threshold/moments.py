"""
Raw moments of a histogram over bin index.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .errors import EmptyHistogramError
from .histogram import Histogram

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MomentSet:
    """
    Raw moments of order 0..3, normalized so that ``m0 == 1``.

    ``variance`` and ``third_central`` are summed around ``m1`` directly
    rather than derived from the raw moments.
    """

    m0: float
    m1: float
    m2: float
    m3: float
    variance: float
    third_central: float


def compute_moments(histogram: Histogram) -> MomentSet:
    """Treat bin index as the random variable and normalized counts as its mass."""
    if histogram.total == 0:
        raise EmptyHistogramError("Histogram has zero total count", stage="moments")

    p = histogram.pmf()
    i = np.arange(histogram.bins, dtype=np.float64)
    m1 = float(np.dot(i, p))
    d = i - m1
    moments = MomentSet(
        m0=1.0,
        m1=m1,
        m2=float(np.dot(i ** 2, p)),
        m3=float(np.dot(i ** 3, p)),
        variance=float(np.dot(d ** 2, p)),
        third_central=float(np.dot(d ** 3, p)),
    )
    logger.debug("moments: m1=%.6g m2=%.6g m3=%.6g", moments.m1, moments.m2, moments.m3)
    return moments
