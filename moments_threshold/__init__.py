"""
Moment-Preserving Threshold Segmentation
----------------------------------------
Global two-class thresholding of grayscale images with Tsai's
moment-preserving method, optionally estimating the threshold from the
pixels selected by a mask only.

The histogram of the (masked) image is reduced to its first three moments,
which are matched by a two-point distribution (p0 at mu0, 1 - p0 at mu1).
The threshold is the intensity at the p0-tile of the histogram.

Example:
    >>> import numpy as np
    >>> from moments_threshold import threshold_image
    >>>
    >>> image = np.array([[10, 10, 200, 200]] * 4, dtype=np.uint8)
    >>> result = threshold_image(image, inside_value=255, outside_value=0)
    >>> result.threshold
    11
    >>> # Only pixels where mask != 0 shape the threshold
    >>> mask = np.ones_like(image)
    >>> result = threshold_image(image, mask, bins=256)
"""

from .classify import classify, validate_output_values
from .core import ThresholdResult, compute_threshold, process_image_file, threshold_image, threshold_to_intensity
from .errors import (
    DegenerateDistributionError,
    EmptyHistogramError,
    InvalidOutputValueError,
    NonFiniteIntensityError,
    ShapeMismatchError,
    ThresholdError,
)
from .histogram import Histogram, build_histogram, inside_predicate
from .moments import MomentSet, compute_moments
from .solver import Solution, moment_preserving_bin, solve

__version__ = "0.1.0"
__all__ = [
    "threshold_image",
    "compute_threshold",
    "process_image_file",
    "threshold_to_intensity",
    "ThresholdResult",
    "build_histogram",
    "inside_predicate",
    "Histogram",
    "compute_moments",
    "MomentSet",
    "solve",
    "moment_preserving_bin",
    "Solution",
    "classify",
    "validate_output_values",
    "ThresholdError",
    "ShapeMismatchError",
    "EmptyHistogramError",
    "DegenerateDistributionError",
    "InvalidOutputValueError",
    "NonFiniteIntensityError",
]
