"""
Core functionality for moment-preserving threshold segmentation.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .classify import DEFAULT_INSIDE_VALUE, DEFAULT_OUTSIDE_VALUE, classify, validate_output_values
from .histogram import DEFAULT_BINS, Histogram, IntensityRange, MaskSelector, build_histogram
from .image_io import load_image, load_mask
from .moments import MomentSet, compute_moments
from .solver import Solution, solve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThresholdResult:
    """
    Outcome of one threshold computation.

    ``output`` is ``None`` when only the threshold was requested.
    """

    threshold: float
    output: Optional[np.ndarray]
    histogram: Histogram
    moments: MomentSet
    solution: Solution


def threshold_to_intensity(histogram: Histogram, t_bin: int):
    """
    Intensity at the left edge of bin ``t_bin``.

    For integer domains this is rounded up to an integer, which keeps
    ``value < threshold`` equivalent to ``bin(value) < t_bin``.
    """
    edge = histogram.edge(t_bin)
    if histogram.integral:
        return int(math.ceil(edge))
    return float(edge)


def compute_threshold(image: np.ndarray,
                      mask: Optional[np.ndarray] = None,
                      bins: int = DEFAULT_BINS,
                      mask_value: MaskSelector = None,
                      intensity_range: IntensityRange = "native",
                      workers: int = 0) -> ThresholdResult:
    """
    Compute the moment-preserving threshold of ``image`` without classifying it.

    Only pixels inside ``mask`` (nonzero, or equal to ``mask_value``)
    contribute to the histogram.
    """
    hist = build_histogram(image, mask, bins=bins, mask_value=mask_value,
                           intensity_range=intensity_range, workers=workers)
    moments = compute_moments(hist)
    solution = solve(moments, hist)
    threshold = threshold_to_intensity(hist, solution.t_bin)
    logger.debug("threshold %s (t_bin %d, p0 %.4f)", threshold, solution.t_bin, solution.p0)
    return ThresholdResult(threshold=threshold, output=None, histogram=hist,
                           moments=moments, solution=solution)


def threshold_image(image: np.ndarray,
                    mask: Optional[np.ndarray] = None,
                    bins: int = DEFAULT_BINS,
                    inside_value=DEFAULT_INSIDE_VALUE,
                    outside_value=DEFAULT_OUTSIDE_VALUE,
                    mask_value: MaskSelector = None,
                    mask_output: bool = False,
                    intensity_range: IntensityRange = "native",
                    output_dtype=np.uint8,
                    workers: int = 0) -> ThresholdResult:
    """
    Threshold an image with Tsai's moment-preserving method.

    Parameters:
    ----------
    image : np.ndarray
        Grayscale image in its native dtype (not normalized).

    mask : np.ndarray, optional
        Same-shape mask restricting which pixels shape the histogram.

    bins : int, optional
        Number of histogram bins. Default: 256

    inside_value, outside_value : optional
        Output values for pixels below / at-or-above the threshold.
        Default: 255 and 0

    mask_value : int or callable, optional
        Mask label counted as inside. Default: any nonzero value

    mask_output : bool, optional
        If True, pixels outside the mask are set to ``outside_value``
        instead of being classified. Default: False

    intensity_range : {"native", "observed"} or (lo, hi), optional
        Range quantized into the histogram bins. Default: "native"

    output_dtype : dtype, optional
        Dtype of the output image. Default: uint8

    workers : int, optional
        Threads used for histogram counting and classification.

    Returns:
    -------
    ThresholdResult
        Threshold in the image's intensity domain and the classified image.
    """
    validate_output_values(inside_value, outside_value, output_dtype)

    result = compute_threshold(image, mask, bins=bins, mask_value=mask_value,
                               intensity_range=intensity_range, workers=workers)
    output = classify(image, result.threshold,
                      inside_value=inside_value,
                      outside_value=outside_value,
                      dtype=output_dtype,
                      mask=mask if mask_output else None,
                      mask_value=mask_value,
                      workers=workers)
    return ThresholdResult(threshold=result.threshold, output=output, histogram=result.histogram,
                           moments=result.moments, solution=result.solution)


def process_image_file(image_path: str, mask_path: Optional[str] = None, **kwargs) -> ThresholdResult:
    """
    Load an image (and optional mask) file and threshold it.

    Keyword arguments are passed on to ``threshold_image``.
    """
    image = load_image(image_path)
    mask = load_mask(mask_path) if mask_path is not None else None
    return threshold_image(image, mask, **kwargs)
