"""
Masked intensity histogram with uniform linear binning.

Integer images are binned over their full representable range by default
(``intensity_range="native"``), so the bin boundaries, and therefore the
threshold, do not depend on which intensities happen to occur in the image.
Floating point images have no bounded native range and are binned over the
observed range of the selected pixels.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

import numpy as np

from .errors import EmptyHistogramError, NonFiniteIntensityError, ShapeMismatchError
from .parallel import map_chunks

logger = logging.getLogger(__name__)

DEFAULT_BINS = 256

IntensityRange = Union[str, Tuple[float, float]]
MaskSelector = Union[None, int, float, Callable[[np.ndarray], np.ndarray]]


@dataclass(frozen=True)
class Histogram:
    """
    Bin counts plus the mapping between bin index and intensity.

    Bin ``k`` covers ``[lower + k * width, lower + (k + 1) * width)``; for
    floating point domains the last bin is closed on the right.
    """

    counts: np.ndarray
    lower: float
    width: float
    integral: bool

    def __post_init__(self):
        self.counts.setflags(write=False)

    @property
    def bins(self) -> int:
        return int(self.counts.size)

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def pmf(self) -> np.ndarray:
        """Counts normalized to unit mass."""
        return self.counts.astype(np.float64) / float(self.total)

    def edge(self, k: int) -> float:
        """Intensity at the left edge of bin ``k`` (``k == bins`` gives the right end)."""
        return self.lower + k * self.width

    def bin_index(self, values: np.ndarray) -> np.ndarray:
        idx = np.floor((np.asarray(values, dtype=np.float64) - self.lower) / self.width)
        return np.clip(idx, 0, self.bins - 1).astype(np.intp)


def inside_predicate(mask_value=None) -> Callable[[np.ndarray], np.ndarray]:
    """
    Return ``is_inside(mask) -> bool array`` for a mask label.

    ``None`` selects every nonzero mask value, anything else selects mask
    values equal to it.
    """
    if mask_value is None:
        return lambda mask: np.asarray(mask) != 0
    return lambda mask: np.asarray(mask) == mask_value


def _as_predicate(mask_value: MaskSelector) -> Callable[[np.ndarray], np.ndarray]:
    if callable(mask_value):
        return mask_value
    return inside_predicate(mask_value)


def select_pixels(image: np.ndarray, mask: Optional[np.ndarray] = None,
                  mask_value: MaskSelector = None) -> np.ndarray:
    """Flat array of the pixels that take part in histogram construction."""
    image = np.asarray(image)
    if mask is None:
        return image.ravel()
    mask = np.asarray(mask)
    if mask.shape != image.shape:
        raise ShapeMismatchError(image.shape, mask.shape)
    inside = np.asarray(_as_predicate(mask_value)(mask), dtype=bool)
    return image[inside]


def _is_integral(dtype) -> bool:
    return dtype == np.bool_ or np.issubdtype(dtype, np.integer)


def _resolve_range(values: np.ndarray, dtype, intensity_range: IntensityRange):
    integral = _is_integral(dtype)
    if isinstance(intensity_range, str):
        if intensity_range not in ("native", "observed"):
            raise ValueError(f"intensity_range must be 'native', 'observed' or (lo, hi), got {intensity_range!r}")
        if intensity_range == "native" and integral:
            if dtype == np.bool_:
                return 0, 1
            info = np.iinfo(dtype)
            return int(info.min), int(info.max)
        lo, hi = values.min(), values.max()
    else:
        lo, hi = intensity_range
        if hi < lo:
            raise ValueError(f"intensity_range upper bound {hi} is below lower bound {lo}")
    if integral:
        return int(lo), int(hi)
    return float(lo), float(hi)


def build_histogram(image: np.ndarray,
                    mask: Optional[np.ndarray] = None,
                    bins: int = DEFAULT_BINS,
                    mask_value: MaskSelector = None,
                    intensity_range: IntensityRange = "native",
                    workers: int = 0) -> Histogram:
    """
    Count the (masked) pixels of ``image`` into ``bins`` uniform bins.

    Parameters:
    ----------
    image : np.ndarray
        Grayscale image of any dimensionality and numeric dtype.

    mask : np.ndarray, optional
        Same-shape mask; only pixels where the mask is inside are counted.

    bins : int
        Number of bins, at least 2. Default: 256

    mask_value : int or callable, optional
        Mask label treated as inside. ``None`` means any nonzero value; a
        callable is used as the ``is_inside`` predicate directly.

    intensity_range : {"native", "observed"} or (lo, hi)
        Range quantized into the bins. Integer domains cover
        ``[lo, hi + 1)`` so every integer level falls in exactly one bin.

    workers : int
        Number of threads counting partial histograms. 0 counts serially.

    Returns:
    -------
    Histogram
    """
    if isinstance(bins, bool) or not isinstance(bins, (int, np.integer)) or bins < 2:
        raise ValueError(f"bins must be an integer >= 2, got {bins!r}")
    bins = int(bins)

    image = np.asarray(image)
    values = select_pixels(image, mask, mask_value)
    if values.size == 0:
        raise EmptyHistogramError(
            "No pixels selected for the histogram" if mask is not None else "Image has no pixels"
        )
    if not _is_integral(image.dtype):
        bad = int(values.size - np.count_nonzero(np.isfinite(values)))
        if bad:
            raise NonFiniteIntensityError(bad)

    lo, hi = _resolve_range(values, image.dtype, intensity_range)
    if _is_integral(image.dtype):
        width = (hi - lo + 1) / bins
    else:
        width = (hi - lo) / bins
        if width <= 0:
            width = 1.0

    template = Histogram(np.zeros(bins, dtype=np.int64), float(lo), float(width), _is_integral(image.dtype))

    def count(chunk):
        return np.bincount(template.bin_index(chunk), minlength=bins).astype(np.int64)

    counts = np.sum(map_chunks(count, [values], workers), axis=0).astype(np.int64)
    hist = Histogram(counts, template.lower, template.width, template.integral)
    logger.debug("histogram: %d pixels in %d bins over [%s, %s], width %g", hist.total, bins, lo, hi, width)
    return hist
