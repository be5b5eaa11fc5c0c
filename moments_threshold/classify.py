"""
Binary classification of an image against a global threshold.
"""

import math
import numbers
from typing import Optional

import numpy as np

from .errors import InvalidOutputValueError, ShapeMismatchError
from .histogram import MaskSelector, _as_predicate
from .parallel import map_chunks

DEFAULT_INSIDE_VALUE = 255
DEFAULT_OUTSIDE_VALUE = 0


def _check_representable(name: str, value, dtype: np.dtype) -> None:
    if not isinstance(value, numbers.Real):
        raise InvalidOutputValueError(name, value, dtype)
    # compare as Python numbers; huge ints must not pass through float64
    if not isinstance(value, numbers.Integral) and not math.isfinite(value):
        raise InvalidOutputValueError(name, value, dtype)
    if dtype == np.bool_:
        if value not in (0, 1):
            raise InvalidOutputValueError(name, value, dtype)
    elif np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        if not isinstance(value, numbers.Integral):
            if value != int(value):
                raise InvalidOutputValueError(name, value, dtype)
            value = int(value)
        if not int(info.min) <= int(value) <= int(info.max):
            raise InvalidOutputValueError(name, value, dtype)
    elif np.issubdtype(dtype, np.floating):
        if abs(value) > float(np.finfo(dtype).max):
            raise InvalidOutputValueError(name, value, dtype)
    else:
        raise InvalidOutputValueError(name, value, dtype)


def validate_output_values(inside_value, outside_value, dtype=np.uint8) -> None:
    """Raise ``InvalidOutputValueError`` unless both values fit in ``dtype``."""
    dtype = np.dtype(dtype)
    _check_representable("inside_value", inside_value, dtype)
    _check_representable("outside_value", outside_value, dtype)


def _below(values: np.ndarray, threshold) -> np.ndarray:
    # thresholds may sit one past the dtype's max (e.g. 256 for uint8)
    if np.issubdtype(values.dtype, np.integer):
        info = np.iinfo(values.dtype)
        if threshold > info.max:
            return np.ones(values.shape, dtype=bool)
        if threshold <= info.min:
            return np.zeros(values.shape, dtype=bool)
    return values < threshold


def classify(image: np.ndarray,
             threshold,
             inside_value=DEFAULT_INSIDE_VALUE,
             outside_value=DEFAULT_OUTSIDE_VALUE,
             dtype=np.uint8,
             mask: Optional[np.ndarray] = None,
             mask_value: MaskSelector = None,
             workers: int = 0) -> np.ndarray:
    """
    Map pixels below ``threshold`` to ``inside_value`` and the rest to ``outside_value``.

    Every pixel is classified. When ``mask`` is given, pixels outside it are
    forced to ``outside_value``.

    Returns:
    -------
    np.ndarray
        New array with the shape of ``image`` and dtype ``dtype``.
    """
    dtype = np.dtype(dtype)
    validate_output_values(inside_value, outside_value, dtype)

    image = np.asarray(image)
    flat = image.ravel()
    arrays = [flat]
    if mask is not None:
        mask = np.asarray(mask)
        if mask.shape != image.shape:
            raise ShapeMismatchError(image.shape, mask.shape)
        arrays.append(np.asarray(_as_predicate(mask_value)(mask), dtype=bool).ravel())

    inside = dtype.type(inside_value)
    outside = dtype.type(outside_value)

    def label(values, keep=None):
        below = _below(values, threshold)
        if keep is not None:
            below &= keep
        return np.where(below, inside, outside).astype(dtype, copy=False)

    out = np.concatenate(map_chunks(label, arrays, workers))
    return out.reshape(image.shape)
