"""
Exceptions raised by the thresholding pipeline.

All of them derive from ``ValueError`` so callers that only guard against bad
input keep working. Each one records the pipeline stage that failed and,
where there is one, the measured quantity that triggered it.
"""


class ThresholdError(ValueError):
    """Base class for failures of the moment-preserving threshold pipeline."""

    def __init__(self, message: str, stage: str, quantity=None):
        super().__init__(message)
        self.stage = stage
        self.quantity = quantity


class ShapeMismatchError(ThresholdError):
    """Mask geometry differs from the image geometry."""

    def __init__(self, image_shape, mask_shape):
        super().__init__(
            f"Image and mask must have same shape, got {tuple(image_shape)} vs {tuple(mask_shape)}",
            stage="histogram",
            quantity=(tuple(image_shape), tuple(mask_shape)),
        )


class EmptyHistogramError(ThresholdError):
    """No pixel contributed to the histogram."""

    def __init__(self, message: str = "No pixels selected for the histogram", stage: str = "histogram"):
        super().__init__(message, stage=stage, quantity=0)


class DegenerateDistributionError(ThresholdError):
    """The histogram moments do not admit a two-point solution."""

    def __init__(self, message: str, quantity=None):
        super().__init__(message, stage="solver", quantity=quantity)


class InvalidOutputValueError(ThresholdError):
    """An inside/outside value cannot be stored in the output dtype."""

    def __init__(self, name: str, value, dtype):
        super().__init__(
            f"{name}={value!r} is not representable in output dtype {dtype}",
            stage="classifier",
            quantity=value,
        )
        self.name = name
        self.dtype = dtype


class NonFiniteIntensityError(ThresholdError):
    """A floating point image holds NaN or infinite intensities."""

    def __init__(self, count: int):
        super().__init__(
            f"Image contains {count} non-finite intensities",
            stage="histogram",
            quantity=count,
        )
