"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest


def make_two_level(low: int = 10, high: int = 200, dtype=np.uint8) -> np.ndarray:
    """4x4 image, left half ``low``, right half ``high``."""
    image = np.full((4, 4), high, dtype=dtype)
    image[:, :2] = low
    return image


def two_point_histogram_counts(a: int, b: int, n_a: int, n_b: int, bins: int = 256) -> np.ndarray:
    counts = np.zeros(bins, dtype=np.int64)
    counts[a] += n_a
    counts[b] += n_b
    return counts


@pytest.fixture
def two_level_image() -> np.ndarray:
    return make_two_level()


@pytest.fixture
def bimodal_image() -> tuple[np.ndarray, np.ndarray]:
    """64x64 uint8 image with a dark left and a bright right half, plus the true labels."""
    rng = np.random.default_rng(1234)
    labels = np.zeros((64, 64), dtype=bool)
    labels[:, :32] = True
    dark = rng.normal(60, 10, size=labels.shape)
    bright = rng.normal(180, 10, size=labels.shape)
    image = np.clip(np.where(labels, dark, bright), 0, 255).astype(np.uint8)
    return image, labels
