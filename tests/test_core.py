"""End-to-end tests for threshold computation and classification."""

import numpy as np
import pytest
from PIL import Image

from moments_threshold import (
    DegenerateDistributionError,
    InvalidOutputValueError,
    ShapeMismatchError,
    compute_threshold,
    process_image_file,
    threshold_image,
)

from conftest import make_two_level


def test_two_level_scenario(two_level_image):
    result = threshold_image(two_level_image, bins=256, inside_value=255, outside_value=0)
    assert 10 < result.threshold < 200
    assert result.threshold == 11
    out = result.output
    assert out.shape == two_level_image.shape
    assert out.dtype == np.uint8
    assert np.all(out[two_level_image == 10] == 255)
    assert np.all(out[two_level_image == 200] == 0)
    assert result.solution.p0 == pytest.approx(0.5)
    assert result.solution.mu0 == pytest.approx(10)
    assert result.solution.mu1 == pytest.approx(200)


def test_mask_selecting_one_level_is_degenerate(two_level_image):
    mask = (two_level_image == 10).astype(np.uint8)
    with pytest.raises(DegenerateDistributionError):
        threshold_image(two_level_image, mask, bins=256)


def test_mask_shape_mismatch(two_level_image):
    with pytest.raises(ShapeMismatchError):
        threshold_image(two_level_image, np.ones((4, 3), dtype=np.uint8))


@pytest.mark.parametrize("low,high", [(0, 1), (50, 60), (120, 255)])
def test_two_values_split_between_them(low, high):
    image = make_two_level(low, high)
    result = threshold_image(image)
    assert low < result.threshold <= high
    assert np.array_equal(result.output == 255, image == low)


def test_deterministic(bimodal_image):
    image, labels = bimodal_image
    first = threshold_image(image, labels)
    second = threshold_image(image, labels)
    assert first.threshold == second.threshold
    assert np.array_equal(first.output, second.output)


def test_parallel_pipeline_matches_serial(bimodal_image):
    image, _ = bimodal_image
    serial = threshold_image(image)
    parallel = threshold_image(image, workers=4)
    assert serial.threshold == parallel.threshold
    assert np.array_equal(serial.output, parallel.output)


def test_bimodal_image_is_separated(bimodal_image):
    image, labels = bimodal_image
    result = threshold_image(image)
    assert 60 < result.threshold < 180
    accuracy = np.mean((result.output == 255) == labels)
    assert accuracy > 0.98


def test_pixels_outside_mask_do_not_move_threshold(bimodal_image):
    image, _ = bimodal_image
    mask = np.zeros(image.shape, dtype=np.uint8)
    mask[:32] = 1
    rng = np.random.default_rng(7)
    changed = image.copy()
    changed[32:] = rng.integers(0, 256, size=changed[32:].shape, dtype=np.uint8)

    before = threshold_image(image, mask)
    after = threshold_image(changed, mask)
    assert before.threshold == after.threshold

    expected = np.where(changed[32:] < after.threshold, 255, 0)
    assert np.array_equal(after.output[32:], expected)


def test_mask_output_sets_outside_pixels(bimodal_image):
    image, _ = bimodal_image
    mask = np.zeros(image.shape, dtype=np.uint8)
    mask[:32] = 255
    result = threshold_image(image, mask, mask_value=255, mask_output=True)
    assert np.all(result.output[32:] == 0)
    assert np.any(result.output[:32] == 255)


def test_compute_threshold_matches_threshold_image(bimodal_image):
    image, _ = bimodal_image
    only = compute_threshold(image)
    assert only.output is None
    assert only.threshold == threshold_image(image).threshold


def test_output_values_checked_before_threshold():
    flat = np.full((4, 4), 7, dtype=np.uint8)
    with pytest.raises(InvalidOutputValueError):
        threshold_image(flat, inside_value=300)
    with pytest.raises(DegenerateDistributionError):
        threshold_image(flat)


def test_int16_image_native_range():
    image = make_two_level(-1000, 3000, dtype=np.int16)
    result = threshold_image(image, bins=256)
    assert result.threshold == -768
    assert np.array_equal(result.output == 255, image == -1000)


def test_float_image_observed_range():
    image = np.where(make_two_level() == 10, 0.2, 0.8)
    result = threshold_image(image, bins=256)
    assert isinstance(result.threshold, float)
    assert 0.2 < result.threshold < 0.8
    assert np.array_equal(result.output == 255, image == 0.2)


def test_inverse_output_convention(two_level_image):
    result = threshold_image(two_level_image, inside_value=0, outside_value=255)
    assert np.all(result.output[two_level_image == 10] == 0)
    assert np.all(result.output[two_level_image == 200] == 255)


def test_process_image_file(tmp_path, two_level_image):
    image_path = tmp_path / "img.png"
    mask_path = tmp_path / "mask.png"
    Image.fromarray(two_level_image).save(image_path)
    Image.fromarray(np.full((4, 4), 255, dtype=np.uint8)).save(mask_path)

    result = process_image_file(str(image_path), str(mask_path), bins=256)
    assert result.threshold == 11
    assert int((result.output == 255).sum()) == 8
