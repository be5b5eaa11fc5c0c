"""Tests for moment extraction and the moment-preserving solver."""

import numpy as np
import pytest

from moments_threshold.errors import DegenerateDistributionError, EmptyHistogramError
from moments_threshold.histogram import Histogram
from moments_threshold.moments import compute_moments
from moments_threshold.solver import moment_preserving_bin, separating_bin, solve, solve_two_point

from conftest import two_point_histogram_counts


def _hist(counts) -> Histogram:
    return Histogram(np.asarray(counts, dtype=np.int64), lower=0.0, width=1.0, integral=True)


def test_moments_normalized():
    moments = compute_moments(_hist([1, 0, 1]))
    assert moments.m0 == 1.0
    assert moments.m1 == pytest.approx(1.0)
    assert moments.m2 == pytest.approx(2.0)
    assert moments.m3 == pytest.approx(4.0)
    assert moments.variance == pytest.approx(1.0)
    assert moments.third_central == pytest.approx(0.0)


def test_moments_of_empty_histogram():
    with pytest.raises(EmptyHistogramError) as exc:
        compute_moments(_hist([0, 0, 0]))
    assert exc.value.stage == "moments"


@pytest.mark.parametrize("a,b,n_a,n_b", [
    (10, 200, 8, 8),
    (3, 40, 25, 75),
    (0, 255, 90, 10),
    (100, 101, 3, 7),
    (17, 180, 1, 999),
])
def test_two_point_distribution_is_recovered(a, b, n_a, n_b):
    hist = _hist(two_point_histogram_counts(a, b, n_a, n_b))
    sol = moment_preserving_bin(hist)
    assert sol.mu0 == pytest.approx(a, abs=1e-6)
    assert sol.mu1 == pytest.approx(b, abs=1e-6)
    assert sol.p0 == pytest.approx(n_a / (n_a + n_b), abs=1e-7)
    assert sol.t_bin == a + 1


def test_raw_moment_quadratic_agrees():
    moments = compute_moments(_hist(two_point_histogram_counts(20, 90, 30, 70)))
    m1, m2, m3 = moments.m1, moments.m2, moments.m3
    cd = m2 - m1 * m1
    c0 = (m1 * m3 - m2 * m2) / cd
    c1 = (m1 * m2 - m3) / cd
    p0, mu0, mu1 = solve_two_point(moments)
    for mu in (mu0, mu1):
        assert mu * mu + c1 * mu + c0 == pytest.approx(0.0, abs=1e-6)


def test_three_level_histogram():
    sol = moment_preserving_bin(_hist([5, 5, 5]))
    assert sol.mu0 < 1.0 < sol.mu1
    assert sol.mu0 == pytest.approx(1 - np.sqrt(2 / 3))
    assert sol.p0 == pytest.approx(0.5)
    assert sol.t_bin == 2


def test_single_value_is_degenerate():
    hist = _hist(two_point_histogram_counts(42, 42, 5, 5))
    with pytest.raises(DegenerateDistributionError) as exc:
        moment_preserving_bin(hist)
    assert exc.value.stage == "solver"
    assert exc.value.quantity == 0.0


def test_solution_invariants_on_skewed_histogram():
    counts = np.zeros(256, dtype=np.int64)
    counts[0:20] = 50
    counts[200:256] = 3
    hist = _hist(counts)
    sol = solve(compute_moments(hist), hist)
    assert 0.0 < sol.p0 < 1.0
    assert sol.mu0 < sol.mu1
    assert 1 <= sol.t_bin <= hist.bins


def test_separating_bin_takes_first_bin_reaching_mass():
    hist = _hist([2, 2, 0, 4])
    assert separating_bin(hist, 0.25) == 1
    assert separating_bin(hist, 0.5) == 2
    assert separating_bin(hist, 0.51) == 4
    assert separating_bin(hist, 1.0) == 4


def test_central_moments_stay_exact_far_from_zero():
    hist = _hist(two_point_histogram_counts(65000, 65001, 3, 7, bins=65536))
    moments = compute_moments(hist)
    assert moments.variance == pytest.approx(0.21, rel=1e-9)
    assert moments.third_central == pytest.approx(-0.084, rel=1e-9)

    sol = solve(moments, hist)
    assert sol.mu0 == pytest.approx(65000, abs=1e-6)
    assert sol.mu1 == pytest.approx(65001, abs=1e-6)
    assert sol.p0 == pytest.approx(0.3, abs=1e-9)
    assert sol.t_bin == 65001


def test_narrow_split_at_high_bins_is_not_degenerate():
    hist = _hist(two_point_histogram_counts(65534, 65535, 999, 1, bins=65536))
    sol = moment_preserving_bin(hist)
    assert sol.mu0 == pytest.approx(65534, abs=1e-6)
    assert sol.mu1 == pytest.approx(65535, abs=1e-6)
    assert sol.t_bin == 65535
