"""Unit tests for quartiles, fences, tick generation and kernel density."""

from __future__ import annotations

import pytest

from chartboard.stats import box_stats, epanechnikov, kernel_density, nice_ticks, quantile

pytestmark = pytest.mark.unit


def test_quantile_interpolates_between_ranks() -> None:
    """Linear interpolation between the closest ranks."""

    assert quantile([1, 2, 3, 4], 0.25) == pytest.approx(1.75)
    assert quantile([1, 2, 3, 4], 0.5) == pytest.approx(2.5)
    assert quantile([7], 0.9) == 7
    assert quantile([], 0.5) is None


def test_box_stats_fences_and_outliers() -> None:
    """Fences sit 1.5 IQR beyond the quartiles; values past them are outliers."""

    stats = box_stats([4, 100, 1, 3, 2])

    assert stats["values"] == [1, 2, 3, 4, 100]
    assert stats["q1"] == 2
    assert stats["median"] == 3
    assert stats["q3"] == 4
    assert stats["iqr"] == 2
    assert stats["lower_fence"] == -1
    assert stats["upper_fence"] == 7
    assert stats["outliers"] == [100]


def test_box_stats_ignores_nan_and_handles_empty() -> None:
    """NaN values are dropped before the statistics are computed."""

    assert box_stats([float("nan"), 5.0])["median"] == 5
    assert box_stats([]) is None


def test_nice_ticks_uses_round_steps() -> None:
    """Ticks are 1, 2 or 5 times a power of ten."""

    assert nice_ticks(0, 100, 10) == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
    assert nice_ticks(0, 1, 5) == pytest.approx([0, 0.2, 0.4, 0.6, 0.8, 1.0])
    assert nice_ticks(0, 10, 5) == [0, 2, 4, 6, 8, 10]


def test_nice_ticks_degenerate_ranges() -> None:
    """Equal bounds give one tick; reversed bounds give descending ticks."""

    assert nice_ticks(5, 5) == [5.0]
    assert nice_ticks(10, 0, 5) == [10, 8, 6, 4, 2, 0]
    assert nice_ticks(0, 10, 0) == []


def test_nice_ticks_stay_inside_bounds() -> None:
    """No tick falls outside [start, stop]."""

    ticks = nice_ticks(3.7, 91.2, 40)

    assert ticks
    assert min(ticks) >= 3.7
    assert max(ticks) <= 91.2


def test_epanechnikov_kernel_shape() -> None:
    """Peak 0.75/h at zero, zero at and beyond the bandwidth."""

    kernel = epanechnikov(2)

    assert float(kernel(0)) == pytest.approx(0.375)
    assert float(kernel(1)) == pytest.approx(0.28125)
    assert float(kernel(2)) == 0
    assert float(kernel(-3)) == 0


def test_kernel_density_averages_over_sample() -> None:
    """Density at each grid point is the mean kernel weight."""

    density = kernel_density([0, 0], [0, 1], epanechnikov(2))

    assert density == [(0.0, pytest.approx(0.375)), (1.0, pytest.approx(0.28125))]
    assert kernel_density([], [0, 1], epanechnikov(2)) == [(0.0, 0.0), (1.0, 0.0)]
