"""
Tests for the series primitives.
"""

import numpy as np
import pytest

from enzyplate.arrays import (
    difference,
    moving_average,
    mean_across_series,
    subtract,
    normalize,
    find_peak,
    first_index_at_or_above,
    linear_regression,
)


def test_difference_first_order():
    s = [1.0, 4.0, 9.0, 16.0]
    diff = difference(s, 1)
    assert list(diff) == [3.0, 5.0, 7.0]
    for i in range(len(diff)):
        assert diff[i] == s[i + 1] - s[i]


def test_difference_order_zero_is_copy():
    s = np.array([1.0, 2.0, 3.0])
    result = difference(s, 0)
    assert list(result) == [1.0, 2.0, 3.0]
    result[0] = 99.0
    assert s[0] == 1.0


@pytest.mark.parametrize("order,expected_len", [(1, 4), (2, 3), (4, 1), (5, 0), (7, 0)])
def test_difference_length(order, expected_len):
    assert len(difference([1, 2, 3, 4, 5], order)) == expected_len


def test_difference_rejects_negative_order():
    with pytest.raises(ValueError):
        difference([1, 2, 3], -1)


def test_moving_average_window_one_is_copy():
    s = [0.5, 1.5, 2.5]
    assert list(moving_average(s, 1)) == s


def test_moving_average_full_windows_only():
    result = moving_average([1, 2, 3, 4, 5], 3)
    np.testing.assert_allclose(result, [2.0, 3.0, 4.0])


@pytest.mark.parametrize("n,window", [(10, 1), (10, 3), (10, 10), (4, 2)])
def test_moving_average_length(n, window):
    assert len(moving_average(np.arange(n), window)) == n - window + 1


@pytest.mark.parametrize("window", [0, -1, 5])
def test_moving_average_degenerate_windows(window):
    assert len(moving_average([1, 2], window)) == 0


def test_moving_average_non_finite_window_is_zero():
    result = moving_average([1.0, np.inf, 1.0, 1.0, 1.0], 2)
    assert list(result) == [0.0, 0.0, 1.0, 1.0]


def test_mean_across_series_single_is_passthrough():
    a = [1.0, 2.0, 3.0]
    assert mean_across_series([a]) is a


def test_mean_across_series_pair():
    a = [1.0, 2.0, 3.0]
    b = [3.0, 4.0, 8.0]
    result = mean_across_series([a, b])
    for i in range(3):
        assert result[i] == pytest.approx((a[i] + b[i]) / 2)


def test_mean_across_series_skips_non_finite():
    result = mean_across_series([[1.0, np.nan, np.nan], [3.0, 5.0, np.inf]])
    assert list(result) == [2.0, 5.0, 0.0]


def test_mean_across_series_ragged_uses_first_length():
    result = mean_across_series([[2.0, 4.0, 6.0], [4.0]])
    assert list(result) == [3.0, 4.0, 6.0]


def test_mean_across_series_empty():
    assert len(mean_across_series([])) == 0


def test_subtract_truncates_to_shorter():
    a = [5.0, 6.0, 7.0, 8.0]
    b = [1.0, 1.0]
    result = subtract(a, b)
    assert len(result) == min(len(a), len(b))
    assert list(result) == [4.0, 5.0]


def test_subtract_is_antisymmetric():
    a = [0.3, 1.7, -2.0, 4.5]
    b = [1.0, 0.2, 0.5]
    np.testing.assert_allclose(subtract(a, b), -subtract(b, a))


def test_subtract_non_finite_is_zero():
    result = subtract([np.inf, 1.0], [np.inf, 0.5])
    assert list(result) == [0.0, 0.5]


def test_subtract_empty_input():
    assert len(subtract([], [1.0, 2.0])) == 0


def test_normalize_rescales_to_percent():
    s = [0.1, 0.35, 0.6]
    result = normalize([s], 0.1, 0.6)
    for i, v in enumerate(s):
        assert result[i] == pytest.approx((v - 0.1) / (0.6 - 0.1) * 100)


def test_normalize_averages_replicates_first():
    result = normalize([[0.0, 2.0], [2.0, 4.0]], 0.0, 4.0)
    np.testing.assert_allclose(result, [25.0, 75.0])


def test_normalize_zero_range_returns_mean():
    s = [0.2, 0.4, 0.6]
    assert list(normalize([s], 0.5, 0.5)) == s


def test_find_peak_first_occurrence():
    assert find_peak([1.0, 3.0, 2.0, 3.0]) == (3.0, 1)


def test_find_peak_empty():
    peak, index = find_peak([])
    assert np.isnan(peak)
    assert index == -1


def test_first_index_at_or_above():
    assert first_index_at_or_above([10, 40, 50, 70], 50) == 2
    assert first_index_at_or_above([10, 20], 50) == -1


def test_linear_regression_matches_closed_form():
    y = [0.0068, 0.0078, 0.0085, 0.009, 0.0097]
    n = len(y)
    x = list(range(n))
    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_x2 = sum(xi * xi for xi in x)
    expected = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)

    fit = linear_regression(y)
    assert fit['slope'] == pytest.approx(expected)
    assert list(fit['x']) == x


def test_linear_regression_exact_line():
    fit = linear_regression([1.0, 3.0, 5.0, 7.0])
    assert fit['slope'] == pytest.approx(2.0)
    assert fit['intercept'] == pytest.approx(1.0)
    assert fit['r_squared'] == pytest.approx(1.0)


@pytest.mark.parametrize("y", [[], [0.5]])
def test_linear_regression_degenerate_slope_is_zero(y):
    assert linear_regression(y)['slope'] == 0.0
