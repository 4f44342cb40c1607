"""
Array primitives for plate reader time series.

This module provides the small set of series operations that the assay calculators
chain together: differencing, moving-average smoothing, averaging of replicate wells,
background subtraction, Alexa 0%/100% normalization, peak finding and the OLS slope
used for plasmin generation rates.

All functions accept any sequence of numbers and return numpy arrays of float64.
Non-finite intermediate values are replaced by 0 where noted, so a single bad reading
cannot turn a whole well into NaN.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy import stats


def _as_series(values):
    return np.asarray(values, dtype=float)


def _finite_or_zero(values):
    return np.where(np.isfinite(values), values, 0.0)


def difference(series, order=1):
    """
    Calculate the difference between elements `order` positions apart.

    Parameters
    ----------
    series : sequence of float
        Input time series
    order : int, optional (default=1)
        Lag between the subtracted elements. 0 returns a copy of the input.

    Returns
    -------
    np.ndarray
        ``series[i] - series[i - order]`` for ``i`` in ``[order, len(series))``.
        Empty if the series is not longer than `order`.
    """
    if order < 0:
        raise ValueError(f"order must be >= 0, got {order}")

    values = _as_series(series)
    if order == 0:
        return values.copy()
    if len(values) <= order:
        return np.array([], dtype=float)

    return values[order:] - values[:-order]


def moving_average(series, window):
    """
    Calculate the moving average over full windows only.

    Only positions where the whole window fits are returned, so the output has
    ``len(series) - window + 1`` values. An empty array is returned when
    ``window <= 0`` or the window is longer than the series. Window means that are
    not finite are reported as 0.

    Parameters
    ----------
    series : sequence of float
        Input time series
    window : int
        Number of consecutive points to average

    Returns
    -------
    np.ndarray
        Smoothed series
    """
    values = _as_series(series)
    if window <= 0 or len(values) == 0 or window > len(values):
        return np.array([], dtype=float)
    if window == 1:
        return values.copy()

    with np.errstate(invalid='ignore', over='ignore'):
        means = sliding_window_view(values, window).mean(axis=1)

    return _finite_or_zero(means)


def mean_across_series(series_list):
    """
    Elementwise mean of replicate series, ignoring non-finite readings.

    The output has the length of the first series; shorter series simply stop
    contributing. An index with no finite contributor is reported as 0.

    A single series is passed through unchanged (not copied), so callers must not
    mutate the result.

    Parameters
    ----------
    series_list : list of sequences
        Replicate measurements of the same well (or wells)

    Returns
    -------
    np.ndarray or the single input series
    """
    if len(series_list) == 0:
        return np.array([], dtype=float)
    if len(series_list) == 1:
        return series_list[0]

    length = len(series_list[0])
    stacked = np.full((len(series_list), length), np.nan)
    for i, series in enumerate(series_list):
        values = _as_series(series)[:length]
        stacked[i, :len(values)] = values

    finite = np.isfinite(stacked)
    counts = finite.sum(axis=0)
    sums = np.where(finite, stacked, 0.0).sum(axis=0)

    with np.errstate(invalid='ignore', over='ignore'):
        means = np.divide(sums, counts, out=np.zeros(length), where=counts > 0)

    return _finite_or_zero(means)


def subtract(data, background):
    """
    Subtract a background series from a data series.

    Mismatched lengths are silently truncated to the shorter series. Differences
    that are not finite are reported as 0.
    """
    a = _as_series(data)
    b = _as_series(background)
    n = min(len(a), len(b))
    if n == 0:
        return np.array([], dtype=float)

    with np.errstate(invalid='ignore', over='ignore'):
        diff = a[:n] - b[:n]

    return _finite_or_zero(diff)


def normalize(series_list, alexa0, alexa100):
    """
    Rescale the mean of `series_list` to a 0-100 scale between two anchors.

    Parameters
    ----------
    series_list : list of sequences
        Replicate series; they are averaged with `mean_across_series` first
    alexa0 : float
        Signal corresponding to 0%
    alexa100 : float
        Signal corresponding to 100%

    Returns
    -------
    np.ndarray
        ``(mean - alexa0) / (alexa100 - alexa0) * 100``. When the anchors are equal
        the unscaled mean is returned instead.
    """
    if len(series_list) == 0:
        return np.array([], dtype=float)

    mean = mean_across_series(series_list)
    span = alexa100 - alexa0
    if span == 0:
        return mean

    with np.errstate(invalid='ignore', over='ignore', divide='ignore'):
        scaled = (_as_series(mean) - alexa0) / span * 100

    return _finite_or_zero(scaled)


def find_peak(series):
    """Return ``(max_value, first_index_of_max)``; ``(nan, -1)`` for an empty series."""
    values = _as_series(series)
    if len(values) == 0:
        return np.nan, -1

    peak = np.max(values)
    if not np.isfinite(peak):
        return peak, -1

    return float(peak), int(np.flatnonzero(values == peak)[0])


def first_index_at_or_above(series, threshold):
    """Index of the first value >= threshold, or -1 if the series never gets there."""
    hits = np.flatnonzero(_as_series(series) >= threshold)
    return int(hits[0]) if len(hits) > 0 else -1


def linear_regression(y):
    """
    Ordinary least squares fit of `y` against time indices ``0..n-1``.

    Parameters
    ----------
    y : sequence of float
        Values to regress

    Returns
    -------
    dict
        Dictionary containing:
        - 'slope': Fitted slope (0 if fewer than two points or not finite)
        - 'intercept': Fitted intercept (0 if not available)
        - 'r_squared': R² of the fit (nan if not available)
        - 'x': Time indices used
        - 'y': Values used
    """
    y = _as_series(y)
    x = np.arange(len(y), dtype=float)

    result = {
        'slope': 0.0,
        'intercept': 0.0,
        'r_squared': np.nan,
        'x': x,
        'y': y,
    }

    # A single point has no defined slope
    if len(y) < 2:
        return result

    fit = stats.linregress(x, y)
    if np.isfinite(fit.slope):
        result['slope'] = float(fit.slope)
        result['intercept'] = float(fit.intercept)
        result['r_squared'] = float(fit.rvalue ** 2)

    return result
