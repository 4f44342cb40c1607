"""
Assay calculators for enzyme kinetics plates.

This module provides the per-well pipelines for the three supported assays:

- Catalytic rate (T2943, tPA activity): peak smoothed rate of change of the signal
- Generation rate (S2251, plasmin generation rate, PGR): OLS slope of the net lysis
  rate from time 0 up to its maximum
- Fibrinolysis (HoFF test): half-lysis time, maximum lysis rate, time of maximum
  lysis rate or fibrinolysis index on the Alexa-normalized signal

Every calculator returns a ``(result, trace)`` pair. The trace holds each intermediate
array for diagnostics and never affects the result. Insufficient data never raises:
the result is 0 and ``trace['short_circuit']`` names the stage that ran out of data.
"""

from collections import namedtuple

import numpy as np

from .arrays import (
    difference,
    moving_average,
    mean_across_series,
    subtract,
    normalize,
    find_peak,
    first_index_at_or_above,
    linear_regression,
)

CATALYTIC_RATE = 'catalytic_rate'
GENERATION_RATE = 'generation_rate'
FIBRINOLYSIS = 'fibrinolysis'

ASSAY_KINDS = (CATALYTIC_RATE, GENERATION_RATE, FIBRINOLYSIS)

# Assay codes used on the lab's plate layouts
ASSAY_ALIASES = {
    'T2943': CATALYTIC_RATE,
    'S2251': GENERATION_RATE,
    'HoFF': FIBRINOLYSIS,
}

DEFAULT_WINDOWS = {
    CATALYTIC_RATE: 10,
    GENERATION_RATE: 3,
    FIBRINOLYSIS: 10,
}

HOFF_METRICS = ('HLT', 'MLR', 'TMLR', 'FI')

HALF_LYSIS_PERCENT = 50

# Background control for the generation rate pipeline: either one series that is
# differenced directly, or replicate series that are averaged first.
FlatBackground = namedtuple('FlatBackground', ['values'])
ReplicatedBackground = namedtuple('ReplicatedBackground', ['series_list'])


def resolve_assay_kind(assay):
    """Canonical assay kind for a kind name or lab assay code."""
    kind = ASSAY_ALIASES.get(assay, assay)
    if kind not in ASSAY_KINDS:
        raise ValueError(
            f"Unknown assay: {assay!r}. Expected one of {', '.join(ASSAY_KINDS)} "
            f"or {', '.join(ASSAY_ALIASES)}"
        )
    return kind


def _check_window(window):
    if isinstance(window, bool) or not isinstance(window, (int, np.integer)) or window < 1:
        raise ValueError(f"Smoothing window must be an integer >= 1, got {window!r}")
    return int(window)


def _stop(trace, stage):
    trace['short_circuit'] = stage
    trace['result'] = 0.0
    return 0.0, trace


def calc_catalytic_rate(duplicate, window):
    """
    Calculate the tPA catalytic rate (T2943) of one well.

    Pipeline: mean of replicates -> first difference -> moving average -> maximum.
    No background is subtracted; the rate is the peak rate of change of the raw signal.

    Parameters
    ----------
    duplicate : list of sequences
        ``[sample]`` or ``[sample, replicate]`` (or ``[duplicate_averaged]``)
    window : int
        Smoothing window (>= 1)

    Returns
    -------
    tuple
        ``(result, trace)`` with trace keys 'mean', 'diff', 'smoothed', 'max_value'
    """
    window = _check_window(window)

    empty = np.array([], dtype=float)
    trace = {
        'assay': CATALYTIC_RATE,
        'window': window,
        'mean': empty,
        'diff': empty,
        'smoothed': empty,
        'max_value': 0.0,
        'result': 0.0,
        'short_circuit': None,
    }

    if len(duplicate) == 0:
        return _stop(trace, 'no input series')

    trace['mean'] = np.asarray(mean_across_series(duplicate), dtype=float)
    if len(trace['mean']) == 0:
        return _stop(trace, 'empty mean')

    trace['diff'] = difference(trace['mean'], 1)
    if len(trace['diff']) == 0:
        return _stop(trace, 'empty difference')

    trace['smoothed'] = moving_average(trace['diff'], window)
    if len(trace['smoothed']) == 0:
        return _stop(trace, 'empty smoothed series')

    max_value, _ = find_peak(trace['smoothed'])
    if not np.isfinite(max_value):
        return _stop(trace, 'non-finite peak')

    trace['max_value'] = max_value
    trace['result'] = max_value
    return max_value, trace


def _background_mean(background):
    if isinstance(background, FlatBackground):
        return np.asarray(background.values, dtype=float)
    if isinstance(background, ReplicatedBackground):
        return np.asarray(mean_across_series(background.series_list), dtype=float)

    raise TypeError(
        "background must be a FlatBackground or ReplicatedBackground, "
        f"got {type(background).__name__}"
    )


def calc_generation_rate(duplicate, background, window=DEFAULT_WINDOWS[GENERATION_RATE]):
    """
    Calculate the plasmin generation rate (S2251, PGR) of one well.

    Algorithm:
    1. Mean of replicate wells (a single well is used as is)
    2. First-order difference -> lysis rate (LR) per time point
    3. Moving average of LR (full windows only)
    4. Background LR: the negative control is differenced and smoothed the same way,
       then subtracted to give net-LR
    5. Maximum of net-LR and its first position
    6. OLS slope of net-LR against time from 0 up to that position

    Parameters
    ----------
    duplicate : list of sequences
        ``[sample]`` or ``[sample, replicate]``
    background : FlatBackground or ReplicatedBackground
        Negative control signal
    window : int, optional (default=3)
        Smoothing window (>= 1)

    Returns
    -------
    tuple
        ``(result, trace)``. The result is 0 when the peak is at time 0, since a slope
        needs at least two points.
    """
    window = _check_window(window)

    empty = np.array([], dtype=float)
    trace = {
        'assay': GENERATION_RATE,
        'window': window,
        'mean': empty,
        'lr': empty,
        'smoothed_lr': empty,
        'background_mean': empty,
        'bg_lr': empty,
        'net_lr': empty,
        'max_net_lr': 0.0,
        'max_net_lr_index': -1,
        'regression_x': empty,
        'regression_y': empty,
        'regression_slope': 0.0,
        'regression_intercept': 0.0,
        'regression_r_squared': np.nan,
        'result': 0.0,
        'short_circuit': None,
    }

    # Resolve the background first so a bad argument is reported even for empty wells
    background_mean = _background_mean(background)

    if len(duplicate) == 0:
        return _stop(trace, 'no input series')

    trace['mean'] = np.asarray(mean_across_series(duplicate), dtype=float)
    if len(trace['mean']) == 0:
        return _stop(trace, 'empty mean')

    trace['lr'] = difference(trace['mean'], 1)
    if len(trace['lr']) == 0:
        return _stop(trace, 'empty lysis rate')

    trace['smoothed_lr'] = moving_average(trace['lr'], window)
    if len(trace['smoothed_lr']) == 0:
        return _stop(trace, 'empty smoothed lysis rate')

    trace['background_mean'] = background_mean
    trace['bg_lr'] = moving_average(difference(background_mean, 1), window)

    trace['net_lr'] = subtract(trace['smoothed_lr'], trace['bg_lr'])
    if len(trace['net_lr']) == 0:
        return _stop(trace, 'empty net lysis rate')

    max_net_lr, max_index = find_peak(trace['net_lr'])
    trace['max_net_lr'] = max_net_lr
    trace['max_net_lr_index'] = max_index
    if not np.isfinite(max_net_lr):
        return _stop(trace, 'non-finite peak')
    if max_index <= 0:
        return _stop(trace, 'peak at time 0')

    fit = linear_regression(trace['net_lr'][:max_index + 1])
    trace['regression_x'] = fit['x']
    trace['regression_y'] = fit['y']
    trace['regression_slope'] = fit['slope']
    trace['regression_intercept'] = fit['intercept']
    trace['regression_r_squared'] = fit['r_squared']

    trace['result'] = fit['slope']
    return fit['slope'], trace


def calc_fibrinolysis(sample, background, alexa0, alexa100, metric='HLT',
                      window=DEFAULT_WINDOWS[FIBRINOLYSIS], total_duration=None):
    """
    Calculate a HoFF fibrinolysis metric for one well.

    The sample and background are normalized to percent lysis between the Alexa
    anchors, the background is subtracted, and the net curve is differenced and
    smoothed to find the maximum lysis rate.

    Parameters
    ----------
    sample : sequence of float
        Duplicate-averaged (or single) sample series
    background : sequence of float
        0% control series used as background
    alexa0, alexa100 : float
        Normalization anchors (see `controls.global_control_extrema`)
    metric : str, optional (default='HLT')
        Which value to return:
        - 'HLT': half-lysis time, first time point with normalized signal >= 50%.
          A curve that never reaches 50% reports `total_duration` (or the series
          length when no duration is given).
        - 'MLR': maximum lysis rate (peak of the smoothed net rate)
        - 'TMLR': time of maximum lysis rate, 1-based (-1 if there is no peak)
        - 'FI': fibrinolysis index, MLR / TMLR (0 if TMLR <= 0)
    window : int, optional (default=10)
        Smoothing window (>= 1)
    total_duration : int, optional
        Number of time points in the experiment

    Returns
    -------
    tuple
        ``(result, trace)``
    """
    window = _check_window(window)
    if metric not in HOFF_METRICS:
        raise ValueError(f"Unknown HoFF metric: {metric!r}. Expected one of {', '.join(HOFF_METRICS)}")

    empty = np.array([], dtype=float)
    trace = {
        'assay': FIBRINOLYSIS,
        'window': window,
        'metric': metric,
        'alexa0': alexa0,
        'alexa100': alexa100,
        'norm': empty,
        'norm_bg': empty,
        'hlt_index': -1,
        'hlt': 0,
        'net': empty,
        'diff': empty,
        'smoothed': empty,
        'mlr': 0.0,
        'tmlr': -1,
        'fi': 0.0,
        'result': 0.0,
        'short_circuit': None,
    }

    trace['norm'] = np.asarray(normalize([sample], alexa0, alexa100), dtype=float)
    if len(trace['norm']) == 0:
        return _stop(trace, 'empty normalized series')

    trace['norm_bg'] = np.asarray(normalize([background], alexa0, alexa100), dtype=float)

    trace['hlt_index'] = first_index_at_or_above(trace['norm'], HALF_LYSIS_PERCENT)
    if trace['hlt_index'] >= 0:
        trace['hlt'] = trace['hlt_index']
    elif total_duration is not None:
        trace['hlt'] = total_duration
    else:
        trace['hlt'] = len(trace['norm'])

    trace['net'] = subtract(trace['norm'], trace['norm_bg'])
    if len(trace['net']) == 0:
        return _stop(trace, 'empty net series')

    trace['diff'] = difference(trace['net'], 1)
    if len(trace['diff']) == 0:
        return _stop(trace, 'empty difference')

    trace['smoothed'] = moving_average(trace['diff'], window)
    if len(trace['smoothed']) == 0:
        return _stop(trace, 'empty smoothed series')

    mlr, mlr_index = find_peak(trace['smoothed'])
    if not np.isfinite(mlr):
        mlr, mlr_index = 0.0, -1

    # Index 0 of the smoothed rate is time point 1
    tmlr = mlr_index + 1 if mlr_index >= 0 else -1
    fi = mlr / tmlr if tmlr > 0 else 0.0

    trace['mlr'] = mlr
    trace['tmlr'] = tmlr
    trace['fi'] = fi

    results = {
        'HLT': trace['hlt'],
        'MLR': mlr,
        'TMLR': tmlr,
        'FI': fi,
    }
    trace['result'] = results[metric]
    return results[metric], trace
