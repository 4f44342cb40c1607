"""
Whole-plate analysis.

`calculate_plate` runs one assay over every selected sample well of a plate and
returns one result per well. `debug_trace` reruns the same calculation for a single
well and returns every intermediate array, optionally with a diagnostic figure.

Problems that make the whole run meaningless (invalid plate data, no samples, missing
controls) raise `AnalysisError` before any well is calculated. Problems confined to a
single well only mark that well invalid.
"""

import warnings

import numpy as np

from .assays import (
    CATALYTIC_RATE,
    GENERATION_RATE,
    FIBRINOLYSIS,
    DEFAULT_WINDOWS,
    HOFF_METRICS,
    ReplicatedBackground,
    resolve_assay_kind,
    _check_window,
    calc_catalytic_rate,
    calc_generation_rate,
    calc_fibrinolysis,
)
from .controls import averaged_control_series, global_control_extrema
from .validation import AnalysisError, PlateValidationError, validate_plate
from .wells import (
    normalize_well_id,
    plate_index,
    well_sort_key,
    is_duplicate_well,
    get_adjacent_well_id,
    get_primary_well_id,
    mean_duplicate_from_adjacent_wells,
)


def _as_well_list(wells):
    """Well selection as a list; a single well ID string is one well."""
    if wells is None:
        return []
    if isinstance(wells, str):
        return [wells]
    return list(wells)


def _check_config(assay, window, metric, total_duration):
    """Resolve the assay kind and window, rejecting invalid settings."""
    kind = resolve_assay_kind(assay)

    if window is None:
        window = DEFAULT_WINDOWS[kind]
    window = _check_window(window)

    if kind == FIBRINOLYSIS and metric not in HOFF_METRICS:
        raise ValueError(f"Unknown HoFF metric: {metric!r}. Expected one of {', '.join(HOFF_METRICS)}")

    if total_duration is not None and total_duration < 1:
        raise ValueError(f"total_duration must be >= 1, got {total_duration}")

    return kind, window


def _prepare_run(plate, kind, sample_wells, control0_wells, control100_wells):
    """
    Batch-level checks and control aggregation, done once before any well.

    Returns a context dict with the plate index and the control-derived inputs
    needed by the assay.
    """
    errors = validate_plate(plate)
    if errors:
        raise PlateValidationError(errors)

    if not sample_wells:
        raise AnalysisError('No wells selected for analysis')

    control0_wells = _as_well_list(control0_wells)
    control100_wells = _as_well_list(control100_wells)

    context = {
        'index': plate_index(plate),
        'background': None,
        'alexa0': None,
        'alexa100': None,
    }

    if kind == GENERATION_RATE:
        if not control0_wells:
            raise AnalysisError('0% control wells required for generation rate')
        control0 = averaged_control_series(control0_wells, plate)
        if not control0:
            raise AnalysisError('No valid 0% control data after averaging')
        context['background'] = ReplicatedBackground(control0)

    elif kind == FIBRINOLYSIS:
        if not control0_wells or not control100_wells:
            raise AnalysisError('Both 0% and 100% control wells required for fibrinolysis')
        control0 = averaged_control_series(control0_wells, plate)
        if not control0:
            raise AnalysisError('No valid 0% control data after averaging')
        context['alexa0'], context['alexa100'] = global_control_extrema(
            control0_wells, control100_wells, plate
        )
        # The first 0% control (in plate order) is the background curve
        context['background'] = control0[0]

    return context


def _calculate_well(well_id, context, kind, window, metric, total_duration):
    """Run the assay pipeline for one primary well; returns ``(value, trace)``."""
    index = context['index']
    sample = index[well_id]

    averaged = mean_duplicate_from_adjacent_wells(well_id, index)
    paired = index[get_adjacent_well_id(well_id, index)] if averaged is not None else None
    series = averaged if averaged is not None else sample

    if kind == CATALYTIC_RATE:
        value, trace = calc_catalytic_rate([series], window)
    elif kind == GENERATION_RATE:
        value, trace = calc_generation_rate([series], context['background'], window)
    else:
        value, trace = calc_fibrinolysis(
            series,
            context['background'],
            context['alexa0'],
            context['alexa100'],
            metric=metric,
            window=window,
            total_duration=total_duration,
        )

    trace['well_id'] = well_id
    trace['sample'] = sample
    trace['paired'] = paired
    return value, trace


def calculate_plate(
    plate,
    sample_wells,
    assay,
    control0_wells=None,
    control100_wells=None,
    window=None,
    metric='HLT',
    total_duration=None,
    verbose=False
):
    """
    Calculate an assay result for every selected sample well of a plate.

    Parameters
    ----------
    plate : list of dict
        Plate records ``{'well_id': 'A1', 'values': [...]}``, one per well
        (see `data_io.make_plate` and `data_io.plate_from_dataframe`)

    sample_wells : iterable of str
        Wells to report. Duplicate-position wells are reported as invalid because
        their data is already averaged into their primary well.

    assay : str
        'catalytic_rate' (T2943), 'generation_rate' (S2251) or 'fibrinolysis' (HoFF)

    control0_wells : iterable of str, optional
        0% (negative) control wells. Required for generation rate and fibrinolysis.

    control100_wells : iterable of str, optional
        100% control wells. Required for fibrinolysis.

    window : int, optional
        Smoothing window. Defaults to 10 for catalytic rate and fibrinolysis and
        3 for generation rate.

    metric : str, optional (default='HLT')
        Fibrinolysis output: 'HLT', 'MLR', 'TMLR' or 'FI'

    total_duration : int, optional
        Experiment length in time points; reported as the half-lysis time of
        curves that never reach 50%

    verbose : bool, optional (default=False)
        If True, prints the run settings and a summary

    Returns
    -------
    list of dict
        One ``{'well_id', 'value', 'is_valid'}`` per sample well on the plate, in plate
        order. ``is_valid`` is False for duplicate wells and for wells whose data ran
        out before a result could be computed (value 0).

    Raises
    ------
    ValueError
        Invalid assay, window, metric or total_duration
    AnalysisError
        Invalid plate data (`PlateValidationError`), no sample wells, or missing
        control wells

    Examples
    --------
    >>> plate = make_plate({'A1': a1_values, 'A2': a2_values, 'B1': blank_values})
    >>> results = calculate_plate(plate, ['A1', 'A2'], 'S2251', control0_wells=['B1'])
    >>> results[0]
    {'well_id': 'A1', 'value': 0.00012, 'is_valid': True}
    """
    kind, window = _check_config(assay, window, metric, total_duration)
    sample_wells = _as_well_list(sample_wells)
    context = _prepare_run(plate, kind, sample_wells, control0_wells, control100_wells)
    index = context['index']

    if verbose:
        print("=" * 80)
        print("PLATE ANALYSIS")
        print("=" * 80)
        print(f"Assay: {kind}")
        print(f"Smoothing window: {window}")
        if kind == FIBRINOLYSIS:
            print(f"HoFF metric: {metric}")
            print(f"Alexa anchors: 0% = {context['alexa0']:.6f}, 100% = {context['alexa100']:.6f}")
            if total_duration is not None:
                print(f"Total duration: {total_duration} time points")
        print(f"Sample wells selected: {len(sample_wells)}")
        print()

    selected = []
    for well_id in sample_wells:
        canonical = normalize_well_id(well_id)
        if canonical is None or canonical not in index:
            warnings.warn(f"Sample well {well_id!r} has no data on the plate and was skipped", UserWarning)
            continue
        if canonical not in selected:
            selected.append(canonical)

    results = []
    n_duplicates = 0
    for well_id in sorted(selected, key=well_sort_key):
        if is_duplicate_well(well_id, index):
            n_duplicates += 1
            results.append({'well_id': well_id, 'value': 0.0, 'is_valid': False})
            continue

        try:
            value, trace = _calculate_well(well_id, context, kind, window, metric, total_duration)
        except (ArithmeticError, ValueError) as e:
            warnings.warn(f"Calculation failed for well {well_id}: {e}", UserWarning)
            results.append({'well_id': well_id, 'value': 0.0, 'is_valid': False})
            continue

        value = float(value)
        is_valid = bool(np.isfinite(value)) and trace['short_circuit'] is None
        if verbose and trace['short_circuit'] is not None:
            print(f"  ⚠️  {well_id}: {trace['short_circuit']}, reported as 0")
        results.append({'well_id': well_id, 'value': value, 'is_valid': is_valid})

    if verbose:
        _print_summary(results, n_duplicates)

    return results


def debug_trace(
    plate,
    well_id,
    assay,
    control0_wells=None,
    control100_wells=None,
    window=None,
    metric='HLT',
    total_duration=None,
    plot=False,
    plot_title=None
):
    """
    Recalculate one well and return every intermediate step.

    Takes the same settings as `calculate_plate`, so the trace's 'result' equals the
    value `calculate_plate` reports for the well.

    Returns
    -------
    dict
        The assay trace (see `assays`) plus 'well_id', 'sample' (raw series),
        'paired' (raw replicate series or None) and 'fig' (Plotly figure if
        ``plot=True``, otherwise None)

    Raises
    ------
    AnalysisError
        If the well has no data, or it is a duplicate well (its primary well holds
        the trace)
    """
    kind, window = _check_config(assay, window, metric, total_duration)
    context = _prepare_run(plate, kind, [well_id], control0_wells, control100_wells)
    index = context['index']

    canonical = normalize_well_id(well_id)
    if canonical is None or canonical not in index:
        raise AnalysisError(f"Well {well_id!r} has no data on the plate")
    if is_duplicate_well(canonical, index):
        raise AnalysisError(
            f"Well {canonical} is a duplicate well; its data is part of "
            f"{get_primary_well_id(canonical, index)}"
        )

    _, trace = _calculate_well(canonical, context, kind, window, metric, total_duration)
    trace['fig'] = None

    if plot:
        from .plotting import plot_debug_trace
        trace['fig'] = plot_debug_trace(trace, plot_title=plot_title)
        trace['fig'].show()

    return trace


def _print_summary(results, n_duplicates):
    """Print summary statistics for a plate run"""
    valid = [r['value'] for r in results if r['is_valid']]

    print("=" * 80)
    print("SUMMARY")
    print("=" * 80)
    print(f"Wells reported: {len(results)}")
    print(f"  Valid:     {len(valid)}")
    print(f"  Invalid:   {len(results) - len(valid) - n_duplicates}")
    print(f"  Duplicate: {n_duplicates}")

    if valid:
        print("\nValid results:")
        print(f"  Mean: {np.mean(valid):.6g}")
        print(f"  Min:  {np.min(valid):.6g}")
        print(f"  Max:  {np.max(valid):.6g}")

    print()
