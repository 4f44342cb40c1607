"""
Data adapters for plate analysis.

This module converts between the in-memory plate representation used by the
calculations (a list of ``{'well_id', 'values'}`` records) and pandas DataFrames,
and lays results out in the 8 x 12 plate grid.
"""

import math

import numpy as np
import pandas as pd

from .wells import ROWS, N_COLUMNS, parse_well_id


def make_plate(well_values):
    """
    Build plate records from a ``{well_id: values}`` mapping or ``(well_id, values)`` pairs.

    Well IDs are kept as given; they are canonicalized during analysis.

    Examples
    --------
    >>> plate = make_plate({'A1': [0.1, 0.12, 0.15], 'A2': [0.1, 0.11, 0.16]})
    >>> plate[0]['well_id']
    'A1'
    """
    items = well_values.items() if isinstance(well_values, dict) else well_values
    return [{'well_id': well_id, 'values': list(values)} for well_id, values in items]


def plate_from_dataframe(df, well_column=None, fill_value=None):
    """
    Build plate records from a wide DataFrame with one row per well.

    Parameters
    ----------
    df : pd.DataFrame
        Plate reader table. Every column other than `well_column` is treated as a
        time point, in column order.

    well_column : str, optional (default=None)
        Column holding the well IDs. If None, the index holds them.

    fill_value : float, optional (default=None)
        Value used for cells that are empty or not numeric. If None they are kept
        as NaN and reported by `validate_plate`.

    Returns
    -------
    list of dict
        Plate records ``{'well_id', 'values'}``

    Examples
    --------
    >>> df = pd.DataFrame({'Well': ['A1', 'A2'], 0: [0.10, 0.10], 1: [0.11, 0.12]})
    >>> plate = plate_from_dataframe(df, well_column='Well')
    """
    if well_column is not None:
        if well_column not in df.columns:
            raise ValueError(f"DataFrame must contain '{well_column}' column")
        well_ids = df[well_column]
        data = df.drop(columns=[well_column])
    else:
        well_ids = pd.Series(df.index, index=df.index)
        data = df

    data = data.apply(pd.to_numeric, errors='coerce')
    if fill_value is not None:
        data = data.fillna(fill_value)

    return [
        {'well_id': str(well_id).strip(), 'values': data.iloc[i].to_numpy(dtype=float).tolist()}
        for i, well_id in enumerate(well_ids)
    ]


def trim_to_duration(plate, total_duration):
    """
    Fit every series to exactly `total_duration` time points.

    Longer series are truncated; shorter series are padded with 0, as the plate
    reader import does for runs that stopped early.
    """
    if total_duration < 0:
        raise ValueError(f"total_duration must be >= 0, got {total_duration}")

    trimmed = []
    for record in plate:
        values = list(record['values'])[:total_duration]
        values.extend([0.0] * (total_duration - len(values)))
        trimmed.append({'well_id': record['well_id'], 'values': values})

    return trimmed


def results_to_frame(results):
    """Results as a DataFrame with columns 'Well', 'Value' and 'Is_Valid'."""
    return pd.DataFrame(
        {
            'Well': [r['well_id'] for r in results],
            'Value': [r['value'] for r in results],
            'Is_Valid': [r['is_valid'] for r in results],
        }
    )


def results_to_plate_grid(results):
    """
    Lay valid results out as an 8 x 12 plate.

    Returns
    -------
    pd.DataFrame
        Index 'A'-'H', columns 1-12. Wells without a valid result are NaN.
    """
    grid = pd.DataFrame(np.nan, index=list(ROWS), columns=range(1, N_COLUMNS + 1))
    for r in results:
        parsed = parse_well_id(r['well_id'])
        if parsed is None or not r['is_valid']:
            continue
        row, col = parsed
        grid.loc[row, col] = r['value']

    return grid


def format_result(value, sig_digits=4):
    """
    Format a result for display.

    Very small (< 0.001) and very large (>= 10000) magnitudes use scientific
    notation with `sig_digits` significant digits, everything else `sig_digits`
    decimals. Zero and non-finite values are shown as "0".

    Examples
    --------
    >>> format_result(0.000123456)
    '1.235e-04'
    >>> format_result(0.0123456)
    '0.0123'
    """
    sig_digits = min(6, max(1, sig_digits))
    if value is None or not math.isfinite(value) or value == 0:
        return "0"

    if abs(value) < 0.001 or abs(value) >= 10000:
        return f"{value:.{sig_digits - 1}e}"

    return f"{value:.{sig_digits}f}"
