"""
Tests for plate construction and result tables.
"""

import numpy as np
import pandas as pd
import pytest

from enzyplate.data_io import (
    make_plate,
    plate_from_dataframe,
    trim_to_duration,
    results_to_frame,
    results_to_plate_grid,
    format_result,
)


def test_make_plate_from_mapping():
    plate = make_plate({'A1': (0.1, 0.2), 'A02': [0.3]})
    assert plate == [
        {'well_id': 'A1', 'values': [0.1, 0.2]},
        {'well_id': 'A02', 'values': [0.3]},
    ]


def test_make_plate_from_pairs_keeps_repeats():
    plate = make_plate([('A1', [0.1]), ('A1', [0.2])])
    assert len(plate) == 2


def test_plate_from_dataframe_well_column():
    df = pd.DataFrame({'Well': ['A1', ' A2 '], 0: [0.10, 0.10], 1: [0.11, 0.12]})
    plate = plate_from_dataframe(df, well_column='Well')
    assert plate == [
        {'well_id': 'A1', 'values': [0.10, 0.11]},
        {'well_id': 'A2', 'values': [0.10, 0.12]},
    ]


def test_plate_from_dataframe_index():
    df = pd.DataFrame([[0.1, 0.2, 0.3]], index=['B4'], columns=['0 min', '1 min', '2 min'])
    plate = plate_from_dataframe(df)
    assert plate == [{'well_id': 'B4', 'values': [0.1, 0.2, 0.3]}]


def test_plate_from_dataframe_non_numeric_cells():
    df = pd.DataFrame({'Well': ['A1'], 0: [0.1], 1: ['OVRFLW']})

    kept = plate_from_dataframe(df, well_column='Well')
    assert np.isnan(kept[0]['values'][1])

    filled = plate_from_dataframe(df, well_column='Well', fill_value=0.0)
    assert filled[0]['values'] == [0.1, 0.0]


def test_plate_from_dataframe_missing_column():
    with pytest.raises(ValueError, match="'Well'"):
        plate_from_dataframe(pd.DataFrame({'A': [1]}), well_column='Well')


def test_trim_to_duration():
    plate = make_plate({'A1': [1.0, 2.0, 3.0, 4.0], 'A2': [1.0]})
    trimmed = trim_to_duration(plate, 3)
    assert trimmed[0]['values'] == [1.0, 2.0, 3.0]
    assert trimmed[1]['values'] == [1.0, 0.0, 0.0]
    # Input untouched
    assert plate[0]['values'] == [1.0, 2.0, 3.0, 4.0]


def test_results_to_frame():
    results = [
        {'well_id': 'A1', 'value': 0.5, 'is_valid': True},
        {'well_id': 'A2', 'value': 0.0, 'is_valid': False},
    ]
    df = results_to_frame(results)
    assert list(df.columns) == ['Well', 'Value', 'Is_Valid']
    assert df['Well'].tolist() == ['A1', 'A2']
    assert df['Is_Valid'].tolist() == [True, False]


def test_results_to_plate_grid():
    results = [
        {'well_id': 'A1', 'value': 0.5, 'is_valid': True},
        {'well_id': 'A2', 'value': 0.0, 'is_valid': False},
        {'well_id': 'H12', 'value': 2.5, 'is_valid': True},
    ]
    grid = results_to_plate_grid(results)
    assert grid.shape == (8, 12)
    assert list(grid.index) == list('ABCDEFGH')
    assert list(grid.columns) == list(range(1, 13))
    assert grid.loc['A', 1] == 0.5
    assert np.isnan(grid.loc['A', 2])
    assert grid.loc['H', 12] == 2.5
    assert grid.notna().sum().sum() == 2


@pytest.mark.parametrize("value,sig_digits,expected", [
    (0.000123456, 4, '1.235e-04'),
    (0.0123456, 4, '0.0123'),
    (12.5, 2, '12.50'),
    (123456.0, 3, '1.23e+05'),
    (0.0, 4, '0'),
    (float('nan'), 4, '0'),
    (float('inf'), 4, '0'),
    (0.5, 10, '0.500000'),
])
def test_format_result(value, sig_digits, expected):
    assert format_result(value, sig_digits) == expected
