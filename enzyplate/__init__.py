"""
EnzyPlate - Enzyme Assay Plate Kinetics

This package provides functions for analyzing 96-well plate reader time courses from
fibrinolysis enzyme assays: tPA catalytic rate (T2943), plasmin generation rate (S2251)
and the HoFF fibrinolysis test.

Main Functions
--------------
From analysis:
    calculate_plate - Calculate an assay result for every selected sample well
    debug_trace - Recalculate one well with every intermediate step

From assays:
    calc_catalytic_rate - tPA catalytic rate of one well
    calc_generation_rate - Plasmin generation rate of one well
    calc_fibrinolysis - HoFF metric (HLT, MLR, TMLR or FI) of one well

From validation:
    validate_plate - Structural checks on plate data

From data_io:
    make_plate - Build a plate from a {well_id: values} mapping
    plate_from_dataframe - Build a plate from a wide DataFrame
    results_to_plate_grid - Lay results out as an 8 x 12 DataFrame

Example
-------
>>> from enzyplate import make_plate, calculate_plate, results_to_plate_grid
>>>
>>> plate = make_plate({'A1': a1, 'A2': a2, 'H1': blank, 'H2': blank_dup, 'H3': lysed})
>>> results = calculate_plate(
...     plate,
...     sample_wells=['A1', 'A2'],
...     assay='HoFF',
...     control0_wells=['H1'],
...     control100_wells=['H3'],
...     metric='HLT',
...     total_duration=120,
... )
>>> grid = results_to_plate_grid(results)
"""

from .arrays import (
    difference,
    moving_average,
    mean_across_series,
    subtract,
    normalize,
    linear_regression,
)
from .wells import (
    normalize_well_id,
    is_duplicate_well,
    get_primary_well_id,
    get_adjacent_well_id,
    mean_duplicate_from_adjacent_wells,
)
from .controls import averaged_control_series, global_control_extrema
from .assays import (
    FlatBackground,
    ReplicatedBackground,
    calc_catalytic_rate,
    calc_generation_rate,
    calc_fibrinolysis,
)
from .validation import AnalysisError, PlateValidationError, validate_plate
from .analysis import calculate_plate, debug_trace
from .data_io import (
    make_plate,
    plate_from_dataframe,
    trim_to_duration,
    results_to_frame,
    results_to_plate_grid,
    format_result,
)

__all__ = [
    'difference',
    'moving_average',
    'mean_across_series',
    'subtract',
    'normalize',
    'linear_regression',
    'normalize_well_id',
    'is_duplicate_well',
    'get_primary_well_id',
    'get_adjacent_well_id',
    'mean_duplicate_from_adjacent_wells',
    'averaged_control_series',
    'global_control_extrema',
    'FlatBackground',
    'ReplicatedBackground',
    'calc_catalytic_rate',
    'calc_generation_rate',
    'calc_fibrinolysis',
    'AnalysisError',
    'PlateValidationError',
    'validate_plate',
    'calculate_plate',
    'debug_trace',
    'make_plate',
    'plate_from_dataframe',
    'trim_to_duration',
    'results_to_frame',
    'results_to_plate_grid',
    'format_result',
]
