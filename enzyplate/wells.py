"""
Well topology for 96-well plates.

Technical replicates are pipetted into adjacent columns of the same row. Which wells
are "primary" and which are "duplicate" is decided by position relative to the first
column of the row that actually holds data: the 1st, 3rd, 5th... populated column
positions are primary wells, and each one is paired with the well immediately to its
right. Plates do not have to start at column 1.

A plate is a list of ``{'well_id': str, 'values': sequence}`` records. Well IDs may be
written as ``"A1"`` or ``"A01"``; both resolve to the canonical ``"A1"`` form.
"""

import re

import numpy as np

from .arrays import mean_across_series

ROWS = 'ABCDEFGH'
N_COLUMNS = 12

WELL_ID_PATTERN = re.compile(r'^([A-H])0?([1-9]|1[0-2])$')


def parse_well_id(well_id):
    """Split a well ID into ``(row, column)``, e.g. ``"B07" -> ("B", 7)``. None if invalid."""
    if not isinstance(well_id, str):
        return None

    match = WELL_ID_PATTERN.match(well_id.strip())
    if match is None:
        return None

    return match.group(1), int(match.group(2))


def normalize_well_id(well_id):
    """Canonical ``"A1"`` form of a well ID, or None if it is not a valid 96-well ID."""
    parsed = parse_well_id(well_id)
    if parsed is None:
        return None

    row, col = parsed
    return f"{row}{col}"


def well_sort_key(well_id):
    """Sort key ordering wells row by row (A1, A2, ..., H12); invalid IDs sort last."""
    parsed = parse_well_id(well_id)
    if parsed is None:
        return (len(ROWS), N_COLUMNS + 1, str(well_id))

    row, col = parsed
    return (ROWS.index(row), col, '')


def plate_index(plate):
    """
    Map canonical well IDs to their series as float arrays.

    Records with invalid well IDs are left out. If a well appears more than once
    the first record wins; `validate_plate` reports such plates before analysis.
    """
    index = {}
    for record in plate:
        well_id = normalize_well_id(record['well_id'])
        if well_id is None or well_id in index:
            continue
        index[well_id] = np.asarray(record['values'], dtype=float)

    return index


def _as_index(plate):
    return plate if isinstance(plate, dict) else plate_index(plate)


def first_populated_column(row, plate):
    """Lowest column number in `row` that has data on the plate, or None."""
    index = _as_index(plate)
    for col in range(1, N_COLUMNS + 1):
        if f"{row}{col}" in index:
            return col

    return None


def relative_position(well_id, plate):
    """
    1-based position of a well counted from the first populated column in its row.

    Returns None if the well ID is invalid or its row has no data.
    """
    parsed = parse_well_id(well_id)
    if parsed is None:
        return None

    row, col = parsed
    first_col = first_populated_column(row, plate)
    if first_col is None:
        return None

    return col - first_col + 1


def is_duplicate_well(well_id, plate):
    """True if the well sits at an even relative position, i.e. it is a replicate."""
    position = relative_position(well_id, plate)
    if position is None:
        return False

    return position % 2 == 0


def get_primary_well_id(well_id, plate):
    """Primary well of a replicate pair; a primary well maps to itself."""
    position = relative_position(well_id, plate)
    if position is None:
        return None

    row, col = parse_well_id(well_id)
    if position % 2 == 0:
        return f"{row}{col - 1}"

    return f"{row}{col}"


def get_adjacent_well_id(well_id, plate):
    """
    The other well of a replicate pair.

    Primary wells pair with the next column, duplicate wells with the previous one.
    None if the partner would fall outside columns 1-12. The partner is not required
    to hold data.
    """
    position = relative_position(well_id, plate)
    if position is None:
        return None

    row, col = parse_well_id(well_id)
    partner_col = col + 1 if position % 2 == 1 else col - 1
    if partner_col < 1 or partner_col > N_COLUMNS:
        return None

    return f"{row}{partner_col}"


def mean_duplicate_from_adjacent_wells(well_id, plate):
    """
    Average a primary well with its replicate in the next column.

    Parameters
    ----------
    well_id : str
        Primary well ID (e.g. 'A1' or 'A01')
    plate : list of dict
        Plate records ({'well_id', 'values'}) or a `plate_index` mapping

    Returns
    -------
    np.ndarray or None
        Elementwise mean over the common length of both series. If only one side is
        finite at an index, that value is used; if neither is, 0. None if the well is
        a duplicate well, or its replicate is missing.
    """
    index = _as_index(plate)
    position = relative_position(well_id, index)
    if position is None or position % 2 == 0:
        return None

    adjacent_id = get_adjacent_well_id(well_id, index)
    current = index.get(normalize_well_id(well_id))
    adjacent = index.get(adjacent_id)
    if current is None or adjacent is None:
        return None

    length = min(len(current), len(adjacent))
    return mean_across_series([current[:length], adjacent[:length]])
