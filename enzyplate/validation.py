"""
Structural checks on plate data and the exceptions raised for whole-plate failures.
"""

import math

from .wells import normalize_well_id


class AnalysisError(ValueError):
    """A plate calculation that cannot start (bad selection, missing controls, bad data)."""


class PlateValidationError(AnalysisError):
    """Raised when `validate_plate` reports problems; `errors` holds every message."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


def _has_non_finite(values):
    for value in values:
        try:
            if not math.isfinite(float(value)):
                return True
        except (TypeError, ValueError):
            return True
    return False


def validate_plate(plate):
    """
    Check a plate before analysis.

    All checks run, so one report lists every problem:
    - the plate holds at least one well
    - every well ID is a valid 96-well ID ('A1'-'H12', 'A01' spelling allowed)
    - no well appears twice ('A1' and 'A01' are the same well)
    - every well has at least one time point
    - every value is a finite number

    Parameters
    ----------
    plate : list of dict
        Plate records ({'well_id', 'values'})

    Returns
    -------
    list of str
        Human-readable error messages; empty if the plate is valid.

    Examples
    --------
    >>> validate_plate([])
    ['No data provided']
    >>> validate_plate([{'well_id': 'X1', 'values': [0.1, 0.2]}])
    ['Invalid well IDs: X1']
    """
    errors = []

    if len(plate) == 0:
        errors.append('No data provided')

    invalid = [str(r['well_id']) for r in plate if normalize_well_id(r['well_id']) is None]
    if invalid:
        errors.append(f"Invalid well IDs: {', '.join(invalid)}")

    seen = set()
    duplicates = []
    for record in plate:
        well_id = normalize_well_id(record['well_id'])
        if well_id is None:
            continue
        if well_id in seen and well_id not in duplicates:
            duplicates.append(well_id)
        seen.add(well_id)
    if duplicates:
        errors.append(f"Duplicate well IDs: {', '.join(duplicates)}")

    empty = [str(r['well_id']) for r in plate if len(r['values']) == 0]
    if empty:
        errors.append(f"No time points in wells: {', '.join(empty)}")

    non_numeric = [str(r['well_id']) for r in plate if _has_non_finite(r['values'])]
    if non_numeric:
        errors.append(f"Non-numeric data found in wells: {', '.join(non_numeric)}")

    return errors
