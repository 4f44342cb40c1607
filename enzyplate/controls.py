"""
Control well aggregation.

Controls are treated like samples: a control pipetted in duplicate is averaged with its
replicate before use. The averaged 0% controls supply the background series, and the
pooled extremes of the 0% and 100% controls supply the Alexa normalization anchors.
"""

import numpy as np

from .wells import normalize_well_id, plate_index, well_sort_key, mean_duplicate_from_adjacent_wells

DEFAULT_ALEXA0 = 0.0
DEFAULT_ALEXA100 = 100.0


def averaged_control_series(control_well_ids, plate):
    """
    Prepare one series per control well.

    Primary wells with a replicate are averaged with it; all other control wells
    (singletons, duplicate-position wells) contribute their raw series. Control wells
    that are not on the plate are ignored.

    Parameters
    ----------
    control_well_ids : iterable of str
        Selected control wells
    plate : list of dict
        Plate records ({'well_id', 'values'})

    Returns
    -------
    list of np.ndarray
        One series per control well, in plate order (A1, A2, ..., H12). Series are not
        averaged across control wells.
    """
    index = plate_index(plate)
    well_ids = {normalize_well_id(w) for w in control_well_ids} - {None}

    series = []
    for well_id in sorted(well_ids, key=well_sort_key):
        if well_id not in index:
            continue

        averaged = mean_duplicate_from_adjacent_wells(well_id, index)
        series.append(averaged if averaged is not None else index[well_id])

    return series


def global_control_extrema(control0_well_ids, control100_well_ids, plate):
    """
    Alexa normalization anchors from the control wells.

    Returns
    -------
    tuple of float
        ``(alexa0, alexa100)``: the minimum over every value of the averaged 0% control
        series and the maximum over every value of the averaged 100% control series.
        Falls back to ``(0.0, 100.0)`` if either control set yields no data.
    """
    control0 = averaged_control_series(control0_well_ids, plate)
    control100 = averaged_control_series(control100_well_ids, plate)
    if not control0 or not control100:
        return DEFAULT_ALEXA0, DEFAULT_ALEXA100

    pool0 = np.concatenate(control0)
    pool100 = np.concatenate(control100)
    if len(pool0) == 0 or len(pool100) == 0:
        return DEFAULT_ALEXA0, DEFAULT_ALEXA100

    return float(np.min(pool0)), float(np.max(pool100))
