"""
Pytest configuration for enzyplate tests.
"""
import sys
import os
import pytest

# Add the repository root to the Python path so tests can import enzyplate
root_path = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, root_path)


# ==============================================================================
# Time Course Fixtures
# ==============================================================================

@pytest.fixture
def sample_series():
    """Absorbance of a tPA sample well, one reading per minute."""
    return [0.1, 0.105, 0.112, 0.120, 0.128, 0.137, 0.146, 0.156, 0.167, 0.178]


@pytest.fixture
def replicate_series():
    """Technical replicate of `sample_series` from the adjacent column."""
    return [0.1, 0.106, 0.113, 0.121, 0.130, 0.139, 0.149, 0.160, 0.171, 0.183]


@pytest.fixture
def flat_background():
    """Negative control that never changes."""
    return [0.1] * 10


@pytest.fixture
def lysis_curve():
    """Clot lysis signal rising from the 0% to the 100% control level."""
    return [0.1, 0.2, 0.4, 0.7, 0.9, 1.0, 1.1]


# ==============================================================================
# Plate Fixtures
# ==============================================================================

@pytest.fixture
def paired_plate(sample_series, replicate_series, flat_background):
    """Sample in A1/A2 as replicates, negative control in H1/H2."""
    return [
        {'well_id': 'A1', 'values': sample_series},
        {'well_id': 'A2', 'values': replicate_series},
        {'well_id': 'H1', 'values': flat_background},
        {'well_id': 'H2', 'values': flat_background},
    ]


@pytest.fixture
def hoff_plate(lysis_curve):
    """HoFF layout: sample pair A1/A2, 0% control H1, 100% control G1."""
    return [
        {'well_id': 'A1', 'values': lysis_curve},
        {'well_id': 'A2', 'values': lysis_curve},
        {'well_id': 'G1', 'values': [0.3, 0.6, 0.9, 1.1, 1.1, 1.1, 1.1]},
        {'well_id': 'H1', 'values': [0.1] * 7},
    ]
