# basis/conftest.py
"""Fixtures for testing the basis submodule."""

import pytest
import numpy as np


@pytest.fixture
def set_up_basis_data():
    n = 200
    k = 12
    return np.random.random((n, k)) - .5


@pytest.fixture
def set_up_complex_data():
    n = 150
    k = 8
    return (np.random.random((n, k)) - .5) \
        + 1j * (np.random.random((n, k)) - .5)
