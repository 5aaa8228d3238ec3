# operators/conftest.py
"""Fixtures for testing the operators submodule."""

import pytest
import numpy as np
import scipy.sparse as sparse


def _symmetric(n):
    A = np.random.standard_normal((n, n))
    return A + A.T


@pytest.fixture
def symmetric_matrices():
    n = 30
    return _symmetric(n), sparse.csr_matrix(_symmetric(n))
