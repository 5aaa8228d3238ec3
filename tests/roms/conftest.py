# roms/conftest.py
"""Fixtures for testing the roms submodule."""

import pytest
import numpy as np
import scipy.sparse as sparse

import adaptprom


@pytest.fixture
def damped_fom():
    """Damped diagonal problem with resonances at 1, 2, ..., 6."""
    n = 30
    d = np.repeat(np.arange(1, 7, dtype=float) ** 2, n // 6)
    K = sparse.diags(d, format="csr")
    M = sparse.identity(n, format="csr")
    C = 0.05 * M
    b1 = np.random.default_rng(4).standard_normal(n)
    return adaptprom.fom.SparseSpaceOperator(K, M, C=C, b1=b1)


@pytest.fixture
def small_fom():
    """Undamped 4 x 4 diagonal problem."""
    n = 4
    K = np.diag(np.arange(1, n + 1, dtype=float))
    M = np.eye(n)
    return adaptprom.fom.SparseSpaceOperator(K, M, b1=np.ones(n))
