# greedy/conftest.py
"""Fixtures for testing the greedy submodule."""

import pytest
import numpy as np
import scipy.sparse as sparse

import adaptprom


@pytest.fixture
def resonant_fom():
    """Damped diagonal problem whose solutions span six directions."""
    n = 30
    d = np.repeat(np.arange(1, 7, dtype=float) ** 2, n // 6)
    K = sparse.diags(d, format="csr")
    M = sparse.identity(n, format="csr")
    b1 = np.random.default_rng(8).standard_normal(n)
    return adaptprom.fom.SparseSpaceOperator(K, M, C=0.05 * M, b1=b1)
