# parallel/test_inner.py
"""Tests for parallel._inner."""

import pytest
import numpy as np

import adaptprom


def _random_complex(*shape):
    return np.random.standard_normal(shape) \
        + 1j * np.random.standard_normal(shape)


def test_local_dot(n=20):
    """Test parallel._inner.local_dot()."""
    subject = adaptprom.parallel.local_dot

    x, y = np.random.random(n), np.random.random(n)
    assert isinstance(subject(x, y), float)
    assert np.isclose(subject(x, y), x @ y)

    x, y = _random_complex(n), _random_complex(n)
    assert np.isclose(subject(x, y), np.vdot(y, x))
    assert np.isclose(subject(x, y, conjugate=False), y @ x)

    # Mixed real / complex.
    xr = np.random.random(n)
    assert np.isclose(subject(xr, y), np.vdot(y, xr))
    assert np.isclose(subject(x, xr), np.vdot(xr, x))
    assert np.isclose(subject(xr, y, conjugate=False), y @ xr)

    with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
        subject(x, y[:-1])
    assert ex.value.args[0].endswith(f"({n} != {n - 1})")


def test_partitioned_sum(n=30, split=11):
    """Local inner products over a partition add up to the global one."""
    x, y = _random_complex(n), _random_complex(n)
    parts = [slice(0, split), slice(split, n)]
    total = sum(adaptprom.parallel.local_dot(x[s], y[s]) for s in parts)
    assert np.isclose(total, np.vdot(y, x))


def test_dot(counting_comm, n=15):
    """Test parallel._inner.dot()."""
    x, y = _random_complex(n), _random_complex(n)
    result = adaptprom.parallel.dot(x, y, counting_comm)
    assert np.isclose(result, np.vdot(y, x))
    assert counting_comm.num_reductions == 1


def test_dots(counting_comm, n=15, k=4):
    """Test parallel._inner.dots()."""
    subject = adaptprom.parallel.dots

    X, y = np.random.random((n, k)), _random_complex(n)
    result = subject(X, y, counting_comm)
    assert result.shape == (k,)
    assert np.allclose(result, X.T @ y)
    assert counting_comm.num_reductions == 1

    Xc = _random_complex(n, k)
    assert np.allclose(subject(Xc, y, counting_comm), Xc.conj().T @ y)
    assert np.allclose(subject(Xc, y, counting_comm, conjugate=False),
                       Xc.T @ y)

    empty = subject(np.zeros((n, 0)), y, counting_comm)
    assert empty.shape == (0,)

    with pytest.raises(adaptprom.errors.DimensionalityError):
        subject(X, y[1:], counting_comm)


def test_norm(counting_comm, n=12):
    """Test parallel._inner.norm()."""
    x = _random_complex(n)
    assert np.isclose(adaptprom.parallel.norm(x, counting_comm),
                      np.linalg.norm(x))
    assert np.isclose(adaptprom.parallel.norm(x.real, counting_comm),
                      np.linalg.norm(x.real))
    assert counting_comm.num_reductions == 2
