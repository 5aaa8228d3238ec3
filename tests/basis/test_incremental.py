# basis/test_incremental.py
"""Tests for basis._incremental."""

import pytest
import numpy as np
import matplotlib.pyplot as plt

import adaptprom


class TestIncrementalBasis:
    """Test basis._incremental.IncrementalBasis."""

    Basis = adaptprom.basis.IncrementalBasis

    def test_init(self, n=10, capacity=4):
        """Test __init__() and properties."""
        basis = self.Basis(n, capacity)
        assert basis.n == n
        assert basis.capacity == capacity
        assert basis.dim == 0
        assert len(basis) == 0
        assert basis.method == "cgs2"
        assert basis.entries.shape == (n, 0)
        assert basis.dtype == float
        assert isinstance(basis.comm, adaptprom.parallel.SerialCommunicator)

        with pytest.raises(ValueError) as ex:
            self.Basis(n, 0)
        assert ex.value.args[0] == "basis storage must have > 0 columns"

        with pytest.raises(ValueError) as ex:
            self.Basis(n, capacity, method="gs")
        assert ex.value.args[0].startswith(
            "invalid orthogonalization method 'gs'"
        )

        with pytest.raises(ValueError) as ex:
            self.Basis(n, capacity, dependence_tol=-1)
        assert ex.value.args[0] == "dependence_tol must be nonnegative"

        # Compression requires vectors.
        for method in basis.compress, basis.decompress:
            with pytest.raises(AttributeError) as ex:
                method(np.zeros(n))
            assert ex.value.args[0] == "basis is empty, call append()"

        assert str(basis).startswith("IncrementalBasis")
        assert repr(basis).startswith("<IncrementalBasis object at ")

    @pytest.mark.parametrize("method", ["mgs", "cgs", "cgs2"])
    def test_append(self, set_up_basis_data, method):
        """Orthonormality after many appends."""
        X = set_up_basis_data
        n, k = X.shape
        basis = self.Basis(n, k, method=method)
        R = np.zeros((k, k))
        for j in range(k):
            accepted, coeffs = basis.append(X[:, j])
            assert accepted
            assert coeffs.shape == (j + 1,)
            R[: j + 1, j] = coeffs
        assert basis.dim == k
        assert adaptprom.basis.orthonormality_error(basis) < 1e-12
        # The coefficients form the triangular factor X = V R.
        assert np.allclose(basis.entries @ R, X)

        # The candidate itself is never modified.
        assert np.array_equal(X, set_up_basis_data)

        # Entries are read-only.
        with pytest.raises(ValueError):
            basis.entries[0, 0] = 1

    def test_append_dependent(self, n=20):
        """A duplicate vector is rejected and the basis is unchanged."""
        basis = self.Basis(n, 3)
        v = np.random.random(n)
        assert basis.append(v)[0]
        before = basis.entries.copy()

        accepted, coeffs = basis.append(2 * v)
        assert not accepted
        assert basis.dim == 1
        assert np.array_equal(basis.entries, before)
        assert np.isclose(coeffs[0], 2 * np.linalg.norm(v))

        # Zero vector.
        assert not basis.append(np.zeros(n))[0]
        assert basis.dim == 1

        # Allowed dependence keeps one column per candidate.
        accepted, coeffs = basis.append(v, allow_dependent=True)
        assert accepted
        assert basis.dim == 2
        assert coeffs.shape == (2,)
        assert abs(coeffs[1]) < 1e-12 * np.linalg.norm(v)

    def test_append_errors(self, n=8):
        """Test append() with bad input and full storage."""
        basis = self.Basis(n, 1)
        with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
            basis.append(np.ones(n + 1))
        assert ex.value.args[0] == \
            f"expected vector of shape ({n},), got ({n + 1},)"

        with pytest.raises(TypeError) as ex:
            basis.append(np.ones(n) * 1j)
        assert ex.value.args[0] == \
            "cannot append a complex vector to a real basis"

        basis.append(np.ones(n))
        with pytest.raises(adaptprom.errors.CapacityError) as ex:
            basis.append(np.arange(n, dtype=float))
        assert ex.value.args[0] == (
            "unable to increase basis storage size, "
            "increase maximum number of vectors"
        )

    def test_complex(self, set_up_complex_data):
        """Hermitian and transpose orthonormality for complex bases."""
        X = set_up_complex_data
        n, k = X.shape

        basis = self.Basis(n, k, dtype=complex)
        assert basis.extend(X).all()
        V = basis.entries
        assert np.allclose(V.conj().T @ V, np.eye(k))
        assert adaptprom.basis.orthonormality_error(basis) < 1e-12

        basis = self.Basis(n, k, dtype=complex, conjugate=False)
        assert basis.extend(X).all()
        V = basis.entries
        assert np.allclose(V.T @ V, np.eye(k))
        assert adaptprom.basis.orthonormality_error(basis) < 1e-10

    def test_compress(self, set_up_basis_data):
        """Test compress() and decompress()."""
        X = set_up_basis_data
        n, k = X.shape
        basis = self.Basis(n, k)
        basis.extend(X)
        q = X[:, 0] + 1j * X[:, 1]
        qhat = basis.compress(q)
        assert qhat.shape == (k,)
        assert np.allclose(basis.decompress(qhat), q)

    def test_set_entries(self, n=10, capacity=3):
        """Test _set_entries()."""
        basis = self.Basis(n, capacity)
        V = np.linalg.qr(np.random.random((n, 2)))[0]
        basis._set_entries(V)
        assert basis.dim == 2
        assert np.allclose(basis.entries, V)

        with pytest.raises(adaptprom.errors.CapacityError) as ex:
            basis._set_entries(np.zeros((n, capacity + 1)))
        assert ex.value.args[0] == "entries exceed basis capacity"

        with pytest.raises(adaptprom.errors.DimensionalityError):
            basis._set_entries(np.zeros((n + 1, 1)))

    def test_plot1D(self, set_up_basis_data):
        """Test plot1D()."""
        X = set_up_basis_data
        basis = self.Basis(X.shape[0], 3)
        basis.extend(X[:, :3])
        ax = basis.plot1D(num_vectors=2)
        assert len(ax.lines) == 2
        plt.close(ax.figure)


def test_orthonormality_error(n=10):
    """Test basis._incremental.orthonormality_error()."""
    basis = adaptprom.basis.IncrementalBasis(n, 2)
    assert adaptprom.basis.orthonormality_error(basis) == 0
    basis.append(np.ones(n))
    assert adaptprom.basis.orthonormality_error(basis) < 1e-14
