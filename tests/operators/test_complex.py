# operators/test_complex.py
"""Tests for operators._complex."""

import pytest
import numpy as np
import scipy.sparse as sparse
import scipy.sparse.linalg as spla

import adaptprom


class TestComplexOperator:
    """Test operators._complex.ComplexOperator."""

    Operator = adaptprom.operators.ComplexOperator

    def test_init(self, symmetric_matrices):
        """Test __init__() and capability flags."""
        Ar, Ai = symmetric_matrices
        n = Ar.shape[0]

        op = self.Operator(Ar, Ai)
        assert op.has_real and op.has_imag
        assert not op.is_zero
        assert op.shape == (n, n)
        assert str(op) == f"ComplexOperator (real + imag), shape={(n, n)}"

        op = self.Operator(imag=Ai)
        assert not op.has_real
        assert op.has_imag
        assert op.shape == (n, n)

        op = self.Operator()
        assert op.is_zero
        assert op.shape is None
        assert str(op) == "ComplexOperator (zero), shape=None"

        with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
            self.Operator(np.ones((n, n - 1)))
        assert ex.value.args[0] == (
            f"real part of operator must be square (got shape {(n, n - 1)})"
        )

        with pytest.raises(TypeError) as ex:
            self.Operator(imag=1j * Ar)
        assert ex.value.args[0] == "imaginary part of operator must be real"

        with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
            self.Operator(Ar, np.eye(n + 1))
        assert ex.value.args[0].startswith(
            "real and imaginary parts of operator not aligned"
        )

    def test_from_complex(self, symmetric_matrices):
        """Test from_complex()."""
        Ar, Ai = symmetric_matrices
        A = Ar + 1j * Ai.toarray()
        op = self.Operator.from_complex(A)
        assert np.allclose(op.real, Ar)
        assert np.allclose(op.imag, Ai.toarray())

        op = self.Operator.from_complex(Ar.astype(complex))
        assert op.has_real and not op.has_imag

        op = self.Operator.from_complex(1j * Ai)
        assert not op.has_real and op.has_imag
        assert sparse.issparse(op.imag)

    def test_apply(self, symmetric_matrices):
        """Test apply_real(), matvec(), and __matmul__()."""
        Ar, Ai = symmetric_matrices
        n = Ar.shape[0]
        A = Ar + 1j * Ai.toarray()
        v = np.random.standard_normal(n)
        x = v + 1j * np.random.standard_normal(n)

        op = self.Operator(Ar, Ai)
        out = np.empty(n, dtype=complex)
        result = op.apply_real(v, out=out)
        assert result is out
        assert np.allclose(result, A @ v)
        assert np.allclose(op.matvec(x), A @ x)
        assert np.allclose(op @ x, A @ x)

        op = self.Operator(real=Ar)
        assert np.allclose(op.apply_real(v), Ar @ v)
        assert np.all(op.apply_real(v).imag == 0)

        # Matrix-free parts.
        op = self.Operator(imag=spla.aslinearoperator(Ai))
        assert np.allclose(op.apply_real(v), 1j * (Ai @ v))

    def test_combine(self, symmetric_matrices):
        """Test combine()."""
        Ar, Ai = symmetric_matrices
        n = Ar.shape[0]
        K = self.Operator(Ar)
        C = self.Operator(Ai)
        M = self.Operator(np.eye(n))
        A2 = self.Operator(imag=Ai)

        omega = 1.7
        A = self.Operator.combine([
            (1.0, K), (1j * omega, C), (-omega**2, M), (1.0, A2),
        ])
        expected = Ar + 1j * omega * Ai - omega**2 * np.eye(n) + 1j * Ai
        assert np.allclose(A.to_sparse().toarray(), expected)

        # None, zero operators, and zero coefficients are skipped.
        A = self.Operator.combine([
            (1.0, K), (2.0, None), (3.0, self.Operator()), (0, M),
        ])
        assert not A.has_imag
        assert np.allclose(A.real, Ar)

        with pytest.raises(adaptprom.errors.DimensionalityError) as ex:
            self.Operator.combine([(1.0, K), (1.0, self.Operator(np.eye(2)))])
        assert ex.value.args[0].startswith(
            "operators in combination not aligned"
        )

    def test_to_sparse(self, symmetric_matrices):
        """Test to_sparse()."""
        Ar, Ai = symmetric_matrices
        op = self.Operator(Ar, Ai)
        S = op.to_sparse("csc")
        assert S.format == "csc"
        assert np.allclose(S.toarray(), Ar + 1j * Ai.toarray())

        with pytest.raises(ValueError) as ex:
            self.Operator().to_sparse()
        assert ex.value.args[0] == "cannot convert the zero operator"

        with pytest.raises(TypeError) as ex:
            self.Operator(spla.aslinearoperator(Ai)).to_sparse()
        assert ex.value.args[0] == \
            "LinearOperator parts cannot be converted to a matrix"
