# operators/_complex.py
"""Full-order operators with independently present real and imaginary
parts.
"""

__all__ = [
    "ComplexOperator",
]

import numbers
import numpy as np
import scipy.sparse as sparse
import scipy.sparse.linalg as spla

from .. import errors, utils


def _shape(part):
    return tuple(part.shape) if part is not None else None


class ComplexOperator:
    r"""Full-order linear operator :math:`\A = \A_r + i\A_i`.

    Either part may be absent, which is recorded in the capability flags
    :attr:`has_real` and :attr:`has_imag` so that consumers apply only the
    parts that exist. An operator with neither part is the zero operator.

    Parameters
    ----------
    real : (n, n) ndarray, scipy.sparse matrix, LinearOperator, or None
        Real part :math:`\A_r`.
    imag : (n, n) ndarray, scipy.sparse matrix, LinearOperator, or None
        Imaginary part :math:`\A_i`.
    """

    def __init__(self, real=None, imag=None):
        """Store and validate the parts."""
        for label, part in (("real", real), ("imaginary", imag)):
            if part is None:
                continue
            if len(part.shape) != 2 or part.shape[0] != part.shape[1]:
                raise errors.DimensionalityError(
                    f"{label} part of operator must be square "
                    f"(got shape {part.shape})"
                )
            if np.iscomplexobj(np.empty(0, dtype=part.dtype)):
                raise TypeError(f"{label} part of operator must be real")
        if real is not None and imag is not None:
            if _shape(real) != _shape(imag):
                raise errors.DimensionalityError(
                    "real and imaginary parts of operator not aligned "
                    f"({_shape(real)} != {_shape(imag)})"
                )
        self.__real = real
        self.__imag = imag

    @classmethod
    def from_complex(cls, matrix):
        """Split a complex ndarray or sparse matrix into its parts.

        Parts that are identically zero are dropped.
        """
        if sparse.issparse(matrix):
            matrix = sparse.csr_matrix(matrix)
            real, imag = matrix.real, matrix.imag
            real.eliminate_zeros()
            imag.eliminate_zeros()
            return cls(real if real.nnz else None, imag if imag.nnz else None)
        matrix = np.asarray(matrix)
        real, imag = matrix.real, matrix.imag
        return cls(
            real if np.any(real) else None,
            imag if np.iscomplexobj(matrix) and np.any(imag) else None,
        )

    # Properties --------------------------------------------------------------
    @property
    def real(self):
        r"""Real part :math:`\A_r` (or ``None``)."""
        return self.__real

    @property
    def imag(self):
        r"""Imaginary part :math:`\A_i` (or ``None``)."""
        return self.__imag

    @property
    def has_real(self) -> bool:
        """``True`` if the operator has a real part."""
        return self.__real is not None

    @property
    def has_imag(self) -> bool:
        """``True`` if the operator has an imaginary part."""
        return self.__imag is not None

    @property
    def is_zero(self) -> bool:
        """``True`` if the operator has neither part."""
        return not (self.has_real or self.has_imag)

    @property
    def shape(self):
        """Dimensions of the operator (``None`` for the zero operator)."""
        if self.has_real:
            return _shape(self.real)
        return _shape(self.imag)

    def __str__(self):
        parts = [
            label
            for label, flag in (("real", self.has_real),
                                ("imag", self.has_imag))
            if flag
        ]
        body = " + ".join(parts) if parts else "zero"
        return f"{self.__class__.__name__} ({body}), shape={self.shape}"

    def __repr__(self):
        return utils.str2repr(self)

    # Application -------------------------------------------------------------
    def apply_real(self, v, out=None):
        """Apply the operator to a real vector.

        Exactly one product is computed per present part; an absent part
        contributes zero.

        Parameters
        ----------
        v : (n,) ndarray
            Real vector.
        out : (n,) complex ndarray or None
            Storage for the result.

        Returns
        -------
        (n,) complex ndarray
        """
        if out is None:
            out = np.empty(v.shape[0], dtype=complex)
        out.real = self.real @ v if self.has_real else 0.0
        out.imag = self.imag @ v if self.has_imag else 0.0
        return out

    def matvec(self, x):
        """Apply the operator to a real or complex vector."""
        if not np.iscomplexobj(x):
            return self.apply_real(x)
        return self.apply_real(x.real) + 1j * self.apply_real(x.imag)

    def __matmul__(self, x):
        return self.matvec(x)

    # Construction ------------------------------------------------------------
    @staticmethod
    def combine(terms):
        r"""Linear combination :math:`\sum_k c_k\A_k` of complex operators.

        With :math:`c_k = a_k + ib_k` the parts of the sum are
        :math:`\sum_k (a_k\A_{r,k} - b_k\A_{i,k})` and
        :math:`\sum_k (a_k\A_{i,k} + b_k\A_{r,k})`.

        Parameters
        ----------
        terms : list of (coefficient, ComplexOperator or None)
            Operators that are ``None`` or zero, and zero coefficients,
            are skipped.

        Returns
        -------
        ComplexOperator
        """
        real, imag = [], []
        shapes = set()
        for coeff, op in terms:
            if op is None or op.is_zero or coeff == 0:
                continue
            if not isinstance(coeff, numbers.Number):
                raise TypeError("coefficients must be scalars")
            shapes.add(op.shape)
            a, b = complex(coeff).real, complex(coeff).imag
            if op.has_real:
                if a != 0:
                    real.append(a * op.real)
                if b != 0:
                    imag.append(b * op.real)
            if op.has_imag:
                if a != 0:
                    imag.append(a * op.imag)
                if b != 0:
                    real.append(-b * op.imag)
        if len(shapes) > 1:
            raise errors.DimensionalityError(
                f"operators in combination not aligned ({shapes})"
            )

        def _sum(parts):
            if not parts:
                return None
            total = parts[0]
            for part in parts[1:]:
                total = total + part
            return total

        return ComplexOperator(_sum(real), _sum(imag))

    def to_sparse(self, format="csc"):
        """Single complex sparse matrix :math:`\\A_r + i\\A_i`, e.g., for a
        direct factorization. Not available for ``LinearOperator`` parts.
        """
        if self.is_zero:
            raise ValueError("cannot convert the zero operator")
        for part in (self.real, self.imag):
            if isinstance(part, spla.LinearOperator):
                raise TypeError(
                    "LinearOperator parts cannot be converted to a matrix"
                )
        n = self.shape[0]
        total = sparse.csc_matrix((n, n), dtype=complex)
        if self.has_real:
            total = total + sparse.csc_matrix(self.real)
        if self.has_imag:
            total = total + 1j * sparse.csc_matrix(self.imag)
        return total.asformat(format)
