# fom/_sparse.py
"""Full-order model defined by explicit (sparse) matrices."""

__all__ = [
    "SparseSpaceOperator",
]

import numpy as np
import scipy.sparse.linalg as spla

from .. import errors, operators
from ._base import SpaceOperatorTemplate


def _as_operator(matrix):
    """Wrap a real or complex matrix as a ComplexOperator."""
    if matrix is None or isinstance(matrix, operators.ComplexOperator):
        return matrix
    if np.iscomplexobj(np.empty(0, dtype=matrix.dtype)):
        return operators.ComplexOperator.from_complex(matrix)
    return operators.ComplexOperator(real=matrix)


class SparseSpaceOperator(SpaceOperatorTemplate):
    r"""Full-order model with explicitly stored matrices

    .. math::
       (\K + i\omega\C - \omega^2\M + \A_2(\omega))\u = i\omega\b_1
       + \b_2(\omega),

    solved with a sparse LU factorization (:func:`scipy.sparse.linalg.splu`).

    Parameters
    ----------
    K : (n, n) ndarray, sparse matrix, or ComplexOperator
        Stiffness matrix.
    M : (n, n) ndarray, sparse matrix, or ComplexOperator
        Mass matrix.
    C : (n, n) ndarray, sparse matrix, ComplexOperator, or None
        Damping matrix.
    b1 : (n,) ndarray or None
        Excitation multiplying :math:`i\omega`.
    extra_matrix : callable or None
        Function ``omega -> A2(omega)`` returning a matrix or ``None``.
    excitation2 : callable or None
        Function ``omega -> b2(omega)`` returning a vector or ``None``.
    comm : CommunicatorTemplate, mpi4py.MPI.Comm, or None
        Communicator shared by all workers. Each worker stores and
        factors its own diagonal block, so with more than one worker the
        matrices must not couple the workers.
    """

    def __init__(
        self,
        K,
        M,
        C=None,
        b1=None,
        extra_matrix=None,
        excitation2=None,
        comm=None,
    ):
        """Store the matrices."""
        SpaceOperatorTemplate.__init__(self, comm=comm)
        self.__K = _as_operator(K)
        self.__M = _as_operator(M)
        self.__C = _as_operator(C)
        if self.__K is None or self.__M is None:
            raise ValueError("stiffness and mass matrices are required")
        n = self.__K.shape[0]
        for label, op in (("M", self.__M), ("C", self.__C)):
            if op is not None and op.shape != (n, n):
                raise errors.DimensionalityError(
                    f"{label}.shape = {op.shape} != {(n, n)} = K.shape"
                )
        if b1 is not None:
            b1 = np.asarray(b1, dtype=complex)
            if b1.shape != (n,):
                raise errors.DimensionalityError(
                    f"b1.shape = {b1.shape} != {(n,)}"
                )
        self.__b1 = b1
        self.__extra = extra_matrix
        self.__excitation2 = excitation2
        self.num_solves = 0
        self.num_extra_calls = 0
        self.num_excitation2_calls = 0

    @property
    def size(self) -> int:
        return self.__K.shape[0]

    def stiffness_matrix(self):
        return self.__K

    def damping_matrix(self):
        return self.__C

    def mass_matrix(self):
        return self.__M

    def excitation_vector1(self):
        return self.__b1

    def extra_system_matrix(self, omega: float):
        self.num_extra_calls += 1
        if self.__extra is None:
            return None
        return _as_operator(self.__extra(omega))

    def excitation_vector2(self, omega: float):
        self.num_excitation2_calls += 1
        if self.__excitation2 is None:
            return None
        b2 = self.__excitation2(omega)
        return None if b2 is None else np.asarray(b2, dtype=complex)

    def solve(self, A, b):
        """Solve with a sparse LU factorization of ``A``."""
        self.num_solves += 1
        lu = spla.splu(A.to_sparse("csc"))
        return lu.solve(np.asarray(b, dtype=complex))
