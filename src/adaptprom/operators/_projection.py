# operators/_projection.py
"""Galerkin projection of full-order operators onto a real basis."""

__all__ = [
    "Projector",
]

import numpy as np

from .. import errors, parallel, utils
from ._complex import ComplexOperator


class Projector:
    r"""Galerkin projector :math:`\A \mapsto \V\trp\A\V` onto a real,
    partitioned basis :math:`\V\in\RR^{n\times k}`.

    Reduced matrices are updated incrementally as the basis grows: when the
    basis grows from :math:`k_0` to :math:`k` columns, only the new columns
    :math:`k_0,\ldots,k-1` are computed (one full-order operator application
    per new column) and the block of new columns is finished with a single
    global reduction. Since the full-order operators are (complex)
    symmetric and :math:`\V` is real, the block of new rows and old columns
    is the transpose of the block of old rows and new columns, so it is
    copied instead of computed. Setting :math:`k_0 = 0` recomputes the whole
    matrix (parameter-dependent operators).

    The projector owns a complex work vector of local length ``n`` that
    receives the operator applications; it is allocated once here.

    Parameters
    ----------
    n : int
        Local length of the full-order vectors.
    comm : CommunicatorTemplate, mpi4py.MPI.Comm, or None
        Communicator for the global reductions.
    """

    def __init__(self, n: int, comm=None):
        """Allocate the work vector."""
        self.__work = np.zeros(int(n), dtype=complex)
        self.__comm = parallel.as_communicator(comm)

    @property
    def n(self) -> int:
        """Local length of the full-order vectors."""
        return self.__work.shape[0]

    @property
    def comm(self):
        """Communicator for the global reductions."""
        return self.__comm

    def __str__(self):
        return f"{self.__class__.__name__} (n = {self.n:d})"

    def __repr__(self):
        return utils.str2repr(self)

    def _check_basis(self, V, Xr_old, n0):
        if V.ndim != 2 or V.shape[0] != self.n:
            raise errors.DimensionalityError(
                f"basis must have {self.n} rows (got shape {V.shape})"
            )
        if np.iscomplexobj(V):
            raise TypeError("projection basis must be real")
        k = V.shape[1]
        if not 0 <= n0 < k:
            raise errors.DimensionalityError(
                "invalid dimensions in PROM projection "
                f"(n0 = {n0}, n = {k})"
            )
        if n0 > 0:
            if Xr_old is None or np.shape(Xr_old)[0] < n0:
                raise errors.DimensionalityError(
                    f"previous projection must have at least {n0} rows"
                )
        return k

    def project_matrix(self, V, A: ComplexOperator, Ar_old=None, n0=0):
        r"""Update the reduced matrix :math:`\A_r = \V\trp\A\V` for the
        basis dimension :math:`n_0 \to n`.

        Parameters
        ----------
        V : (n_local, n) ndarray
            Local rows of the real basis.
        A : ComplexOperator
            Full-order (complex symmetric) operator.
        Ar_old : (m, m) ndarray or None
            Previous reduced matrix with ``m >= n0``; its leading
            ``n0 x n0`` block is reused. Ignored if ``n0 = 0``.
        n0 : int
            Number of basis vectors already projected, ``0 <= n0 < n``.

        Returns
        -------
        Ar : (n, n) complex ndarray
            Reduced matrix, identical on every worker.
        """
        n = self._check_basis(V, Ar_old, n0)
        if A is None or A.is_zero:
            raise ValueError(
                "invalid zero ComplexOperator for PROM matrix projection"
            )
        if A.shape[1] != self.n:
            raise errors.DimensionalityError(
                f"operator shape {A.shape} not aligned with basis "
                f"({self.n} rows)"
            )

        Ar = np.zeros((n, n), dtype=complex)
        if n0 > 0:
            Ar[:n0, :n0] = Ar_old[:n0, :n0]

        # Fill the block of new columns [ | V^T A v_j ] with local inner
        # products, then sum the whole block over all workers at once.
        block = np.zeros((n, n - n0), dtype=complex)
        for j in range(n0, n):
            r = A.apply_real(V[:, j], out=self.__work)
            if A.has_real:
                block[:, j - n0].real = V.T @ r.real
            if A.has_imag:
                block[:, j - n0].imag = V.T @ r.imag
        Ar[:, n0:] = self.comm.allreduce_sum(block)

        # Fill the lower block [ v_j^T A V[:, :n0] | ] by symmetry.
        Ar[n0:, :n0] = Ar[:n0, n0:].T
        return Ar

    def project_vector(self, V, b, br_old=None, n0=0):
        r"""Update the reduced vector :math:`\b_r = \V\trp\b` for the basis
        dimension :math:`n_0 \to n`.

        Parameters
        ----------
        V : (n_local, n) ndarray
            Local rows of the real basis.
        b : (n_local,) ndarray
            Local slice of the full-order (complex) vector.
        br_old : (m,) ndarray or None
            Previous reduced vector with ``m >= n0``.
        n0 : int
            Number of basis vectors already projected, ``0 <= n0 < n``.

        Returns
        -------
        br : (n,) complex ndarray
            Reduced vector, identical on every worker.
        """
        n = self._check_basis(V, br_old, n0)
        b = np.asarray(b)
        if b.shape != (self.n,):
            raise errors.DimensionalityError(
                f"vector of shape {b.shape} not aligned with basis "
                f"({self.n} rows)"
            )
        br = np.zeros(n, dtype=complex)
        if n0 > 0:
            br[:n0] = br_old[:n0]
        Vnew = V[:, n0:n]
        local = np.zeros(n - n0, dtype=complex)
        local.real = Vnew.T @ b.real
        if np.iscomplexobj(b):
            local.imag = Vnew.T @ b.imag
        br[n0:] = self.comm.allreduce_sum(local)
        return br
