# basis/_incremental.py
"""Orthonormal basis grown one vector at a time."""

__all__ = [
    "IncrementalBasis",
    "orthonormality_error",
]

import numpy as np
import scipy.linalg as la
import matplotlib.pyplot as plt

from .. import errors, parallel, utils
from ._gram_schmidt import GS_METHODS, orthogonalize


requires_vectors = utils.requires2(
    "dim",
    "basis is empty, call append()",
)


class IncrementalBasis:
    r"""Ordered orthonormal basis :math:`\V = [~\v_1~~\cdots~~\v_k~]` with
    fixed storage capacity, extended one vector at a time.

    Each new candidate is orthogonalized against the current basis vectors
    with a Gram-Schmidt variant and normalized. Candidates that are
    (numerically) linearly dependent on the current basis are rejected.

    The storage for ``capacity`` vectors is allocated once. In distributed
    runs each worker stores only its local rows of the basis.

    Parameters
    ----------
    n : int
        Local length of the basis vectors.
    capacity : int
        Maximum number of basis vectors.
    dtype : type
        Entry type of the basis, ``float`` (default) or ``complex``.
    method : str
        Gram-Schmidt variant: ``"mgs"``, ``"cgs"``, or ``"cgs2"`` (default).
    comm : CommunicatorTemplate, mpi4py.MPI.Comm, or None
        Communicator for global inner products. ``None`` means serial.
    conjugate : bool
        Orthonormality with respect to the Hermitian inner product
        (``True``, default) or the transpose bilinear form (``False``).
        Only relevant for complex bases.
    dependence_tol : float
        A candidate is linearly dependent if the norm left after
        orthogonalization is at most ``dependence_tol`` times its original
        norm.
    """

    def __init__(
        self,
        n: int,
        capacity: int,
        dtype=float,
        method: str = "cgs2",
        comm=None,
        conjugate: bool = True,
        dependence_tol: float = 1e-12,
    ):
        """Allocate storage and set options."""
        if capacity < 1:
            raise ValueError("basis storage must have > 0 columns")
        if method not in GS_METHODS:
            raise ValueError(
                f"invalid orthogonalization method '{method}' "
                f"(options: {', '.join(GS_METHODS)})"
            )
        if dependence_tol < 0:
            raise ValueError("dependence_tol must be nonnegative")

        self.__storage = np.zeros((int(n), int(capacity)), dtype=dtype,
                                  order="F")
        self.__dim = 0
        self.__method = method
        self.__comm = parallel.as_communicator(comm)
        self.__conjugate = bool(conjugate)
        self.__tol = float(dependence_tol)

    # Properties --------------------------------------------------------------
    @property
    def n(self) -> int:
        """Local length of the basis vectors."""
        return self.__storage.shape[0]

    @property
    def capacity(self) -> int:
        """Maximum number of basis vectors."""
        return self.__storage.shape[1]

    @property
    def dim(self) -> int:
        """Current number of basis vectors."""
        return self.__dim

    @property
    def dtype(self):
        """Entry type of the basis vectors."""
        return self.__storage.dtype

    @property
    def method(self) -> str:
        """Gram-Schmidt variant."""
        return self.__method

    @property
    def comm(self):
        """Communicator for global inner products."""
        return self.__comm

    @property
    def conjugate(self) -> bool:
        """Whether the Hermitian inner product is used."""
        return self.__conjugate

    @property
    def dependence_tol(self) -> float:
        """Relative tolerance for detecting linearly dependent candidates."""
        return self.__tol

    @property
    def entries(self) -> np.ndarray:
        r"""Basis matrix :math:`\V` (local rows), a read-only view of the
        first :attr:`dim` columns of the storage.
        """
        view = self.__storage[:, : self.__dim]
        view.flags.writeable = False
        return view

    def __len__(self) -> int:
        return self.__dim

    def __getitem__(self, key):
        """self[:] --> self.entries."""
        return self.entries[key]

    def __str__(self):
        """String representation: class, dimensions, and method."""
        out = [self.__class__.__name__]
        out.append(f"Local vector length n = {self.n:d}")
        out.append(f"Basis dimension     k = {self.dim:d} "
                   f"(capacity {self.capacity:d})")
        out.append(f"Orthogonalization: {self.method.upper()}")
        return "\n  ".join(out)

    def __repr__(self):
        """Unique ID + string representation."""
        return utils.str2repr(self)

    # Main routine ------------------------------------------------------------
    def _vector_norm(self, w):
        """Norm induced by the inner product of the basis. For the
        transpose bilinear form this is the principal square root of
        :math:`\\w\\trp\\w`, which may be complex.
        """
        if self.conjugate or not np.iscomplexobj(w):
            return parallel.norm(w, self.comm)
        return np.sqrt(complex(parallel.dot(w, w, self.comm,
                                            conjugate=False)))

    def append(self, vector, allow_dependent: bool = False):
        """Orthogonalize a candidate against the basis and append it.

        Parameters
        ----------
        vector : (n,) ndarray
            Local slice of the candidate. It is copied, never modified.
        allow_dependent : bool
            If ``False`` (default), a linearly dependent candidate is
            rejected and the basis is unchanged. If ``True``, it is appended
            anyway: normalized if anything is left after orthogonalization,
            otherwise stored as a zero column. This keeps one column per
            candidate, as needed for triangular factors.

        Returns
        -------
        accepted : bool
            ``True`` if the candidate was appended.
        coeffs : (k + 1,) ndarray
            Projection coefficients against the (extended) basis, where
            `k` is the dimension before the call; the last entry is the norm
            of the orthogonalized candidate. Together they form a new
            column of a QR-style triangular factor.
        """
        vector = np.asarray(vector)
        if vector.shape != (self.n,):
            raise errors.DimensionalityError(
                f"expected vector of shape ({self.n},), got {vector.shape}"
            )
        if np.iscomplexobj(vector) and not np.iscomplexobj(self.__storage):
            raise TypeError("cannot append a complex vector to a real basis")
        if self.__dim >= self.capacity:
            raise errors.CapacityError(
                "unable to increase basis storage size, "
                "increase maximum number of vectors"
            )

        k = self.__dim
        coeffs = np.zeros(k + 1, dtype=self.dtype)
        norm0 = parallel.norm(vector, self.comm)
        w = self.__storage[:, k]
        w[:] = vector
        coeffs[:k] = orthogonalize(
            self.__storage,
            w,
            k,
            self.comm,
            method=self.method,
            conjugate=self.conjugate,
        )
        coeffs[k] = normk = self._vector_norm(w)

        if abs(normk) <= self.dependence_tol * norm0 or normk == 0:
            if not allow_dependent:
                w[:] = 0
                return False, coeffs
            if normk != 0:
                w /= normk
            else:
                w[:] = 0
            self.__dim += 1
            return True, coeffs

        w /= normk
        self.__dim += 1
        return True, coeffs

    def extend(self, vectors, allow_dependent: bool = False):
        """Append the columns of ``vectors`` one at a time.

        Returns
        -------
        accepted : (k,) ndarray of bools
            Which columns were appended.
        """
        return np.array(
            [self.append(v, allow_dependent)[0]
             for v in np.transpose(vectors)],
            dtype=bool,
        )

    # Dimension reduction -----------------------------------------------------
    @requires_vectors
    def compress(self, state: np.ndarray) -> np.ndarray:
        r"""Global coefficients :math:`\V\herm\q` of a partitioned state."""
        return parallel.dots(self.entries, state, self.comm,
                             conjugate=self.conjugate)

    @requires_vectors
    def decompress(self, coeffs: np.ndarray) -> np.ndarray:
        r"""Local slice of :math:`\V\qhat`."""
        V = self.entries
        if np.iscomplexobj(coeffs) and not np.iscomplexobj(V):
            return V @ coeffs.real + 1j * (V @ coeffs.imag)
        return V @ coeffs

    # Persistence -------------------------------------------------------------
    def _set_entries(self, entries):
        """Overwrite the leading columns of the storage (used by loaders)."""
        entries = np.asarray(entries)
        if entries.ndim != 2 or entries.shape[0] != self.n:
            raise errors.DimensionalityError(
                f"expected ({self.n}, k) entries, got {entries.shape}"
            )
        if entries.shape[1] > self.capacity:
            raise errors.CapacityError("entries exceed basis capacity")
        self.__storage[:, :] = 0
        self.__storage[:, : entries.shape[1]] = entries
        self.__dim = entries.shape[1]

    # Visualization -----------------------------------------------------------
    @requires_vectors
    def plot1D(self, x=None, num_vectors=None, ax=None, **kwargs):
        """Plot the (real parts of the) basis vectors over a one-dimensional
        domain.

        Parameters
        ----------
        x : (n,) ndarray or None
            Domain over which to plot the vectors. Defaults to [0, 1].
        num_vectors : int or None
            Number of basis vectors to plot (default: all).
        ax : plt.Axes or None
            Matplotlib Axes to plot on. If ``None``, create a new figure.
        kwargs : dict
            Other keyword arguments to pass to ``plt.plot()``.

        Returns
        -------
        ax : plt.Axes
        """
        if x is None:
            x = np.linspace(0, 1, self.n)
        if num_vectors is None:
            num_vectors = self.dim
        num_vectors = min(num_vectors, self.dim)
        if ax is None:
            ax = plt.figure().add_subplot(111)
        for j in range(num_vectors):
            ax.plot(x, self.entries[:, j].real, **kwargs)
        ax.set_xlim(x[0], x[-1])
        ax.set_xlabel("degree of freedom")
        ax.set_ylabel("basis vectors")
        return ax


def orthonormality_error(basis: IncrementalBasis) -> float:
    r"""Compute :math:`\|\V\herm\V - \I\|_2` (or :math:`\|\V\trp\V - \I\|_2`
    for a basis using the transpose bilinear form) with global reductions.
    """
    V = basis.entries
    k = V.shape[1]
    if k == 0:
        return 0.0
    gram = np.column_stack(
        [parallel.dots(V, V[:, j], basis.comm, conjugate=basis.conjugate)
         for j in range(k)]
    )
    return float(la.norm(gram - np.eye(k), ord=2))
