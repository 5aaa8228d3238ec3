# basis/_gram_schmidt.py
"""Gram-Schmidt orthogonalization of one vector against a basis."""

__all__ = [
    "GS_METHODS",
    "orthogonalize_mgs",
    "orthogonalize_cgs",
    "orthogonalize",
]

import numpy as np

from .. import parallel


GS_METHODS = ("mgs", "cgs", "cgs2")


def orthogonalize_mgs(V, w, j, comm, conjugate=True):
    r"""Modified Gram-Schmidt: orthogonalize ``w`` in place against the
    leading ``j`` columns of ``V``, one column at a time.

    Each projection coefficient is computed against the already updated
    working vector, which requires one global reduction per coefficient.

    Parameters
    ----------
    V : (n, k) ndarray
        Local rows of the basis, ``k >= j``.
    w : (n,) ndarray
        Local slice of the vector to orthogonalize (modified in place).
    j : int
        Number of basis columns to orthogonalize against.
    comm : CommunicatorTemplate
        Communicator for the global reductions.
    conjugate : bool
        Use the Hermitian (``True``) or transpose (``False``) inner product.

    Returns
    -------
    coeffs : (j,) ndarray
        Projection coefficients :math:`h_i = \langle \v_i, \w \rangle`.
    """
    coeffs = np.zeros(j, dtype=np.result_type(V, w))
    for i in range(j):
        coeffs[i] = parallel.dot(w, V[:, i], comm, conjugate=conjugate)
        w -= coeffs[i] * V[:, i]
    return coeffs


def orthogonalize_cgs(V, w, j, comm, conjugate=True, refine=False):
    r"""Classical Gram-Schmidt: orthogonalize ``w`` in place against the
    leading ``j`` columns of ``V`` in a single pass.

    All ``j`` coefficients are computed against the unmodified working
    vector with one batched reduction, then their combined contribution is
    subtracted. With ``refine=True`` the pass is repeated (CGS2) and the
    corrections are added to the coefficients.

    Parameters
    ----------
    V : (n, k) ndarray
        Local rows of the basis, ``k >= j``.
    w : (n,) ndarray
        Local slice of the vector to orthogonalize (modified in place).
    j : int
        Number of basis columns to orthogonalize against.
    comm : CommunicatorTemplate
        Communicator for the global reductions.
    conjugate : bool
        Use the Hermitian (``True``) or transpose (``False``) inner product.
    refine : bool
        If ``True``, apply a second orthogonalization pass.

    Returns
    -------
    coeffs : (j,) ndarray
        Projection coefficients.
    """
    Vj = V[:, :j]
    coeffs = parallel.dots(Vj, w, comm, conjugate=conjugate)
    w -= Vj @ coeffs
    if refine:
        correction = parallel.dots(Vj, w, comm, conjugate=conjugate)
        w -= Vj @ correction
        coeffs = coeffs + correction
    return coeffs


def orthogonalize(V, w, j, comm, method="cgs2", conjugate=True):
    """Orthogonalize ``w`` in place against the leading ``j`` columns of
    ``V`` with the Gram-Schmidt variant ``method``.

    Parameters
    ----------
    method : str
        * ``"mgs"``: modified Gram-Schmidt (sequential, most stable per pass).
        * ``"cgs"``: classical Gram-Schmidt (one batched reduction).
        * ``"cgs2"``: classical Gram-Schmidt with one reorthogonalization.

    Returns
    -------
    coeffs : (j,) ndarray
        Projection coefficients.
    """
    if method == "mgs":
        return orthogonalize_mgs(V, w, j, comm, conjugate=conjugate)
    if method == "cgs":
        return orthogonalize_cgs(V, w, j, comm, conjugate=conjugate)
    if method == "cgs2":
        return orthogonalize_cgs(
            V, w, j, comm, conjugate=conjugate, refine=True
        )
    raise ValueError(
        f"invalid orthogonalization method '{method}' "
        f"(options: {', '.join(GS_METHODS)})"
    )
