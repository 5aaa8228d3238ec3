# parallel/_inner.py
"""Global inner products and norms of partitioned vectors."""

__all__ = [
    "local_dot",
    "dot",
    "dots",
    "norm",
]

import numpy as np

from .. import errors


def _check_sizes(x, y):
    if np.shape(x)[0] != np.shape(y)[0]:
        raise errors.DimensionalityError(
            "size mismatch for vector inner product "
            f"({np.shape(x)[0]} != {np.shape(y)[0]})"
        )


def local_dot(x, y, conjugate: bool = True):
    r"""Inner product of the locally owned entries of two vectors.

    For complex vectors :math:`\x = \x_r + i\x_i` and
    :math:`\y = \y_r + i\y_i` the Hermitian form is

    .. math::
       \y\herm\x = (\x_r\cdot\y_r + \x_i\cdot\y_i)
       + i(\x_i\cdot\y_r - \x_r\cdot\y_i),

    and the transpose (non-conjugate) form is

    .. math::
       \y\trp\x = (\x_r\cdot\y_r - \x_i\cdot\y_i)
       + i(\x_i\cdot\y_r + \x_r\cdot\y_i).

    Both are evaluated from real dot products only, so real vectors never
    get promoted to complex storage.

    Parameters
    ----------
    x : (n,) ndarray
        Local slice of the first vector.
    y : (n,) ndarray
        Local slice of the second vector (the one conjugated).
    conjugate : bool
        If ``True`` (default), compute the Hermitian inner product
        :math:`\y\herm\x`. Otherwise compute :math:`\y\trp\x`.

    Returns
    -------
    float or complex
        Local partial inner product (not yet reduced).
    """
    _check_sizes(x, y)
    xcomplex, ycomplex = np.iscomplexobj(x), np.iscomplexobj(y)
    if not xcomplex and not ycomplex:
        return float(np.dot(x, y))

    xr, xi = np.real(x), (np.imag(x) if xcomplex else None)
    yr, yi = np.real(y), (np.imag(y) if ycomplex else None)
    sign = 1.0 if conjugate else -1.0

    real = np.dot(xr, yr)
    imag = 0.0
    if xi is not None:
        imag += np.dot(xi, yr)
        if yi is not None:
            real += sign * np.dot(xi, yi)
    if yi is not None:
        imag -= sign * np.dot(xr, yi)
    return complex(real, imag)


def dot(x, y, comm, conjugate: bool = True):
    """Global inner product of two partitioned vectors.

    The local partial inner product is summed over all workers with one
    reduction, so the result is identical on every worker.

    Parameters
    ----------
    x : (n,) ndarray
        Local slice of the first vector.
    y : (n,) ndarray
        Local slice of the second vector (the one conjugated).
    comm : CommunicatorTemplate
        Communicator for the global sum.
    conjugate : bool
        Hermitian (``True``, default) or transpose (``False``) form.
    """
    return comm.allreduce_sum(local_dot(x, y, conjugate=conjugate))


def dots(X, y, comm, conjugate: bool = True) -> np.ndarray:
    """Global inner products of every column of ``X`` with ``y``, finished
    by a single batched reduction.

    Parameters
    ----------
    X : (n, k) ndarray
        Local rows of a matrix of `k` partitioned vectors.
    y : (n,) ndarray
        Local slice of a partitioned vector.
    comm : CommunicatorTemplate
        Communicator for the global sum.
    conjugate : bool
        If ``True`` (default), entry `i` is ``X[:, i]^H y``; otherwise
        ``X[:, i]^T y``.

    Returns
    -------
    (k,) ndarray
        Global inner products.
    """
    _check_sizes(X, y)
    if X.shape[1] == 0:
        return np.zeros(0, dtype=np.result_type(X, y))
    if np.iscomplexobj(X):
        local = (X.conj().T if conjugate else X.T) @ y
    elif np.iscomplexobj(y):
        local = (X.T @ y.real) + 1j * (X.T @ y.imag)
    else:
        local = X.T @ y
    return comm.allreduce_sum(np.asarray(local))


def norm(x, comm) -> float:
    """Global 2-norm of a partitioned real or complex vector."""
    local = np.dot(x.real, x.real)
    if np.iscomplexobj(x):
        local += np.dot(x.imag, x.imag)
    return float(np.sqrt(comm.allreduce_sum(float(local))))
