# roms/_reduced.py
"""Assembly, solution, and expansion of small dense reduced systems."""

__all__ = [
    "assemble_reduced_system",
    "solve_reduced_system",
    "expand",
    "REDUCED_SOLVERS",
]

import numpy as np
import scipy.linalg as la

from .. import errors


REDUCED_SOLVERS = ("lu", "ldlt")


def assemble_reduced_system(omega, Kr, Mr, Cr=None, Ar2=None):
    r"""Assemble :math:`\A_r(\omega) = \K_r + i\omega\C_r - \omega^2\M_r
    + \A_{2,r}`.

    Parameters
    ----------
    omega : float
        Parameter value.
    Kr, Mr : (r, r) ndarray
        Reduced stiffness and mass matrices.
    Cr, Ar2 : (r, r) ndarray or None
        Reduced damping and parameter-dependent matrices (omitted if
        ``None``).

    Returns
    -------
    Ar : (r, r) complex ndarray
    """
    Kr = np.asarray(Kr)
    if np.shape(Mr) != Kr.shape:
        raise errors.DimensionalityError(
            f"Mr.shape = {np.shape(Mr)} != {Kr.shape} = Kr.shape"
        )
    Ar = Kr.astype(complex) - omega**2 * np.asarray(Mr)
    if Cr is not None:
        Ar += 1j * omega * np.asarray(Cr)
    if Ar2 is not None:
        Ar += Ar2
    return Ar


def solve_reduced_system(A, b, solver: str = "lu"):
    """Solve the dense reduced system ``A y = b``.

    Parameters
    ----------
    A : (r, r) ndarray
        Reduced system matrix (complex symmetric).
    b : (r,) ndarray
        Reduced right-hand side.
    solver : str
        * ``"lu"``: LU factorization with partial pivoting.
        * ``"ldlt"``: symmetric indefinite factorization, which uses
          ``A = A^T`` (no conjugation).

    Returns
    -------
    y : (r,) complex ndarray
    """
    if solver not in REDUCED_SOLVERS:
        raise ValueError(
            f"invalid reduced solver '{solver}' "
            f"(options: {', '.join(REDUCED_SOLVERS)})"
        )
    A = np.asarray(A, dtype=complex)
    b = np.asarray(b, dtype=complex)
    if A.ndim != 2 or A.shape[0] != A.shape[1] or b.shape != A.shape[:1]:
        raise errors.DimensionalityError(
            f"reduced system not aligned (A.shape = {A.shape}, "
            f"b.shape = {b.shape})"
        )
    if solver == "ldlt":
        return la.solve(A, b, assume_a="sym")
    return la.lu_solve(la.lu_factor(A), b)


def expand(V, y):
    r"""Reconstruct :math:`\u = \sum_j y_j\v_j` from reduced coefficients.

    The real basis is applied to the real and imaginary parts of ``y``
    separately so that no complex copy of ``V`` is formed.

    Parameters
    ----------
    V : (n, r) ndarray
        Local rows of the real basis.
    y : (r,) ndarray
        Reduced coefficients.

    Returns
    -------
    u : (n,) complex ndarray
    """
    y = np.asarray(y)
    if V.shape[1] != y.shape[0]:
        raise errors.DimensionalityError(
            f"basis has {V.shape[1]} columns, coefficients have "
            f"{y.shape[0]} entries"
        )
    return V @ y.real + 1j * (V @ y.imag)
