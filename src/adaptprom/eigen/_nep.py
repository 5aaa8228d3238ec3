# eigen/_nep.py
"""Iterative solvers for small dense nonlinear eigenvalue problems."""

__all__ = [
    "NEPResult",
    "Deflation",
    "mslp",
    "rii",
    "solve_nep",
    "NEP_METHODS",
]

import logging
import warnings
import collections
import numpy as np
import scipy.linalg as la

from .. import errors, utils
from ._selection import get_selection


NEP_METHODS = ("mslp", "rii")

_EPS = np.finfo(float).eps
_SQRT_EPS = np.sqrt(_EPS)
_SHIFT_RTOL = 1e-3
_MAX_SHIFTS = 8


NEPResult = collections.namedtuple(
    "NEPResult",
    ["eigenvalue", "eigenvector", "converged", "iterations", "residual"],
)
NEPResult.__doc__ = """Outcome of one nonlinear eigenvalue iteration.

Attributes
----------
eigenvalue : complex
    Eigenvalue estimate.
eigenvector : (n,) complex ndarray
    Unit eigenvector estimate.
converged : bool
    Whether the relative residual dropped below the tolerance.
iterations : int
    Number of outer iterations performed.
residual : float
    Final relative residual ``||T x|| / (||T||_F ||x||)``.
"""


def _random_unit(n, rng):
    """Random complex unit vector with entries in the unit square."""
    x = rng.uniform(-1, 1, n) + 1j * rng.uniform(-1, 1, n)
    return x / la.norm(x)


def _residual(T, x):
    """Relative residual of the eigenpair estimate."""
    Tnorm = la.norm(T)
    if Tnorm == 0:
        return 0.0
    return la.norm(T @ x) / (Tnorm * la.norm(x))



def _shift_step(sigma) -> float:
    """Offset used to move a shift off an eigenvalue."""
    return _SHIFT_RTOL * max(abs(sigma), 1.0)


def _factor_shift(evaluate, sigma, max_tries=_MAX_SHIFTS):
    """LU factorization of T(sigma), moving sigma until T(sigma) is
    numerically nonsingular.

    Returns
    -------
    sigma : complex
        Shift actually factored.
    lu : tuple or None
        Output of ``scipy.linalg.lu_factor``, or ``None`` if every shift
        tried gave a singular matrix.
    """
    h = _shift_step(sigma)
    for _ in range(max_tries):
        T, _ = evaluate(sigma, False)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", la.LinAlgWarning)
            lu = la.lu_factor(T)
        pivots = np.abs(np.diag(lu[0]))
        if pivots.min() > T.shape[0] * _EPS * pivots.max():
            return sigma, lu
        logging.debug(f"T({utils.complex2str(sigma)}) is singular, "
                      "shifting")
        sigma = sigma + h
    return sigma, None


def _restart_guess(sigma, eigenvalues):
    """Move ``sigma`` away from eigenvalues that were already deflated."""
    sigma = complex(sigma)
    h = _shift_step(sigma)
    while np.any(np.abs(eigenvalues - sigma) < h / 2):
        sigma = sigma + h
    return sigma


class Deflation:
    r"""Deflation of converged eigenpairs from a nonlinear eigenproblem
    :math:`\T(\lambda)\x = \0`.

    For each converged pair :math:`(\lambda_i, \x_i)` with unit
    :math:`\x_i`, the transformation

    .. math::
       \P_i(\lambda) = \I - \frac{\lambda - \lambda_i - 1}
       {\lambda - \lambda_i}\x_i\x_i\her

    removes :math:`\lambda_i` from the spectrum of
    :math:`\T(\lambda)\P_0(\lambda)\cdots\P_{k-1}(\lambda)`. Its derivative
    is :math:`\P_i'(\lambda) = -\x_i\x_i\her / (\lambda - \lambda_i)^2`.
    An eigenvector :math:`\y` of the deflated problem maps back to the
    eigenvector :math:`\x = \P(\lambda)\y` of the original one.

    Parameters
    ----------
    n : int
        Size of the eigenproblem.
    """

    def __init__(self, n: int):
        self.__n = int(n)
        self.__eigenvalues = []
        self.__eigenvectors = []

    @property
    def n(self) -> int:
        """Size of the eigenproblem."""
        return self.__n

    @property
    def eigenvalues(self) -> np.ndarray:
        """Deflated eigenvalues."""
        return np.array(self.__eigenvalues, dtype=complex)

    def __len__(self):
        return len(self.__eigenvalues)

    def __str__(self):
        out = [self.__class__.__name__]
        out.append(f"Size: {self.n:d}")
        out.append(f"Deflated eigenvalues: {len(self):d}")
        return "\n  ".join(out)

    def __repr__(self):
        return utils.str2repr(self)

    def add(self, eigenvalue, eigenvector):
        """Deflate a converged eigenpair."""
        x = np.asarray(eigenvector, dtype=complex)
        if x.shape != (self.n,):
            raise errors.DimensionalityError(
                f"eigenvector.shape = {x.shape} != {(self.n,)}"
            )
        self.__eigenvalues.append(complex(eigenvalue))
        self.__eigenvectors.append(x / la.norm(x))

    def _factors(self, lam):
        """Transformations P_i(lam) and derivatives P_i'(lam)."""
        eye = np.eye(self.n, dtype=complex)
        Ps, dPs = [], []
        for lam_i, x in zip(self.__eigenvalues, self.__eigenvectors):
            xxH = np.outer(x, x.conj())
            gap = lam - lam_i
            Ps.append(eye - ((gap - 1) / gap) * xxH)
            dPs.append(-xxH / gap**2)
        return Ps, dPs

    def transformation(self, lam) -> np.ndarray:
        r"""Total transformation :math:`\P(\lambda) = \prod_i\P_i(\lambda)`."""
        P = np.eye(self.n, dtype=complex)
        for Pi in self._factors(lam)[0]:
            P = P @ Pi
        return P

    def apply(self, lam, T, dT=None):
        r"""Deflate :math:`\T(\lambda)` and, if given, its derivative.

        Parameters
        ----------
        lam : complex
            Evaluation point (must differ from every deflated eigenvalue).
        T : (n, n) ndarray
            :math:`\T(\lambda)`.
        dT : (n, n) ndarray or None
            :math:`\T'(\lambda)`.

        Returns
        -------
        Tp : (n, n) complex ndarray
            :math:`\T(\lambda)\P(\lambda)`.
        dTp : (n, n) complex ndarray or None
            :math:`\T'(\lambda)\P(\lambda) + \T(\lambda)\P'(\lambda)`.
        """
        if not self.__eigenvalues:
            return T, dT
        Ps, dPs = self._factors(lam)
        k = len(Ps)
        P = np.eye(self.n, dtype=complex)
        for Pi in Ps:
            P = P @ Pi
        Tp = T @ P
        if dT is None:
            return Tp, None

        # Product rule over P_0 ... P_{k-1}.
        dP = np.zeros((self.n, self.n), dtype=complex)
        left = np.eye(self.n, dtype=complex)
        for i in range(k):
            right = np.eye(self.n, dtype=complex)
            for Pj in Ps[i + 1:]:
                right = right @ Pj
            dP += left @ dPs[i] @ right
            left = left @ Ps[i]
        return Tp, dT @ P + T @ dP

    def recover(self, lam, y) -> np.ndarray:
        """Map an eigenvector of the deflated problem back to a unit
        eigenvector of the original problem.
        """
        x = self.transformation(lam) @ np.asarray(y, dtype=complex)
        return x / la.norm(x)


def mslp(
    n: int,
    evaluate,
    lam0,
    selection="smallest",
    max_iter: int = 100,
    tol: float = 1e-9,
    seed=0,
) -> NEPResult:
    r"""Method of successive linear problems.

    Each iteration solves the generalized linear eigenproblem
    :math:`\T(\lambda)\x = \mu\T'(\lambda)\x`, picks one :math:`\mu`
    according to ``selection``, and sets :math:`\lambda \leftarrow
    \lambda - \mu`. Infinite :math:`\mu` (singular :math:`\T'`) are
    skipped.

    Parameters
    ----------
    n : int
        Size of the eigenproblem.
    evaluate : callable
        Function ``(lam, jacobian) -> (T, dT)`` with ``dT = None`` if
        ``jacobian`` is False.
    lam0 : complex
        Initial eigenvalue guess.
    selection : str or callable
        Selection policy, see :func:`get_selection`. The string
        ``"closest"`` targets the initial guess ``lam0``.
    max_iter : int
        Maximum number of iterations.
    tol : float
        Tolerance for the relative residual.
    seed : int or None
        Seed for the random initial vector.

    Returns
    -------
    NEPResult
    """
    if selection == "closest":
        select = get_selection(selection, target=lam0)
    else:
        select = get_selection(selection)
    rng = np.random.default_rng(seed)
    x = _random_unit(n, rng)
    lam = complex(lam0)
    res = np.inf
    it = 0
    while it < max_iter:
        T, dT = evaluate(lam, True)
        res = _residual(T, x)
        logging.debug(f"MSLP iteration {it}, l = "
                      f"{utils.complex2str(lam)}, res = {res:.3e}")
        if res < tol:
            return NEPResult(lam, x, True, it, res)
        (alpha, beta), X = la.eig(T, dT, homogeneous_eigvals=True)
        with np.errstate(divide="ignore", invalid="ignore"):
            mu = alpha / beta
        i = select(mu, lam)
        if i < 0:
            warnings.warn(
                "MSLP linearization has no finite eigenvalues "
                f"at l = {utils.complex2str(lam)}",
                errors.ConvergenceWarning,
            )
            return NEPResult(lam, x, False, it, res)
        lam = lam - mu[i]
        x = X[:, i] / la.norm(X[:, i])
        it += 1

    T, _ = evaluate(lam, False)
    res = _residual(T, x)
    converged = res < tol
    if not converged:
        warnings.warn(
            f"MSLP did not converge in {max_iter} iterations "
            f"(l = {utils.complex2str(lam)}, res = {res:.3e})",
            errors.ConvergenceWarning,
        )
    return NEPResult(lam, x, converged, it, res)


def rii(
    n: int,
    evaluate,
    lam0,
    max_iter: int = 100,
    tol: float = 1e-9,
    seed=0,
) -> NEPResult:
    r"""Residual inverse iteration.

    The shifted matrix :math:`\T(\sigma)` with :math:`\sigma` the initial
    guess is factored once. Each outer iteration updates the eigenvalue
    with a Newton iteration on the nonlinear Rayleigh functional
    :math:`\x\her\T(\sigma)^{-1}\T(\lambda)\x = 0`, then updates the
    vector with :math:`\x \leftarrow \x - \T(\sigma)^{-1}\T(\lambda)\x`.
    If :math:`\T(\sigma)` is singular (the guess is an eigenvalue), the
    shift is moved by a small relative offset before factoring; if no
    nonsingular shift is found, a :class:`ConvergenceWarning` is issued
    and the initial guess is returned unconverged.

    Parameters
    ----------
    n : int
        Size of the eigenproblem.
    evaluate : callable
        Function ``(lam, jacobian) -> (T, dT)`` with ``dT = None`` if
        ``jacobian`` is False.
    lam0 : complex
        Initial eigenvalue guess (the fixed shift).
    max_iter : int
        Maximum number of outer (and inner) iterations.
    tol : float
        Tolerance for the relative residual.
    seed : int or None
        Seed for the random initial vector.

    Returns
    -------
    NEPResult
    """
    rng = np.random.default_rng(seed)
    lam = complex(lam0)
    sigma, lu = _factor_shift(evaluate, lam)
    if lu is None:
        x = _random_unit(n, rng)
        res = _residual(evaluate(lam, False)[0], x)
        warnings.warn(
            "RII shift matrix is singular near "
            f"l = {utils.complex2str(lam)}",
            errors.ConvergenceWarning,
        )
        return NEPResult(lam, x, False, 0, res)
    if sigma != lam:
        logging.debug(f"RII shift moved to {utils.complex2str(sigma)}")
    x = la.lu_solve(lu, _random_unit(n, rng))
    x /= la.norm(x)

    res = np.inf
    it = 0
    while it < max_iter:
        # Newton on the Rayleigh functional for the eigenvalue.
        for _ in range(max_iter):
            T, dT = evaluate(lam, True)
            num = np.vdot(x, la.lu_solve(lu, T @ x))
            den = np.vdot(x, la.lu_solve(lu, dT @ x))
            if den == 0 or not np.isfinite(num / den):
                break
            mu = num / den
            lam = lam - mu
            if abs(mu) < _SQRT_EPS * max(abs(lam), 1):
                break
        else:
            logging.debug("RII Rayleigh iteration did not converge")

        T, _ = evaluate(lam, False)
        r = T @ x
        res = _residual(T, x)
        logging.debug(f"RII iteration {it}, l = "
                      f"{utils.complex2str(lam)}, res = {res:.3e}")
        if res < tol:
            return NEPResult(lam, x, True, it, res)
        x = x - la.lu_solve(lu, r)
        x /= la.norm(x)
        it += 1

    T, _ = evaluate(lam, False)
    res = _residual(T, x)
    converged = res < tol
    if not converged:
        warnings.warn(
            f"RII did not converge in {max_iter} iterations "
            f"(l = {utils.complex2str(lam)}, res = {res:.3e})",
            errors.ConvergenceWarning,
        )
    return NEPResult(lam, x, converged, it, res)


def solve_nep(
    n: int,
    evaluate,
    sigma,
    num_eig: int,
    method: str = "mslp",
    selection="smallest",
    max_iter: int = 100,
    tol: float = 1e-9,
    seed=0,
):
    r"""Compute several eigenpairs of :math:`\T(\lambda)\x = \0` near
    ``sigma``, deflating each converged pair before computing the next.

    Parameters
    ----------
    n : int
        Size of the eigenproblem.
    evaluate : callable
        Function ``(lam, jacobian) -> (T, dT)`` with ``dT = None`` if
        ``jacobian`` is False.
    sigma : complex
        Initial guess for every eigenvalue. After the first eigenpair the
        guess is moved off any eigenvalue that was already deflated.
    num_eig : int
        Number of eigenpairs.
    method : str
        ``"mslp"`` (successive linear problems) or ``"rii"`` (residual
        inverse iteration).
    selection : str or callable
        Selection policy for MSLP (ignored by RII).
    max_iter : int
        Maximum number of iterations per eigenpair.
    tol : float
        Tolerance for the relative residual.
    seed : int or None
        Seed for the random initial vectors.

    Returns
    -------
    eigenvalues : (num_eig,) complex ndarray
    eigenvectors : (n, num_eig) complex ndarray
        Unit eigenvectors of the original (undeflated) problem.
    results : list of NEPResult
        Per-eigenpair convergence information.
    """
    if method not in NEP_METHODS:
        raise ValueError(
            f"invalid NEP method '{method}' "
            f"(options: {', '.join(NEP_METHODS)})"
        )
    if num_eig < 1 or num_eig > n:
        raise ValueError(f"num_eig must be in [1, {n}] (got {num_eig})")

    deflation = Deflation(n)

    def evaluate_deflated(lam, jacobian=True):
        T, dT = evaluate(lam, jacobian)
        return deflation.apply(lam, T, dT)

    results = []
    for k in range(num_eig):
        lam0 = _restart_guess(sigma, deflation.eigenvalues)
        if method == "mslp":
            result = mslp(n, evaluate_deflated, lam0, selection,
                          max_iter=max_iter, tol=tol, seed=seed)
        else:
            result = rii(n, evaluate_deflated, lam0,
                         max_iter=max_iter, tol=tol, seed=seed)
        x = deflation.recover(result.eigenvalue, result.eigenvector)
        deflation.add(result.eigenvalue, x)
        result = result._replace(eigenvector=x)
        results.append(result)
        logging.info(f"Eigenvalue {k + 1}/{num_eig}, l = "
                     f"{utils.complex2str(result.eigenvalue)} "
                     f"({result.iterations} iterations, "
                     f"res = {result.residual:.3e})")

    eigenvalues = np.array([r.eigenvalue for r in results], dtype=complex)
    eigenvectors = np.column_stack([r.eigenvector for r in results])
    return eigenvalues, eigenvectors, results
