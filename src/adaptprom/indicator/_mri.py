# indicator/_mri.py
"""Minimal rational interpolation (MRI) error indicator."""

__all__ = [
    "compute_weights",
    "RationalErrorIndicator",
]

import logging
import warnings
import numpy as np
import scipy.linalg as la
import matplotlib.pyplot as plt

from .. import basis as _basis, errors, utils


requires_samples = utils.requires2(
    "num_samples",
    "no samples in the error indicator, call add_sample()",
)


def compute_weights(R, rank_tol: float = 1e-12) -> np.ndarray:
    r"""Barycentric weights of the minimal rational interpolant.

    The weights :math:`\q` are the right singular vector of the triangular
    factor :math:`\R` belonging to its smallest singular value. If trailing
    singular values are below ``rank_tol`` times the largest one, the
    matrix is treated as rank deficient: a warning is issued for each such
    value and the right singular vector of the smallest singular value
    above the threshold is used instead.

    Parameters
    ----------
    R : (s, s) ndarray
        Upper triangular factor of the snapshot matrix.
    rank_tol : float
        Relative tolerance for rank deficiency.

    Returns
    -------
    q : (s,) complex ndarray
        Barycentric weights.
    """
    R = np.asarray(R)
    if R.ndim != 2 or R.shape[0] != R.shape[1] or R.shape[0] == 0:
        raise errors.DimensionalityError(
            f"invalid dimension mismatch when computing MRI ({R.shape})"
        )
    _, sigma, Vh = la.svd(R, full_matrices=True, lapack_driver="gesvd")
    m = R.shape[0] - 1
    while m > 0 and sigma[m] < rank_tol * sigma[0]:
        warnings.warn(
            "minimal rational interpolation encountered rank-deficient "
            f"matrix: sigma[{m}] = {sigma[m]:.3e} (sigma[0] = {sigma[0]:.3e})",
            errors.RankDeficiencyWarning,
        )
        m -= 1
    return Vh[m].conj().astype(complex)


class RationalErrorIndicator:
    r"""Error indicator from the minimal rational interpolation of sampled
    full-order solutions.

    The snapshot matrix :math:`\U = [~\u(z_1)~~\cdots~~\u(z_s)~]` is stored
    through its QR-style factorization :math:`\U = \Q\R`, updated one
    column at a time. The barycentric interpolant

    .. math::
       \u(z) \approx \frac{\sum_s q_s\u(z_s)/(z - z_s)}{\sum_s q_s/(z - z_s)}

    has weights :math:`\q` given by the minimum right singular vector of
    :math:`\R` (see :func:`compute_weights`). The modulus of the
    denominator :math:`Q(z) = \sum_s q_s/(z - z_s)` is small where the
    interpolant is least reliable, so the minimizer of :math:`|Q(z)|` over
    a candidate set estimates the location of the largest reduced-order
    error.

    Parameters
    ----------
    n : int
        Local length of the full-order solution vectors.
    max_samples : int
        Maximum number of samples (capacity of the snapshot basis).
    method : str
        Gram-Schmidt variant for the snapshot basis.
    comm : CommunicatorTemplate, mpi4py.MPI.Comm, or None
        Communicator for global inner products.
    rank_tol : float
        Relative tolerance for rank deficiency of :math:`\R`.
    """

    def __init__(
        self,
        n: int,
        max_samples: int,
        method: str = "cgs2",
        comm=None,
        rank_tol: float = 1e-12,
    ):
        """Set up empty snapshot storage."""
        self.__Q = _basis.IncrementalBasis(
            n,
            max_samples,
            dtype=complex,
            method=method,
            comm=comm,
            conjugate=True,
        )
        self.__R = np.zeros((0, 0), dtype=complex)
        self.__z = np.zeros(0)
        self.__q = None
        self.__rank_tol = float(rank_tol)

    # Properties --------------------------------------------------------------
    @property
    def snapshot_basis(self) -> _basis.IncrementalBasis:
        r"""Orthonormal snapshot basis :math:`\Q`."""
        return self.__Q

    @property
    def R(self) -> np.ndarray:
        r"""Upper triangular factor :math:`\R` (replicated)."""
        return self.__R

    @property
    def samples(self) -> np.ndarray:
        """Sampled parameter values :math:`z_1, \\ldots, z_s`."""
        return self.__z

    @property
    def weights(self) -> np.ndarray:
        r"""Barycentric weights :math:`\q` (``None`` before sampling)."""
        return self.__q

    @property
    def num_samples(self) -> int:
        """Number of samples :math:`s`."""
        return self.__z.size

    @property
    def max_samples(self) -> int:
        """Maximum number of samples."""
        return self.__Q.capacity

    @property
    def rank_tol(self) -> float:
        """Relative tolerance for rank deficiency."""
        return self.__rank_tol

    def __str__(self):
        out = [self.__class__.__name__]
        out.append(f"Samples: {self.num_samples:d} "
                   f"(capacity {self.max_samples:d})")
        if self.num_samples:
            out.append(f"Sample range: [{self.samples.min():.6e}, "
                       f"{self.samples.max():.6e}]")
        return "\n  ".join(out)

    def __repr__(self):
        return utils.str2repr(self)

    # Main routines -----------------------------------------------------------
    def add_sample(self, z: float, u):
        """Insert the full-order solution ``u`` sampled at ``z``.

        The snapshot is orthogonalized against the snapshot basis (a
        numerically dependent snapshot is still inserted so that
        :math:`\\R` keeps one column per sample; rank deficiency is handled
        when the weights are computed), :math:`\\R` and the sample list are
        extended, and the weights are recomputed.

        Parameters
        ----------
        z : float
            Parameter value of the sample.
        u : (n,) ndarray
            Local slice of the full-order solution (copied).
        """
        z = float(z)
        if self.num_samples >= self.max_samples:
            raise errors.CapacityError(
                "unable to increase snapshot storage size, "
                "increase maximum number of samples"
            )
        if np.any(self.__z == z):
            warnings.warn(
                f"parameter value {z:.6e} already sampled",
                errors.PROMWarning,
            )
        s = self.num_samples
        _, coeffs = self.__Q.append(np.asarray(u, dtype=complex),
                                    allow_dependent=True)
        R = np.zeros((s + 1, s + 1), dtype=complex)
        R[:s, :s] = self.__R
        R[:, s] = coeffs
        self.__R = R
        self.__z = np.append(self.__z, z)
        self.__q = compute_weights(self.__R, self.rank_tol)
        logging.debug(f"MRI updated with sample z = {z:.6e} (S = {s + 1})")

    @requires_samples
    def evaluate(self, z):
        r"""Evaluate the denominator :math:`Q(z) = \sum_s q_s/(z - z_s)`.

        Parameters
        ----------
        z : float or (m,) ndarray
            Parameter value(s).

        Returns
        -------
        complex or (m,) complex ndarray
            :math:`Q(z)`; infinite at the sampled points.
        """
        z = np.asarray(z, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore"):
            diff = z[..., np.newaxis] - self.__z
            terms = self.__q / diff
            values = np.sum(terms, axis=-1)
        values = np.where(np.any(diff == 0, axis=-1), np.inf, values)
        return values[()] if values.ndim == 0 else values

    @requires_samples
    def find_max_error(self, start: float, delta: float, num_steps: int):
        r"""Estimate :math:`\text{argmax}_z\|\u(z) - \V\y(z)\|` as the
        minimizer of :math:`|Q(z)|` over the candidates
        :math:`z_k = \text{start} + k\,\delta`, :math:`k < \text{num\_steps}`.

        Parameters
        ----------
        start : float
            First candidate.
        delta : float
            Candidate spacing. If negative, the same candidates are scanned
            in increasing order.
        num_steps : int
            Number of candidates.

        Returns
        -------
        z_star : float
            Candidate with the smallest :math:`|Q(z)|`. Sampled points are
            never returned.
        """
        if num_steps < 1:
            raise ValueError("num_steps must be positive")
        if delta < 0:
            start = start + (num_steps - 1) * delta
            delta = -delta
        candidates = start + delta * np.arange(num_steps)
        Qabs = np.abs(self.evaluate(candidates))
        Qabs[~np.isfinite(Qabs)] = np.inf
        k = int(np.argmin(Qabs))
        if not np.isfinite(Qabs[k]):
            raise errors.SearchError(
                "unable to find location for maximum error "
                "(all candidates already sampled)"
            )
        z_star = float(candidates[k])
        if z_star == 0:
            raise errors.SearchError(
                "unable to find location for maximum error "
                "(search returned zero)"
            )
        return z_star

    def reconstruction(self) -> np.ndarray:
        r"""Local rows of :math:`\Q\R`, which reproduce the sampled
        snapshots column by column.
        """
        return self.__Q.entries @ self.__R

    # Persistence -------------------------------------------------------------
    def _set_state(self, Q, R, z):
        """Restore the snapshot basis, factor, and samples."""
        R = np.asarray(R, dtype=complex)
        z = np.asarray(z, dtype=float)
        if R.shape != (z.size, z.size) or np.shape(Q)[1] != z.size:
            raise errors.DimensionalityError(
                "snapshot basis, factor, and samples not aligned"
            )
        self.__Q._set_entries(Q)
        self.__R = R
        self.__z = z
        self.__q = compute_weights(R, self.rank_tol) if z.size else None

    # Visualization -----------------------------------------------------------
    @requires_samples
    def plot_surrogate(self, start, stop, num=1000, ax=None, **kwargs):
        """Plot :math:`1/|Q(z)|` over an interval, with the samples marked.

        Large values indicate large estimated reduced-order errors.

        Parameters
        ----------
        start, stop : float
            Interval to plot over.
        num : int
            Number of points.
        ax : plt.Axes or None
            Matplotlib Axes to plot on. If ``None``, create a new figure.
        kwargs : dict
            Other keyword arguments to pass to ``plt.semilogy()``.

        Returns
        -------
        ax : plt.Axes
        """
        if ax is None:
            ax = plt.figure().add_subplot(111)
        z = np.linspace(start, stop, num)
        with np.errstate(divide="ignore"):
            surrogate = 1 / np.abs(self.evaluate(z))
        ax.semilogy(z, surrogate, **kwargs)
        inrange = (self.samples >= min(start, stop)) & (
            self.samples <= max(start, stop)
        )
        for zs in self.samples[inrange]:
            ax.axvline(zs, color="gray", lw=0.5)
        ax.set_xlim(start, stop)
        ax.set_xlabel("parameter")
        ax.set_ylabel(r"$1 / |Q(z)|$")
        return ax

    @requires_samples
    def plot_svdvals(self, ax=None, **kwargs):
        """Plot the normalized singular values of :math:`\\R`.

        Returns
        -------
        ax : plt.Axes
        """
        if ax is None:
            ax = plt.figure().add_subplot(111)
        svdvals = la.svdvals(self.R)
        j = np.arange(1, svdvals.size + 1)
        ax.semilogy(j, svdvals / svdvals[0], "k*", ms=10, mew=0, **kwargs)
        ax.axhline(self.rank_tol, color="gray", ls="--", lw=0.5)
        ax.set_xlim((0, j.size + 1))
        ax.set_xlabel("singular value index")
        ax.set_ylabel("normalized singular values")
        return ax

