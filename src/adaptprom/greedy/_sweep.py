# greedy/_sweep.py
"""Greedy construction of a PROM over a parameter interval."""

__all__ = [
    "AdaptiveSweep",
    "SweepResult",
]

import logging
import warnings
import numpy as np
import matplotlib.pyplot as plt

from .. import errors, parallel, utils


def num_candidates(start: float, stop: float, delta: float) -> int:
    """Number of points ``start + k * delta`` covering ``[start, stop]``."""
    return int(np.floor((stop - start) / delta + 0.5)) + 1


class SweepResult:
    """Record of an adaptive sweep.

    Parameters
    ----------
    samples : list of float
        Parameter values sampled, in order (endpoints first).
    errors : list of (float, float)
        Pairs ``(omega, relative error)`` measured at each greedy step.
    converged : bool
        Whether the error stayed below the tolerance for enough
        consecutive steps.
    """

    def __init__(self, samples, errors, converged):
        self.samples = list(samples)
        self.errors = list(errors)
        self.converged = bool(converged)

    @property
    def num_samples(self) -> int:
        return len(self.samples)

    @property
    def max_errors(self) -> np.ndarray:
        """Relative error measured at each greedy step."""
        return np.array([err for _, err in self.errors])

    def __str__(self):
        out = [self.__class__.__name__]
        out.append(f"Samples: {self.num_samples:d}")
        out.append(f"Converged: {self.converged}")
        if self.errors:
            out.append(f"Last error: {self.errors[-1][1]:.6e}")
        return "\n  ".join(out)

    def __repr__(self):
        return utils.str2repr(self)

    def plot(self, tol=None, ax=None, **kwargs):
        """Plot the estimated maximum error against the number of samples.

        Parameters
        ----------
        tol : float or None
            If given, draw the tolerance as a horizontal line.
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
        # The first greedy error is measured with the two endpoints sampled.
        steps = np.arange(len(self.errors)) + 2
        ax.semilogy(steps, self.max_errors, "o-", **kwargs)
        if tol is not None:
            ax.axhline(tol, color="gray", ls="--", lw=0.5)
        ax.set_xlabel("number of samples")
        ax.set_ylabel("relative error")
        return ax


class AdaptiveSweep:
    """Greedy sampling of a PROM over ``[start, stop]``.

    The endpoints are sampled first. Each further step locates the
    candidate with the largest estimated error, measures the actual
    relative error of the PROM there against a new HDM solution, and adds
    that solution to the PROM. The sweep stops once the error has been
    below ``tol`` for ``convergence_memory`` consecutive steps, or when
    ``max_samples`` samples have been taken.

    Parameters
    ----------
    tol : float
        Relative error tolerance.
    max_samples : int
        Maximum number of samples, including the endpoints. Capped by the
        PROM's ``max_size``.
    convergence_memory : int
        Number of consecutive steps below ``tol`` needed to stop.
    """

    def __init__(self, tol=1e-3, max_samples=20, convergence_memory=2):
        if tol <= 0:
            raise ValueError("tol must be positive")
        if max_samples < 2:
            raise ValueError("max_samples must be at least 2")
        if convergence_memory < 1:
            raise ValueError("convergence_memory must be positive")
        self.tol = float(tol)
        self.max_samples = int(max_samples)
        self.convergence_memory = int(convergence_memory)

    def __str__(self):
        out = [self.__class__.__name__]
        out.append(f"Tolerance: {self.tol:.3e}")
        out.append(f"Maximum samples: {self.max_samples:d}")
        out.append(f"Convergence memory: {self.convergence_memory:d}")
        return "\n  ".join(out)

    def __repr__(self):
        return utils.str2repr(self)

    def _sample(self, prom, omega):
        u = prom.solve_hdm(omega)
        prom.update(omega, u)

    def run(self, prom, start: float, stop: float, delta: float):
        """Build ``prom`` over the candidates ``start + k * delta``.

        Parameters
        ----------
        prom : adaptprom.roms.PROM
            Model to extend (normally empty).
        start, stop : float
            Parameter interval.
        delta : float
            Candidate spacing, with the sign of ``stop - start``.

        Returns
        -------
        SweepResult
        """
        if delta == 0 or (stop - start) * delta < 0:
            raise ValueError("delta must be nonzero and point from start "
                             "to stop")
        num_steps = num_candidates(start, stop, delta)
        max_samples = min(self.max_samples, prom.max_size)
        logging.info(f"Adaptive sweep over [{start:.6e}, {stop:.6e}] "
                     f"({num_steps} candidates, tol = {self.tol:.3e})")

        self._sample(prom, start)
        if stop != start:
            self._sample(prom, stop)

        history = []
        memory = 0
        converged = False
        while len(prom.sample_parameters) < max_samples:
            try:
                omega = prom.find_max_error(start, delta, num_steps)
            except errors.SearchError as ex:
                warnings.warn(f"adaptive sweep stopped: {ex}",
                              errors.PROMWarning)
                break

            u_hdm = prom.solve_hdm(omega)
            u_prom = prom.solve_prom(omega)
            unorm = parallel.norm(u_hdm, prom.comm)
            error = parallel.norm(u_hdm - u_prom, prom.comm)
            if unorm > 0:
                error /= unorm
            history.append((omega, error))
            logging.info(f"Greedy step {len(history)}: omega = {omega:.6e}, "
                         f"relative error = {error:.6e}")

            if error < self.tol:
                memory += 1
                if memory >= self.convergence_memory:
                    converged = True
                    break
            else:
                memory = 0
            prom.update(omega, u_hdm)

        if converged:
            logging.info(f"Adaptive sweep converged with "
                         f"{len(prom.sample_parameters)} samples")
        else:
            logging.info(f"Adaptive sweep stopped without convergence "
                         f"after {len(prom.sample_parameters)} samples")
        return SweepResult(prom.sample_parameters, history, converged)
